from jinja2 import Environment, PackageLoader, select_autoescape

jinja_env = Environment(
    loader=PackageLoader("passfree", "templates"),
    autoescape=select_autoescape(["html", "xml"]),
)
