import secrets
import uuid
from datetime import timedelta
from urllib.parse import urlencode

import typer
import uvicorn

app = typer.Typer(help="PassFree CLI")


@app.command()
def run(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
) -> None:
    """
    Run the FastAPI server
    """
    uvicorn.run(
        "passfree.main:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command("generate-key")
def generate_key(length: int = typer.Option(48, min=32, help="Random bytes in the key")) -> None:
    """
    Print a new random value for SECRET_KEY or JWT_SECRET_KEY
    """
    typer.echo(secrets.token_urlsafe(length))


@app.command("issue-link")
def issue_link(
    email: str,
    ttl_minutes: int | None = typer.Option(None, min=1, help="Defaults to LOGIN_LINK_TTL_MINUTES"),
) -> None:
    """
    Issue a login link without sending it. The correlation token must be set
    as the correlation cookie in the browser that opens the link.
    """
    from passfree.api.v1.passwordless import LOGIN_CALLBACK_PATH
    from passfree.auth_strategies.constants import AUTH_TOKEN_QUERY_PARAM
    from passfree.auth_strategies.passwordless import PasswordlessAuthenticationProvider
    from passfree.core.clock import system_clock
    from passfree.core.config import settings
    from passfree.core.exceptions import InvalidIdentityError
    from passfree.core.protection import DataProtectionProvider
    from passfree.services.identity import EmailIdentityValidator

    try:
        identity = EmailIdentityValidator().validate(email)
    except InvalidIdentityError as exc:
        typer.echo(exc.message, err=True)
        raise typer.Exit(code=1) from exc

    provider = PasswordlessAuthenticationProvider(
        system_clock, DataProtectionProvider(settings.protection_keys)
    )
    valid_for = timedelta(minutes=ttl_minutes or settings.LOGIN_LINK_TTL_MINUTES)
    tokens = provider.generate_tokens(identity, valid_for, uuid.uuid4())

    callback_url = f"{settings.APP_URL.rstrip('/')}{LOGIN_CALLBACK_PATH}"
    typer.echo(f"link: {callback_url}?{urlencode({AUTH_TOKEN_QUERY_PARAM: tokens.auth_token})}")
    typer.echo(f"{settings.CORRELATION_COOKIE_NAME}: {tokens.correlation_token}")


if __name__ == "__main__":
    app()
