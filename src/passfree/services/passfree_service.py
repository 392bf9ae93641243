import logging
from abc import ABC, abstractmethod
from datetime import timedelta

from passfree.core.config import settings
from passfree.core.exceptions import EmailDeliveryError
from passfree.core.templates import jinja_env
from passfree.external_services.email.base import EmailProvider

logger = logging.getLogger(__name__)


class PassFreeService(ABC):
    """
    Application hook consulted by the login flow.

    Hosting applications subclass this to decide who may receive a login
    link and how the link reaches them.
    """

    @abstractmethod
    async def is_authorized_to_login(self, user: str) -> bool:
        pass

    @abstractmethod
    async def send_login_email(self, user: str, login_link: str, valid_for: timedelta) -> None:
        pass


class DefaultPassFreeService(PassFreeService):
    def __init__(
        self,
        email_provider: EmailProvider,
        allowed_domains: list[str] | None = None,
        app_name: str | None = None,
    ) -> None:
        self.email_provider = email_provider
        self.allowed_domains = {domain.lower() for domain in allowed_domains or []}
        self.app_name = app_name or settings.APP_NAME

    async def is_authorized_to_login(self, user: str) -> bool:
        if not self.allowed_domains:
            return True
        _, _, domain = user.rpartition("@")
        return domain.lower() in self.allowed_domains

    async def send_login_email(self, user: str, login_link: str, valid_for: timedelta) -> None:
        template = jinja_env.get_template("login_email.html")
        html_content = template.render(
            app_name=self.app_name,
            login_link=login_link,
            valid_minutes=max(1, int(valid_for.total_seconds() // 60)),
        )

        sent = await self.email_provider.send_email(
            [user],
            f"Your {self.app_name} sign-in link",
            html_content,
        )
        if not sent:
            raise EmailDeliveryError()
