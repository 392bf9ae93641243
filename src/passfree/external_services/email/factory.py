import logging

from passfree.core.config import Settings
from passfree.external_services.email.base import (
    EmailProvider,
    EmailProviderConfig,
    EmailProviderType,
)
from passfree.external_services.email.providers.console import ConsoleEmailProvider
from passfree.external_services.email.providers.sendgrid import SendGridEmailProvider

logger = logging.getLogger(__name__)


class EmailServiceFactory:
    @staticmethod
    def create(config: EmailProviderConfig) -> EmailProvider:
        provider_type = str(config.provider_type).lower()

        if provider_type == EmailProviderType.SENDGRID.value:
            return SendGridEmailProvider(config)

        if provider_type != EmailProviderType.CONSOLE.value:
            logger.warning(f"Unknown provider type: {config.provider_type}. Falling back to Console.")
        return ConsoleEmailProvider()

    @staticmethod
    def from_settings(settings: Settings) -> EmailProvider:
        return EmailServiceFactory.create(
            EmailProviderConfig(
                provider_type=settings.EMAIL_PROVIDER,
                api_key=settings.EMAIL_PROVIDER_API_KEY,
                from_email=settings.EMAIL_SENDER,
            )
        )
