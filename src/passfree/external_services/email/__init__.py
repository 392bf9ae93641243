from passfree.external_services.email.base import (
    EmailProvider,
    EmailProviderConfig,
    EmailProviderType,
)
from passfree.external_services.email.factory import EmailServiceFactory

__all__ = [
    "EmailProvider",
    "EmailProviderConfig",
    "EmailProviderType",
    "EmailServiceFactory",
]
