import logging

from passfree.external_services.email.base import EmailProvider

logger = logging.getLogger(__name__)


class ConsoleEmailProvider(EmailProvider):
    """Logs outgoing mail instead of sending it. Used in development."""

    async def send_email(self, to_emails: list[str], subject: str, html_content: str) -> bool:
        logger.info("--- Sending Email (Console Provider) ---")
        logger.info(f"To: {to_emails}")
        logger.info(f"Subject: {subject}")
        logger.info(f"Body: {html_content}")
        logger.info("--------------------------------------")
        return True
