import asyncio
import logging
import smtplib
from email.message import EmailMessage

from laptop_api.core.config import settings

logger = logging.getLogger(__name__)


class MailService:
    """Отправка информационных писем по SMTP"""

    def __init__(
        self,
        activated: bool = settings.mail_activated,
        host: str = settings.mail_host,
        port: int = settings.mail_port,
        sender: str = settings.mail_from,
        recipient: str = settings.mail_to,
    ):
        self.activated = activated
        self.host = host
        self.port = port
        self.sender = sender
        self.recipient = recipient

    async def send_mail(self, subject: str, body: str) -> None:
        """Отправка письма; при выключенной почте письмо только логируется"""
        if not self.activated:
            logger.warning("Mail deactivated: subject=%s", subject)
            return

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.sender
        message["To"] = self.recipient
        message.set_content(body, subtype="html")

        # smtplib блокирующий, поэтому отдельный поток
        await asyncio.to_thread(self._send, message)
        logger.debug("send_mail: subject=%s sent to %s", subject, self.recipient)

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port) as smtp:
            smtp.send_message(message)
