"""Outbound email for one-time codes."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from otp_auth.errors import DeliveryFailed

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send(self, to_email: str, subject: str, body: str) -> None: ...


class SmtpNotifier:
    """Sends plain-text mail over SMTP in a worker thread.

    Any transport failure, or missing configuration, surfaces as
    DeliveryFailed. Nothing is retried.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        from_email: str = "",
        use_tls: bool = True,
        timeout: float = 10,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.use_tls = use_tls
        self.timeout = timeout

    def _build_message(self, to_email: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.from_email
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)

    async def send(self, to_email: str, subject: str, body: str) -> None:
        if not self.host or not self.from_email:
            raise DeliveryFailed("Email not configured")

        msg = self._build_message(to_email, subject, body)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{subject}' to {to_email}: {e}")
            raise DeliveryFailed(str(e)) from e
        logger.info(f"Sent '{subject}' to {to_email}")
