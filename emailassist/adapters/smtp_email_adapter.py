"""
SmtpEmailAdapter — Sends transactional email over SMTP (Gmail by default).
One connection per message; smtplib is blocking so it runs in a worker thread.
"""

import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid, parseaddr
from typing import TYPE_CHECKING

from ..domain.interfaces.i_email_sender_gateway import (
    IEmailSenderGateway,
    SendEmailResult,
)

if TYPE_CHECKING:
    from ..domain.entities.donation_email import DonationEmail

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 30


class SmtpEmailAdapter(IEmailSenderGateway):
    """
    Adapter that delivers messages through an authenticated SMTP relay.
    secure=True uses implicit TLS (port 465); otherwise STARTTLS is negotiated.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        secure: bool = False,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure

    async def send(self, message: "DonationEmail") -> SendEmailResult:
        if not message.to:
            return SendEmailResult(
                success=False,
                email="",
                error="No email address provided",
            )

        try:
            logger.info(f"[SMTP] Sending '{message.subject}' to {message.to} via {self.host}")
            message_id = await asyncio.to_thread(self._send_sync, message)
            logger.info(f"[SMTP] Delivered to {message.to}. Message-ID: {message_id}")
            return SendEmailResult(success=True, email=message.to, message_id=message_id)

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"[SMTP] Failed to send to {message.to}: {str(e)}")
            return SendEmailResult(
                success=False,
                email=message.to,
                error=str(e),
            )

    # ── Private helpers ───────────────────────────────────────────────────

    def _send_sync(self, message: "DonationEmail") -> str:
        mime = self._build_mime(message)
        context = ssl.create_default_context()

        if self.secure:
            server = smtplib.SMTP_SSL(
                self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS, context=context
            )
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS)

        with server:
            if not self.secure:
                server.starttls(context=context)
            if self.user:
                server.login(self.user, self.password)
            envelope_from = parseaddr(message.from_address)[1] or self.user
            server.sendmail(envelope_from, [message.to], mime.as_string())

        return mime["Message-ID"]

    @staticmethod
    def _build_mime(message: "DonationEmail") -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["From"] = message.from_address
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime["Message-ID"] = make_msgid()
        mime.attach(MIMEText(message.html, "html", "utf-8"))
        return mime
