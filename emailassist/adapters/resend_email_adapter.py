"""
ResendEmailAdapter — Sends transactional email via the Resend HTTP API.
Alternative to SMTP for hosts where outbound port 587/465 is blocked.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

import resend

from ..domain.interfaces.i_email_sender_gateway import (
    IEmailSenderGateway,
    SendEmailResult,
)

if TYPE_CHECKING:
    from ..domain.entities.donation_email import DonationEmail

logger = logging.getLogger(__name__)


class ResendEmailAdapter(IEmailSenderGateway):
    """
    Adapter that delivers messages using the Resend API.
    Without an API key, sends are stubbed and reported as successful.
    """

    def __init__(self, api_key: str = "", reply_to: str = ""):
        self.api_key = api_key
        self.reply_to = reply_to

        if self.api_key:
            resend.api_key = self.api_key

    async def send(self, message: "DonationEmail") -> SendEmailResult:
        if not message.to:
            return SendEmailResult(
                success=False,
                email="",
                error="No email address provided",
            )

        if not self.api_key:
            logger.warning(
                f"[Resend] RESEND_API_KEY not set. "
                f"Stubbing '{message.subject}' to {message.to}"
            )
            return SendEmailResult(success=True, email=message.to)

        params = {
            "from": message.from_address,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if self.reply_to:
            params["reply_to"] = self.reply_to

        try:
            logger.info(f"[Resend] Sending '{message.subject}' to {message.to}")
            response = await asyncio.to_thread(resend.Emails.send, params)
            message_id = response.get("id") if isinstance(response, dict) else None
            logger.info(f"[Resend] Successfully sent to {message.to}. Resend ID: {message_id}")
            return SendEmailResult(success=True, email=message.to, message_id=message_id)

        except Exception as e:
            logger.error(f"[Resend] Failed to send to {message.to}: {str(e)}")
            return SendEmailResult(
                success=False,
                email=message.to,
                error=str(e),
            )
