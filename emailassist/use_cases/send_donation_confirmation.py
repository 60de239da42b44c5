"""
SendDonationConfirmationUseCase - Compose and send the donation thank-you email.
Exactly one send attempt; the transport's outcome is returned unchanged.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..domain.entities.donation_email import DonationEmail
from ..domain.entities.donor import Amount
from ..domain.interfaces.i_email_sender_gateway import (
    IEmailSenderGateway,
    SendEmailResult,
)

logger = logging.getLogger(__name__)


@dataclass
class DonationConfirmationRequest:
    email: str
    soulmark: Optional[str]
    name: Optional[str] = None
    amount: Optional[Amount] = None
    currency: Optional[str] = None


class SendDonationConfirmationUseCase:
    def __init__(
        self,
        email_sender: IEmailSenderGateway,
        campaign_name: str,
        sender_address: str,
        dashboard_url: str,
    ):
        self.email_sender = email_sender
        self.campaign_name = campaign_name
        self.sender_address = sender_address
        self.dashboard_url = dashboard_url

    async def execute(self, request: DonationConfirmationRequest) -> SendEmailResult:
        message = DonationEmail.compose(
            to=request.email,
            soulmark=request.soulmark,
            campaign_name=self.campaign_name,
            sender_address=self.sender_address,
            dashboard_url=self.dashboard_url,
            amount=request.amount,
            currency=request.currency,
        )

        result = await self.email_sender.send(message)
        if not result.success:
            logger.error(
                f"[Confirmation] Send to {request.email} failed: {result.error}"
            )
        return result
