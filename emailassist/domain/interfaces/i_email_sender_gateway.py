"""
IEmailSenderGateway - Port: deliver one transactional email.
Given from/to/subject/html, attempts delivery once and reports the outcome.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..entities.donation_email import DonationEmail


@dataclass
class SendEmailResult:
    success: bool
    email: str
    message_id: Optional[str] = None
    error: Optional[str] = None


class IEmailSenderGateway(ABC):
    """Port for the mail-transport capability."""

    @abstractmethod
    async def send(self, message: "DonationEmail") -> SendEmailResult:
        """
        Makes a single delivery attempt. Never retries, never queues.
        Transport errors are reported through SendEmailResult, not raised.
        """
        pass
