"""
DonationEmail - The donation confirmation message.
Pure composition: subject, sender label and HTML body. No transport here.

Only a masked excerpt of the soulmark may ever appear in the body.
"""

import html
from dataclasses import dataclass
from typing import Optional

from .donor import Amount

SUBJECT = "Thank You — Your Donation Has Been Received"
DEFAULT_CURRENCY = "USD"
_MASK_MIN_LENGTH = 10


def mask_soulmark(soulmark: Optional[str]) -> str:
    """
    ABCDEFGHIJKLMNOP -> ABCDEF…MNOP
    Short values are shown verbatim; missing ones as N/A.
    """
    if not soulmark:
        return "N/A"
    if len(soulmark) < _MASK_MIN_LENGTH:
        return soulmark
    return f"{soulmark[:6]}…{soulmark[-4:]}"


def has_amount(amount: Optional[Amount]) -> bool:
    return amount is not None and amount != ""


@dataclass(frozen=True)
class DonationEmail:
    from_address: str
    to: str
    subject: str
    html: str

    @classmethod
    def compose(
        cls,
        to: str,
        soulmark: Optional[str],
        campaign_name: str,
        sender_address: str,
        dashboard_url: str,
        amount: Optional[Amount] = None,
        currency: Optional[str] = None,
    ) -> "DonationEmail":
        return cls(
            from_address=f"{campaign_name} <{sender_address}>",
            to=to,
            subject=SUBJECT,
            html=_build_html(
                partial=mask_soulmark(soulmark),
                campaign_name=campaign_name,
                dashboard_url=dashboard_url,
                amount=amount,
                currency=currency,
            ),
        )


def _build_html(
    partial: str,
    campaign_name: str,
    dashboard_url: str,
    amount: Optional[Amount],
    currency: Optional[str],
) -> str:
    amount_line = ""
    if has_amount(amount):
        display_currency = currency or DEFAULT_CURRENCY
        amount_line = (
            f"<p><strong>Amount:</strong> "
            f"{html.escape(str(amount))} {html.escape(display_currency)}</p>"
        )

    return f"""
    <p>Thank you for your donation. Your contribution has been verified successfully.</p>

    <p>A unique SoulMark has been created for this transaction.<br>
    For your security, only a portion is shown:</p>

    <p><strong>SoulMark (partial):</strong> {html.escape(partial)}</p>

    {amount_line}

    <p>To activate your full SoulMark and access your donation dashboard, click below:</p>

    <p><a href="{html.escape(dashboard_url, quote=True)}">
      <strong>Access Your Dashboard</strong>
    </a></p>

    <p>{html.escape(campaign_name)} × iAscendAi</p>
    """
