"""
InboundMessage - A parsed message from the support inbox.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class InboundMessage:
    uid: int
    sender: str
    subject: str
    body: str
    received_at: Optional[datetime] = None

    @property
    def preview(self) -> str:
        text = " ".join(self.body.split())
        return text if len(text) <= 200 else text[:200] + "..."
