"""
IInboxGateway - Port: read new messages from the support inbox.
"""

from abc import ABC, abstractmethod
from typing import List

from ..entities.inbound_message import InboundMessage


class IInboxGateway(ABC):
    """Port for fetching support-inbox messages."""

    @abstractmethod
    async def fetch_since(self, last_uid: int) -> List[InboundMessage]:
        """
        Return messages whose UID is greater than last_uid, oldest first.
        Connection and protocol errors are raised to the caller.
        """
        pass
