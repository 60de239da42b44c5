"""
IRegistryRepository - Port: the flat-file donor ledger.
Every mutation is a full read-modify-write of the whole registry.
The domain doesn't know the registry is a JSON file.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..entities.donor import Donor


@dataclass
class SaveRegistryResult:
    success: bool
    donor_count: int = 0
    error: Optional[str] = None


class IRegistryRepository(ABC):
    """Port for loading and saving the donor registry."""

    @abstractmethod
    async def load(self) -> List[Donor]:
        """
        Return every donor in insertion order.
        A missing, empty or corrupt backing store yields [] and is reset;
        this never raises.
        """
        pass

    @abstractmethod
    async def save(self, donors: List[Donor]) -> SaveRegistryResult:
        """Replace the whole registry. Write failures come back in the result."""
        pass
