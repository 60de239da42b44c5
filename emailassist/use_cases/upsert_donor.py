"""
UpsertDonorUseCase - Find-or-create a donor by email and record a donation.

Load the whole registry → match case-insensitively → create if absent →
append the donation event → save the whole registry.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..domain.entities.donor import Amount, DonationEvent, Donor, find_donor, utc_now
from ..domain.interfaces.i_registry_repository import IRegistryRepository

logger = logging.getLogger(__name__)


@dataclass
class UpsertDonorRequest:
    email: str
    soulmark: str
    name: Optional[str] = None
    amount: Optional[Amount] = None
    currency: Optional[str] = None
    session_id: Optional[str] = None


@dataclass
class UpsertDonorResult:
    success: bool
    email: str
    created: bool = False
    donation_count: int = 0
    error: Optional[str] = None


class UpsertDonorUseCase:
    """
    Records one donation event against the registry.
    Upserts in this process are serialized; separate processes writing the
    same file can still lose updates (last write wins).
    """

    def __init__(
        self,
        registry: IRegistryRepository,
        campaign_name: str,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.registry = registry
        self.campaign_name = campaign_name
        self.clock = clock
        self._lock = asyncio.Lock()

    async def execute(self, request: UpsertDonorRequest) -> UpsertDonorResult:
        async with self._lock:
            donors = await self.registry.load()
            now = self.clock()

            donor = find_donor(donors, request.email)
            created = donor is None
            if donor is None:
                donor = Donor.create(email=request.email, name=request.name, now=now)
                donors.append(donor)

            donor.record_donation(
                DonationEvent(
                    campaign=self.campaign_name,
                    soulmark=request.soulmark,
                    timestamp=now,
                    amount=request.amount,
                    currency=request.currency,
                    session_id=request.session_id,
                ),
                name=request.name,
            )

            saved = await self.registry.save(donors)

        if not saved.success:
            logger.error(
                f"[Upsert] Donation for {request.email} NOT persisted: {saved.error}"
            )
            return UpsertDonorResult(
                success=False,
                email=donor.email,
                created=created,
                donation_count=donor.donation_count,
                error=saved.error,
            )

        logger.info(
            f"[Upsert] {'Created' if created else 'Updated'} donor {donor.email} "
            f"| donations={donor.donation_count}"
        )
        return UpsertDonorResult(
            success=True,
            email=donor.email,
            created=created,
            donation_count=donor.donation_count,
        )
