"""
ProcessDonationUseCase - Top-level orchestrator for one donation request.

  RECEIVED → VALIDATED → NOTIFIED → RECORDED → COMPLETE
                │            │           │
                └────────────┴───────────┴──→ FAILED

The confirmation email is sent BEFORE anything touches the registry:
a failed send must never leave a recorded donation with no confirmation.
Registry write failures only fail the request under the strict policy.
No step is retried.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..domain.entities.donor import Amount
from .send_donation_confirmation import (
    DonationConfirmationRequest,
    SendDonationConfirmationUseCase,
)
from .upsert_donor import UpsertDonorRequest, UpsertDonorUseCase

logger = logging.getLogger(__name__)

MISSING_FIELDS_ERROR = "email and soulmark are required fields."


class DonationState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    NOTIFIED = "notified"
    RECORDED = "recorded"
    COMPLETE = "complete"
    FAILED = "failed"


class DonationFailure(str, Enum):
    VALIDATION = "validation"
    SEND = "send"
    STORE_WRITE = "store_write"


@dataclass
class ProcessDonationRequest:
    email: Optional[str] = None
    soulmark: Optional[str] = None
    name: Optional[str] = None
    amount: Optional[Amount] = None
    currency: Optional[str] = None
    session_id: Optional[str] = None


@dataclass
class ProcessDonationResult:
    success: bool
    state: DonationState
    failure: Optional[DonationFailure] = None
    error: Optional[str] = None
    trail: List[DonationState] = field(default_factory=list)


class ProcessDonationUseCase:
    """
    Orchestrates: validate → send confirmation → upsert registry.
    Dependencies injected via constructor.
    """

    def __init__(
        self,
        confirmation: SendDonationConfirmationUseCase,
        upsert: UpsertDonorUseCase,
        strict_writes: bool = False,
    ):
        self.confirmation = confirmation
        self.upsert = upsert
        self.strict_writes = strict_writes

    async def execute(self, request: ProcessDonationRequest) -> ProcessDonationResult:
        trail = [DonationState.RECEIVED]

        # ── Received → Validated ─────────────────────────────────────────
        email = (request.email or "").strip()
        soulmark = (request.soulmark or "").strip()
        if not email or not soulmark:
            return self._fail(trail, DonationFailure.VALIDATION, MISSING_FIELDS_ERROR)
        trail.append(DonationState.VALIDATED)

        # ── Validated → Notified ─────────────────────────────────────────
        send_result = await self.confirmation.execute(
            DonationConfirmationRequest(
                email=email,
                soulmark=soulmark,
                name=request.name,
                amount=request.amount,
                currency=request.currency,
            )
        )
        if not send_result.success:
            return self._fail(
                trail, DonationFailure.SEND, send_result.error or "Send failed"
            )
        trail.append(DonationState.NOTIFIED)
        logger.info(f"[Donation] Confirmation email sent to {email}")

        # ── Notified → Recorded ──────────────────────────────────────────
        upsert_result = await self.upsert.execute(
            UpsertDonorRequest(
                email=email,
                soulmark=soulmark,
                name=request.name,
                amount=request.amount,
                currency=request.currency,
                session_id=request.session_id,
            )
        )
        if not upsert_result.success:
            if self.strict_writes:
                return self._fail(
                    trail,
                    DonationFailure.STORE_WRITE,
                    upsert_result.error or "Registry write failed",
                )
            logger.error(
                f"[Donation] {email} was emailed but is missing from the registry "
                f"(best-effort writes): {upsert_result.error}"
            )
        trail.append(DonationState.RECORDED)

        # ── Recorded → Complete ──────────────────────────────────────────
        trail.append(DonationState.COMPLETE)
        return ProcessDonationResult(
            success=True,
            state=DonationState.COMPLETE,
            trail=trail,
        )

    @staticmethod
    def _fail(
        trail: List[DonationState],
        failure: DonationFailure,
        error: str,
    ) -> ProcessDonationResult:
        trail.append(DonationState.FAILED)
        logger.error(
            f"[Donation] FAILED after {trail[-2].value} "
            f"({failure.value}): {error}"
        )
        return ProcessDonationResult(
            success=False,
            state=DonationState.FAILED,
            failure=failure,
            error=error,
            trail=trail,
        )
