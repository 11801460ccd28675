"""Duplicate-settlement guard for payroll runs.

Two layers keep a period from being paid twice:

1. A pre-check for an existing COMPLETED run whose period starts inside the
   requested month. This catches the common case cheaply.
2. A unique idempotency key per organization and period, enforced by the
   run store at insert time. This catches concurrent requests, possibly from
   other processes, that both passed the pre-check.

Both layers end in the same ``DuplicatePeriod`` error.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from payroll_core.errors import DuplicatePeriod

if TYPE_CHECKING:
    from payroll_core.calculators.period import Period
    from payroll_core.services.stores import PayrollRunStore

logger = logging.getLogger(__name__)


def build_idempotency_key(organization_id: UUID, month: int, year: int) -> str:
    """Deterministic key for one organization and one (0-based month, year)."""
    return f"run-{organization_id}-{month}-{year}"


class IdempotencyGuard:
    """Pre-checks a period and maps key collisions to DuplicatePeriod."""

    def __init__(self, runs: PayrollRunStore):
        self.runs = runs

    async def ensure_not_processed(self, organization_id: UUID, period: Period) -> None:
        """Raise DuplicatePeriod if a completed run already covers the period."""
        existing = await self.runs.find_completed_run_in_period(
            organization_id, period.start, period.end
        )
        if existing is not None:
            logger.warning(
                "Payroll for org %s period %s already processed by run %s",
                organization_id,
                period.label,
                existing.id,
            )
            raise DuplicatePeriod(organization_id, period.label)

    @staticmethod
    def collision(organization_id: UUID, period: Period, key: str) -> DuplicatePeriod:
        """Error for a key collision at insert (lost a race)."""
        logger.warning(
            "Idempotency key %s collided at insert; treating as already processed",
            key,
        )
        return DuplicatePeriod(organization_id, period.label)
