"""Tests for the duplicate-settlement guard."""

from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from payroll_core.calculators.period import resolve_period
from payroll_core.errors import DuplicatePeriod
from payroll_core.services.idempotency import IdempotencyGuard, build_idempotency_key


class FakeRunStore:
    """Only the pre-check query is needed here."""

    def __init__(self, existing=None):
        self.existing = existing
        self.calls = []

    async def find_completed_run_in_period(self, organization_id, start, end):
        self.calls.append((organization_id, start, end))
        return self.existing


class TestIdempotencyKey:
    def test_key_format(self):
        org_id = UUID("11111111-2222-3333-4444-555555555555")
        assert (
            build_idempotency_key(org_id, 2, 2026)
            == "run-11111111-2222-3333-4444-555555555555-2-2026"
        )

    def test_key_is_per_period_and_org(self):
        org_id = uuid4()
        keys = {
            build_idempotency_key(org_id, 2, 2026),
            build_idempotency_key(org_id, 3, 2026),
            build_idempotency_key(org_id, 2, 2027),
            build_idempotency_key(uuid4(), 2, 2026),
        }
        assert len(keys) == 4


class TestIdempotencyGuard:
    async def test_passes_when_period_is_open(self):
        store = FakeRunStore()
        period = resolve_period(2, 2026)
        org_id = uuid4()

        await IdempotencyGuard(store).ensure_not_processed(org_id, period)

        assert store.calls == [(org_id, period.start, period.end)]

    async def test_completed_run_blocks_period(self):
        store = FakeRunStore(existing=SimpleNamespace(id=uuid4()))

        with pytest.raises(DuplicatePeriod) as exc_info:
            await IdempotencyGuard(store).ensure_not_processed(uuid4(), resolve_period(2, 2026))

        assert str(exc_info.value) == "Payroll for March 2026 has already been processed."
        assert exc_info.value.status_code == 409

    def test_collision_maps_to_duplicate_period(self):
        org_id = uuid4()
        period = resolve_period(2, 2026)

        error = IdempotencyGuard.collision(
            org_id, period, build_idempotency_key(org_id, 2, 2026)
        )

        assert isinstance(error, DuplicatePeriod)
        assert error.period_label == "March 2026"
        assert error.code == "DUPLICATE_PERIOD"
