"""Payroll core services."""

from payroll_core.services.context import Actor, OrgContext
from payroll_core.services.idempotency import IdempotencyGuard, build_idempotency_key
from payroll_core.services.payroll_service import (
    PayrollService,
    PayrollSummary,
    Payslip,
    RunOutcome,
    TrendPoint,
)
from payroll_core.services.state_machine import (
    CommitStage,
    CommitStateMachine,
    InvalidTransitionError,
)

__all__ = [
    "Actor",
    "CommitStage",
    "CommitStateMachine",
    "IdempotencyGuard",
    "InvalidTransitionError",
    "OrgContext",
    "PayrollService",
    "PayrollSummary",
    "Payslip",
    "RunOutcome",
    "TrendPoint",
    "build_idempotency_key",
]
