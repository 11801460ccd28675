"""Error taxonomy for payroll operations.

Every fatal error carries a stable ``code`` naming its kind and the HTTP
status the API layer answers with. Non-fatal problems during a commit
(schedule or audit writes) are not raised; they travel back to the caller as
``RunWarning`` records next to the committed run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID


class PayrollError(Exception):
    """Base exception for payroll operations."""

    code: str = "PAYROLL_ERROR"
    status_code: int = 400

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class InvalidPeriod(PayrollError):
    """Month or year outside the accepted range."""

    code = "INVALID_PERIOD"
    status_code = 422

    def __init__(self, month: Any, year: Any, reason: str):
        self.month = month
        self.year = year
        super().__init__(
            f"Invalid payroll period month={month!r} year={year!r}: {reason}",
            {"month": month, "year": year},
        )


class InvalidAdjustment(PayrollError):
    """Caller-supplied adjustment set is malformed."""

    code = "INVALID_ADJUSTMENT"
    status_code = 422

    def __init__(self, employee_id: UUID, reason: str):
        self.employee_id = employee_id
        super().__init__(
            f"Invalid adjustment for employee {employee_id}: {reason}",
            {"employee_id": str(employee_id)},
        )


class DuplicatePeriod(PayrollError):
    """A completed run already exists for the organization and period."""

    code = "DUPLICATE_PERIOD"
    status_code = 409

    def __init__(self, organization_id: UUID, period_label: str):
        self.organization_id = organization_id
        self.period_label = period_label
        super().__init__(
            f"Payroll for {period_label} has already been processed.",
            {"organization_id": str(organization_id), "period": period_label},
        )


class NoEligibleEmployees(PayrollError):
    """The organization has no active employees to pay."""

    code = "NO_ELIGIBLE_EMPLOYEES"
    status_code = 400

    def __init__(self, organization_id: UUID):
        self.organization_id = organization_id
        super().__init__(
            "No active employees to pay.",
            {"organization_id": str(organization_id)},
        )


class PersistenceFailure(PayrollError):
    """Storage error unrelated to uniqueness; nothing was committed."""

    code = "PERSISTENCE_FAILURE"
    status_code = 503


class EmployeeNotFound(PayrollError):
    code = "EMPLOYEE_NOT_FOUND"
    status_code = 404

    def __init__(self, organization_id: UUID, employee_id: UUID):
        self.organization_id = organization_id
        self.employee_id = employee_id
        super().__init__(
            f"Employee {employee_id} not found",
            {"organization_id": str(organization_id), "employee_id": str(employee_id)},
        )


class OrganizationNotFound(PayrollError):
    code = "ORGANIZATION_NOT_FOUND"
    status_code = 404

    def __init__(self, organization_id: UUID):
        self.organization_id = organization_id
        super().__init__(
            f"Organization {organization_id} not found",
            {"organization_id": str(organization_id)},
        )


class DuplicateKeyError(Exception):
    """Raised by a run store when the idempotency key is already taken."""

    def __init__(self, idempotency_key: str):
        self.idempotency_key = idempotency_key
        super().__init__(f"Idempotency key already used: {idempotency_key}")


# Non-fatal warning kinds
SCHEDULE_UPDATE_FAILURE = "SCHEDULE_UPDATE_FAILURE"
AUDIT_FAILURE = "AUDIT_FAILURE"


@dataclass(frozen=True)
class RunWarning:
    """A side effect that failed after the run itself was committed."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
