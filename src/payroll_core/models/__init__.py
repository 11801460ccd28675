"""ORM models."""

from payroll_core.models.audit import AuditLog
from payroll_core.models.base import Base, TimestampMixin, utcnow
from payroll_core.models.employee import Employee, EmployeeStatus
from payroll_core.models.organization import Organization
from payroll_core.models.payroll import (
    ImmutableRecordError,
    PayrollRun,
    PayrollRunItem,
    RunStatus,
)

__all__ = [
    "AuditLog",
    "Base",
    "Employee",
    "EmployeeStatus",
    "ImmutableRecordError",
    "Organization",
    "PayrollRun",
    "PayrollRunItem",
    "RunStatus",
    "TimestampMixin",
    "utcnow",
]
