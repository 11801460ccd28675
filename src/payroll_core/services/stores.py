"""Collaborator interfaces consumed by the payroll service, and their
SQLAlchemy implementations.

Every write method commits its own transaction: a run (with its items), a
schedule update and an audit entry are each durable on their own. Reads do
not commit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_core.calculators.money import safe_salary
from payroll_core.calculators.types import EmployeeSnapshot
from payroll_core.errors import DuplicateKeyError, OrganizationNotFound, PersistenceFailure
from payroll_core.models import (
    AuditLog,
    Employee,
    EmployeeStatus,
    Organization,
    PayrollRun,
    PayrollRunItem,
    RunStatus,
)
from payroll_core.services.context import Actor

IDEMPOTENCY_CONSTRAINT = "payroll_run_idempotency_key_unique"


@dataclass(frozen=True)
class OrganizationSchedule:
    """Payroll schedule fields of an organization."""

    organization_id: UUID
    pay_frequency: str
    next_payroll_date: datetime | None
    last_payroll_date: datetime | None


# ============================================================================
# Interfaces
# ============================================================================


class EmployeeDirectory(Protocol):
    async def list_active_employees(self, organization_id: UUID) -> list[EmployeeSnapshot]:
        ...

    async def find_employee(
        self, organization_id: UUID, employee_id: UUID, include_deleted: bool = False
    ) -> EmployeeSnapshot | None:
        ...


class OrganizationStore(Protocol):
    async def get_schedule(self, organization_id: UUID) -> OrganizationSchedule | None:
        ...

    async def update_schedule(
        self,
        organization_id: UUID,
        last_payroll_date: datetime,
        next_payroll_date: datetime,
    ) -> None:
        ...


class PayrollRunStore(Protocol):
    async def find_completed_run_in_period(
        self, organization_id: UUID, start: datetime, end: datetime
    ) -> PayrollRun | None:
        ...

    async def create_run(self, run: PayrollRun) -> PayrollRun:
        """Persist a run and its items atomically.

        Raises:
            DuplicateKeyError: If the idempotency key is taken.
            PersistenceFailure: For any other storage error.
        """
        ...

    async def list_runs(self, organization_id: UUID, limit: int) -> list[PayrollRun]:
        ...

    async def find_runs_containing_employee(
        self, organization_id: UUID, employee_id: UUID, limit: int
    ) -> list[PayrollRun]:
        ...

    async def list_completed_runs_since(
        self, organization_id: UUID, since: datetime
    ) -> list[PayrollRun]:
        ...


class AuditSink(Protocol):
    async def record(
        self,
        organization_id: UUID,
        action: str,
        actor: Actor,
        target: str,
        target_id: UUID | None,
        details: str,
        metadata: dict[str, Any],
    ) -> None:
        ...


# ============================================================================
# SQLAlchemy implementations
# ============================================================================


def to_snapshot(employee: Employee) -> EmployeeSnapshot:
    return EmployeeSnapshot(
        employee_id=employee.id,
        display_name=employee.full_name,
        role=employee.role,
        annual_salary=safe_salary(employee.salary),
    )


def is_idempotency_violation(exc: IntegrityError) -> bool:
    """True if an IntegrityError comes from the idempotency key constraint.

    PostgreSQL names the constraint, SQLite names the column.
    """
    message = str(exc.orig)
    return IDEMPOTENCY_CONSTRAINT in message or "payroll_run.idempotency_key" in message


class SqlEmployeeDirectory:
    """Employee reads from the employee table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_active_employees(self, organization_id: UUID) -> list[EmployeeSnapshot]:
        result = await self.session.execute(
            select(Employee)
            .where(
                Employee.organization_id == organization_id,
                Employee.status == EmployeeStatus.ACTIVE.value,
                Employee.deleted_at.is_(None),
            )
            .order_by(Employee.created_at, Employee.id)
        )
        return [to_snapshot(e) for e in result.scalars().all()]

    async def find_employee(
        self, organization_id: UUID, employee_id: UUID, include_deleted: bool = False
    ) -> EmployeeSnapshot | None:
        query = select(Employee).where(
            Employee.id == employee_id,
            Employee.organization_id == organization_id,
        )
        if not include_deleted:
            query = query.where(Employee.deleted_at.is_(None))
        result = await self.session.execute(query)
        employee = result.scalar_one_or_none()
        return to_snapshot(employee) if employee is not None else None


class SqlOrganizationStore:
    """Schedule reads and writes on the organization table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_schedule(self, organization_id: UUID) -> OrganizationSchedule | None:
        org = await self.session.get(
            Organization, organization_id, populate_existing=True
        )
        if org is None:
            return None
        return OrganizationSchedule(
            organization_id=org.id,
            pay_frequency=org.pay_frequency,
            next_payroll_date=org.next_payroll_date,
            last_payroll_date=org.last_payroll_date,
        )

    async def update_schedule(
        self,
        organization_id: UUID,
        last_payroll_date: datetime,
        next_payroll_date: datetime,
    ) -> None:
        """Set both schedule fields in one UPDATE statement."""
        try:
            result = await self.session.execute(
                update(Organization)
                .where(Organization.id == organization_id)
                .values(
                    last_payroll_date=last_payroll_date,
                    next_payroll_date=next_payroll_date,
                )
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceFailure(f"Schedule update failed: {exc}") from exc

        if result.rowcount == 0:
            raise OrganizationNotFound(organization_id)


class SqlPayrollRunStore:
    """Payroll run persistence."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_completed_run_in_period(
        self, organization_id: UUID, start: datetime, end: datetime
    ) -> PayrollRun | None:
        result = await self.session.execute(
            select(PayrollRun)
            .where(
                PayrollRun.organization_id == organization_id,
                PayrollRun.status == RunStatus.COMPLETED.value,
                PayrollRun.period_start >= start,
                PayrollRun.period_start <= end,
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create_run(self, run: PayrollRun) -> PayrollRun:
        self.session.add(run)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if is_idempotency_violation(exc):
                raise DuplicateKeyError(run.idempotency_key) from exc
            raise PersistenceFailure(f"Payroll run insert rejected: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceFailure(f"Payroll run insert failed: {exc}") from exc
        # Detached, a later rollback on this session cannot expire the committed run
        self.session.expunge(run)
        return run

    async def list_runs(self, organization_id: UUID, limit: int) -> list[PayrollRun]:
        result = await self.session.execute(
            select(PayrollRun)
            .where(PayrollRun.organization_id == organization_id)
            .order_by(PayrollRun.period_start.desc(), PayrollRun.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def find_runs_containing_employee(
        self, organization_id: UUID, employee_id: UUID, limit: int
    ) -> list[PayrollRun]:
        result = await self.session.execute(
            select(PayrollRun)
            .where(
                PayrollRun.organization_id == organization_id,
                PayrollRun.status == RunStatus.COMPLETED.value,
                PayrollRun.items.any(PayrollRunItem.employee_id == employee_id),
            )
            .order_by(PayrollRun.period_start.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_completed_runs_since(
        self, organization_id: UUID, since: datetime
    ) -> list[PayrollRun]:
        result = await self.session.execute(
            select(PayrollRun)
            .where(
                PayrollRun.organization_id == organization_id,
                PayrollRun.status == RunStatus.COMPLETED.value,
                PayrollRun.period_start >= since,
            )
            .order_by(PayrollRun.period_start)
        )
        return list(result.scalars().all())


class SqlAuditSink:
    """Audit entries in the audit_log table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        organization_id: UUID,
        action: str,
        actor: Actor,
        target: str,
        target_id: UUID | None,
        details: str,
        metadata: dict[str, Any],
    ) -> None:
        self.session.add(
            AuditLog(
                organization_id=organization_id,
                action=action,
                actor=actor.name,
                actor_id=actor.id,
                target=target,
                target_id=target_id,
                details=details,
                metadata_json=metadata,
            )
        )
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
