"""Payroll service - main orchestrator for payroll operations."""

from __future__ import annotations

import calendar
import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from payroll_core.calculators.money import ZERO, monthly_amount, round_to_cents
from payroll_core.calculators.payroll_calculator import PayrollCalculator, index_adjustments
from payroll_core.calculators.period import Period, period_for_instant, resolve_period
from payroll_core.calculators.types import (
    Adjustment,
    CalculationResult,
    PayrollLineItem,
)
from payroll_core.config import Settings, get_settings
from payroll_core.errors import (
    AUDIT_FAILURE,
    SCHEDULE_UPDATE_FAILURE,
    DuplicateKeyError,
    DuplicatePeriod,
    EmployeeNotFound,
    NoEligibleEmployees,
    OrganizationNotFound,
    PersistenceFailure,
    RunWarning,
)
from payroll_core.models import PayrollRun, PayrollRunItem, RunStatus, utcnow
from payroll_core.services.idempotency import IdempotencyGuard, build_idempotency_key
from payroll_core.services.state_machine import CommitStage, CommitStateMachine
from payroll_core.services.stores import (
    SqlAuditSink,
    SqlEmployeeDirectory,
    SqlOrganizationStore,
    SqlPayrollRunStore,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from payroll_core.services.context import OrgContext
    from payroll_core.services.stores import (
        AuditSink,
        EmployeeDirectory,
        OrganizationStore,
        PayrollRunStore,
    )

logger = logging.getLogger(__name__)

AUDIT_ACTION_RUN = "Payroll executed"
AUDIT_TARGET_RUN = "Payroll Run"


@dataclass
class RunOutcome:
    """A committed run plus any non-fatal problems that followed it."""

    run: PayrollRun
    warnings: list[RunWarning] = field(default_factory=list)

    @property
    def fully_applied(self) -> bool:
        """True if the schedule update and audit entry both succeeded."""
        return not self.warnings


@dataclass(frozen=True)
class Payslip:
    """One employee's view of one completed run."""

    run_id: UUID
    period_start: datetime
    period_end: datetime
    paid_date: datetime
    amount: Decimal
    status: str = "paid"


@dataclass(frozen=True)
class PayrollSummary:
    """Dashboard figures for an organization's payroll."""

    active_employees: int
    total_annual_payroll: Decimal
    projected_monthly_payroll: Decimal
    average_salary: Decimal
    next_payroll_date: datetime | None
    due_in_days: int | None


@dataclass(frozen=True)
class TrendPoint:
    """Completed payroll total for one calendar month."""

    month: int  # 0-based
    year: int
    label: str
    amount: Decimal


class PayrollService:
    """Service for the payroll run lifecycle.

    Operations:
    - preview: Base pay for every active employee, no side effects
    - run: Calculate and commit one calendar month, at most once
    - list_runs: Run history, newest period first
    - list_my_payslips: One employee's amounts across completed runs
    - payroll_summary / payroll_trend: Dashboard figures
    """

    def __init__(
        self,
        employees: EmployeeDirectory,
        organizations: OrganizationStore,
        runs: PayrollRunStore,
        audit: AuditSink,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.employees = employees
        self.organizations = organizations
        self.runs = runs
        self.audit = audit
        self.settings = settings or get_settings()
        self.clock = clock
        self.calculator = PayrollCalculator()
        self.guard = IdempotencyGuard(runs)

    @classmethod
    def for_session(
        cls,
        session: AsyncSession,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> PayrollService:
        """Wire the service to the SQLAlchemy stores on one session."""
        return cls(
            employees=SqlEmployeeDirectory(session),
            organizations=SqlOrganizationStore(session),
            runs=SqlPayrollRunStore(session),
            audit=SqlAuditSink(session),
            settings=settings,
            clock=clock,
        )

    def resolve_period(self, month: int, year: int) -> Period:
        return resolve_period(
            month,
            year,
            min_year=self.settings.payroll_min_year,
            max_year=self.settings.payroll_max_year,
        )

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    async def preview(self, context: OrgContext) -> list[PayrollLineItem]:
        """Base monthly pay for every active employee, without adjustments."""
        employees = await self.employees.list_active_employees(context.organization_id)
        return self.calculator.calculate(employees).items

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def run(
        self,
        context: OrgContext,
        month: int,
        year: int,
        adjustments: Iterable[Adjustment] = (),
    ) -> RunOutcome:
        """Calculate and commit payroll for one calendar month.

        Args:
            context: Organization and acting user
            month: 0-based month (0 = January)
            year: Calendar year
            adjustments: At most one bonus/deduction entry per employee

        Returns:
            The committed run and any warnings from the schedule update or
            audit write. Those two steps never undo the run.

        Raises:
            InvalidPeriod: Month/year out of range
            InvalidAdjustment: Negative amount or duplicate employee entry
            DuplicatePeriod: The period already has a completed run
            NoEligibleEmployees: Nobody to pay
            PersistenceFailure: Storage error while writing the run
        """
        org_id = context.organization_id
        period = self.resolve_period(month, year)
        by_employee = index_adjustments(adjustments)
        key = build_idempotency_key(org_id, month, year)
        machine = CommitStateMachine(org_id, key)

        # 1. Duplicate check
        machine.advance(CommitStage.CHECKING_DUPLICATE)
        try:
            await self.guard.ensure_not_processed(org_id, period)
        except DuplicatePeriod:
            machine.advance(CommitStage.REJECTED, "period already processed")
            raise

        # 2. Employees
        machine.advance(CommitStage.FETCHING_EMPLOYEES)
        employees = await self.employees.list_active_employees(org_id)
        if not employees:
            machine.advance(CommitStage.REJECTED, "no eligible employees")
            logger.warning(
                "Payroll for org %s %s rejected: no active employees",
                org_id,
                period.label,
            )
            raise NoEligibleEmployees(org_id)

        # 3. Calculate
        machine.advance(CommitStage.CALCULATING)
        result = self.calculator.calculate(employees, by_employee)

        # 4. Persist run + items as one write
        machine.advance(CommitStage.PERSISTING)
        committed_at = self.clock()
        run = self._build_run(context, period, key, result, committed_at)
        try:
            run = await self.runs.create_run(run)
        except DuplicateKeyError as exc:
            machine.advance(CommitStage.FAILED, "idempotency key collision")
            raise self.guard.collision(org_id, period, key) from exc
        except PersistenceFailure:
            machine.advance(CommitStage.FAILED, "storage error")
            logger.exception("Payroll run insert failed for org %s %s", org_id, period.label)
            raise

        warnings: list[RunWarning] = []

        # 5. Schedule
        machine.advance(CommitStage.UPDATING_SCHEDULE)
        warning = await self._advance_schedule(run, committed_at, period.next_start)
        if warning is not None:
            warnings.append(warning)

        # 6. Audit
        machine.advance(CommitStage.AUDITING)
        warning = await self._record_audit(context, run, period)
        if warning is not None:
            warnings.append(warning)

        machine.advance(CommitStage.DONE)
        logger.info(
            "Payroll run %s committed for org %s %s: %d employees, total %s",
            run.id,
            org_id,
            period.label,
            run.employee_count,
            run.total_amount,
        )
        return RunOutcome(run=run, warnings=warnings)

    def _build_run(
        self,
        context: OrgContext,
        period: Period,
        key: str,
        result: CalculationResult,
        committed_at: datetime,
    ) -> PayrollRun:
        items = [
            PayrollRunItem(
                position=position,
                employee_id=item.employee_id,
                employee_name=item.employee_name,
                base_amount=item.base_amount,
                bonus=item.bonus,
                deduction=item.deduction,
                net_amount=item.net_amount,
                salary_snapshot=item.salary_snapshot,
                note=item.note,
            )
            for position, item in enumerate(result.items)
        ]
        return PayrollRun(
            organization_id=context.organization_id,
            run_date=committed_at,
            period_start=period.start,
            period_end=period.end,
            status=RunStatus.COMPLETED.value,
            total_amount=result.total,
            employee_count=result.employee_count,
            created_by=context.actor.id,
            idempotency_key=key,
            created_at=committed_at,
            items=items,
        )

    async def _advance_schedule(
        self, run: PayrollRun, committed_at: datetime, next_date: datetime
    ) -> RunWarning | None:
        # The run is already durable; a failure here is reported, not raised.
        try:
            await self.organizations.update_schedule(
                run.organization_id,
                last_payroll_date=committed_at,
                next_payroll_date=next_date,
            )
        except Exception as exc:
            logger.exception(
                "Schedule update failed after payroll run %s for org %s; "
                "next_payroll_date needs reconciling to %s",
                run.id,
                run.organization_id,
                next_date.date(),
            )
            return RunWarning(
                code=SCHEDULE_UPDATE_FAILURE,
                message=f"Payroll schedule was not advanced: {exc}",
                details={
                    "run_id": str(run.id),
                    "next_payroll_date": next_date.isoformat(),
                },
            )
        return None

    async def _record_audit(
        self, context: OrgContext, run: PayrollRun, period: Period
    ) -> RunWarning | None:
        try:
            await self.audit.record(
                organization_id=context.organization_id,
                action=AUDIT_ACTION_RUN,
                actor=context.actor,
                target=AUDIT_TARGET_RUN,
                target_id=run.id,
                details=f"Processed {run.employee_count} employees for {period.label}",
                metadata={
                    "total_amount": str(run.total_amount),
                    "month": period.month,
                    "year": period.year,
                },
            )
        except Exception as exc:
            logger.exception(
                "Audit entry for payroll run %s (org %s) could not be written",
                run.id,
                context.organization_id,
            )
            return RunWarning(
                code=AUDIT_FAILURE,
                message=f"Audit entry was not written: {exc}",
                details={"run_id": str(run.id)},
            )
        return None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_runs(self, context: OrgContext, limit: int | None = None) -> list[PayrollRun]:
        """Runs for the organization, newest period first."""
        return await self.runs.list_runs(
            context.organization_id, limit or self.settings.runs_limit
        )

    async def list_my_payslips(
        self,
        context: OrgContext,
        employee_id: UUID,
        limit: int | None = None,
    ) -> list[Payslip]:
        """One employee's amounts across completed runs.

        Only that employee's line is exposed; colleagues' figures and the
        run totals are not. Soft-deleted employees keep their history.
        """
        org_id = context.organization_id
        employee = await self.employees.find_employee(org_id, employee_id, include_deleted=True)
        if employee is None:
            raise EmployeeNotFound(org_id, employee_id)

        runs = await self.runs.find_runs_containing_employee(
            org_id, employee_id, limit or self.settings.payslips_limit
        )
        payslips = []
        for run in runs:
            item = run.item_for(employee_id)
            payslips.append(
                Payslip(
                    run_id=run.id,
                    period_start=run.period_start,
                    period_end=run.period_end,
                    paid_date=run.created_at,
                    amount=item.net_amount if item is not None else ZERO,
                )
            )
        return payslips

    async def payroll_summary(
        self, context: OrgContext, today: datetime | None = None
    ) -> PayrollSummary:
        """Projected monthly cost and time until the next scheduled run."""
        org_id = context.organization_id
        schedule = await self.organizations.get_schedule(org_id)
        if schedule is None:
            raise OrganizationNotFound(org_id)

        employees = await self.employees.list_active_employees(org_id)
        total = sum((e.annual_salary for e in employees), ZERO)
        average = round_to_cents(total / len(employees)) if employees else ZERO

        due_in_days = None
        if schedule.next_payroll_date is not None:
            now = today or self.clock()
            seconds = (schedule.next_payroll_date - now).total_seconds()
            due_in_days = math.ceil(seconds / 86400)

        return PayrollSummary(
            active_employees=len(employees),
            total_annual_payroll=total,
            projected_monthly_payroll=monthly_amount(total),
            average_salary=average,
            next_payroll_date=schedule.next_payroll_date,
            due_in_days=due_in_days,
        )

    async def payroll_trend(
        self, context: OrgContext, today: datetime | None = None, months: int = 12
    ) -> list[TrendPoint]:
        """Completed totals for the last ``months`` calendar months, oldest first."""
        if months < 1:
            return []
        current = period_for_instant(today or self.clock())
        periods: list[tuple[int, int]] = []
        for back in range(months - 1, -1, -1):
            index = current.year * 12 + current.month - back
            periods.append((index % 12, index // 12))

        first_month, first_year = periods[0]
        since = datetime(first_year, first_month + 1, 1)
        runs = await self.runs.list_completed_runs_since(context.organization_id, since)

        totals: dict[tuple[int, int], Decimal] = {}
        for run in runs:
            slot = (run.period_start.month - 1, run.period_start.year)
            totals.setdefault(slot, run.total_amount)

        return [
            TrendPoint(
                month=month,
                year=year,
                label=calendar.month_abbr[month + 1],
                amount=totals.get((month, year), ZERO),
            )
            for month, year in periods
        ]
