"""Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from payroll_core.calculators.types import Adjustment


# ============================================================================
# Run request
# ============================================================================


class AdjustmentIn(BaseModel):
    """Bonus/deduction for one employee in one run."""

    employee_id: UUID
    # Whole cents only, within the Numeric(12, 2) column range
    bonus: Decimal = Field(
        default=Decimal("0"), ge=0, max_digits=12, decimal_places=2
    )
    deduction: Decimal = Field(
        default=Decimal("0"), ge=0, max_digits=12, decimal_places=2
    )
    note: str | None = None

    def to_adjustment(self) -> Adjustment:
        return Adjustment(
            employee_id=self.employee_id,
            bonus=self.bonus,
            deduction=self.deduction,
            note=self.note,
        )


class PayrollRunRequest(BaseModel):
    """Schema for executing payroll for one month.

    ``period_month`` is 0-based (0 = January). Range checks happen in the
    service so the configured year bounds apply.
    """

    period_month: int
    period_year: int
    adjustments: list[AdjustmentIn] = Field(default_factory=list)


# ============================================================================
# Line items and runs
# ============================================================================


class LineItemResponse(BaseModel):
    """Calculated (not persisted) line item, as returned by preview."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_name: str
    role: str | None = None
    base_amount: Decimal
    bonus: Decimal
    deduction: Decimal
    net_amount: Decimal


class PayrollRunItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_name: str
    base_amount: Decimal
    bonus: Decimal
    deduction: Decimal
    net_amount: Decimal
    salary_snapshot: Decimal
    note: str | None = None


class PayrollRunResponse(BaseModel):
    """Schema for a persisted payroll run."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    run_date: datetime
    period_start: datetime
    period_end: datetime
    status: str
    total_amount: Decimal
    employee_count: int
    created_by: UUID
    idempotency_key: str
    failure_reason: str | None = None
    created_at: datetime
    items: list[PayrollRunItemResponse] = []


class RunWarningResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    message: str
    details: dict[str, Any] = {}


class RunCommitResponse(BaseModel):
    """Committed run plus warnings from the schedule/audit steps."""

    run: PayrollRunResponse
    warnings: list[RunWarningResponse] = []


class PayrollRunListResponse(BaseModel):
    items: list[PayrollRunResponse]
    total: int


# ============================================================================
# Employee and dashboard views
# ============================================================================


class PayslipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    run_id: UUID
    period_start: datetime
    period_end: datetime
    paid_date: datetime
    amount: Decimal
    status: str


class PayrollSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    active_employees: int
    total_annual_payroll: Decimal
    projected_monthly_payroll: Decimal
    average_salary: Decimal
    next_payroll_date: datetime | None = None
    due_in_days: int | None = None


class TrendPointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: int
    year: int
    label: str
    amount: Decimal


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None
