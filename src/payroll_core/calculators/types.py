"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from payroll_core.calculators.money import ZERO


@dataclass(frozen=True)
class EmployeeSnapshot:
    """Salary data read from the employee directory at calculation time."""

    employee_id: UUID
    display_name: str
    role: str | None = None
    annual_salary: Decimal = ZERO


@dataclass(frozen=True)
class Adjustment:
    """Per-run bonus/deduction for one employee."""

    employee_id: UUID
    bonus: Decimal = ZERO
    deduction: Decimal = ZERO
    note: str | None = None


@dataclass(frozen=True)
class PayrollLineItem:
    """One employee's computed pay figures within a run."""

    employee_id: UUID
    employee_name: str
    base_amount: Decimal
    bonus: Decimal
    deduction: Decimal
    net_amount: Decimal
    salary_snapshot: Decimal
    role: str | None = None
    note: str | None = None


@dataclass
class CalculationResult:
    """Items and grand total for one calculation."""

    items: list[PayrollLineItem] = field(default_factory=list)
    total: Decimal = ZERO

    @property
    def employee_count(self) -> int:
        return len(self.items)
