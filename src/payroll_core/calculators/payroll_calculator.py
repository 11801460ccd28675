"""Monthly payroll calculator."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from uuid import UUID

from payroll_core.calculators.money import (
    MAX_AMOUNT,
    ZERO,
    is_whole_cents,
    monthly_amount,
)
from payroll_core.calculators.types import (
    Adjustment,
    CalculationResult,
    EmployeeSnapshot,
    PayrollLineItem,
)
from payroll_core.errors import InvalidAdjustment

_NO_ADJUSTMENT = Adjustment(employee_id=UUID(int=0))


def index_adjustments(adjustments: Iterable[Adjustment]) -> dict[UUID, Adjustment]:
    """Key adjustments by employee id.

    Raises:
        InvalidAdjustment: If an employee appears twice, or an amount is
            negative, has fractions of a cent or exceeds MAX_AMOUNT.
    """
    index: dict[UUID, Adjustment] = {}
    for adjustment in adjustments:
        for name, amount in (("bonus", adjustment.bonus), ("deduction", adjustment.deduction)):
            if not amount.is_finite():
                raise InvalidAdjustment(adjustment.employee_id, f"{name} must be a number")
            if amount < 0:
                raise InvalidAdjustment(
                    adjustment.employee_id, f"{name} must not be negative"
                )
            if not is_whole_cents(amount):
                raise InvalidAdjustment(
                    adjustment.employee_id, f"{name} must be in whole cents"
                )
            if amount > MAX_AMOUNT:
                raise InvalidAdjustment(
                    adjustment.employee_id, f"{name} must not exceed {MAX_AMOUNT}"
                )
        if adjustment.employee_id in index:
            raise InvalidAdjustment(
                adjustment.employee_id, "more than one adjustment submitted"
            )
        index[adjustment.employee_id] = adjustment
    return index


class PayrollCalculator:
    """Pure monthly pay calculation.

    For every employee, in input order:

        base = round_to_cents(annual_salary / 12)
        net  = max(0, base + bonus - deduction)

    The total is the plain sum of the already-rounded net amounts, so it
    always equals the sum of the items exactly.
    """

    @staticmethod
    def calculate_item(
        employee: EmployeeSnapshot, adjustment: Adjustment | None = None
    ) -> PayrollLineItem:
        """Compute one employee's line item."""
        adj = adjustment or _NO_ADJUSTMENT
        base = monthly_amount(employee.annual_salary)
        net = max(ZERO, base + adj.bonus - adj.deduction)
        return PayrollLineItem(
            employee_id=employee.employee_id,
            employee_name=employee.display_name,
            base_amount=base,
            bonus=adj.bonus,
            deduction=adj.deduction,
            net_amount=net,
            salary_snapshot=employee.annual_salary,
            role=employee.role,
            note=adj.note,
        )

    @classmethod
    def calculate(
        cls,
        employees: Iterable[EmployeeSnapshot],
        adjustments: Iterable[Adjustment] | Mapping[UUID, Adjustment] = (),
    ) -> CalculationResult:
        """Compute line items and the grand total for a set of employees."""
        if isinstance(adjustments, Mapping):
            by_employee = dict(adjustments)
        else:
            by_employee = index_adjustments(adjustments)

        items: list[PayrollLineItem] = []
        total = Decimal("0")
        for employee in employees:
            item = cls.calculate_item(employee, by_employee.get(employee.employee_id))
            items.append(item)
            total += item.net_amount

        return CalculationResult(items=items, total=total)


def calculate(
    employees: Iterable[EmployeeSnapshot],
    adjustments: Iterable[Adjustment] = (),
) -> CalculationResult:
    """Module-level shortcut for ``PayrollCalculator.calculate``."""
    return PayrollCalculator.calculate(employees, adjustments)
