"""Payroll calculation."""

from payroll_core.calculators.money import round_to_cents, safe_salary
from payroll_core.calculators.payroll_calculator import (
    PayrollCalculator,
    calculate,
    index_adjustments,
)
from payroll_core.calculators.period import Period, resolve_period
from payroll_core.calculators.types import (
    Adjustment,
    CalculationResult,
    EmployeeSnapshot,
    PayrollLineItem,
)

__all__ = [
    "Adjustment",
    "CalculationResult",
    "EmployeeSnapshot",
    "PayrollCalculator",
    "PayrollLineItem",
    "Period",
    "calculate",
    "index_adjustments",
    "resolve_period",
    "round_to_cents",
    "safe_salary",
]
