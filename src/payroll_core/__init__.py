"""Monthly payroll run engine."""

__version__ = "0.1.0"
