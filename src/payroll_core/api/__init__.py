"""HTTP surface for the payroll core."""
