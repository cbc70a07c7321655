"""HTTP boundary for campus payroll."""
