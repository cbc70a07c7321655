"""Campus payroll: period generation, ad-hoc run snapshots, unified payslips."""

__version__ = "0.1.0"
