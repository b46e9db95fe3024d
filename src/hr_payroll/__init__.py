"""HR payroll core.

Organized by feature modules (timesheet, overtime, deductions, policies,
payroll, ...) with a thin Flask JSON controller layer over service and
repository layers.
"""
