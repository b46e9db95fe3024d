from __future__ import annotations

from ..employees.model import Employee
from .model import Payslip, PayslipLine, PayrollView


def _label(enum_value) -> str:
    return enum_value.value.replace("_", " ").title()


def build_payslip(view: PayrollView, employee: Employee) -> Payslip:
    """Payslip view-model for one payroll view. Rendering happens elsewhere."""
    if view.employee_id != employee.employee_id:
        raise ValueError(f"Payroll of employee {view.employee_id} cannot be printed for employee {employee.employee_id}")

    return Payslip(
        employee_id=employee.employee_id,
        employee_code=employee.employee_code,
        employee_name=employee.full_name,
        department_name=employee.department_name,
        position=employee.position,
        period_start=view.period_start,
        period_end=view.period_end,
        earnings=tuple(
            PayslipLine(label=_label(e.earning_type), amount=e.amount, hours=e.hours, rate=e.rate) for e in view.earnings
        ),
        deductions=tuple(PayslipLine(label=_label(d.deduction_type), amount=d.amount) for d in view.deductions),
        gross_pay=view.gross_pay,
        total_deductions=view.total_deductions,
        net_pay=view.net_pay,
        status=view.status,
        payroll_id=view.payroll_id,
    )
