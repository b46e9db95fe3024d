from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from ..core.enums import PayrollStatus
from ..core.exceptions import DomainError, NotFoundError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .assembler import PayrollAssembler
from .model import Payslip, PayrollView
from .payslip import build_payslip

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchFailure:
    employee_id: int
    error_kind: str
    message: str


@dataclass
class BatchResult:
    generated: list[PayrollView] = field(default_factory=list)
    failures: list[BatchFailure] = field(default_factory=list)


class PayrollRunService:
    def __init__(self, assembler: PayrollAssembler, employees: EmployeeRepository):
        self._assembler = assembler
        self._employees = employees

    def run_batch(
        self,
        *,
        organization_id: int,
        period_start: date,
        period_end: date,
        actor_id: str,
        employee_ids: Optional[Iterable[int]] = None,
        status: PayrollStatus = PayrollStatus.DRAFT,
    ) -> BatchResult:
        """Generate payrolls employee by employee.

        A failing employee is reported with its error kind and the run goes on.
        """
        if employee_ids is None:
            ids = [e.employee_id for e in self._employees.list_active_for_organization(int(organization_id))]
        else:
            ids = [int(i) for i in employee_ids]

        result = BatchResult()
        for employee_id in ids:
            try:
                view = self._assembler.generate(
                    employee_id=employee_id,
                    organization_id=organization_id,
                    period_start=period_start,
                    period_end=period_end,
                    actor_id=actor_id,
                    status=status,
                )
                result.generated.append(view)
            except DomainError as exc:
                logger.warning(
                    "Payroll run %s..%s: employee %s failed with %s: %s",
                    period_start,
                    period_end,
                    employee_id,
                    type(exc).__name__,
                    exc,
                )
                result.failures.append(BatchFailure(employee_id=employee_id, error_kind=type(exc).__name__, message=str(exc)))

        logger.info(
            "Payroll run %s..%s for organization %s: %d generated, %d failed",
            period_start,
            period_end,
            organization_id,
            len(result.generated),
            len(result.failures),
        )
        return result

    def payslip(self, payroll_id: int) -> Payslip:
        view = self._assembler.get_by_id(payroll_id)
        return build_payslip(view, self._employee(view.employee_id))

    def _employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee
