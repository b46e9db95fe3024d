from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .compensation.mysql_compensation_repository import MySQLCompensationRepository
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_MINIMUM_WAGE
from .database.connection import DBConfig, DatabaseConnection
from .deductions.engine import StatutoryDeductionEngine
from .deductions.mysql_rate_table_repository import MySQLRateTableRepository
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .overtime.mysql_overtime_repository import MySQLOvertimeRepository
from .overtime.resolver import OvertimeResolver
from .overtime.service import OvertimeRequestService
from .payroll.assembler import PayrollAssembler
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.mysql_period_repository import MySQLPayrollPeriodRepository
from .payroll.period_service import PayrollPeriodService
from .payroll.service import PayrollRunService
from .payroll.status_machine import PayrollStatusMachine
from .policies.calculator import PolicyDeductionCalculator
from .policies.factory import DeductionStrategyFactory
from .policies.mysql_policy_repository import MySQLDeductionPolicyRepository
from .schedules.mysql_schedule_repository import MySQLWorkScheduleRepository
from .timesheet.calculator import TimesheetCalculator
from .timesheet.mysql_time_entry_repository import MySQLTimeEntryRepository


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository

    timesheet_calculator: TimesheetCalculator
    overtime_service: OvertimeRequestService
    deduction_engine: StatutoryDeductionEngine
    policy_calculator: PolicyDeductionCalculator
    payroll_assembler: PayrollAssembler
    status_machine: PayrollStatusMachine
    period_service: PayrollPeriodService
    payroll_run_service: PayrollRunService

    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    time_entries,
    overtime,
    compensations,
    rate_tables,
    policies,
    schedules,
    payrolls,
    periods,
    employees,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    minimum_wage: Decimal = DEFAULT_MINIMUM_WAGE,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services onto any set of repositories (MySQL or in-memory)."""
    timesheet_calculator = TimesheetCalculator(time_entries, time_entries, OvertimeResolver(overtime))
    deduction_engine = StatutoryDeductionEngine(rate_tables, minimum_wage=Decimal(minimum_wage))
    policy_calculator = PolicyDeductionCalculator(
        policies,
        schedules,
        strategy_factory=DeductionStrategyFactory(),
        grace_minutes=grace_minutes,
    )
    payroll_assembler = PayrollAssembler(
        timesheet_calculator,
        time_entries,
        compensations,
        deduction_engine,
        policy_calculator,
        payrolls,
    )

    return Container(
        conn=conn,
        employees_repo=employees,
        timesheet_calculator=timesheet_calculator,
        overtime_service=OvertimeRequestService(overtime),
        deduction_engine=deduction_engine,
        policy_calculator=policy_calculator,
        payroll_assembler=payroll_assembler,
        status_machine=PayrollStatusMachine(payrolls),
        period_service=PayrollPeriodService(periods),
        payroll_run_service=PayrollRunService(payroll_assembler, employees),
    )


def build_container(
    *,
    db_config: dict,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    minimum_wage: Decimal = DEFAULT_MINIMUM_WAGE,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return build_services(
        time_entries=MySQLTimeEntryRepository(conn),
        overtime=MySQLOvertimeRepository(conn),
        compensations=MySQLCompensationRepository(conn),
        rate_tables=MySQLRateTableRepository(conn),
        policies=MySQLDeductionPolicyRepository(conn),
        schedules=MySQLWorkScheduleRepository(conn),
        payrolls=MySQLPayrollRepository(conn),
        periods=MySQLPayrollPeriodRepository(conn),
        employees=MySQLEmployeeRepository(conn),
        grace_minutes=grace_minutes,
        minimum_wage=minimum_wage,
        conn=conn,
    )
