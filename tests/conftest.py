from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

import pytest

from hr_payroll.compensation.model import Compensation
from hr_payroll.container import build_services
from hr_payroll.core.enums import (
    DeductionMethod,
    OvertimeStatus,
    PayrollLogAction,
    PayrollStatus,
    PolicyType,
    RateTableKind,
    TimeEntryStatus,
)
from hr_payroll.core.exceptions import OvertimeLookupError
from hr_payroll.deductions.model import RateBracket, RateTable
from hr_payroll.employees.model import Employee
from hr_payroll.overtime.model import OvertimeRequest
from hr_payroll.payroll.model import Payroll, PayrollLog
from hr_payroll.policies.model import DeductionPolicy
from hr_payroll.schedules.model import WorkSchedule
from hr_payroll.timesheet.model import TimeBreak, TimeEntry

D = Decimal


class InMemoryTimeEntries:
    def __init__(self):
        self.entries: dict[int, TimeEntry] = {}
        self.breaks: dict[int, list[TimeBreak]] = {}
        self._id = 0
        self._break_id = 0

    def add(self, employee_id: int, clock_in: datetime, clock_out: Optional[datetime], *, breaks=()) -> TimeEntry:
        self._id += 1
        entry = TimeEntry(
            time_entry_id=self._id,
            employee_id=employee_id,
            work_date=clock_in.date(),
            clock_in_at=clock_in,
            clock_out_at=clock_out,
            status=TimeEntryStatus.CLOSED if clock_out else TimeEntryStatus.OPEN,
        )
        self.entries[entry.time_entry_id] = entry
        for start, end, paid in breaks:
            self._break_id += 1
            self.breaks.setdefault(entry.time_entry_id, []).append(
                TimeBreak(
                    break_id=self._break_id,
                    time_entry_id=entry.time_entry_id,
                    break_start_at=start,
                    break_end_at=end,
                    is_paid=paid,
                )
            )
        return entry

    def list_closed_for_employee(self, *, employee_id: int, start_date: date, end_date: date):
        return [
            e
            for e in self.entries.values()
            if e.employee_id == employee_id and e.status == TimeEntryStatus.CLOSED and start_date <= e.work_date <= end_date
        ]

    def list_for_time_entry(self, time_entry_id: int):
        return list(self.breaks.get(time_entry_id, []))


class InMemoryOvertime:
    def __init__(self):
        self.requests: dict[int, OvertimeRequest] = {}
        self.fail = False
        self._id = 0

    def approved(self, employee_id: int, work_date: date, minutes: int, *, requested: Optional[int] = None) -> int:
        request_id = self.create(
            employee_id=employee_id, work_date=work_date, requested_minutes=requested or minutes, reason=None
        )
        self.decide(
            request_id=request_id,
            status=OvertimeStatus.APPROVED,
            decided_by="manager",
            decided_at=datetime(2025, 1, 1),
            approved_minutes=minutes,
        )
        return request_id

    def sum_approved_minutes(self, *, employee_id: int, work_date: date) -> int:
        if self.fail:
            raise OvertimeLookupError("connection reset")
        return sum(
            r.approved_minutes or 0
            for r in self.requests.values()
            if r.employee_id == employee_id and r.work_date == work_date and r.status == OvertimeStatus.APPROVED
        )

    def get(self, *, request_id: int):
        return self.requests.get(request_id)

    def create(self, *, employee_id: int, work_date: date, requested_minutes: int, reason):
        self._id += 1
        self.requests[self._id] = OvertimeRequest(
            request_id=self._id,
            employee_id=employee_id,
            work_date=work_date,
            requested_minutes=requested_minutes,
            status=OvertimeStatus.PENDING,
            created_at=datetime(2025, 1, 1),
            reason=reason,
        )
        return self._id

    def decide(self, *, request_id: int, status, decided_by, decided_at, approved_minutes=None) -> bool:
        req = self.requests[request_id]
        if req.status != OvertimeStatus.PENDING:
            return False
        self.requests[request_id] = replace(
            req, status=status, decided_by=decided_by, decided_at=decided_at, approved_minutes=approved_minutes
        )
        return True

    def list_for_employee(self, *, employee_id: int, start_date: date, end_date: date, status=None):
        return [
            r
            for r in self.requests.values()
            if r.employee_id == employee_id
            and start_date <= r.work_date <= end_date
            and (status is None or r.status == status)
        ]


class InMemoryCompensations:
    def __init__(self, items=()):
        self.items: list[Compensation] = list(items)

    def get_current(self, *, employee_id: int, as_of: date):
        found = [c for c in self.items if c.employee_id == employee_id and c.effective_date <= as_of]
        found.sort(key=lambda c: c.effective_date)
        return found[-1] if found else None


class InMemoryRateTables:
    def __init__(self, tables=()):
        self.tables: list[RateTable] = list(tables)
        self.calls: list[tuple] = []

    def get_rate_table(self, *, organization_id, kind, as_of):
        self.calls.append((organization_id, kind, as_of))
        found = [
            t
            for t in self.tables
            if t.kind == kind and t.organization_id == organization_id and t.is_effective_on(as_of)
        ]
        found.sort(key=lambda t: t.effective_from)
        return found[-1] if found else None


class InMemoryPolicies:
    def __init__(self, policies=()):
        self.policies: list[DeductionPolicy] = list(policies)

    def get_active_policy(self, *, organization_id: int, policy_type, as_of: date):
        found = [
            p
            for p in self.policies
            if p.organization_id == organization_id
            and p.policy_type == policy_type
            and p.effective_from <= as_of
            and (p.effective_to is None or as_of <= p.effective_to)
        ]
        found.sort(key=lambda p: p.effective_from)
        return found[-1] if found else None


class InMemorySchedules:
    def __init__(self):
        self.schedules: dict[int, WorkSchedule] = {}
        self.leave: dict[int, set] = {}

    def get_work_schedule(self, *, employee_id: int, as_of: date):
        return self.schedules.get(employee_id)

    def list_approved_leave_dates(self, *, employee_id: int, start_date: date, end_date: date):
        return {d for d in self.leave.get(employee_id, set()) if start_date <= d <= end_date}


class InMemoryPayrolls:
    """Payroll store with the same compare-and-set contract as the MySQL one."""

    def __init__(self):
        self._lock = threading.Lock()
        self.payrolls: dict[int, Payroll] = {}
        self.earnings: dict[int, list] = {}
        self.deductions: dict[int, list] = {}
        self.logs: list[PayrollLog] = []
        self._id = 0
        self.fail_lines = False

    def seed(self, status: PayrollStatus, *, employee_id: int = 1, payroll_id: Optional[int] = None) -> Payroll:
        with self._lock:
            self._id = payroll_id or self._id + 1
            payroll = Payroll(
                payroll_id=self._id,
                employee_id=employee_id,
                organization_id=10,
                period_start=date(2025, 3, 1),
                period_end=date(2025, 3, 15),
                gross_pay=D("10000.00"),
                taxable_income=D("9000.00"),
                total_deductions=D("1000.00"),
                net_pay=D("9000.00"),
                status=status,
                processed_at=datetime(2025, 3, 16, 9, 0),
                processed_by="system",
            )
            self.payrolls[payroll.payroll_id] = payroll
            return payroll

    def get_existing(self, *, employee_id: int, period_start: date, period_end: date):
        for p in list(self.payrolls.values()):
            if (
                p.employee_id == employee_id
                and p.period_start == period_start
                and p.period_end == period_end
                and p.status != PayrollStatus.VOIDED
            ):
                return p
        return None

    def get_by_id(self, payroll_id: int):
        return self.payrolls.get(payroll_id)

    def list_for_period(self, *, organization_id: int, period_start: date, period_end: date, include_voided: bool = False):
        return [
            p
            for p in self.payrolls.values()
            if p.organization_id == organization_id
            and p.period_start == period_start
            and p.period_end == period_end
            and (include_voided or p.status != PayrollStatus.VOIDED)
        ]

    def create_payroll(self, *, earnings, deductions, **fields) -> Optional[int]:
        with self._lock:
            if self.get_existing(
                employee_id=fields["employee_id"], period_start=fields["period_start"], period_end=fields["period_end"]
            ):
                return None
            payroll_id = self._id + 1
            payroll = Payroll(payroll_id=payroll_id, **fields)
            lines = [replace(e, payroll_id=payroll_id) for e in earnings]
            if self.fail_lines:
                # Nothing below has been stored yet, like a rolled-back transaction.
                raise RuntimeError("payroll_earnings insert failed")
            self._id = payroll_id
            self.payrolls[payroll_id] = payroll
            self.earnings[payroll_id] = lines
            self.deductions[payroll_id] = [replace(d, payroll_id=payroll_id) for d in deductions]
            self._log(payroll_id, PayrollLogAction.GENERATED, None, payroll.status, payroll.processed_by, payroll.processed_at)
            return payroll_id

    def list_earnings(self, payroll_id: int):
        return list(self.earnings.get(payroll_id, []))

    def list_deductions(self, payroll_id: int):
        return list(self.deductions.get(payroll_id, []))

    def replace_figures(self, *, payroll_id, expected_status, earnings, deductions, **totals) -> bool:
        with self._lock:
            current = self.payrolls[payroll_id]
            if current.status != expected_status:
                return False
            self.payrolls[payroll_id] = replace(current, **totals)
            self.earnings[payroll_id] = list(earnings)
            self.deductions[payroll_id] = list(deductions)
            self._log(payroll_id, PayrollLogAction.RECALCULATED, expected_status, expected_status, totals["processed_by"], totals["processed_at"])
            return True

    def transition_status(self, *, payroll_id, expected_status, new_status, action, actor_id, at, reason=None) -> bool:
        stamps = {
            PayrollStatus.COMPUTED: {"processed_at": at, "processed_by": actor_id},
            PayrollStatus.APPROVED: {"approved_at": at, "approved_by": actor_id},
            PayrollStatus.RELEASED: {"released_at": at, "released_by": actor_id},
            PayrollStatus.VOIDED: {"voided_at": at, "voided_by": actor_id, "void_reason": reason},
        }
        with self._lock:
            current = self.payrolls.get(payroll_id)
            if not current or current.status != expected_status:
                return False
            self.payrolls[payroll_id] = replace(current, status=new_status, **stamps[new_status])
            self._log(payroll_id, action, expected_status, new_status, actor_id, at, reason)
            return True

    def _log(self, payroll_id, action, previous_status, new_status, actor_id, at, reason=None) -> None:
        self.logs.append(
            PayrollLog(
                payroll_id=payroll_id,
                action=action,
                previous_status=previous_status,
                new_status=new_status,
                actor_id=actor_id,
                logged_at=at,
                reason=reason,
                log_id=len(self.logs) + 1,
            )
        )

    def list_logs(self, payroll_id: int, *, limit: int = 50):
        return [entry for entry in self.logs if entry.payroll_id == payroll_id][:limit]


class InMemoryPeriods:
    def __init__(self):
        self.periods = {}

    def list_for_organization(self, organization_id: int):
        return [p for p in self.periods.values() if p.organization_id == organization_id]

    def get(self, *, organization_id: int, start_date: date, end_date: date):
        return self.periods.get((organization_id, start_date, end_date))

    def create(self, period) -> None:
        self.periods[(period.organization_id, period.start_date, period.end_date)] = period

    def update_status(self, *, organization_id, start_date, end_date, expected_status, new_status) -> bool:
        key = (organization_id, start_date, end_date)
        period = self.periods.get(key)
        if not period or period.status != expected_status:
            return False
        self.periods[key] = replace(period, status=new_status)
        return True


class InMemoryEmployees:
    def __init__(self, employees=()):
        self.employees = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id: int):
        return self.employees.get(employee_id)

    def list_active_for_organization(self, organization_id: int):
        return [e for e in self.employees.values() if e.organization_id == organization_id and e.is_active]


def ph_rate_tables(*, organization_id=None, effective_from=date(2024, 1, 1)) -> list[RateTable]:
    """Monthly BIR table plus SSS/PhilHealth/Pag-IBIG, as shipped in seed.sql."""
    return [
        RateTable(
            rate_table_id=1,
            kind=RateTableKind.TAX,
            organization_id=organization_id,
            effective_from=effective_from,
            brackets=(
                RateBracket(min_salary=D("0"), max_salary=D("20833"), base_tax=D("0"), rate=D("0")),
                RateBracket(min_salary=D("20833"), max_salary=D("33333"), base_tax=D("0"), rate=D("0.20")),
                RateBracket(min_salary=D("33333"), max_salary=D("66667"), base_tax=D("2500"), rate=D("0.25")),
                RateBracket(min_salary=D("66667"), max_salary=D("166667"), base_tax=D("10833"), rate=D("0.30")),
                RateBracket(min_salary=D("166667"), max_salary=D("666667"), base_tax=D("40833"), rate=D("0.32")),
                RateBracket(min_salary=D("666667"), max_salary=None, base_tax=D("200833"), rate=D("0.35")),
            ),
        ),
        RateTable(
            rate_table_id=2,
            kind=RateTableKind.SSS,
            organization_id=organization_id,
            effective_from=effective_from,
            brackets=(
                RateBracket(
                    min_salary=D("0"),
                    employee_rate=D("0.045"),
                    employer_rate=D("0.095"),
                    ec_rate=D("0.001"),
                    salary_floor=D("4000"),
                    salary_ceiling=D("30000"),
                ),
            ),
        ),
        RateTable(
            rate_table_id=3,
            kind=RateTableKind.PHILHEALTH,
            organization_id=organization_id,
            effective_from=effective_from,
            brackets=(
                RateBracket(
                    min_salary=D("0"),
                    employee_rate=D("0.025"),
                    employer_rate=D("0.025"),
                    salary_floor=D("10000"),
                    salary_ceiling=D("100000"),
                    max_employee_share=D("2500"),
                ),
            ),
        ),
        RateTable(
            rate_table_id=4,
            kind=RateTableKind.PAGIBIG,
            organization_id=organization_id,
            effective_from=effective_from,
            brackets=(
                RateBracket(min_salary=D("0"), max_salary=D("1500"), employee_rate=D("0.01"), employer_rate=D("0.02")),
                RateBracket(
                    min_salary=D("1500.01"),
                    employee_rate=D("0.02"),
                    employer_rate=D("0.02"),
                    salary_ceiling=D("5000"),
                    max_employee_share=D("100"),
                ),
            ),
        ),
    ]


@pytest.fixture
def time_entries():
    return InMemoryTimeEntries()


@pytest.fixture
def overtime():
    return InMemoryOvertime()


@pytest.fixture
def payrolls():
    return InMemoryPayrolls()


@pytest.fixture
def rate_tables():
    return InMemoryRateTables(ph_rate_tables())


@pytest.fixture
def schedules():
    return InMemorySchedules()


@pytest.fixture
def periods():
    return InMemoryPeriods()


@pytest.fixture
def employees():
    return InMemoryEmployees(
        [
            Employee(employee_id=1, employee_code="E-001", full_name="Ana Reyes", organization_id=10, department_name="Finance", position="Analyst"),
            Employee(employee_id=2, employee_code="E-002", full_name="Ben Cruz", organization_id=10),
        ]
    )


@pytest.fixture
def compensations():
    return InMemoryCompensations([Compensation(compensation_id=1, employee_id=1, effective_date=date(2024, 1, 1), base_salary=D("32000.00"))])


@pytest.fixture
def policies():
    return InMemoryPolicies(
        [
            DeductionPolicy(
                policy_id=1,
                organization_id=10,
                policy_type=PolicyType.LATE,
                method=DeductionMethod.FIXED_AMOUNT,
                effective_from=date(2024, 1, 1),
                minimum_minutes=1,
                fixed_amount=D("100.00"),
                max_deduction_per_day=D("500.00"),
            ),
            DeductionPolicy(
                policy_id=2,
                organization_id=10,
                policy_type=PolicyType.ABSENCE,
                method=DeductionMethod.PERCENTAGE,
                effective_from=date(2024, 1, 1),
                percentage_rate=D("100"),
            ),
        ]
    )


@pytest.fixture
def container(time_entries, overtime, compensations, rate_tables, policies, schedules, payrolls, periods, employees):
    return build_services(
        time_entries=time_entries,
        overtime=overtime,
        compensations=compensations,
        rate_tables=rate_tables,
        policies=policies,
        schedules=schedules,
        payrolls=payrolls,
        periods=periods,
        employees=employees,
    )


@pytest.fixture
def office_schedule():
    return WorkSchedule(employee_id=1, start_time=time(9, 0), end_time=time(18, 0), grace_minutes=5)
