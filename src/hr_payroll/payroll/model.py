from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import (
    DeductionType,
    EarningType,
    PayrollLogAction,
    PayrollPeriodStatus,
    PayrollPeriodType,
    PayrollStatus,
)
from ..timesheet.model import TimeEntry, TimesheetResult


@dataclass(frozen=True)
class PayrollPeriod:
    organization_id: int
    start_date: date
    end_date: date
    pay_date: date
    period_type: PayrollPeriodType
    status: PayrollPeriodStatus = PayrollPeriodStatus.PENDING

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and start <= self.end_date


@dataclass(frozen=True)
class PayrollEarning:
    earning_type: EarningType
    hours: Decimal
    rate: Decimal
    amount: Decimal
    earning_id: Optional[int] = None
    payroll_id: Optional[int] = None


@dataclass(frozen=True)
class PayrollDeduction:
    deduction_type: DeductionType
    amount: Decimal
    deduction_id: Optional[int] = None
    payroll_id: Optional[int] = None


@dataclass(frozen=True)
class Payroll:
    """Persisted payroll of one employee for one period."""

    payroll_id: int
    employee_id: int
    organization_id: int
    period_start: date
    period_end: date
    gross_pay: Decimal
    taxable_income: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    status: PayrollStatus
    processed_at: datetime
    processed_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    released_at: Optional[datetime] = None
    released_by: Optional[str] = None
    voided_at: Optional[datetime] = None
    voided_by: Optional[str] = None
    void_reason: Optional[str] = None


@dataclass(frozen=True)
class PayrollLog:
    payroll_id: int
    action: PayrollLogAction
    previous_status: Optional[PayrollStatus]
    new_status: PayrollStatus
    actor_id: str
    logged_at: datetime
    reason: Optional[str] = None
    log_id: Optional[int] = None


@dataclass(frozen=True)
class PayrollComputation:
    """Figures for one employee and period, nothing persisted yet."""

    employee_id: int
    organization_id: int
    period_start: date
    period_end: date
    timesheet: TimesheetResult
    earnings: tuple[PayrollEarning, ...]
    deductions: tuple[PayrollDeduction, ...]
    gross_pay: Decimal
    taxable_income: Decimal
    total_deductions: Decimal
    net_pay: Decimal


@dataclass(frozen=True)
class PayrollView:
    employee_id: int
    organization_id: int
    period_start: date
    period_end: date
    earnings: tuple[PayrollEarning, ...]
    deductions: tuple[PayrollDeduction, ...]
    gross_pay: Decimal
    taxable_income: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    time_entries: tuple[TimeEntry, ...] = ()
    payroll: Optional[Payroll] = None

    @property
    def is_persisted(self) -> bool:
        return self.payroll is not None

    @property
    def status(self) -> Optional[PayrollStatus]:
        return self.payroll.status if self.payroll else None

    @property
    def payroll_id(self) -> Optional[int]:
        return self.payroll.payroll_id if self.payroll else None


@dataclass(frozen=True)
class PayslipLine:
    label: str
    amount: Decimal
    hours: Optional[Decimal] = None
    rate: Optional[Decimal] = None


@dataclass(frozen=True)
class Payslip:
    employee_id: int
    employee_code: str
    employee_name: str
    department_name: Optional[str]
    position: Optional[str]
    period_start: date
    period_end: date
    earnings: tuple[PayslipLine, ...]
    deductions: tuple[PayslipLine, ...]
    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    status: Optional[PayrollStatus] = None
    payroll_id: Optional[int] = None
