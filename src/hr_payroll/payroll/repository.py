from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import PayrollLogAction, PayrollPeriodStatus, PayrollStatus
from .model import Payroll, PayrollDeduction, PayrollEarning, PayrollLog, PayrollPeriod


class PayrollRepository(Protocol):
    def get_existing(self, *, employee_id: int, period_start: date, period_end: date) -> Optional[Payroll]:
        """Non-VOIDED payroll for exactly this employee and period."""

        raise NotImplementedError

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    def list_for_period(self, *, organization_id: int, period_start: date, period_end: date, include_voided: bool = False) -> Sequence[Payroll]:
        raise NotImplementedError

    def create_payroll(
        self,
        *,
        employee_id: int,
        organization_id: int,
        period_start: date,
        period_end: date,
        gross_pay: Decimal,
        taxable_income: Decimal,
        total_deductions: Decimal,
        net_pay: Decimal,
        status: PayrollStatus,
        earnings: Sequence[PayrollEarning],
        deductions: Sequence[PayrollDeduction],
        processed_at: datetime,
        processed_by: str,
    ) -> Optional[int]:
        """Insert the payroll, its lines and its GENERATED log in one transaction.

        Returns None, writing nothing, when a non-VOIDED payroll already
        exists for the employee and period.
        """

        raise NotImplementedError

    def list_earnings(self, payroll_id: int) -> Sequence[PayrollEarning]:
        raise NotImplementedError

    def list_deductions(self, payroll_id: int) -> Sequence[PayrollDeduction]:
        raise NotImplementedError

    def replace_figures(
        self,
        *,
        payroll_id: int,
        expected_status: PayrollStatus,
        gross_pay: Decimal,
        taxable_income: Decimal,
        total_deductions: Decimal,
        net_pay: Decimal,
        earnings: Sequence[PayrollEarning],
        deductions: Sequence[PayrollDeduction],
        processed_at: datetime,
        processed_by: str,
    ) -> bool:
        """Swap totals and lines and append the RECALCULATED log in one transaction.

        Returns False, writing nothing, when the status moved on.
        """

        raise NotImplementedError

    def transition_status(
        self,
        *,
        payroll_id: int,
        expected_status: PayrollStatus,
        new_status: PayrollStatus,
        action: PayrollLogAction,
        actor_id: str,
        at: datetime,
        reason: Optional[str] = None,
    ) -> bool:
        """Compare-and-set the status and append the matching log row atomically.

        Returns False, writing nothing, when the stored status is no longer
        `expected_status`.
        """

        raise NotImplementedError

    def list_logs(self, payroll_id: int, *, limit: int = 50) -> Sequence[PayrollLog]:
        """Oldest first."""

        raise NotImplementedError


class PayrollPeriodRepository(Protocol):
    def list_for_organization(self, organization_id: int) -> Sequence[PayrollPeriod]:
        raise NotImplementedError

    def get(self, *, organization_id: int, start_date: date, end_date: date) -> Optional[PayrollPeriod]:
        raise NotImplementedError

    def create(self, period: PayrollPeriod) -> None:
        raise NotImplementedError

    def update_status(
        self,
        *,
        organization_id: int,
        start_date: date,
        end_date: date,
        expected_status: PayrollPeriodStatus,
        new_status: PayrollPeriodStatus,
    ) -> bool:
        raise NotImplementedError
