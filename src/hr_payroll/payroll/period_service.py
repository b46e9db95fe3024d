from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.enums import PayrollPeriodStatus, PayrollPeriodType
from ..core.exceptions import NotFoundError, PeriodOverlapError, ValidationError
from .model import PayrollPeriod
from .repository import PayrollPeriodRepository

logger = logging.getLogger(__name__)

PERIOD_TRANSITIONS = {
    PayrollPeriodStatus.PENDING: frozenset({PayrollPeriodStatus.PROCESSING, PayrollPeriodStatus.CANCELLED}),
    PayrollPeriodStatus.PROCESSING: frozenset({PayrollPeriodStatus.COMPLETED, PayrollPeriodStatus.CANCELLED}),
    PayrollPeriodStatus.COMPLETED: frozenset(),
    PayrollPeriodStatus.CANCELLED: frozenset(),
}


class PayrollPeriodService:
    def __init__(self, periods: PayrollPeriodRepository):
        self._periods = periods

    def create_period(
        self,
        *,
        organization_id: int,
        start_date: date,
        end_date: date,
        pay_date: date,
        period_type: PayrollPeriodType,
    ) -> PayrollPeriod:
        if not start_date < end_date:
            raise ValidationError("Period start date must be before its end date")
        if not end_date < pay_date:
            raise ValidationError("Pay date must be after the period end date")

        # Cancelled periods free their dates.
        for p in self._periods.list_for_organization(int(organization_id)):
            if p.status != PayrollPeriodStatus.CANCELLED and p.overlaps(start_date, end_date):
                raise PeriodOverlapError(
                    f"Period {start_date}..{end_date} overlaps existing period {p.start_date}..{p.end_date}"
                )

        period = PayrollPeriod(
            organization_id=int(organization_id),
            start_date=start_date,
            end_date=end_date,
            pay_date=pay_date,
            period_type=period_type,
        )
        self._periods.create(period)
        logger.info("Created %s payroll period %s..%s for organization %s", period_type.value, start_date, end_date, organization_id)
        return period

    def update_status(
        self, *, organization_id: int, start_date: date, end_date: date, new_status: PayrollPeriodStatus
    ) -> PayrollPeriod:
        period = self.get_period(organization_id=organization_id, start_date=start_date, end_date=end_date)
        if new_status not in PERIOD_TRANSITIONS[period.status]:
            raise ValidationError(f"Payroll period cannot go from {period.status.value} to {new_status.value}")

        ok = self._periods.update_status(
            organization_id=period.organization_id,
            start_date=start_date,
            end_date=end_date,
            expected_status=period.status,
            new_status=new_status,
        )
        if not ok:
            raise ValidationError("Payroll period status changed concurrently, reload and retry")
        return self.get_period(organization_id=organization_id, start_date=start_date, end_date=end_date)

    def get_period(self, *, organization_id: int, start_date: date, end_date: date) -> PayrollPeriod:
        period = self._periods.get(organization_id=int(organization_id), start_date=start_date, end_date=end_date)
        if not period:
            raise NotFoundError(f"No payroll period {start_date}..{end_date} for organization {organization_id}")
        return period

    def find_period_for_date(self, *, organization_id: int, day: date) -> Optional[PayrollPeriod]:
        for p in self._periods.list_for_organization(int(organization_id)):
            if p.status != PayrollPeriodStatus.CANCELLED and p.start_date <= day <= p.end_date:
                return p
        return None

    def list_periods(self, organization_id: int) -> Sequence[PayrollPeriod]:
        return sorted(self._periods.list_for_organization(int(organization_id)), key=lambda p: p.start_date)
