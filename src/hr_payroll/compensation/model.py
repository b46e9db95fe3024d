from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ..common.money import to_money, to_rate
from ..core.constants import HOURS_PER_DAY, HOURS_PER_MONTH, WORKING_DAYS_PER_MONTH


@dataclass(frozen=True)
class Compensation:
    compensation_id: int
    employee_id: int
    effective_date: date
    base_salary: Decimal

    @property
    def hourly_rate(self) -> Decimal:
        """Monthly base over 160 hours, the rate every earning line is paid at."""
        return to_rate(self.base_salary / HOURS_PER_MONTH)

    @property
    def daily_rate(self) -> Decimal:
        return to_money(self.base_salary / WORKING_DAYS_PER_MONTH)

    @property
    def policy_hourly_rate(self) -> Decimal:
        # Late/absence policies work off the 22-day month.
        return to_rate(self.daily_rate / HOURS_PER_DAY)
