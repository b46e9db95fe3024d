from __future__ import annotations

from decimal import Decimal
from typing import Callable, Sequence

from ...common.money import minutes_to_hours, to_money, to_rate
from ...compensation.model import Compensation
from ...core.constants import NIGHT_DIFFERENTIAL_RATE, OVERTIME_MULTIPLIER
from ...core.enums import EarningType
from ...timesheet.model import TimesheetTotals
from ..model import PayrollEarning
from .base import EarningsCalculator

# earning type -> (payable minutes, multiplier on the hourly rate)
_EARNING_RULES: dict[EarningType, tuple[Callable[[TimesheetTotals], int], Decimal]] = {
    EarningType.BASE_SALARY: (lambda t: t.regular_minutes + t.paid_break_minutes, Decimal("1")),
    EarningType.OVERTIME: (lambda t: t.overtime_approved_minutes, OVERTIME_MULTIPLIER),
    EarningType.NIGHT_DIFFERENTIAL: (lambda t: t.night_minutes, NIGHT_DIFFERENTIAL_RATE),
}

if set(_EARNING_RULES) != set(EarningType):
    raise RuntimeError("Every EarningType needs a rule in the standard calculator")


class StandardEarningsCalculator(EarningsCalculator):
    """Standard rule: minutes at base_salary / 160, overtime 1.25x, night diff +10%.

    amount == hours * rate on every line; zero lines are dropped.
    """

    def earnings(self, *, totals: TimesheetTotals, compensation: Compensation) -> Sequence[PayrollEarning]:
        hourly = compensation.hourly_rate
        out = []
        for earning_type in EarningType:
            minutes_of, multiplier = _EARNING_RULES[earning_type]
            hours = minutes_to_hours(minutes_of(totals))
            rate = to_rate(hourly * multiplier)
            amount = to_money(hours * rate)
            if amount == 0:
                continue
            out.append(PayrollEarning(earning_type=earning_type, hours=hours, rate=rate, amount=amount))
        return out
