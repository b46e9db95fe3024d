from __future__ import annotations

from decimal import Decimal

from ...common.money import to_money
from ..model import DeductionPolicy
from .base import DeductionStrategy


class PercentageStrategy(DeductionStrategy):
    """percentage_rate percent of the daily rate."""

    def amount_for(self, *, policy: DeductionPolicy, minutes: int, daily_rate: Decimal, hourly_rate: Decimal) -> Decimal:
        rate = Decimal(policy.percentage_rate or 0)
        return to_money(daily_rate * rate / Decimal(100))
