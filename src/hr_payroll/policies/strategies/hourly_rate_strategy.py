from __future__ import annotations

from decimal import Decimal

from ...common.money import to_money
from ..model import DeductionPolicy
from .base import DeductionStrategy


class HourlyRateStrategy(DeductionStrategy):
    """Hourly rate times the hours missed times the multiplier (1 when unset)."""

    def amount_for(self, *, policy: DeductionPolicy, minutes: int, daily_rate: Decimal, hourly_rate: Decimal) -> Decimal:
        multiplier = Decimal(policy.hourly_rate_multiplier) if policy.hourly_rate_multiplier is not None else Decimal(1)
        hours = Decimal(int(minutes)) / Decimal(60)
        return to_money(hourly_rate * hours * multiplier)
