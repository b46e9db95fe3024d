from __future__ import annotations

from decimal import Decimal

from ...common.money import to_money
from ..model import DeductionPolicy
from .base import DeductionStrategy


class FixedAmountStrategy(DeductionStrategy):
    """Flat amount per occurrence."""

    def amount_for(self, *, policy: DeductionPolicy, minutes: int, daily_rate: Decimal, hourly_rate: Decimal) -> Decimal:
        return to_money(policy.fixed_amount or 0)
