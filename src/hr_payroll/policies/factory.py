from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import DeductionMethod
from .model import DeductionPolicy
from .strategies.base import DeductionStrategy
from .strategies.fixed_amount_strategy import FixedAmountStrategy
from .strategies.hourly_rate_strategy import HourlyRateStrategy
from .strategies.percentage_strategy import PercentageStrategy


@dataclass
class DeductionStrategyFactory:
    """Factory Pattern: pick the strategy matching a policy's method."""

    def for_policy(self, policy: DeductionPolicy) -> DeductionStrategy:
        if policy.method == DeductionMethod.FIXED_AMOUNT:
            return FixedAmountStrategy()
        if policy.method == DeductionMethod.PERCENTAGE:
            return PercentageStrategy()
        if policy.method == DeductionMethod.HOURLY_RATE:
            return HourlyRateStrategy()
        raise ValueError(f"Unsupported deduction method: {policy.method!r}")
