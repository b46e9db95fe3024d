from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ..model import DeductionPolicy


class DeductionStrategy(ABC):
    """Strategy Pattern: how one day's late/absence minutes become money."""

    @abstractmethod
    def amount_for(self, *, policy: DeductionPolicy, minutes: int, daily_rate: Decimal, hourly_rate: Decimal) -> Decimal:
        raise NotImplementedError
