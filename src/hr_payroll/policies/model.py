from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import DeductionMethod, PolicyType


@dataclass(frozen=True)
class DeductionPolicy:
    policy_id: int
    organization_id: int
    policy_type: PolicyType
    method: DeductionMethod
    effective_from: date
    minimum_minutes: int = 0
    fixed_amount: Optional[Decimal] = None
    percentage_rate: Optional[Decimal] = None
    hourly_rate_multiplier: Optional[Decimal] = None
    max_deduction_per_day: Optional[Decimal] = None
    max_deduction_per_cutoff: Optional[Decimal] = None
    effective_to: Optional[date] = None


@dataclass(frozen=True)
class PolicyDeductions:
    late_amount: Decimal
    absence_amount: Decimal
    late_minutes: int = 0
    absent_days: int = 0
