from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ..core.enums import PolicyType
from .model import DeductionPolicy


class DeductionPolicyRepository(Protocol):
    def get_active_policy(self, *, organization_id: int, policy_type: PolicyType, as_of: date) -> Optional[DeductionPolicy]:
        raise NotImplementedError
