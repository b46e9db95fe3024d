from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import Compensation


class CompensationRepository(Protocol):
    def get_current(self, *, employee_id: int, as_of: date) -> Optional[Compensation]:
        """Most recent compensation with effective_date <= as_of."""

        raise NotImplementedError
