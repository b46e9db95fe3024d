from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Set

from .model import WorkSchedule


class WorkScheduleRepository(Protocol):
    def get_work_schedule(self, *, employee_id: int, as_of: date) -> Optional[WorkSchedule]:
        """Schedule with the latest effective_from <= as_of."""

        raise NotImplementedError

    def list_approved_leave_dates(self, *, employee_id: int, start_date: date, end_date: date) -> Set[date]:
        """Every date in [start_date, end_date] covered by an APPROVED leave request."""

        raise NotImplementedError
