from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import TimeBreak, TimeEntry


class TimeEntryRepository(Protocol):
    def list_closed_for_employee(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[TimeEntry]:
        """CLOSED entries whose work_date falls in [start_date, end_date]."""

        raise NotImplementedError


class BreakRepository(Protocol):
    def list_for_time_entry(self, time_entry_id: int) -> Sequence[TimeBreak]:
        raise NotImplementedError
