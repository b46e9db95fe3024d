from __future__ import annotations

from datetime import date
from typing import Sequence

from ..common.validators import require_date_range
from ..core.enums import TimeEntryStatus
from ..core.exceptions import IncompleteEntryError
from .model import TimeEntry
from .repository import TimeEntryRepository


def require_closed(entry: TimeEntry) -> TimeEntry:
    if entry.clock_out_at is None:
        raise IncompleteEntryError(
            f"Time entry {entry.time_entry_id} on {entry.work_date} is not closed (missing clock-out)",
            time_entry_id=entry.time_entry_id,
            work_date=entry.work_date,
        )
    return entry


class TimeEntryAggregator:
    """Reads the closed time entries of one employee over a date range."""

    def __init__(self, entries: TimeEntryRepository):
        self._entries = entries

    def closed_entries(self, *, employee_id: int, start: date, end: date) -> list[TimeEntry]:
        require_date_range(start, end)
        rows: Sequence[TimeEntry] = self._entries.list_closed_for_employee(
            employee_id=int(employee_id), start_date=start, end_date=end
        )
        # A CLOSED row without clock-out is kept so the calculator rejects it loudly.
        out = [
            r
            for r in rows
            if r.status == TimeEntryStatus.CLOSED and r.employee_id == int(employee_id) and start <= r.work_date <= end
        ]
        out.sort(key=lambda r: (r.work_date, r.clock_in_at))
        return out
