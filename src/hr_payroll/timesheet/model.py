from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import TimeEntryStatus


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: one employee's clock-in/clock-out for a work date."""

    time_entry_id: int
    employee_id: int
    work_date: date
    clock_in_at: datetime
    clock_out_at: Optional[datetime]
    status: TimeEntryStatus

    @property
    def is_closed(self) -> bool:
        return self.status == TimeEntryStatus.CLOSED and self.clock_out_at is not None


@dataclass(frozen=True)
class TimeBreak:
    break_id: int
    time_entry_id: int
    break_start_at: datetime
    break_end_at: Optional[datetime]
    is_paid: bool = False


@dataclass(frozen=True)
class BreakMinutes:
    paid: int = 0
    unpaid: int = 0


@dataclass(frozen=True)
class TimesheetTotals:
    raw_minutes: int = 0
    paid_break_minutes: int = 0
    unpaid_break_minutes: int = 0
    net_work_minutes: int = 0
    regular_minutes: int = 0
    overtime_raw_minutes: int = 0
    overtime_approved_minutes: int = 0
    payable_minutes: int = 0
    night_minutes: int = 0

    def __add__(self, other: "TimesheetTotals") -> "TimesheetTotals":
        return TimesheetTotals(**{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)})

    @classmethod
    def summed(cls, items: Sequence["TimesheetTotals"]) -> "TimesheetTotals":
        total = cls()
        for item in items:
            total = total + item.totals()
        return total

    def totals(self) -> "TimesheetTotals":
        return self


@dataclass(frozen=True)
class TimesheetEntryResult:
    """Per-entry breakdown of payable time (all values in whole minutes)."""

    time_entry_id: int
    employee_id: int
    work_date: date
    clock_in_at: datetime
    clock_out_at: datetime
    raw_minutes: int
    paid_break_minutes: int
    unpaid_break_minutes: int
    net_work_minutes: int
    regular_minutes: int
    overtime_raw_minutes: int
    overtime_approved_minutes: int
    payable_minutes: int
    night_minutes: int = 0

    def totals(self) -> TimesheetTotals:
        return TimesheetTotals(**{f.name: getattr(self, f.name) for f in fields(TimesheetTotals)})


@dataclass(frozen=True)
class TimesheetResult:
    employee_id: int
    period_start: date
    period_end: date
    entries: tuple[TimesheetEntryResult, ...]
    totals: TimesheetTotals

    @property
    def present_days(self) -> int:
        return len({e.work_date for e in self.entries})
