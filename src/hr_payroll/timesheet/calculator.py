from __future__ import annotations

from datetime import date

from ..common.datetime_utils import whole_minutes
from ..core.constants import REGULAR_MINUTES_PER_DAY
from ..core.exceptions import ValidationError
from ..overtime.resolver import OvertimeResolver
from .aggregator import TimeEntryAggregator, require_closed
from .breaks import classify_breaks
from .model import TimeEntry, TimesheetEntryResult, TimesheetResult, TimesheetTotals
from .night_differential import night_minutes
from .repository import BreakRepository, TimeEntryRepository


class TimesheetCalculator:
    """Turns closed time entries into payable minutes.

    Per entry:
        net_work  = raw - unpaid breaks
        regular   = min(net_work, 480)
        ot_raw    = max(net_work - 480, 0)
        ot_appr   = min(ot_raw, approved overtime for the date)
        payable   = regular + ot_appr + paid breaks

    Paid breaks sit on top of the regular cap: a 15 minute paid break on a
    full day yields 495 payable minutes.
    """

    def __init__(
        self,
        entries: TimeEntryRepository,
        breaks: BreakRepository,
        overtime: OvertimeResolver,
        *,
        regular_cap: int = REGULAR_MINUTES_PER_DAY,
    ):
        self._aggregator = TimeEntryAggregator(entries)
        self._breaks = breaks
        self._overtime = overtime
        self._regular_cap = int(regular_cap)

    def calculate_entry(self, entry: TimeEntry) -> TimesheetEntryResult:
        require_closed(entry)
        clock_in = entry.clock_in_at
        clock_out = entry.clock_out_at
        if clock_out < clock_in:
            raise ValidationError(f"Time entry {entry.time_entry_id} clocks out before it clocks in")

        raw = whole_minutes(clock_in, clock_out)
        entry_breaks = list(self._breaks.list_for_time_entry(entry.time_entry_id))
        split = classify_breaks(entry_breaks)

        net_work = max(raw - split.unpaid, 0)
        regular = min(net_work, self._regular_cap)
        overtime_raw = max(net_work - self._regular_cap, 0)
        overtime_approved = 0
        if overtime_raw > 0:
            overtime_approved = min(overtime_raw, self._overtime.approved_minutes(entry.employee_id, entry.work_date))

        night = min(night_minutes(clock_in, clock_out, entry_breaks), regular + overtime_approved)

        return TimesheetEntryResult(
            time_entry_id=entry.time_entry_id,
            employee_id=entry.employee_id,
            work_date=entry.work_date,
            clock_in_at=clock_in,
            clock_out_at=clock_out,
            raw_minutes=raw,
            paid_break_minutes=split.paid,
            unpaid_break_minutes=split.unpaid,
            net_work_minutes=net_work,
            regular_minutes=regular,
            overtime_raw_minutes=overtime_raw,
            overtime_approved_minutes=overtime_approved,
            payable_minutes=regular + overtime_approved + split.paid,
            night_minutes=night,
        )

    def calculate_period(self, *, employee_id: int, start: date, end: date) -> TimesheetResult:
        # Any incomplete entry aborts the whole period.
        entries = self._aggregator.closed_entries(employee_id=employee_id, start=start, end=end)
        results = tuple(self.calculate_entry(e) for e in entries)
        return TimesheetResult(
            employee_id=int(employee_id),
            period_start=start,
            period_end=end,
            entries=results,
            totals=TimesheetTotals.summed(results),
        )
