from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Iterable, Iterator

from ..common.datetime_utils import overlap_minutes
from ..core.constants import NIGHT_END, NIGHT_START
from .model import TimeBreak


def night_windows(start: datetime, end: datetime, *, night_start: time = NIGHT_START, night_end: time = NIGHT_END) -> Iterator[tuple[datetime, datetime]]:
    """Yield every night window (e.g. 22:00 -> 06:00 next day) that may touch [start, end]."""
    day = start.date() - timedelta(days=1)
    last = end.date()
    while day <= last:
        w_start = datetime.combine(day, night_start)
        w_end = datetime.combine(day, night_end)
        if w_end <= w_start:
            w_end += timedelta(days=1)
        yield w_start, w_end
        day += timedelta(days=1)


def night_minutes(
    clock_in: datetime,
    clock_out: datetime,
    breaks: Iterable[TimeBreak] = (),
    *,
    night_start: time = NIGHT_START,
    night_end: time = NIGHT_END,
) -> int:
    """Minutes worked inside the night window, excluding finished unpaid breaks."""
    if clock_out <= clock_in:
        return 0

    windows = list(night_windows(clock_in, clock_out, night_start=night_start, night_end=night_end))
    worked = sum(overlap_minutes(clock_in, clock_out, ws, we) for ws, we in windows)

    on_break = 0
    for b in breaks:
        if b.is_paid or b.break_end_at is None:
            continue
        b_start = max(b.break_start_at, clock_in)
        b_end = min(b.break_end_at, clock_out)
        if b_end <= b_start:
            continue
        on_break += sum(overlap_minutes(b_start, b_end, ws, we) for ws, we in windows)

    return max(worked - on_break, 0)
