from __future__ import annotations

from typing import Iterable

from ..common.datetime_utils import whole_minutes
from .model import BreakMinutes, TimeBreak


def classify_breaks(breaks: Iterable[TimeBreak]) -> BreakMinutes:
    """Split finished break time into paid and unpaid minutes.

    A break without an end timestamp is ignored (contributes 0), it is not
    treated as still running.
    """
    paid = 0
    unpaid = 0
    for b in breaks:
        if b.break_end_at is None:
            continue
        minutes = max(whole_minutes(b.break_start_at, b.break_end_at), 0)
        if b.is_paid:
            paid += minutes
        else:
            unpaid += minutes
    return BreakMinutes(paid=paid, unpaid=unpaid)
