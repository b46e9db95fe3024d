from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class WorkSchedule:
    """Expected working pattern of an employee; weekdays use date.weekday() (Monday=0)."""

    employee_id: int
    start_time: time
    end_time: time
    grace_minutes: Optional[int] = None
    work_days: FrozenSet[int] = field(default_factory=lambda: frozenset({0, 1, 2, 3, 4}))
    allow_late_deduction: bool = True

    def is_work_day(self, day: date) -> bool:
        return day.weekday() in self.work_days


def parse_work_days(value: str) -> FrozenSet[int]:
    """'0,1,2,3,4' -> frozenset({0, 1, 2, 3, 4})."""
    days = set()
    for part in (value or "").split(","):
        part = part.strip()
        if not part:
            continue
        day = int(part)
        if not 0 <= day <= 6:
            raise ValueError(f"Invalid weekday in work_days: {part!r}")
        days.add(day)
    return frozenset(days)
