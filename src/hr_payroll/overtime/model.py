from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import OvertimeStatus


@dataclass(frozen=True)
class OvertimeRequest:
    request_id: int
    employee_id: int
    work_date: date
    requested_minutes: int
    status: OvertimeStatus
    created_at: datetime
    approved_minutes: Optional[int] = None
    reason: Optional[str] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
