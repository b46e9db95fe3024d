from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import OvertimeStatus
from .model import OvertimeRequest


class OvertimeRepository(Protocol):
    def sum_approved_minutes(self, *, employee_id: int, work_date: date) -> int:
        """Sum of approved_minutes over APPROVED requests for that exact date.

        Implementations raise OvertimeLookupError when the lookup itself fails.
        """

        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[OvertimeRequest]:
        raise NotImplementedError

    def create(self, *, employee_id: int, work_date: date, requested_minutes: int, reason: Optional[str]) -> int:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: OvertimeStatus,
        decided_by: str,
        decided_at: datetime,
        approved_minutes: Optional[int] = None,
    ) -> bool:
        """Move a PENDING request to a terminal status. Returns False if it was no longer PENDING."""

        raise NotImplementedError

    def list_for_employee(
        self, *, employee_id: int, start_date: date, end_date: date, status: Optional[OvertimeStatus] = None
    ) -> Sequence[OvertimeRequest]:
        raise NotImplementedError
