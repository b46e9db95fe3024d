from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..core.enums import OvertimeStatus
from ..common.validators import require_date_range, require_non_empty
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import OvertimeRequest
from .repository import OvertimeRepository

logger = logging.getLogger(__name__)


class OvertimeRequestService:
    """Submission and decision workflow for overtime requests.

    PENDING is the only state that can change; APPROVED, REJECTED and
    CANCELLED are terminal.
    """

    def __init__(self, overtime: OvertimeRepository):
        self._overtime = overtime

    def submit(self, *, employee_id: int, work_date: date, requested_minutes: int, reason: Optional[str] = None) -> int:
        if int(requested_minutes) <= 0:
            raise ValidationError("Requested overtime must be a positive number of minutes")
        return self._overtime.create(
            employee_id=int(employee_id),
            work_date=work_date,
            requested_minutes=int(requested_minutes),
            reason=(reason or "").strip() or None,
        )

    def list_requests(
        self, *, employee_id: int, start: date, end: date, status: Optional[OvertimeStatus] = None
    ) -> list[OvertimeRequest]:
        require_date_range(start, end, field_name="overtime range")
        return list(
            self._overtime.list_for_employee(employee_id=int(employee_id), start_date=start, end_date=end, status=status)
        )

    def approve(
        self,
        *,
        request_id: int,
        approver_id: str,
        approved_minutes: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> None:
        req = self._require_pending(request_id)
        minutes = req.requested_minutes if approved_minutes is None else int(approved_minutes)
        if minutes < 0:
            raise ValidationError("Approved minutes cannot be negative")
        if minutes > req.requested_minutes:
            raise ValidationError(
                f"Approved minutes ({minutes}) cannot exceed requested minutes ({req.requested_minutes})"
            )
        self._decide(req.request_id, OvertimeStatus.APPROVED, approver_id, now, approved_minutes=minutes)

    def reject(self, *, request_id: int, approver_id: str, now: Optional[datetime] = None) -> None:
        req = self._require_pending(request_id)
        self._decide(req.request_id, OvertimeStatus.REJECTED, approver_id, now)

    def cancel(self, *, request_id: int, employee_id: int, now: Optional[datetime] = None) -> None:
        req = self._require_pending(request_id)
        if req.employee_id != int(employee_id):
            raise AuthorizationError("Only the requesting employee can cancel an overtime request")
        self._decide(req.request_id, OvertimeStatus.CANCELLED, str(employee_id), now)

    def _require_pending(self, request_id: int):
        req = self._overtime.get(request_id=int(request_id))
        if not req:
            raise NotFoundError(f"Overtime request {request_id} not found")
        if req.status != OvertimeStatus.PENDING:
            raise ValidationError(f"Overtime request {request_id} is already {req.status.value}")
        return req

    def _decide(self, request_id, status, decided_by, now, *, approved_minutes=None) -> None:
        ok = self._overtime.decide(
            request_id=int(request_id),
            status=status,
            decided_by=require_non_empty(str(decided_by), "Actor"),
            decided_at=now or datetime.now(),
            approved_minutes=approved_minutes,
        )
        if not ok:
            raise ValidationError(f"Overtime request {request_id} was already decided")
        logger.info("Overtime request %s -> %s by %s", request_id, status.value, decided_by)
