from __future__ import annotations

import logging
from datetime import date

from ..core.exceptions import OvertimeLookupError
from .repository import OvertimeRepository

logger = logging.getLogger(__name__)


class OvertimeResolver:
    """Approved overtime minutes per employee and work date.

    A failed lookup never aborts a timesheet run: it is logged and counted as
    no approved overtime.
    """

    def __init__(self, overtime: OvertimeRepository):
        self._overtime = overtime

    def approved_minutes(self, employee_id: int, work_date: date) -> int:
        try:
            minutes = self._overtime.sum_approved_minutes(employee_id=int(employee_id), work_date=work_date)
        except OvertimeLookupError as exc:
            logger.warning(
                "Failed to fetch approved overtime for employee %s on %s, using 0: %s",
                employee_id,
                work_date,
                exc,
            )
            return 0
        return max(int(minutes or 0), 0)
