from __future__ import annotations

from datetime import date
from typing import Optional, Set

from ..common.datetime_utils import iter_dates
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_time, db_cursor, fetchall, fetchone
from .model import WorkSchedule, parse_work_days
from .repository import WorkScheduleRepository


class MySQLWorkScheduleRepository(WorkScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_work_schedule(self, *, employee_id: int, as_of: date) -> Optional[WorkSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, start_time, end_time, grace_minutes, work_days, allow_late_deduction
                FROM work_schedules
                WHERE employee_id=%s AND effective_from <= %s
                ORDER BY effective_from DESC, schedule_id DESC
                LIMIT 1
                """,
                (int(employee_id), as_of),
            )
            r = fetchone(cur)
            if not r:
                return None
            return WorkSchedule(
                employee_id=int(r["employee_id"]),
                start_time=as_time(r["start_time"]),
                end_time=as_time(r["end_time"]),
                grace_minutes=None if r.get("grace_minutes") is None else int(r["grace_minutes"]),
                work_days=parse_work_days(r["work_days"]),
                allow_late_deduction=bool(r["allow_late_deduction"]),
            )

    def list_approved_leave_dates(self, *, employee_id: int, start_date: date, end_date: date) -> Set[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT start_date, end_date
                FROM leave_requests
                WHERE employee_id=%s AND status='APPROVED' AND start_date <= %s AND end_date >= %s
                """,
                (int(employee_id), end_date, start_date),
            )
            rows = fetchall(cur)

        out: Set[date] = set()
        for r in rows:
            lo = max(r["start_date"], start_date)
            hi = min(r["end_date"], end_date)
            out.update(iter_dates(lo, hi))
        return out
