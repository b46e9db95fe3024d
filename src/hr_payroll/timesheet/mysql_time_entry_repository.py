from __future__ import annotations

from datetime import date
from typing import Sequence

from ..core.enums import TimeEntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import TimeBreak, TimeEntry
from .repository import BreakRepository, TimeEntryRepository


def _to_entry(r: dict) -> TimeEntry:
    return TimeEntry(
        time_entry_id=int(r["time_entry_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        clock_in_at=r["clock_in_at"],
        clock_out_at=r.get("clock_out_at"),
        status=TimeEntryStatus(r["status"]),
    )


class MySQLTimeEntryRepository(TimeEntryRepository, BreakRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_closed_for_employee(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT time_entry_id, employee_id, work_date, clock_in_at, clock_out_at, status
                FROM time_entries
                WHERE employee_id=%s AND status=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, clock_in_at ASC
                """,
                (int(employee_id), TimeEntryStatus.CLOSED.value, start_date, end_date),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def list_for_time_entry(self, time_entry_id: int) -> Sequence[TimeBreak]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT break_id, time_entry_id, break_start_at, break_end_at, is_paid
                FROM time_breaks WHERE time_entry_id=%s
                ORDER BY break_start_at ASC
                """,
                (int(time_entry_id),),
            )
            return [
                TimeBreak(
                    break_id=int(r["break_id"]),
                    time_entry_id=int(r["time_entry_id"]),
                    break_start_at=r["break_start_at"],
                    break_end_at=r.get("break_end_at"),
                    is_paid=bool(r["is_paid"]),
                )
                for r in fetchall(cur)
            ]
