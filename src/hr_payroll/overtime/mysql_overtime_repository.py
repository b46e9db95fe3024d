from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import OvertimeStatus
from ..core.exceptions import OvertimeLookupError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import OvertimeRequest
from .repository import OvertimeRepository

_COLUMNS = """
    request_id, employee_id, work_date, requested_minutes, approved_minutes,
    status, reason, decided_by, decided_at, created_at
"""


def _to_request(r: dict) -> OvertimeRequest:
    return OvertimeRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        requested_minutes=int(r["requested_minutes"]),
        approved_minutes=int(r["approved_minutes"]) if r.get("approved_minutes") is not None else None,
        status=OvertimeStatus(r["status"]),
        reason=r.get("reason"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        created_at=r["created_at"],
    )


class MySQLOvertimeRepository(OvertimeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def sum_approved_minutes(self, *, employee_id: int, work_date: date) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT COALESCE(SUM(approved_minutes), 0) AS total
                    FROM overtime_requests
                    WHERE employee_id=%s AND work_date=%s AND status=%s
                    """,
                    (int(employee_id), work_date, OvertimeStatus.APPROVED.value),
                )
                r = fetchone(cur)
                return int(r["total"]) if r else 0
        except mysql.connector.Error as exc:
            raise OvertimeLookupError(str(exc)) from exc

    def get(self, *, request_id: int) -> Optional[OvertimeRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM overtime_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def create(self, *, employee_id: int, work_date: date, requested_minutes: int, reason: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO overtime_requests(employee_id, work_date, requested_minutes, status, reason)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(employee_id), work_date, int(requested_minutes), OvertimeStatus.PENDING.value, reason),
            )
            return int(cur.lastrowid)

    def decide(
        self,
        *,
        request_id: int,
        status: OvertimeStatus,
        decided_by: str,
        decided_at: datetime,
        approved_minutes: Optional[int] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE overtime_requests
                SET status=%s, approved_minutes=%s, decided_by=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, approved_minutes, str(decided_by), decided_at, int(request_id), OvertimeStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_for_employee(
        self, *, employee_id: int, start_date: date, end_date: date, status: Optional[OvertimeStatus] = None
    ) -> Sequence[OvertimeRequest]:
        clauses = ["employee_id=%s", "work_date BETWEEN %s AND %s"]
        params: list[object] = [int(employee_id), start_date, end_date]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM overtime_requests WHERE {' AND '.join(clauses)} ORDER BY work_date ASC",
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]
