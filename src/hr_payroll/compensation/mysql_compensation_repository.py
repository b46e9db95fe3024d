from __future__ import annotations

from datetime import date
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchone
from .model import Compensation
from .repository import CompensationRepository


def _to_compensation(r: dict) -> Compensation:
    return Compensation(
        compensation_id=int(r["compensation_id"]),
        employee_id=int(r["employee_id"]),
        effective_date=r["effective_date"],
        base_salary=as_decimal(r["base_salary"]),
    )


class MySQLCompensationRepository(CompensationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_current(self, *, employee_id: int, as_of: date) -> Optional[Compensation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT compensation_id, employee_id, effective_date, base_salary
                FROM compensations
                WHERE employee_id=%s AND effective_date <= %s
                ORDER BY effective_date DESC, compensation_id DESC
                LIMIT 1
                """,
                (int(employee_id), as_of),
            )
            r = fetchone(cur)
            return _to_compensation(r) if r else None
