from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_SELECT = """
    SELECT employee_id, employee_code, full_name, organization_id, department_name, position, is_active
    FROM employees
"""


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_code=r["employee_code"],
        full_name=r["full_name"],
        organization_id=int(r["organization_id"]),
        department_name=r.get("department_name"),
        position=r.get("position"),
        is_active=bool(r["is_active"]),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_active_for_organization(self, organization_id: int) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE organization_id=%s AND is_active=1 ORDER BY employee_code ASC",
                (int(organization_id),),
            )
            return [_to_employee(r) for r in fetchall(cur)]
