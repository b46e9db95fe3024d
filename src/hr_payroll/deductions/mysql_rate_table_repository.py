from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.enums import RateTableKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import RateBracket, RateTable
from .repository import RateTableRepository


class MySQLRateTableRepository(RateTableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_rate_table(self, *, organization_id: Optional[int], kind: RateTableKind, as_of: date) -> Optional[RateTable]:
        if organization_id is None:
            scope_sql, scope_params = "organization_id IS NULL", ()
        else:
            scope_sql, scope_params = "organization_id=%s", (int(organization_id),)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT rate_table_id, kind, organization_id, effective_from, effective_to
                FROM rate_tables
                WHERE kind=%s AND {scope_sql}
                  AND effective_from <= %s AND (effective_to IS NULL OR effective_to >= %s)
                ORDER BY effective_from DESC, rate_table_id DESC
                LIMIT 1
                """,
                (kind.value, *scope_params, as_of, as_of),
            )
            t = fetchone(cur)
            if not t:
                return None

            cur.execute(
                """
                SELECT min_salary, max_salary, base_tax, rate, employee_rate, employer_rate, ec_rate,
                       salary_floor, salary_ceiling, max_employee_share
                FROM rate_brackets
                WHERE rate_table_id=%s
                ORDER BY min_salary ASC
                """,
                (int(t["rate_table_id"]),),
            )
            rows = fetchall(cur)

        return RateTable(
            rate_table_id=int(t["rate_table_id"]),
            kind=RateTableKind(t["kind"]),
            organization_id=int(t["organization_id"]) if t.get("organization_id") is not None else None,
            effective_from=t["effective_from"],
            effective_to=t.get("effective_to"),
            brackets=tuple(
                RateBracket(
                    min_salary=as_decimal(r["min_salary"]),
                    max_salary=as_decimal(r.get("max_salary")),
                    base_tax=as_decimal(r["base_tax"]),
                    rate=as_decimal(r["rate"]),
                    employee_rate=as_decimal(r["employee_rate"]),
                    employer_rate=as_decimal(r["employer_rate"]),
                    ec_rate=as_decimal(r["ec_rate"]),
                    salary_floor=as_decimal(r.get("salary_floor")),
                    salary_ceiling=as_decimal(r.get("salary_ceiling")),
                    max_employee_share=as_decimal(r.get("max_employee_share")),
                )
                for r in rows
            ),
        )
