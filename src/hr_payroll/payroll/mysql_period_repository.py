from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import PayrollPeriodStatus, PayrollPeriodType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PayrollPeriod
from .repository import PayrollPeriodRepository


def _to_period(r: dict) -> PayrollPeriod:
    return PayrollPeriod(
        organization_id=int(r["organization_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        pay_date=r["pay_date"],
        period_type=PayrollPeriodType(r["period_type"]),
        status=PayrollPeriodStatus(r["status"]),
    )


class MySQLPayrollPeriodRepository(PayrollPeriodRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_organization(self, organization_id: int) -> Sequence[PayrollPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT organization_id, start_date, end_date, pay_date, period_type, status
                FROM payroll_periods WHERE organization_id=%s
                ORDER BY start_date ASC
                """,
                (int(organization_id),),
            )
            return [_to_period(r) for r in fetchall(cur)]

    def get(self, *, organization_id: int, start_date: date, end_date: date) -> Optional[PayrollPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT organization_id, start_date, end_date, pay_date, period_type, status
                FROM payroll_periods
                WHERE organization_id=%s AND start_date=%s AND end_date=%s
                """,
                (int(organization_id), start_date, end_date),
            )
            r = fetchone(cur)
            return _to_period(r) if r else None

    def create(self, period: PayrollPeriod) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_periods(organization_id, start_date, end_date, pay_date, period_type, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    period.organization_id,
                    period.start_date,
                    period.end_date,
                    period.pay_date,
                    period.period_type.value,
                    period.status.value,
                ),
            )

    def update_status(
        self,
        *,
        organization_id: int,
        start_date: date,
        end_date: date,
        expected_status: PayrollPeriodStatus,
        new_status: PayrollPeriodStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payroll_periods SET status=%s
                WHERE organization_id=%s AND start_date=%s AND end_date=%s AND status=%s
                """,
                (new_status.value, int(organization_id), start_date, end_date, expected_status.value),
            )
            return cur.rowcount > 0
