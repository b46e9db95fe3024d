from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import DeductionType, EarningType, PayrollLogAction, PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import Payroll, PayrollDeduction, PayrollEarning, PayrollLog
from .repository import PayrollRepository

_COLUMNS = """
    payroll_id, employee_id, organization_id, period_start, period_end,
    gross_pay, taxable_income, total_deductions, net_pay, status,
    processed_at, processed_by, approved_at, approved_by, released_at, released_by,
    voided_at, voided_by, void_reason
"""

# Audit columns stamped by each target status.
_STAMP_COLUMNS = {
    PayrollStatus.COMPUTED: ("processed_at", "processed_by"),
    PayrollStatus.APPROVED: ("approved_at", "approved_by"),
    PayrollStatus.RELEASED: ("released_at", "released_by"),
    PayrollStatus.VOIDED: ("voided_at", "voided_by"),
}


def _to_payroll(r: dict) -> Payroll:
    return Payroll(
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        organization_id=int(r["organization_id"]),
        period_start=r["period_start"],
        period_end=r["period_end"],
        gross_pay=as_decimal(r["gross_pay"]),
        taxable_income=as_decimal(r["taxable_income"]),
        total_deductions=as_decimal(r["total_deductions"]),
        net_pay=as_decimal(r["net_pay"]),
        status=PayrollStatus(r["status"]),
        processed_at=r["processed_at"],
        processed_by=r.get("processed_by"),
        approved_at=r.get("approved_at"),
        approved_by=r.get("approved_by"),
        released_at=r.get("released_at"),
        released_by=r.get("released_by"),
        voided_at=r.get("voided_at"),
        voided_by=r.get("voided_by"),
        void_reason=r.get("void_reason"),
    )


def _insert_earnings(cur, payroll_id: int, earnings: Sequence[PayrollEarning]) -> None:
    for e in earnings:
        cur.execute(
            """
            INSERT INTO payroll_earnings(payroll_id, earning_type, hours, rate, amount)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (int(payroll_id), e.earning_type.value, e.hours, e.rate, e.amount),
        )


def _insert_deductions(cur, payroll_id: int, deductions: Sequence[PayrollDeduction]) -> None:
    for d in deductions:
        cur.execute(
            "INSERT INTO payroll_deductions(payroll_id, deduction_type, amount) VALUES(%s,%s,%s)",
            (int(payroll_id), d.deduction_type.value, d.amount),
        )


def _insert_log(cur, entry: PayrollLog) -> int:
    cur.execute(
        """
        INSERT INTO payroll_logs(payroll_id, action, previous_status, new_status, actor_id, reason, logged_at)
        VALUES(%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            int(entry.payroll_id),
            entry.action.value,
            entry.previous_status.value if entry.previous_status else None,
            entry.new_status.value,
            entry.actor_id,
            entry.reason,
            entry.logged_at,
        ),
    )
    return int(cur.lastrowid)


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_existing(self, *, employee_id: int, period_start: date, period_end: date) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM payrolls
                WHERE employee_id=%s AND period_start=%s AND period_end=%s AND status<>%s
                ORDER BY payroll_id DESC LIMIT 1
                """,
                (int(employee_id), period_start, period_end, PayrollStatus.VOIDED.value),
            )
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payrolls WHERE payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def list_for_period(self, *, organization_id: int, period_start: date, period_end: date, include_voided: bool = False) -> Sequence[Payroll]:
        sql = f"SELECT {_COLUMNS} FROM payrolls WHERE organization_id=%s AND period_start=%s AND period_end=%s"
        params: list[object] = [int(organization_id), period_start, period_end]
        if not include_voided:
            sql += " AND status<>%s"
            params.append(PayrollStatus.VOIDED.value)
        sql += " ORDER BY employee_id ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_payroll(r) for r in fetchall(cur)]

    def create_payroll(
        self,
        *,
        employee_id: int,
        organization_id: int,
        period_start: date,
        period_end: date,
        gross_pay: Decimal,
        taxable_income: Decimal,
        total_deductions: Decimal,
        net_pay: Decimal,
        status: PayrollStatus,
        earnings: Sequence[PayrollEarning],
        deductions: Sequence[PayrollDeduction],
        processed_at: datetime,
        processed_by: str,
    ) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # uq_payrolls_open makes a concurrent insert for the same period wait, then fail.
                cur.execute(
                    """
                    INSERT INTO payrolls(
                        employee_id, organization_id, period_start, period_end,
                        gross_pay, taxable_income, total_deductions, net_pay,
                        status, processed_at, processed_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        int(organization_id),
                        period_start,
                        period_end,
                        gross_pay,
                        taxable_income,
                        total_deductions,
                        net_pay,
                        status.value,
                        processed_at,
                        processed_by,
                    ),
                )
                payroll_id = int(cur.lastrowid)
                _insert_earnings(cur, payroll_id, earnings)
                _insert_deductions(cur, payroll_id, deductions)
                _insert_log(
                    cur,
                    PayrollLog(
                        payroll_id=payroll_id,
                        action=PayrollLogAction.GENERATED,
                        previous_status=None,
                        new_status=status,
                        actor_id=processed_by,
                        logged_at=processed_at,
                    ),
                )
                return payroll_id
        except mysql.connector.IntegrityError as exc:
            if exc.errno == errorcode.ER_DUP_ENTRY:
                return None
            raise

    def list_earnings(self, payroll_id: int) -> Sequence[PayrollEarning]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT earning_id, payroll_id, earning_type, hours, rate, amount
                FROM payroll_earnings WHERE payroll_id=%s ORDER BY earning_id ASC
                """,
                (int(payroll_id),),
            )
            return [
                PayrollEarning(
                    earning_id=int(r["earning_id"]),
                    payroll_id=int(r["payroll_id"]),
                    earning_type=EarningType(r["earning_type"]),
                    hours=as_decimal(r["hours"]),
                    rate=as_decimal(r["rate"]),
                    amount=as_decimal(r["amount"]),
                )
                for r in fetchall(cur)
            ]

    def list_deductions(self, payroll_id: int) -> Sequence[PayrollDeduction]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT deduction_id, payroll_id, deduction_type, amount
                FROM payroll_deductions WHERE payroll_id=%s ORDER BY deduction_id ASC
                """,
                (int(payroll_id),),
            )
            return [
                PayrollDeduction(
                    deduction_id=int(r["deduction_id"]),
                    payroll_id=int(r["payroll_id"]),
                    deduction_type=DeductionType(r["deduction_type"]),
                    amount=as_decimal(r["amount"]),
                )
                for r in fetchall(cur)
            ]

    def replace_figures(
        self,
        *,
        payroll_id: int,
        expected_status: PayrollStatus,
        gross_pay: Decimal,
        taxable_income: Decimal,
        total_deductions: Decimal,
        net_pay: Decimal,
        earnings: Sequence[PayrollEarning],
        deductions: Sequence[PayrollDeduction],
        processed_at: datetime,
        processed_by: str,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET gross_pay=%s, taxable_income=%s, total_deductions=%s, net_pay=%s,
                    processed_at=%s, processed_by=%s
                WHERE payroll_id=%s AND status=%s
                """,
                (
                    gross_pay,
                    taxable_income,
                    total_deductions,
                    net_pay,
                    processed_at,
                    processed_by,
                    int(payroll_id),
                    expected_status.value,
                ),
            )
            if cur.rowcount == 0:
                return False
            cur.execute("DELETE FROM payroll_earnings WHERE payroll_id=%s", (int(payroll_id),))
            cur.execute("DELETE FROM payroll_deductions WHERE payroll_id=%s", (int(payroll_id),))
            _insert_earnings(cur, payroll_id, earnings)
            _insert_deductions(cur, payroll_id, deductions)
            _insert_log(
                cur,
                PayrollLog(
                    payroll_id=int(payroll_id),
                    action=PayrollLogAction.RECALCULATED,
                    previous_status=expected_status,
                    new_status=expected_status,
                    actor_id=processed_by,
                    logged_at=processed_at,
                ),
            )
            return True

    def transition_status(
        self,
        *,
        payroll_id: int,
        expected_status: PayrollStatus,
        new_status: PayrollStatus,
        action: PayrollLogAction,
        actor_id: str,
        at: datetime,
        reason: Optional[str] = None,
    ) -> bool:
        at_col, by_col = _STAMP_COLUMNS[new_status]
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock: a concurrent transition waits here, then sees the new status.
            cur.execute("SELECT status FROM payrolls WHERE payroll_id=%s FOR UPDATE", (int(payroll_id),))
            r = fetchone(cur)
            if not r or r["status"] != expected_status.value:
                return False

            cur.execute(
                f"""
                UPDATE payrolls
                SET status=%s, {at_col}=%s, {by_col}=%s, void_reason=COALESCE(%s, void_reason)
                WHERE payroll_id=%s AND status=%s
                """,
                (new_status.value, at, actor_id, reason, int(payroll_id), expected_status.value),
            )
            if cur.rowcount == 0:
                return False

            _insert_log(
                cur,
                PayrollLog(
                    payroll_id=int(payroll_id),
                    action=action,
                    previous_status=expected_status,
                    new_status=new_status,
                    actor_id=actor_id,
                    logged_at=at,
                    reason=reason,
                ),
            )
            return True

    def list_logs(self, payroll_id: int, *, limit: int = 50) -> Sequence[PayrollLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT log_id, payroll_id, action, previous_status, new_status, actor_id, reason, logged_at
                FROM payroll_logs
                WHERE payroll_id=%s
                ORDER BY logged_at ASC, log_id ASC
                LIMIT %s
                """,
                (int(payroll_id), int(limit)),
            )
            return [
                PayrollLog(
                    log_id=int(r["log_id"]),
                    payroll_id=int(r["payroll_id"]),
                    action=PayrollLogAction(r["action"]),
                    previous_status=PayrollStatus(r["previous_status"]) if r.get("previous_status") else None,
                    new_status=PayrollStatus(r["new_status"]),
                    actor_id=r["actor_id"],
                    reason=r.get("reason"),
                    logged_at=r["logged_at"],
                )
                for r in fetchall(cur)
            ]
