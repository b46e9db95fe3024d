from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.enums import DeductionMethod, PolicyType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchone
from .model import DeductionPolicy
from .repository import DeductionPolicyRepository


class MySQLDeductionPolicyRepository(DeductionPolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_policy(self, *, organization_id: int, policy_type: PolicyType, as_of: date) -> Optional[DeductionPolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT policy_id, organization_id, policy_type, method, minimum_minutes, fixed_amount,
                       percentage_rate, hourly_rate_multiplier, max_deduction_per_day, max_deduction_per_cutoff,
                       effective_from, effective_to
                FROM deduction_policies
                WHERE organization_id=%s AND policy_type=%s
                  AND effective_from <= %s AND (effective_to IS NULL OR effective_to >= %s)
                ORDER BY effective_from DESC, policy_id DESC
                LIMIT 1
                """,
                (int(organization_id), policy_type.value, as_of, as_of),
            )
            r = fetchone(cur)
            if not r:
                return None
            return DeductionPolicy(
                policy_id=int(r["policy_id"]),
                organization_id=int(r["organization_id"]),
                policy_type=PolicyType(r["policy_type"]),
                method=DeductionMethod(r["method"]),
                minimum_minutes=int(r.get("minimum_minutes") or 0),
                fixed_amount=as_decimal(r.get("fixed_amount")),
                percentage_rate=as_decimal(r.get("percentage_rate")),
                hourly_rate_multiplier=as_decimal(r.get("hourly_rate_multiplier")),
                max_deduction_per_day=as_decimal(r.get("max_deduction_per_day")),
                max_deduction_per_cutoff=as_decimal(r.get("max_deduction_per_cutoff")),
                effective_from=r["effective_from"],
                effective_to=r.get("effective_to"),
            )
