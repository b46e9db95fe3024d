from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import PayrollLogAction, PayrollStatus
from ..core.exceptions import ConcurrencyConflictError, DomainError, InvalidTransitionError, NotFoundError
from .model import Payroll, PayrollLog
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[PayrollStatus, frozenset] = {
    PayrollStatus.DRAFT: frozenset({PayrollStatus.COMPUTED, PayrollStatus.VOIDED}),
    PayrollStatus.COMPUTED: frozenset({PayrollStatus.APPROVED, PayrollStatus.VOIDED}),
    PayrollStatus.APPROVED: frozenset({PayrollStatus.RELEASED, PayrollStatus.VOIDED}),
    PayrollStatus.RELEASED: frozenset({PayrollStatus.VOIDED}),
    PayrollStatus.VOIDED: frozenset(),
}

_ACTIONS = {
    PayrollStatus.COMPUTED: PayrollLogAction.COMPUTED,
    PayrollStatus.APPROVED: PayrollLogAction.APPROVED,
    PayrollStatus.RELEASED: PayrollLogAction.RELEASED,
    PayrollStatus.VOIDED: PayrollLogAction.VOIDED,
}


def can_transition(current: PayrollStatus, target: PayrollStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class BulkFailure:
    payroll_id: int
    error_kind: str
    message: str


@dataclass
class BulkResult:
    succeeded: list[int] = field(default_factory=list)
    failed: list[BulkFailure] = field(default_factory=list)


class PayrollStatusMachine:
    """Guards payroll status changes and writes their audit trail.

    DRAFT -> COMPUTED -> APPROVED -> RELEASED, and any state except VOIDED
    -> VOIDED with a reason. The repository compare-and-sets the status and
    appends the log in the same transaction, so of two concurrent requests on
    one payroll only the first succeeds.
    """

    def __init__(self, payrolls: PayrollRepository, *, clock: Callable[[], datetime] = now_local):
        self._payrolls = payrolls
        self._clock = clock

    def compute(self, payroll_id: int, *, actor_id: str) -> Payroll:
        return self.transition(payroll_id, PayrollStatus.COMPUTED, actor_id=actor_id)

    def approve(self, payroll_id: int, *, actor_id: str) -> Payroll:
        return self.transition(payroll_id, PayrollStatus.APPROVED, actor_id=actor_id)

    def release(self, payroll_id: int, *, actor_id: str) -> Payroll:
        return self.transition(payroll_id, PayrollStatus.RELEASED, actor_id=actor_id)

    def void(self, payroll_id: int, *, actor_id: str, reason: Optional[str]) -> Payroll:
        return self.transition(payroll_id, PayrollStatus.VOIDED, actor_id=actor_id, reason=reason)

    def transition(self, payroll_id: int, target: PayrollStatus, *, actor_id: str, reason: Optional[str] = None) -> Payroll:
        actor_id = require_non_empty(actor_id, "Actor")
        if target == PayrollStatus.VOIDED:
            reason = require_non_empty(reason, "Void reason")
        else:
            reason = None
        if target not in _ACTIONS:
            raise InvalidTransitionError(f"{target.value} cannot be reached by a transition", current=None, target=target)

        payroll = self._require(payroll_id)
        current = payroll.status
        self._check(payroll_id, current, target)

        ok = self._payrolls.transition_status(
            payroll_id=payroll.payroll_id,
            expected_status=current,
            new_status=target,
            action=_ACTIONS[target],
            actor_id=actor_id,
            at=self._clock(),
            reason=reason,
        )
        if not ok:
            latest = self._require(payroll_id)
            self._check(payroll_id, latest.status, target)
            raise ConcurrencyConflictError(
                f"Payroll {payroll_id} moved from {current.value} to {latest.status.value} concurrently"
            )

        logger.info("Payroll %s: %s -> %s by %s", payroll_id, current.value, target.value, actor_id)
        return self._require(payroll_id)

    def bulk_approve(self, payroll_ids: Iterable[int], *, actor_id: str) -> BulkResult:
        return self._bulk(payroll_ids, PayrollStatus.APPROVED, actor_id=actor_id)

    def bulk_release(self, payroll_ids: Iterable[int], *, actor_id: str) -> BulkResult:
        return self._bulk(payroll_ids, PayrollStatus.RELEASED, actor_id=actor_id)

    def history(self, payroll_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[PayrollLog]:
        self._require(payroll_id)
        return self._payrolls.list_logs(int(payroll_id), limit=limit)

    def _bulk(self, payroll_ids: Iterable[int], target: PayrollStatus, *, actor_id: str) -> BulkResult:
        require_non_empty(actor_id, "Actor")
        result = BulkResult()
        for payroll_id in payroll_ids:
            try:
                self.transition(int(payroll_id), target, actor_id=actor_id)
                result.succeeded.append(int(payroll_id))
            except DomainError as exc:
                logger.warning("Bulk %s skipped payroll %s: %s", target.value, payroll_id, exc)
                result.failed.append(BulkFailure(payroll_id=int(payroll_id), error_kind=type(exc).__name__, message=str(exc)))
        return result

    def _require(self, payroll_id: int) -> Payroll:
        payroll = self._payrolls.get_by_id(int(payroll_id))
        if not payroll:
            raise NotFoundError(f"Payroll {payroll_id} not found")
        return payroll

    @staticmethod
    def _check(payroll_id: int, current: PayrollStatus, target: PayrollStatus) -> None:
        if not can_transition(current, target):
            raise InvalidTransitionError(
                f"Payroll {payroll_id} cannot go from {current.value} to {target.value}",
                current=current,
                target=target,
            )
