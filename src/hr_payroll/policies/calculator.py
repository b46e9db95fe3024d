from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from ..common.datetime_utils import iter_dates, whole_minutes
from ..common.money import money_sum, to_money
from ..compensation.model import Compensation
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, REGULAR_MINUTES_PER_DAY
from ..core.enums import PolicyType
from ..schedules.model import WorkSchedule
from ..schedules.repository import WorkScheduleRepository
from ..timesheet.model import TimesheetResult
from .factory import DeductionStrategyFactory
from .model import DeductionPolicy, PolicyDeductions
from .repository import DeductionPolicyRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def late_minutes(clock_in_at: datetime, work_date: date, schedule: WorkSchedule, *, grace_minutes: int) -> int:
    """Minutes clocked in after schedule start + grace (0 when on time)."""
    threshold = datetime.combine(work_date, schedule.start_time) + timedelta(minutes=int(grace_minutes))
    if clock_in_at <= threshold:
        return 0
    return whole_minutes(datetime.combine(work_date, schedule.start_time), clock_in_at)


def absent_dates(schedule: WorkSchedule, *, start: date, end: date, worked: Iterable[date], on_leave: Iterable[date]) -> list[date]:
    """Scheduled work days with neither a closed entry nor approved leave."""
    covered = set(worked) | set(on_leave)
    return [d for d in iter_dates(start, end) if schedule.is_work_day(d) and d not in covered]


class PolicyDeductionCalculator:
    """Late arrival and absence deductions driven by organization policies."""

    def __init__(
        self,
        policies: DeductionPolicyRepository,
        schedules: WorkScheduleRepository,
        *,
        strategy_factory: Optional[DeductionStrategyFactory] = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    ):
        self._policies = policies
        self._schedules = schedules
        self._factory = strategy_factory or DeductionStrategyFactory()
        self._grace_minutes = int(grace_minutes)

    def compute(
        self,
        *,
        organization_id: int,
        compensation: Compensation,
        timesheet: TimesheetResult,
    ) -> PolicyDeductions:
        start, end = timesheet.period_start, timesheet.period_end
        schedule = self._schedules.get_work_schedule(employee_id=timesheet.employee_id, as_of=end)
        if not schedule:
            logger.info("Employee %s has no work schedule, skipping late/absence deductions", timesheet.employee_id)
            return PolicyDeductions(late_amount=ZERO, absence_amount=ZERO)

        grace = self._grace_minutes if schedule.grace_minutes is None else schedule.grace_minutes

        # Lateness is measured once per day, from its earliest clock-in.
        first_in: dict[date, datetime] = {}
        for e in timesheet.entries:
            if e.work_date not in first_in or e.clock_in_at < first_in[e.work_date]:
                first_in[e.work_date] = e.clock_in_at

        late_by_day: dict[date, int] = {}
        if schedule.allow_late_deduction:
            for day, clock_in_at in first_in.items():
                minutes = late_minutes(clock_in_at, day, schedule, grace_minutes=grace)
                if minutes > 0:
                    late_by_day[day] = minutes

        leave = self._schedules.list_approved_leave_dates(
            employee_id=timesheet.employee_id, start_date=start, end_date=end
        )
        absences = absent_dates(schedule, start=start, end=end, worked=first_in, on_leave=leave)

        late_amount = ZERO
        if late_by_day:
            late_amount = self._apply(
                PolicyType.LATE, organization_id=organization_id, as_of=end, compensation=compensation,
                minutes_per_day=list(late_by_day.values()),
            )

        absence_amount = ZERO
        if absences:
            absence_amount = self._apply(
                PolicyType.ABSENCE, organization_id=organization_id, as_of=end, compensation=compensation,
                minutes_per_day=[REGULAR_MINUTES_PER_DAY] * len(absences),
            )

        return PolicyDeductions(
            late_amount=late_amount,
            absence_amount=absence_amount,
            late_minutes=sum(late_by_day.values()),
            absent_days=len(absences),
        )

    def amount_for_day(self, policy: DeductionPolicy, *, minutes: int, compensation: Compensation) -> Decimal:
        if minutes <= 0 or minutes < int(policy.minimum_minutes or 0):
            return ZERO
        strategy = self._factory.for_policy(policy)
        amount = strategy.amount_for(
            policy=policy,
            minutes=minutes,
            daily_rate=compensation.daily_rate,
            hourly_rate=compensation.policy_hourly_rate,
        )
        if policy.max_deduction_per_day is not None:
            amount = min(amount, to_money(policy.max_deduction_per_day))
        return max(amount, ZERO)

    def _apply(
        self,
        policy_type: PolicyType,
        *,
        organization_id: int,
        as_of: date,
        compensation: Compensation,
        minutes_per_day: list[int],
    ) -> Decimal:
        policy = self._policies.get_active_policy(organization_id=int(organization_id), policy_type=policy_type, as_of=as_of)
        if not policy:
            logger.warning(
                "No active %s deduction policy for organization %s on %s, deducting 0",
                policy_type.value,
                organization_id,
                as_of,
            )
            return ZERO

        total = money_sum(self.amount_for_day(policy, minutes=m, compensation=compensation) for m in minutes_per_day)
        if policy.max_deduction_per_cutoff is not None:
            total = min(total, to_money(policy.max_deduction_per_cutoff))
        return total
