from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.money import money_sum, to_money
from ..common.validators import require_date_range, require_non_empty
from ..compensation.model import Compensation
from ..compensation.repository import CompensationRepository
from ..core.enums import DeductionType, PayrollStatus
from ..core.exceptions import ConcurrencyConflictError, InvalidTransitionError, NoCompensationError, NotFoundError, ValidationError
from ..deductions.engine import StatutoryDeductionEngine
from ..deductions.model import StatutoryDeductions
from ..policies.calculator import PolicyDeductionCalculator
from ..policies.model import PolicyDeductions
from ..timesheet.aggregator import TimeEntryAggregator
from ..timesheet.calculator import TimesheetCalculator
from ..timesheet.repository import TimeEntryRepository
from .calculator.base import EarningsCalculator
from .calculator.standard_calculator import StandardEarningsCalculator
from .model import Payroll, PayrollComputation, PayrollDeduction, PayrollView
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

_DEDUCTION_SOURCES: dict[DeductionType, Callable[[StatutoryDeductions, PolicyDeductions], Decimal]] = {
    DeductionType.TAX: lambda s, p: s.tax,
    DeductionType.SSS: lambda s, p: s.sss,
    DeductionType.PHILHEALTH: lambda s, p: s.philhealth,
    DeductionType.PAGIBIG: lambda s, p: s.pagibig,
    DeductionType.LATE: lambda s, p: p.late_amount,
    DeductionType.ABSENCE: lambda s, p: p.absence_amount,
}

if set(_DEDUCTION_SOURCES) != set(DeductionType):
    raise RuntimeError("Every DeductionType needs a source in the payroll assembler")

OPEN_STATUSES = frozenset({PayrollStatus.DRAFT, PayrollStatus.COMPUTED})


class PayrollAssembler:
    """Builds, persists and re-reads employee payrolls for a period.

    An existing payroll is always read back from storage; figures are only
    recomputed by an explicit recalculate().
    """

    def __init__(
        self,
        timesheets: TimesheetCalculator,
        time_entries: TimeEntryRepository,
        compensations: CompensationRepository,
        deductions: StatutoryDeductionEngine,
        policies: PolicyDeductionCalculator,
        payrolls: PayrollRepository,
        *,
        earnings_calculator: Optional[EarningsCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._timesheets = timesheets
        self._entries = TimeEntryAggregator(time_entries)
        self._compensations = compensations
        self._deductions = deductions
        self._policies = policies
        self._payrolls = payrolls
        self._earnings = earnings_calculator or StandardEarningsCalculator()
        self._clock = clock

    def current_compensation(self, employee_id: int, as_of: date) -> Compensation:
        comp = self._compensations.get_current(employee_id=int(employee_id), as_of=as_of)
        if not comp:
            raise NoCompensationError(
                f"Employee {employee_id} has no compensation effective by {as_of}",
                employee_id=employee_id,
                as_of=as_of,
            )
        return comp

    def compute(self, *, employee_id: int, organization_id: int, period_start: date, period_end: date) -> PayrollComputation:
        require_date_range(period_start, period_end, field_name="payroll period")
        compensation = self.current_compensation(employee_id, period_end)
        timesheet = self._timesheets.calculate_period(employee_id=employee_id, start=period_start, end=period_end)

        earnings = tuple(self._earnings.earnings(totals=timesheet.totals, compensation=compensation))
        gross = money_sum(e.amount for e in earnings)

        statutory = self._deductions.compute_all(organization_id=organization_id, gross=gross, as_of=period_end)
        policy = self._policies.compute(organization_id=organization_id, compensation=compensation, timesheet=timesheet)

        deductions = []
        for deduction_type in DeductionType:
            amount = to_money(_DEDUCTION_SOURCES[deduction_type](statutory, policy))
            if amount != 0:
                deductions.append(PayrollDeduction(deduction_type=deduction_type, amount=amount))
        total = money_sum(d.amount for d in deductions)

        return PayrollComputation(
            employee_id=int(employee_id),
            organization_id=int(organization_id),
            period_start=period_start,
            period_end=period_end,
            timesheet=timesheet,
            earnings=earnings,
            deductions=tuple(deductions),
            gross_pay=gross,
            taxable_income=statutory.taxable_income,
            total_deductions=total,
            net_pay=gross - total,
        )

    def preview(self, *, employee_id: int, organization_id: int, period_start: date, period_end: date) -> PayrollView:
        """Compute without writing anything."""
        computation = self.compute(
            employee_id=employee_id, organization_id=organization_id, period_start=period_start, period_end=period_end
        )
        return self._view_from_computation(computation)

    def generate(
        self,
        *,
        employee_id: int,
        organization_id: int,
        period_start: date,
        period_end: date,
        actor_id: str,
        status: PayrollStatus = PayrollStatus.DRAFT,
    ) -> PayrollView:
        view, _ = self.generate_or_get(
            employee_id=employee_id,
            organization_id=organization_id,
            period_start=period_start,
            period_end=period_end,
            actor_id=actor_id,
            status=status,
        )
        return view

    def generate_or_get(
        self,
        *,
        employee_id: int,
        organization_id: int,
        period_start: date,
        period_end: date,
        actor_id: str,
        status: PayrollStatus = PayrollStatus.DRAFT,
    ) -> tuple[PayrollView, bool]:
        """Like generate(), also telling whether this call created the payroll."""
        actor_id = require_non_empty(actor_id, "Actor")
        if status not in OPEN_STATUSES:
            raise ValidationError(f"A payroll can only be created as DRAFT or COMPUTED, not {status.value}")

        existing = self._payrolls.get_existing(employee_id=employee_id, period_start=period_start, period_end=period_end)
        if existing:
            logger.info(
                "Payroll %s already exists for employee %s (%s..%s), returning stored figures",
                existing.payroll_id,
                employee_id,
                period_start,
                period_end,
            )
            return self._view_from_payroll(existing), False

        computation = self.compute(
            employee_id=employee_id, organization_id=organization_id, period_start=period_start, period_end=period_end
        )
        payroll_id = self._payrolls.create_payroll(
            employee_id=computation.employee_id,
            organization_id=computation.organization_id,
            period_start=period_start,
            period_end=period_end,
            gross_pay=computation.gross_pay,
            taxable_income=computation.taxable_income,
            total_deductions=computation.total_deductions,
            net_pay=computation.net_pay,
            status=status,
            earnings=computation.earnings,
            deductions=computation.deductions,
            processed_at=self._clock(),
            processed_by=actor_id,
        )
        if payroll_id is None:
            # Another request created it between the read and the insert.
            existing = self._payrolls.get_existing(employee_id=employee_id, period_start=period_start, period_end=period_end)
            if not existing:
                raise ConcurrencyConflictError(
                    f"Payroll for employee {employee_id} ({period_start}..{period_end}) changed while it was being generated"
                )
            logger.info("Payroll %s was generated concurrently for employee %s", existing.payroll_id, employee_id)
            return self._view_from_payroll(existing), False

        logger.info(
            "Generated payroll %s for employee %s (%s..%s): gross=%s net=%s",
            payroll_id,
            employee_id,
            period_start,
            period_end,
            computation.gross_pay,
            computation.net_pay,
        )
        return self._view_from_payroll(self._require(payroll_id)), True

    def get_payroll_view(self, *, employee_id: int, organization_id: int, period_start: date, period_end: date) -> PayrollView:
        existing = self._payrolls.get_existing(employee_id=employee_id, period_start=period_start, period_end=period_end)
        if existing:
            return self._view_from_payroll(existing)
        return self.preview(
            employee_id=employee_id, organization_id=organization_id, period_start=period_start, period_end=period_end
        )

    def get_by_id(self, payroll_id: int) -> PayrollView:
        return self._view_from_payroll(self._require(payroll_id))

    def list_for_period(
        self, *, organization_id: int, period_start: date, period_end: date, include_voided: bool = False
    ) -> list[Payroll]:
        require_date_range(period_start, period_end, field_name="payroll period")
        return list(
            self._payrolls.list_for_period(
                organization_id=int(organization_id),
                period_start=period_start,
                period_end=period_end,
                include_voided=include_voided,
            )
        )

    def recalculate(self, *, payroll_id: int, actor_id: str) -> PayrollView:
        actor_id = require_non_empty(actor_id, "Actor")
        payroll = self._require(payroll_id)
        if payroll.status not in OPEN_STATUSES:
            raise InvalidTransitionError(
                f"Payroll {payroll_id} is {payroll.status.value}; only DRAFT or COMPUTED payrolls can be recalculated",
                current=payroll.status,
                target=payroll.status,
            )

        computation = self.compute(
            employee_id=payroll.employee_id,
            organization_id=payroll.organization_id,
            period_start=payroll.period_start,
            period_end=payroll.period_end,
        )
        now = self._clock()
        ok = self._payrolls.replace_figures(
            payroll_id=payroll.payroll_id,
            expected_status=payroll.status,
            gross_pay=computation.gross_pay,
            taxable_income=computation.taxable_income,
            total_deductions=computation.total_deductions,
            net_pay=computation.net_pay,
            earnings=computation.earnings,
            deductions=computation.deductions,
            processed_at=now,
            processed_by=actor_id,
        )
        if not ok:
            raise ConcurrencyConflictError(f"Payroll {payroll_id} changed while it was being recalculated")

        logger.info(
            "Recalculated payroll %s: gross %s -> %s, net %s -> %s",
            payroll_id,
            payroll.gross_pay,
            computation.gross_pay,
            payroll.net_pay,
            computation.net_pay,
        )
        return self._view_from_payroll(self._require(payroll.payroll_id))

    def _require(self, payroll_id: int) -> Payroll:
        payroll = self._payrolls.get_by_id(int(payroll_id))
        if not payroll:
            raise NotFoundError(f"Payroll {payroll_id} not found")
        return payroll

    def _view_from_payroll(self, payroll: Payroll) -> PayrollView:
        entries = self._entries.closed_entries(
            employee_id=payroll.employee_id, start=payroll.period_start, end=payroll.period_end
        )
        return PayrollView(
            employee_id=payroll.employee_id,
            organization_id=payroll.organization_id,
            period_start=payroll.period_start,
            period_end=payroll.period_end,
            earnings=tuple(self._payrolls.list_earnings(payroll.payroll_id)),
            deductions=tuple(self._payrolls.list_deductions(payroll.payroll_id)),
            gross_pay=payroll.gross_pay,
            taxable_income=payroll.taxable_income,
            total_deductions=payroll.total_deductions,
            net_pay=payroll.net_pay,
            time_entries=tuple(entries),
            payroll=payroll,
        )

    def _view_from_computation(self, c: PayrollComputation) -> PayrollView:
        return PayrollView(
            employee_id=c.employee_id,
            organization_id=c.organization_id,
            period_start=c.period_start,
            period_end=c.period_end,
            earnings=c.earnings,
            deductions=c.deductions,
            gross_pay=c.gross_pay,
            taxable_income=c.taxable_income,
            total_deductions=c.total_deductions,
            net_pay=c.net_pay,
            time_entries=tuple(
                self._entries.closed_entries(employee_id=c.employee_id, start=c.period_start, end=c.period_end)
            ),
        )
