from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.money import to_money
from ..core.constants import BONUS_TAX_EXEMPTION, DEFAULT_MINIMUM_WAGE
from ..core.enums import RateTableKind
from ..core.exceptions import NoApplicableRateError, ValidationError
from . import brackets
from .model import ContributionBreakdown, RateBracket, RateTable, StatutoryDeductions, WithholdingTax
from .repository import RateTableRepository

logger = logging.getLogger(__name__)

CONTRIBUTION_KINDS = (RateTableKind.SSS, RateTableKind.PHILHEALTH, RateTableKind.PAGIBIG)


class StatutoryDeductionEngine:
    """Tax and government contributions from organization-scoped bracket tables.

    Resolution order for every table kind:
        1. the organization's own table effective on the date
        2. the global table effective on or before the date
        3. NoApplicableRateError (never a silent zero)
    """

    def __init__(
        self,
        tables: RateTableRepository,
        *,
        minimum_wage: Decimal = DEFAULT_MINIMUM_WAGE,
        bonus_exemption: Decimal = BONUS_TAX_EXEMPTION,
    ):
        self._tables = tables
        self._minimum_wage = Decimal(minimum_wage)
        self._bonus_exemption = Decimal(bonus_exemption)

    def resolve_table(self, *, organization_id: Optional[int], kind: RateTableKind, as_of: date) -> RateTable:
        table = None
        if organization_id is not None:
            table = self._tables.get_rate_table(organization_id=int(organization_id), kind=kind, as_of=as_of)
        if table is None:
            table = self._tables.get_rate_table(organization_id=None, kind=kind, as_of=as_of)
        if table is None:
            raise NoApplicableRateError(
                f"No {kind.value} table effective on {as_of} for organization {organization_id}",
                kind=kind,
                organization_id=organization_id,
                as_of=as_of,
            )
        return table

    def _bracket(self, table: RateTable, amount: Decimal, *, organization_id, as_of: date) -> RateBracket:
        bracket = brackets.find_bracket(table, amount)
        if bracket is None:
            raise NoApplicableRateError(
                f"No {table.kind.value} bracket covers {amount} (table {table.rate_table_id})",
                kind=table.kind,
                organization_id=organization_id,
                as_of=as_of,
            )
        return bracket

    def compute_contribution(self, *, organization_id: Optional[int], kind: RateTableKind, salary: Decimal, as_of: date) -> Decimal:
        if kind == RateTableKind.TAX:
            raise ValidationError("Use compute_tax for the TAX table")
        salary = to_money(salary)
        table = self.resolve_table(organization_id=organization_id, kind=kind, as_of=as_of)
        if salary <= 0:
            return brackets.ZERO
        bracket = self._bracket(table, salary, organization_id=organization_id, as_of=as_of)
        return brackets.employee_share(bracket, salary)

    def compute_tax(self, *, organization_id: Optional[int], taxable_income: Decimal, as_of: date) -> Decimal:
        income = to_money(taxable_income)
        table = self.resolve_table(organization_id=organization_id, kind=RateTableKind.TAX, as_of=as_of)
        if income <= 0:
            return brackets.ZERO
        bracket = self._bracket(table, income, organization_id=organization_id, as_of=as_of)
        return brackets.progressive_tax(bracket, income)

    def compute_all(self, *, organization_id: Optional[int], gross: Decimal, as_of: date) -> StatutoryDeductions:
        """Contributions first, then tax on max(0, gross - contributions)."""
        gross = to_money(gross)
        shares = {
            kind: self.compute_contribution(organization_id=organization_id, kind=kind, salary=gross, as_of=as_of)
            for kind in CONTRIBUTION_KINDS
        }
        taxable = max(gross - sum(shares.values(), Decimal("0")), Decimal("0"))
        taxable = to_money(taxable)
        tax = self.compute_tax(organization_id=organization_id, taxable_income=taxable, as_of=as_of)
        return StatutoryDeductions(
            sss=shares[RateTableKind.SSS],
            philhealth=shares[RateTableKind.PHILHEALTH],
            pagibig=shares[RateTableKind.PAGIBIG],
            tax=tax,
            taxable_income=taxable,
        )

    def compute_withholding_on_gross(
        self,
        *,
        organization_id: Optional[int],
        gross: Decimal,
        as_of: date,
        government_deductions: Decimal = Decimal("0"),
    ) -> WithholdingTax:
        """Withholding on a gross figure with contributions supplied by the caller.

        Minimum wage earners are flagged and withheld nothing.
        """
        gross = to_money(gross)
        taxable = to_money(max(gross - Decimal(government_deductions), Decimal("0")))
        table = self.resolve_table(organization_id=organization_id, kind=RateTableKind.TAX, as_of=as_of)
        bracket = self._bracket(table, taxable, organization_id=organization_id, as_of=as_of)
        is_minimum_wage = gross <= self._minimum_wage
        tax = brackets.ZERO if is_minimum_wage else brackets.progressive_tax(bracket, taxable)
        return WithholdingTax(taxable_income=taxable, bracket=bracket, tax=tax, is_minimum_wage=is_minimum_wage)

    def compute_bonus_tax(
        self,
        *,
        organization_id: Optional[int],
        bonus: Decimal,
        other_annual_income: Decimal = Decimal("0"),
        as_of: date,
    ) -> Decimal:
        """Tax attributable to a bonus: tax(other + taxable bonus) - tax(other), yearly.

        Only the part of the bonus above the exemption is taxable.
        """
        bonus = to_money(bonus)
        other = to_money(other_annual_income)
        if bonus < 0 or other < 0:
            raise ValidationError("Bonus and other income cannot be negative")

        taxable_bonus = max(bonus - self._bonus_exemption, Decimal("0"))
        table = self.resolve_table(organization_id=organization_id, kind=RateTableKind.TAX, as_of=as_of)
        if taxable_bonus == 0:
            return brackets.ZERO

        with_bonus = brackets.annualized_tax(table, other + taxable_bonus)
        without_bonus = brackets.annualized_tax(table, other)
        return max(with_bonus - without_bonus, brackets.ZERO)

    def contribution_breakdown(
        self, *, organization_id: Optional[int], kind: RateTableKind, salary: Decimal, as_of: date
    ) -> ContributionBreakdown:
        if kind == RateTableKind.TAX:
            raise ValidationError("TAX has no contribution shares")
        salary = to_money(salary)
        table = self.resolve_table(organization_id=organization_id, kind=kind, as_of=as_of)
        bracket = self._bracket(table, max(salary, Decimal("0")), organization_id=organization_id, as_of=as_of)
        return ContributionBreakdown(
            kind=kind,
            salary_base=to_money(brackets.salary_base(bracket, salary)),
            employee_share=brackets.employee_share(bracket, salary),
            employer_share=brackets.employer_share(bracket, salary),
            ec_share=brackets.ec_share(bracket, salary),
        )

    def validate_configuration(self, *, organization_id: Optional[int], as_of: date) -> list[RateTableKind]:
        """Table kinds that cannot be resolved for the organization on the date."""
        missing = []
        for kind in RateTableKind:
            try:
                self.resolve_table(organization_id=organization_id, kind=kind, as_of=as_of)
            except NoApplicableRateError:
                missing.append(kind)
        if missing:
            logger.warning(
                "Organization %s is missing statutory tables on %s: %s",
                organization_id,
                as_of,
                ", ".join(k.value for k in missing),
            )
        return missing
