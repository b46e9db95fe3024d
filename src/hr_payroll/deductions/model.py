from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import RateTableKind


@dataclass(frozen=True)
class RateBracket:
    """One row of a statutory table.

    Tax rows use base_tax/rate; contribution rows use the employee/employer/EC
    rates with the optional salary floor, ceiling and employee share cap.
    """

    min_salary: Decimal
    max_salary: Optional[Decimal] = None
    base_tax: Decimal = Decimal("0")
    rate: Decimal = Decimal("0")
    employee_rate: Decimal = Decimal("0")
    employer_rate: Decimal = Decimal("0")
    ec_rate: Decimal = Decimal("0")
    salary_floor: Optional[Decimal] = None
    salary_ceiling: Optional[Decimal] = None
    max_employee_share: Optional[Decimal] = None

    def contains(self, amount: Decimal) -> bool:
        if amount < self.min_salary:
            return False
        return self.max_salary is None or amount <= self.max_salary


@dataclass(frozen=True)
class RateTable:
    rate_table_id: int
    kind: RateTableKind
    organization_id: Optional[int]
    effective_from: date
    brackets: tuple[RateBracket, ...]
    effective_to: Optional[date] = None

    @property
    def is_global(self) -> bool:
        return self.organization_id is None

    def is_effective_on(self, as_of: date) -> bool:
        if as_of < self.effective_from:
            return False
        return self.effective_to is None or as_of <= self.effective_to


@dataclass(frozen=True)
class StatutoryDeductions:
    sss: Decimal
    philhealth: Decimal
    pagibig: Decimal
    tax: Decimal
    taxable_income: Decimal

    @property
    def contributions(self) -> Decimal:
        return self.sss + self.philhealth + self.pagibig

    @property
    def total(self) -> Decimal:
        return self.contributions + self.tax


@dataclass(frozen=True)
class ContributionBreakdown:
    kind: RateTableKind
    salary_base: Decimal
    employee_share: Decimal
    employer_share: Decimal
    ec_share: Decimal = Decimal("0.00")

    @property
    def total(self) -> Decimal:
        return self.employee_share + self.employer_share + self.ec_share


@dataclass(frozen=True)
class WithholdingTax:
    taxable_income: Decimal
    bracket: RateBracket
    tax: Decimal
    is_minimum_wage: bool = False
