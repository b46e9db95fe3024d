"""Bracket walking shared by every statutory computation.

All functions are pure: (amount, table or bracket) -> amount.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..common.money import to_money
from .model import RateBracket, RateTable

ZERO = Decimal("0.00")


def find_bracket(table: RateTable, amount: Decimal) -> Optional[RateBracket]:
    """Bracket containing `amount`.

    Falls back to the highest bracket starting at or below the amount so a
    value that lands in a gap between two rows (9,999.995) is still priced.
    """
    ordered = sorted(table.brackets, key=lambda b: b.min_salary)
    for b in ordered:
        if b.contains(amount):
            return b
    below = [b for b in ordered if b.min_salary <= amount]
    return below[-1] if below else None


def _tax_amount(bracket: RateBracket, income: Decimal) -> Decimal:
    excess = max(income - bracket.min_salary, Decimal("0"))
    return bracket.base_tax + excess * bracket.rate


def progressive_tax(bracket: RateBracket, income: Decimal) -> Decimal:
    """base_tax + (income - min_salary) * rate, never negative."""
    if income <= 0:
        return ZERO
    return max(to_money(_tax_amount(bracket, income)), ZERO)


def annualized_tax(table: RateTable, annual_income: Decimal, *, periods_per_year: int = 12) -> Decimal:
    """Tax on a yearly amount using per-period brackets."""
    periods = Decimal(periods_per_year)
    per_period = annual_income / periods
    bracket = find_bracket(table, per_period)
    if bracket is None or per_period <= 0:
        return ZERO
    return max(to_money(_tax_amount(bracket, per_period) * periods), ZERO)


def salary_base(bracket: RateBracket, salary: Decimal) -> Decimal:
    base = salary
    if bracket.salary_floor is not None and base < bracket.salary_floor:
        base = bracket.salary_floor
    if bracket.salary_ceiling is not None and base > bracket.salary_ceiling:
        base = bracket.salary_ceiling
    return base


def employee_share(bracket: RateBracket, salary: Decimal) -> Decimal:
    if salary <= 0:
        return ZERO
    share = to_money(salary_base(bracket, salary) * bracket.employee_rate)
    if bracket.max_employee_share is not None:
        share = min(share, to_money(bracket.max_employee_share))
    return min(share, to_money(salary))


def employer_share(bracket: RateBracket, salary: Decimal) -> Decimal:
    if salary <= 0:
        return ZERO
    return to_money(salary_base(bracket, salary) * bracket.employer_rate)


def ec_share(bracket: RateBracket, salary: Decimal) -> Decimal:
    if salary <= 0:
        return ZERO
    return to_money(salary_base(bracket, salary) * bracket.ec_rate)
