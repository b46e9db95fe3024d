from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from conftest import InMemoryRateTables, ph_rate_tables
from hr_payroll.core.enums import RateTableKind
from hr_payroll.core.exceptions import NoApplicableRateError
from hr_payroll.deductions.engine import StatutoryDeductionEngine
from hr_payroll.deductions.model import RateBracket, RateTable

D = Decimal
AS_OF = date(2025, 3, 15)


def _flat_tax_table(organization_id, rate: str, *, effective_from=date(2024, 1, 1)) -> RateTable:
    return RateTable(
        rate_table_id=99,
        kind=RateTableKind.TAX,
        organization_id=organization_id,
        effective_from=effective_from,
        brackets=(RateBracket(min_salary=D("0"), rate=D(rate)),),
    )


def test_compute_all_takes_contributions_before_tax(rate_tables):
    result = StatutoryDeductionEngine(rate_tables).compute_all(organization_id=10, gross=D("32000"), as_of=AS_OF)

    assert result.sss == D("1350.00")  # capped at the 30,000 ceiling
    assert result.philhealth == D("800.00")
    assert result.pagibig == D("100.00")
    assert result.taxable_income == D("29750.00")
    assert result.tax == D("1783.40")
    assert result.total == D("4033.40")


def test_organization_table_overrides_global(rate_tables):
    rate_tables.tables.append(_flat_tax_table(10, "0.10"))
    engine = StatutoryDeductionEngine(rate_tables)

    assert engine.compute_tax(organization_id=10, taxable_income=D("10000"), as_of=AS_OF) == D("1000.00")
    assert engine.compute_tax(organization_id=77, taxable_income=D("10000"), as_of=AS_OF) == D("0.00")


def test_future_organization_table_falls_back_to_global(rate_tables):
    rate_tables.tables.append(_flat_tax_table(10, "0.10", effective_from=date(2026, 1, 1)))
    engine = StatutoryDeductionEngine(rate_tables)

    assert engine.compute_tax(organization_id=10, taxable_income=D("10000"), as_of=AS_OF) == D("0.00")
    assert rate_tables.calls[-2:] == [(10, RateTableKind.TAX, AS_OF), (None, RateTableKind.TAX, AS_OF)]


def test_missing_table_is_an_error_not_zero():
    tables = InMemoryRateTables([t for t in ph_rate_tables() if t.kind != RateTableKind.PHILHEALTH])

    with pytest.raises(NoApplicableRateError) as exc:
        StatutoryDeductionEngine(tables).compute_all(organization_id=10, gross=D("25000"), as_of=AS_OF)

    assert exc.value.kind == RateTableKind.PHILHEALTH
    assert exc.value.organization_id == 10


def test_table_not_yet_effective_is_an_error(rate_tables):
    with pytest.raises(NoApplicableRateError):
        StatutoryDeductionEngine(rate_tables).compute_all(organization_id=10, gross=D("25000"), as_of=date(2023, 12, 31))


def test_tax_is_continuous_at_bracket_boundaries(rate_tables):
    engine = StatutoryDeductionEngine(rate_tables)

    assert engine.compute_tax(organization_id=None, taxable_income=D("33333"), as_of=AS_OF) == D("2500.00")
    assert engine.compute_tax(organization_id=None, taxable_income=D("33333.01"), as_of=AS_OF) == D("2500.00")
    assert engine.compute_tax(organization_id=None, taxable_income=D("66667"), as_of=AS_OF) == D("10833.50")


def test_deductions_are_monotonic_and_bounded_by_gross(rate_tables):
    engine = StatutoryDeductionEngine(rate_tables)
    previous_tax = D("0")
    previous_shares = {kind: D("0") for kind in (RateTableKind.SSS, RateTableKind.PHILHEALTH)}

    for step in range(0, 200001, 2500):
        gross = D(step)
        tax = engine.compute_tax(organization_id=10, taxable_income=gross, as_of=AS_OF)
        assert D("0") <= tax <= gross
        assert tax >= previous_tax
        previous_tax = tax

        for kind in previous_shares:
            share = engine.compute_contribution(organization_id=10, kind=kind, salary=gross, as_of=AS_OF)
            assert D("0") <= share <= gross
            assert share >= previous_shares[kind]
            previous_shares[kind] = share


def test_small_salary_never_pays_more_than_it_earns(rate_tables):
    engine = StatutoryDeductionEngine(rate_tables)

    # The 10,000 floor would ask for 250.00.
    assert engine.compute_contribution(organization_id=10, kind=RateTableKind.PHILHEALTH, salary=D("120"), as_of=AS_OF) == D("120.00")


def test_withholding_on_gross_flags_minimum_wage_earners(rate_tables):
    engine = StatutoryDeductionEngine(rate_tables, minimum_wage=D("16000"))

    low = engine.compute_withholding_on_gross(organization_id=10, gross=D("15000"), as_of=AS_OF)
    high = engine.compute_withholding_on_gross(
        organization_id=10, gross=D("40000"), as_of=AS_OF, government_deductions=D("2250")
    )

    assert low.is_minimum_wage and low.tax == D("0.00")
    assert not high.is_minimum_wage
    assert high.taxable_income == D("37750.00")
    assert high.tax == D("3604.25")


def test_bonus_tax_only_taxes_the_excess_over_the_exemption(rate_tables):
    engine = StatutoryDeductionEngine(rate_tables)

    assert engine.compute_bonus_tax(organization_id=10, bonus=D("90000"), other_annual_income=D("360000"), as_of=AS_OF) == D("0.00")
    # 10,000 above the exemption, taxed at the 20% marginal rate.
    assert engine.compute_bonus_tax(organization_id=10, bonus=D("100000"), other_annual_income=D("360000"), as_of=AS_OF) == D("2000.00")


def test_contribution_breakdown_reports_all_shares(rate_tables):
    shares = StatutoryDeductionEngine(rate_tables).contribution_breakdown(
        organization_id=10, kind=RateTableKind.SSS, salary=D("32000"), as_of=AS_OF
    )

    assert shares.salary_base == D("30000.00")
    assert shares.employee_share == D("1350.00")
    assert shares.employer_share == D("2850.00")
    assert shares.ec_share == D("30.00")
    assert shares.total == D("4230.00")


def test_validate_configuration_lists_missing_kinds():
    tables = InMemoryRateTables([t for t in ph_rate_tables() if t.kind != RateTableKind.PAGIBIG])

    assert StatutoryDeductionEngine(tables).validate_configuration(organization_id=10, as_of=AS_OF) == [RateTableKind.PAGIBIG]
