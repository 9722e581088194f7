from datetime import date
from decimal import Decimal

import pytest

from payroll_engine.config.rule_table import (
    ContributionDefinition,
    ContributionType,
    PTKPStatus,
    RuleTable,
    TaxBracket,
    load_rule_tables,
)
from payroll_engine.models import CompensationRecord

STATUTORY_PTKP = {
    PTKPStatus.TK0: 54_000_000,
    PTKPStatus.TK1: 58_500_000,
    PTKPStatus.TK2: 63_000_000,
    PTKPStatus.TK3: 67_500_000,
    PTKPStatus.K0: 58_500_000,
    PTKPStatus.K1: 63_000_000,
    PTKPStatus.K2: 67_500_000,
    PTKPStatus.K3: 72_000_000,
}

STATUTORY_BRACKETS = (
    TaxBracket(60_000_000, Decimal("0.05")),
    TaxBracket(250_000_000, Decimal("0.15")),
    TaxBracket(500_000_000, Decimal("0.25")),
    TaxBracket(5_000_000_000, Decimal("0.30")),
    TaxBracket(None, Decimal("0.35")),
)


def build_rule_table(**overrides):
    """
    Small rule table: 1% health and 2% old-age savings from the employee, both
    tax-deductible, every other program at 0%, no biaya jabatan and no rounding
    of taxable income.
    """
    values = dict(
        effective_from=date(2024, 1, 1),
        name="test",
        contributions=(
            ContributionDefinition(ContributionType.KESEHATAN, Decimal("0.01"), Decimal("0"), tax_deductible=True),
            ContributionDefinition(ContributionType.JHT, Decimal("0.02"), Decimal("0"), tax_deductible=True),
            ContributionDefinition(ContributionType.JP, Decimal("0"), Decimal("0")),
            ContributionDefinition(ContributionType.JKK, Decimal("0"), Decimal("0")),
            ContributionDefinition(ContributionType.JKM, Decimal("0"), Decimal("0")),
        ),
        ptkp=STATUTORY_PTKP,
        tax_brackets=STATUTORY_BRACKETS,
        occupational_deduction_rate=Decimal("0"),
        occupational_deduction_annual_cap=None,
        taxable_income_rounding=1,
    )
    values.update(overrides)
    return RuleTable(**values)


@pytest.fixture(scope="session")
def rule_tables():
    return load_rule_tables()


@pytest.fixture
def rule_table_2024(rule_tables):
    return rule_tables.for_date(date(2024, 1, 1))


@pytest.fixture
def simple_rule_table():
    return build_rule_table()


@pytest.fixture
def make_record():
    def _make(employee_id="EMP-001", base_salary=10_000_000, ptkp_status="TK/0", **kwargs):
        return CompensationRecord(
            employee_id=employee_id,
            base_salary=base_salary,
            ptkp_status=ptkp_status,
            **kwargs,
        )

    return _make
