# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Annual taxable income (PKP) for the progressive PPh 21 calculation.

    annual gross   = monthly taxable gross x annualization months
    annual net     = annual gross - biaya jabatan - deductible BPJS
    deductible BPJS is limited to contribution_deduction_cap_rate x monthly
    taxable gross when the rule table sets one
    PKP            = annual net - PTKP, floored at zero and rounded down
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from payroll_engine.config.rule_table import PTKPStatus, RuleTable
from payroll_engine.config.settings import AnnualizationPolicy
from payroll_engine.constants import MONTHS_PER_YEAR
from payroll_engine.exceptions import InputValidationError
from payroll_engine.log_utils import get_logger
from payroll_engine.utils import floor_to_unit, round_half_up

__all__ = [
    "TaxableIncome",
    "annualization_months",
    "cap_contribution_deduction",
    "calculate_occupational_deduction",
    "compute_taxable_income",
]

logger = get_logger(__name__)


@dataclass(frozen=True)
class TaxableIncome:
    monthly_taxable_gross: int
    annualization_months: int
    annual_gross: int
    annual_occupational_deduction: int
    annual_contribution_deduction: int
    annual_net: int
    ptkp_status: PTKPStatus
    ptkp: int
    taxable_income: int

    @property
    def annual_allowed_deductions(self) -> int:
        return self.annual_occupational_deduction + self.annual_contribution_deduction


def annualization_months(
    policy: Union[AnnualizationPolicy, str] = AnnualizationPolicy.CALENDAR,
    employment_start_month: int = 1,
) -> int:
    """Number of months the monthly income is projected over."""
    if not 1 <= employment_start_month <= MONTHS_PER_YEAR:
        raise InputValidationError(f"employment_start_month must be 1-12 (got {employment_start_month})")

    if AnnualizationPolicy(policy) == AnnualizationPolicy.PRORATED:
        return MONTHS_PER_YEAR - employment_start_month + 1
    return MONTHS_PER_YEAR


def calculate_occupational_deduction(annual_gross: int, rule_table: RuleTable, months: int = MONTHS_PER_YEAR) -> int:
    """
    Biaya jabatan: a percentage of gross income, capped per year.

    The annual cap is scaled to the number of months annualized.
    """
    rate = rule_table.occupational_deduction_rate
    if not rate or annual_gross <= 0:
        return 0

    deduction = round_half_up(Decimal(annual_gross) * rate)
    cap = rule_table.occupational_deduction_annual_cap
    if cap is not None:
        deduction = min(deduction, round_half_up(Decimal(cap * months) / MONTHS_PER_YEAR))
    return deduction


def cap_contribution_deduction(
    deductible_monthly_contributions: int, monthly_taxable_gross: int, rule_table: RuleTable
) -> int:
    """Monthly employee BPJS allowed as a deduction under the table's cap rate, if any."""
    cap_rate = rule_table.contribution_deduction_cap_rate
    if cap_rate is None:
        return deductible_monthly_contributions
    return min(deductible_monthly_contributions, round_half_up(Decimal(monthly_taxable_gross) * cap_rate))


def compute_taxable_income(
    monthly_taxable_gross: int,
    deductible_monthly_contributions: int,
    ptkp_status: Union[PTKPStatus, str],
    rule_table: RuleTable,
    annualization_months: int = MONTHS_PER_YEAR,
) -> TaxableIncome:
    """
    Compute annual taxable income.

    Args:
        monthly_taxable_gross: Taxable gross income for the month
        deductible_monthly_contributions: Employee BPJS contributions flagged tax-deductible
        ptkp_status: PTKP status code, e.g. "TK/0"
        rule_table: Rule table in force for the period
        annualization_months: Months the monthly figures are projected over

    Returns:
        TaxableIncome

    Raises:
        InputValidationError: unknown PTKP status or negative amounts
    """
    if monthly_taxable_gross < 0:
        raise InputValidationError(f"Taxable gross must not be negative (got {monthly_taxable_gross})")
    if deductible_monthly_contributions < 0:
        raise InputValidationError(
            f"Deductible contributions must not be negative (got {deductible_monthly_contributions})"
        )
    if not 1 <= annualization_months <= MONTHS_PER_YEAR:
        raise InputValidationError(f"annualization_months must be 1-12 (got {annualization_months})")

    status = PTKPStatus.parse(ptkp_status)
    ptkp = rule_table.ptkp_amount(status)

    annual_gross = monthly_taxable_gross * annualization_months
    occupational = calculate_occupational_deduction(annual_gross, rule_table, annualization_months)
    monthly_deduction = cap_contribution_deduction(deductible_monthly_contributions, monthly_taxable_gross, rule_table)
    contribution_deduction = monthly_deduction * annualization_months
    annual_net = annual_gross - occupational - contribution_deduction

    taxable = floor_to_unit(max(0, annual_net - ptkp), rule_table.taxable_income_rounding)

    logger.debug(
        f"PKP: gross={annual_gross}, biaya_jabatan={occupational}, bpjs={contribution_deduction}, "
        f"net={annual_net}, ptkp[{status.value}]={ptkp}, pkp={taxable}"
    )

    return TaxableIncome(
        monthly_taxable_gross=monthly_taxable_gross,
        annualization_months=annualization_months,
        annual_gross=annual_gross,
        annual_occupational_deduction=occupational,
        annual_contribution_deduction=contribution_deduction,
        annual_net=annual_net,
        ptkp_status=status,
        ptkp=ptkp,
        taxable_income=taxable,
    )
