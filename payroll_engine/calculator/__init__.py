from .bpjs_calculator import (
    ContributionResult,
    ContributionSummary,
    calculate_contribution,
    calculate_contributions,
    prorate_contributions,
    summarize_contributions,
)
from .contribution_base import resolve_contribution_base
from .earnings import calculate_overtime_pay, prorate_base_salary
from .progressive_tax import ProgressiveTax, calculate_bonus_tax, calculate_progressive_tax, calculate_severance_tax
from .tax_computation import TaxComputation
from .taxable_income import TaxableIncome, compute_taxable_income
from .withholding import Withholding, allocate_monthly_withholding

__all__ = [
    "ContributionResult",
    "ContributionSummary",
    "ProgressiveTax",
    "TaxComputation",
    "TaxableIncome",
    "Withholding",
    "allocate_monthly_withholding",
    "calculate_bonus_tax",
    "calculate_contribution",
    "calculate_contributions",
    "calculate_overtime_pay",
    "calculate_progressive_tax",
    "calculate_severance_tax",
    "compute_taxable_income",
    "prorate_base_salary",
    "prorate_contributions",
    "resolve_contribution_base",
    "summarize_contributions",
]
