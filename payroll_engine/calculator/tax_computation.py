# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""Audit record of one employee's PPh 21 calculation for a month."""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from payroll_engine.calculator.progressive_tax import BracketSlice, ProgressiveTax
from payroll_engine.calculator.taxable_income import TaxableIncome
from payroll_engine.calculator.withholding import Withholding
from payroll_engine.config.rule_table import PTKPStatus
from payroll_engine.config.settings import WithholdingPolicy

__all__ = ["TaxComputation"]


@dataclass(frozen=True)
class TaxComputation:
    monthly_taxable_gross: int
    annualization_months: int
    annual_gross: int
    annual_occupational_deduction: int
    annual_contribution_deduction: int
    annual_allowed_deductions: int
    annual_net: int
    ptkp_status: PTKPStatus
    ptkp: int
    taxable_income: int
    annual_tax: int
    bracket_slices: Tuple[BracketSlice, ...]
    withholding_policy: WithholdingPolicy
    cumulative_tax_due: int
    ytd_tax_withheld: int
    monthly_withholding: int
    over_withheld: int

    @classmethod
    def from_parts(
        cls, taxable: TaxableIncome, progressive: ProgressiveTax, withholding: Withholding
    ) -> "TaxComputation":
        return cls(
            monthly_taxable_gross=taxable.monthly_taxable_gross,
            annualization_months=taxable.annualization_months,
            annual_gross=taxable.annual_gross,
            annual_occupational_deduction=taxable.annual_occupational_deduction,
            annual_contribution_deduction=taxable.annual_contribution_deduction,
            annual_allowed_deductions=taxable.annual_allowed_deductions,
            annual_net=taxable.annual_net,
            ptkp_status=taxable.ptkp_status,
            ptkp=taxable.ptkp,
            taxable_income=taxable.taxable_income,
            annual_tax=progressive.annual_tax,
            bracket_slices=progressive.slices,
            withholding_policy=withholding.policy,
            cumulative_tax_due=withholding.cumulative_tax_due,
            ytd_tax_withheld=withholding.ytd_tax_withheld,
            monthly_withholding=withholding.amount,
            over_withheld=withholding.over_withheld,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "monthly_taxable_gross": self.monthly_taxable_gross,
            "annualization_months": self.annualization_months,
            "annual_gross": self.annual_gross,
            "annual_occupational_deduction": self.annual_occupational_deduction,
            "annual_contribution_deduction": self.annual_contribution_deduction,
            "annual_allowed_deductions": self.annual_allowed_deductions,
            "annual_net": self.annual_net,
            "ptkp_status": self.ptkp_status.value,
            "ptkp": self.ptkp,
            "taxable_income": self.taxable_income,
            "annual_tax": self.annual_tax,
            "bracket_slices": [
                {
                    "lower_bound": s.lower_bound,
                    "upper_bound": s.upper_bound,
                    "rate": str(s.rate),
                    "amount": s.amount,
                    "tax": str(s.tax),
                }
                for s in self.bracket_slices
            ],
            "withholding_policy": self.withholding_policy.value,
            "cumulative_tax_due": self.cumulative_tax_due,
            "ytd_tax_withheld": self.ytd_tax_withheld,
            "monthly_withholding": self.monthly_withholding,
            "over_withheld": self.over_withheld,
        }
