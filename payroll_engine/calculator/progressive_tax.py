# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Progressive PPh 21 (Pasal 17) over bracket tables.

Each bracket taxes only the slice (lapisan) of income that falls inside it.
Slice taxes are summed exactly and the annual total is rounded half-up once.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from payroll_engine.calculator.taxable_income import TaxableIncome, calculate_occupational_deduction
from payroll_engine.config.rule_table import RuleTable, TaxBracket
from payroll_engine.exceptions import ConfigurationError, InputValidationError
from payroll_engine.log_utils import get_logger
from payroll_engine.utils import floor_to_unit, round_half_up

__all__ = [
    "BracketSlice",
    "ProgressiveTax",
    "BonusTax",
    "calculate_progressive_tax",
    "calculate_severance_tax",
    "calculate_bonus_tax",
]

logger = get_logger(__name__)


@dataclass(frozen=True)
class BracketSlice:
    lower_bound: int
    upper_bound: Optional[int]
    rate: Decimal
    amount: int
    tax: Decimal


@dataclass(frozen=True)
class ProgressiveTax:
    taxable_income: int
    annual_tax: int
    slices: Tuple[BracketSlice, ...]

    @property
    def effective_rate(self) -> Decimal:
        if not self.taxable_income:
            return Decimal("0")
        return Decimal(self.annual_tax) / Decimal(self.taxable_income)


@dataclass(frozen=True)
class BonusTax:
    bonus_amount: int
    bonus_tax: int
    taxable_income_with_bonus: int

    @property
    def net_bonus(self) -> int:
        return self.bonus_amount - self.bonus_tax


def calculate_progressive_tax(taxable_income: int, brackets: Sequence[TaxBracket]) -> ProgressiveTax:
    """
    Apply progressive brackets to an annual taxable income.

    Args:
        taxable_income: Annual taxable income (PKP), non-negative
        brackets: Ascending brackets, the last one unbounded

    Returns:
        ProgressiveTax with one slice per bracket the income reaches
    """
    if taxable_income < 0:
        raise InputValidationError(f"Taxable income must not be negative (got {taxable_income})")
    if not brackets:
        raise ConfigurationError("Progressive tax requires at least one bracket")

    slices = []
    total = Decimal("0")
    previous = 0
    for bracket in brackets:
        if taxable_income <= previous:
            break

        top = taxable_income if bracket.upper_bound is None else min(taxable_income, bracket.upper_bound)
        amount = max(0, top - previous)
        tax = amount * bracket.rate
        total += tax
        slices.append(
            BracketSlice(
                lower_bound=previous,
                upper_bound=bracket.upper_bound,
                rate=bracket.rate,
                amount=amount,
                tax=tax,
            )
        )

        if bracket.upper_bound is None:
            break
        previous = bracket.upper_bound

    return ProgressiveTax(
        taxable_income=taxable_income,
        annual_tax=round_half_up(total),
        slices=tuple(slices),
    )


def calculate_severance_tax(severance_amount: int, rule_table: RuleTable) -> ProgressiveTax:
    """Tax on severance pay (pesangon) using the separate severance brackets."""
    if not rule_table.severance_brackets:
        raise ConfigurationError(
            f"Rule table effective {rule_table.effective_from} has no severance brackets"
        )
    return calculate_progressive_tax(severance_amount, rule_table.severance_brackets)


def calculate_bonus_tax(taxable: TaxableIncome, bonus_amount: int, rule_table: RuleTable) -> BonusTax:
    """
    Tax on a one-off bonus.

    The bonus is added to the annual gross of the regular projection; biaya
    jabatan is recomputed on the new gross. The bonus tax is the increase of
    the annual tax, never negative.

    Args:
        taxable: Regular annual taxable income
        bonus_amount: Bonus paid this year
        rule_table: Rule table in force for the period

    Returns:
        BonusTax
    """
    if bonus_amount < 0:
        raise InputValidationError(f"Bonus amount must not be negative (got {bonus_amount})")

    regular_tax = calculate_progressive_tax(taxable.taxable_income, rule_table.tax_brackets).annual_tax

    gross_with_bonus = taxable.annual_gross + bonus_amount
    occupational = calculate_occupational_deduction(gross_with_bonus, rule_table, taxable.annualization_months)
    net_with_bonus = gross_with_bonus - occupational - taxable.annual_contribution_deduction
    taxable_with_bonus = floor_to_unit(max(0, net_with_bonus - taxable.ptkp), rule_table.taxable_income_rounding)

    tax_with_bonus = calculate_progressive_tax(taxable_with_bonus, rule_table.tax_brackets).annual_tax
    bonus_tax = max(0, tax_with_bonus - regular_tax)

    logger.debug(f"Bonus {bonus_amount}: PKP {taxable.taxable_income} -> {taxable_with_bonus}, tax {bonus_tax}")

    return BonusTax(
        bonus_amount=bonus_amount,
        bonus_tax=bonus_tax,
        taxable_income_with_bonus=taxable_with_bonus,
    )
