# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
BPJS calculator module.

Computes the employee and employer portions of every BPJS program for one
month. Each portion is rounded half-up to whole Rupiah on its own; portions
are never derived from one another.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Tuple

from payroll_engine.calculator.contribution_base import resolve_contribution_base
from payroll_engine.config.rule_table import (
    ContributionDefinition,
    ContributionType,
    RuleTable,
)
from payroll_engine.constants import DEFAULT_JKK_RISK_LEVEL
from payroll_engine.exceptions import InputValidationError
from payroll_engine.log_utils import get_logger
from payroll_engine.utils import round_half_up, to_decimal

__all__ = [
    "ContributionResult",
    "ContributionSummary",
    "calculate_bpjs",
    "calculate_contribution",
    "calculate_contributions",
    "summarize_contributions",
    "prorate_contributions",
]

logger = get_logger(__name__)


@dataclass(frozen=True)
class ContributionResult:
    type: ContributionType
    base: int
    employee_rate: Decimal
    employer_rate: Decimal
    employee_amount: int
    employer_amount: int
    tax_deductible: bool = False

    @property
    def label(self) -> str:
        return self.type.label

    @property
    def total(self) -> int:
        return self.employee_amount + self.employer_amount


@dataclass(frozen=True)
class ContributionSummary:
    total_employee: int
    total_employer: int
    deductible_employee: int

    @property
    def grand_total(self) -> int:
        return self.total_employee + self.total_employer


def calculate_bpjs(base_salary: int, rate: Decimal) -> int:
    """
    Calculate one BPJS amount.

    Args:
        base_salary: Contribution base, already floored and capped
        rate: The BPJS rate as a fraction (e.g. Decimal("0.01") for 1%)

    Returns:
        int: The calculated BPJS amount rounded half-up (IDR has no cents)
    """
    return round_half_up(to_decimal(base_salary) * to_decimal(rate))


def calculate_contribution(
    raw_salary: int,
    definition: ContributionDefinition,
    jkk_risk_rate: Optional[Decimal] = None,
) -> ContributionResult:
    """
    Calculate one program's contribution.

    Args:
        raw_salary: Monthly contribution base salary before floor and cap
        definition: The program's rates and limits
        jkk_risk_rate: Employer rate overriding the definition for JKK

    Returns:
        ContributionResult
    """
    base = resolve_contribution_base(raw_salary, definition)

    employer_rate = definition.employer_rate
    if definition.type == ContributionType.JKK and jkk_risk_rate is not None:
        employer_rate = jkk_risk_rate

    return ContributionResult(
        type=definition.type,
        base=base,
        employee_rate=definition.employee_rate,
        employer_rate=employer_rate,
        employee_amount=calculate_bpjs(base, definition.employee_rate),
        employer_amount=calculate_bpjs(base, employer_rate),
        tax_deductible=definition.tax_deductible,
    )


def calculate_contributions(
    raw_salary: int,
    rule_table: RuleTable,
    jkk_risk_level: int = DEFAULT_JKK_RISK_LEVEL,
) -> Tuple[ContributionResult, ...]:
    """
    Calculate every program defined by the rule table, in table order.

    Args:
        raw_salary: Monthly contribution base salary
        rule_table: Rule table in force for the period
        jkk_risk_level: JKK risk class of the employee (1-5)

    Returns:
        Tuple of ContributionResult
    """
    jkk_rate = rule_table.jkk_rate_for(jkk_risk_level)
    results = tuple(
        calculate_contribution(raw_salary, definition, jkk_rate) for definition in rule_table.contributions
    )

    logger.debug(
        f"BPJS on {raw_salary}: "
        + ", ".join(f"{r.type.value}={r.employee_amount}/{r.employer_amount}" for r in results)
    )
    return results


def summarize_contributions(results: Iterable[ContributionResult]) -> ContributionSummary:
    """Total employee, employer and tax-deductible employee amounts."""
    total_employee = 0
    total_employer = 0
    deductible_employee = 0
    for result in results:
        total_employee += result.employee_amount
        total_employer += result.employer_amount
        if result.tax_deductible:
            deductible_employee += result.employee_amount

    return ContributionSummary(
        total_employee=total_employee,
        total_employer=total_employer,
        deductible_employee=deductible_employee,
    )


def prorate_contributions(
    results: Sequence[ContributionResult], worked_days: int, total_days: int
) -> Tuple[ContributionResult, ...]:
    """
    Scale full-month contributions to a partial month.

    Each portion becomes round_half_up(amount x worked_days / total_days).
    """
    if total_days <= 0:
        raise InputValidationError(f"total_days must be positive (got {total_days})")
    if worked_days < 0 or worked_days > total_days:
        raise InputValidationError(f"worked_days must be between 0 and {total_days} (got {worked_days})")

    def scale(amount: int) -> int:
        return round_half_up(Decimal(amount * worked_days) / Decimal(total_days))

    return tuple(
        replace(
            result,
            employee_amount=scale(result.employee_amount),
            employer_amount=scale(result.employer_amount),
        )
        for result in results
    )
