# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Monthly PPh 21 withholding.

The annual tax projection is turned into the amount to withhold this month.
Both policies make the monthly amounts of a stable salary add up to the
annual tax exactly; the last month of the fiscal year absorbs rounding.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from payroll_engine.config.settings import WithholdingPolicy
from payroll_engine.constants import DECEMBER_MONTH, MONTHS_PER_YEAR
from payroll_engine.exceptions import InputValidationError
from payroll_engine.log_utils import get_logger
from payroll_engine.utils import round_half_up

__all__ = ["Withholding", "allocate_monthly_withholding"]

logger = get_logger(__name__)


@dataclass(frozen=True)
class Withholding:
    policy: WithholdingPolicy
    annual_tax: int
    # tax that should have been withheld by the end of this month
    cumulative_tax_due: int
    ytd_tax_withheld: int
    amount: int
    # already withheld beyond what is due; reported, never refunded here
    over_withheld: int


def _check_month(value: int, name: str) -> None:
    if not 1 <= value <= MONTHS_PER_YEAR:
        raise InputValidationError(f"{name} must be 1-12 (got {value})")


def allocate_monthly_withholding(
    annual_tax: int,
    ytd_withheld: int,
    month: int,
    start_month: int = 1,
    exposure_months: int = MONTHS_PER_YEAR,
    policy: Union[WithholdingPolicy, str] = WithholdingPolicy.CUMULATIVE,
) -> Withholding:
    """
    Allocate the withholding for one month.

    Args:
        annual_tax: Projected annual tax
        ytd_withheld: Tax already withheld in earlier months of the fiscal year
        month: Month being processed (1-12)
        start_month: First month of employment in the fiscal year
        exposure_months: Months the annual tax was projected over
        policy: CUMULATIVE or FLAT

    Returns:
        Withholding
    """
    policy = WithholdingPolicy(policy)
    _check_month(month, "month")
    _check_month(start_month, "start_month")
    _check_month(exposure_months, "exposure_months")
    if month < start_month:
        raise InputValidationError(f"Month {month} is before the employment start month {start_month}")
    if annual_tax < 0:
        raise InputValidationError(f"Annual tax must not be negative (got {annual_tax})")
    if ytd_withheld < 0:
        raise InputValidationError(f"Year-to-date withholding must not be negative (got {ytd_withheld})")

    elapsed = month - start_month + 1
    worked = MONTHS_PER_YEAR - start_month + 1

    if policy == WithholdingPolicy.CUMULATIVE:
        if elapsed >= exposure_months:
            due = annual_tax
        else:
            due = round_half_up(Decimal(annual_tax * elapsed) / exposure_months)
        amount = max(0, due - ytd_withheld)
        over_withheld = max(0, ytd_withheld - due)
    else:
        if worked >= exposure_months:
            due_for_year = annual_tax
        else:
            due_for_year = round_half_up(Decimal(annual_tax * worked) / exposure_months)
        remaining = MONTHS_PER_YEAR - month + 1
        if month == DECEMBER_MONTH:
            amount = max(0, due_for_year - ytd_withheld)
        else:
            amount = max(0, round_half_up(Decimal(due_for_year - ytd_withheld) / remaining))
        due = ytd_withheld + amount
        over_withheld = max(0, ytd_withheld - due_for_year)

    logger.debug(
        f"Withholding [{policy.value}] month {month}: annual={annual_tax}, due={due}, "
        f"ytd={ytd_withheld}, amount={amount}, over={over_withheld}"
    )

    return Withholding(
        policy=policy,
        annual_tax=annual_tax,
        cumulative_tax_due=due,
        ytd_tax_withheld=ytd_withheld,
        amount=amount,
        over_withheld=over_withheld,
    )
