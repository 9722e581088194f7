# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Variable monthly earnings: attendance proration and overtime.

    paid base salary = base salary x present days / working days
    hourly rate      = base salary / 173
    overtime pay     = first hour x 1.5 x hourly rate + later hours x 2 x hourly rate
"""

from decimal import Decimal
from typing import Any, Optional

from payroll_engine.constants import (
    OVERTIME_FIRST_HOUR_MULTIPLIER,
    OVERTIME_HOURLY_DIVISOR,
    OVERTIME_NEXT_HOURS_MULTIPLIER,
)
from payroll_engine.exceptions import InputValidationError
from payroll_engine.utils import round_half_up, to_decimal

__all__ = ["calculate_overtime_pay", "prorate_base_salary"]

ONE_HOUR = Decimal("1")


def prorate_base_salary(
    base_salary: int, present_days: Optional[int] = None, working_days: Optional[int] = None
) -> int:
    """
    Base salary actually earned for the month.

    Without attendance data the full base salary is paid. Present days above
    the working days are counted as full attendance.
    """
    if base_salary < 0:
        raise InputValidationError(f"Base salary must not be negative (got {base_salary})")
    if present_days is None and working_days is None:
        return base_salary
    if present_days is None or working_days is None:
        raise InputValidationError("present_days and working_days must be given together")
    if working_days < 1:
        raise InputValidationError(f"working_days must be at least 1 (got {working_days})")
    if present_days < 0:
        raise InputValidationError(f"present_days must not be negative (got {present_days})")

    if present_days >= working_days:
        return base_salary
    return round_half_up(Decimal(base_salary) * present_days / working_days)


def calculate_overtime_pay(base_salary: int, overtime_hours: Any) -> int:
    """
    Overtime pay for the month's overtime hours (Kepmenakertrans 102/2004).

    Args:
        base_salary: Monthly base salary the hourly rate derives from
        overtime_hours: Overtime hours worked in the month, may be fractional

    Returns:
        int: Overtime pay rounded to whole Rupiah
    """
    hours = to_decimal(overtime_hours)
    if not hours.is_finite() or hours < 0:
        raise InputValidationError(f"Overtime hours must be a non-negative number (got {overtime_hours!r})")
    if not hours or not base_salary:
        return 0

    hourly_rate = Decimal(base_salary) / OVERTIME_HOURLY_DIVISOR
    first_hour = min(hours, ONE_HOUR)
    later_hours = hours - first_hour
    pay = hourly_rate * (first_hour * OVERTIME_FIRST_HOUR_MULTIPLIER + later_hours * OVERTIME_NEXT_HOURS_MULTIPLIER)
    return round_half_up(pay)
