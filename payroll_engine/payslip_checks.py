# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Rule-based checks on a calculated payslip.

Checks never fail a payslip; their findings are attached to it as warnings
for a reviewer to look at before the run is paid out.
"""

from decimal import Decimal
from typing import List, Optional, Tuple

from payroll_engine.constants import MIN_PAYROLLS_FOR_VARIANCE_CHECK, NET_SALARY_VARIANCE_THRESHOLD
from payroll_engine.models import CompensationRecord
from payroll_engine.payslip import Payslip

__all__ = ["check_payslip"]


def _check_attendance(record: CompensationRecord) -> Optional[str]:
    if record.present_days is not None and record.present_days > record.working_days:
        return f"Present days ({record.present_days}) exceed working days ({record.working_days})"
    return None


def _check_net_salary_variance(record: CompensationRecord, payslip: Payslip) -> Optional[str]:
    average = record.average_net_salary
    if not average or record.payrolls_processed < MIN_PAYROLLS_FOR_VARIANCE_CHECK:
        return None

    variance = abs(Decimal(payslip.net_salary - average)) / average
    if variance > NET_SALARY_VARIANCE_THRESHOLD:
        return f"Net salary {payslip.net_salary} deviates {variance:.1%} from the historical average {average}"
    return None


def _check_minimum_wage(
    record: CompensationRecord, payslip: Payslip, minimum_wage: Optional[int]
) -> Optional[str]:
    # partial months are not checked
    if minimum_wage is None or not record.has_full_attendance:
        return None
    if payslip.net_salary < minimum_wage:
        return f"Net salary {payslip.net_salary} is below the minimum wage {minimum_wage} for a full month"
    return None


def check_payslip(
    record: CompensationRecord, payslip: Payslip, minimum_wage: Optional[int] = None
) -> Tuple[str, ...]:
    """
    Run the payslip checks.

    Args:
        record: Compensation record the payslip was calculated from
        payslip: Calculated payslip
        minimum_wage: Regional minimum wage; the check is skipped when None

    Returns:
        Tuple of warning messages, empty when nothing was flagged
    """
    findings: List[Optional[str]] = [
        _check_attendance(record),
        _check_net_salary_variance(record, payslip),
        _check_minimum_wage(record, payslip, minimum_wage),
    ]
    return tuple(f for f in findings if f)
