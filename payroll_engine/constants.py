# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Constants for the payroll engine.
This file centralizes magic numbers used throughout the codebase.
Statutory rates and caps are not kept here; they live in the versioned
rule tables (config/rule_tables.json).
"""

from decimal import Decimal

# Calendar constants
MONTHS_PER_YEAR = 12  # Months in a fiscal year
DECEMBER_MONTH = 12  # Final month of the fiscal year
MIN_PERIOD_YEAR = 2000
MAX_PERIOD_YEAR = 2100

# JKK (work accident) risk classes
JKK_RISK_LEVELS = (1, 2, 3, 4, 5)
DEFAULT_JKK_RISK_LEVEL = 1  # Very low risk (office work)

# Overtime (Kepmenakertrans 102/2004)
OVERTIME_HOURLY_DIVISOR = 173  # Monthly salary divisor giving the hourly rate
OVERTIME_FIRST_HOUR_MULTIPLIER = Decimal("1.5")
OVERTIME_NEXT_HOURS_MULTIPLIER = Decimal("2")

# Payslip checks
NET_SALARY_VARIANCE_THRESHOLD = Decimal("0.30")  # Deviation from the historical average net salary
MIN_PAYROLLS_FOR_VARIANCE_CHECK = 3
FULL_ATTENDANCE_TOLERANCE_DAYS = 2  # Absences still counted as a full month

# Rounding
DEFAULT_TAXABLE_INCOME_ROUNDING = 1000  # PKP is rounded down to full thousands

# Engine defaults
DEFAULT_MAX_WORKERS = 4  # Worker threads used for a payroll run
DEFAULT_LOG_LEVEL = "INFO"
RULE_TABLES_FILENAME = "rule_tables.json"

# Environment variables read by EngineSettings.from_env()
ENV_RULES_PATH = "PAYROLL_RULES_PATH"
ENV_ANNUALIZATION_POLICY = "PAYROLL_ANNUALIZATION_POLICY"
ENV_WITHHOLDING_POLICY = "PAYROLL_WITHHOLDING_POLICY"
ENV_MAX_WORKERS = "PAYROLL_MAX_WORKERS"
ENV_LOG_LEVEL = "PAYROLL_LOG_LEVEL"
ENV_MINIMUM_WAGE = "PAYROLL_MINIMUM_WAGE"

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

MONTH_NAMES_ID = (
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
)
