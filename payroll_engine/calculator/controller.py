# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Per-employee payroll pipeline.

contribution base -> BPJS -> taxable income -> progressive tax -> monthly
withholding -> payslip -> payslip checks. The pipeline is pure: the same
record, period, rule table and settings always give the same payslip.
"""

from dataclasses import replace
from typing import Any, Mapping, Optional, Union

from payroll_engine.calculator.bpjs_calculator import calculate_contributions, summarize_contributions
from payroll_engine.calculator.progressive_tax import calculate_progressive_tax
from payroll_engine.calculator.tax_computation import TaxComputation
from payroll_engine.calculator.taxable_income import annualization_months, compute_taxable_income
from payroll_engine.calculator.withholding import allocate_monthly_withholding
from payroll_engine.config.rule_table import RuleTable
from payroll_engine.config.settings import EngineSettings
from payroll_engine.exceptions import InputValidationError, InvariantViolationError, PayrollEngineError
from payroll_engine.log_utils import get_logger
from payroll_engine.models import CompensationRecord, PayrollPeriod
from payroll_engine.payslip import Payslip, assemble_payslip
from payroll_engine.payslip_checks import check_payslip

__all__ = ["PayrollCalculator"]

logger = get_logger(__name__)


class PayrollCalculator:
    """
    Calculates payslips for one period under one rule table.

    Instances hold no mutable state and may be shared between threads.
    """

    def __init__(self, rule_table: RuleTable, settings: Optional[EngineSettings] = None):
        self.rule_table = rule_table
        self.settings = settings or EngineSettings()

    def calculate(
        self,
        record: Union[CompensationRecord, Mapping[str, Any]],
        period: PayrollPeriod,
        version: int = 1,
    ) -> Payslip:
        """
        Calculate the payslip of one employee.

        Args:
            record: CompensationRecord or a mapping validated into one
            period: Payroll period being processed
            version: Payslip version to assign

        Returns:
            Payslip

        Raises:
            InputValidationError: the record cannot be processed
            InvariantViolationError: the result breaks a payroll invariant
        """
        record = CompensationRecord.parse(record)
        try:
            return self._calculate(record, period, version)
        except PayrollEngineError as e:
            if e.employee_id is None:
                e.employee_id = record.employee_id
            raise

    def _calculate(self, record: CompensationRecord, period: PayrollPeriod, version: int) -> Payslip:
        table = self.rule_table

        if period.month < record.employment_start_month:
            raise InputValidationError(
                f"Period {period.period_id} is before employment start month {record.employment_start_month}"
            )

        contributions = calculate_contributions(record.contribution_base_salary, table, record.jkk_risk_level)
        summary = summarize_contributions(contributions)

        months = annualization_months(self.settings.annualization_policy, record.employment_start_month)
        taxable = compute_taxable_income(
            record.taxable_gross,
            summary.deductible_employee,
            record.ptkp_status,
            table,
            months,
        )

        progressive = calculate_progressive_tax(taxable.taxable_income, table.tax_brackets)
        if progressive.annual_tax > taxable.taxable_income:
            raise InvariantViolationError(
                f"Annual tax {progressive.annual_tax} exceeds taxable income {taxable.taxable_income}"
            )

        withholding = allocate_monthly_withholding(
            progressive.annual_tax,
            record.ytd_tax_withheld,
            period.month,
            start_month=record.employment_start_month,
            exposure_months=months,
            policy=self.settings.withholding_policy,
        )
        if withholding.over_withheld:
            logger.warning(
                f"[{record.employee_id}] {period.period_id}: {withholding.over_withheld} withheld "
                f"beyond the tax due so far"
            )

        computation = TaxComputation.from_parts(taxable, progressive, withholding)
        payslip = assemble_payslip(
            record,
            period,
            contributions,
            computation,
            table.effective_from,
            version=version,
        )

        warnings = check_payslip(record, payslip, self.settings.minimum_wage)
        for warning in warnings:
            logger.warning(f"[{record.employee_id}] {period.period_id}: {warning}")
        return replace(payslip, warnings=warnings) if warnings else payslip
