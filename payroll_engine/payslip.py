# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Payslip assembly.

    gross salary     = paid base salary + overtime + allowances
    total deductions = employee BPJS + PPh 21 for the month
    net salary       = gross salary - total deductions
    employer cost    = gross salary + employer BPJS
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, Optional, Sequence, Tuple

from payroll_engine.calculator.bpjs_calculator import ContributionResult, summarize_contributions
from payroll_engine.calculator.tax_computation import TaxComputation
from payroll_engine.exceptions import InvariantViolationError
from payroll_engine.log_utils import get_logger
from payroll_engine.models import Allowance, CompensationRecord, PayrollPeriod

__all__ = ["Payslip", "assemble_payslip"]

logger = get_logger(__name__)


@dataclass(frozen=True)
class Payslip:
    period_id: str
    employee_id: str
    version: int
    base_salary: int
    allowances: Tuple[Allowance, ...]
    gross_salary: int
    taxable_gross: int
    contributions: Tuple[ContributionResult, ...]
    total_employee_contributions: int
    total_employer_contributions: int
    monthly_tax: int
    total_deductions: int
    net_salary: int
    employer_cost: int
    tax_computation: TaxComputation
    rule_table_effective_from: date
    employee_name: Optional[str] = None
    superseded_version: Optional[int] = None
    overtime_pay: int = 0
    # non-fatal findings of the payslip checks
    warnings: Tuple[str, ...] = ()

    def supersede(self, new: "Payslip") -> "Payslip":
        """Return ``new`` numbered as the version that replaces this payslip."""
        if (new.employee_id, new.period_id) != (self.employee_id, self.period_id):
            raise ValueError(
                f"Payslip for {new.employee_id}/{new.period_id} cannot supersede "
                f"{self.employee_id}/{self.period_id}"
            )
        return replace(new, version=self.version + 1, superseded_version=self.version)

    def as_dict(self) -> Dict[str, Any]:
        """Plain representation for renderers and exporters."""
        return {
            "period_id": self.period_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "version": self.version,
            "superseded_version": self.superseded_version,
            "rule_table_effective_from": self.rule_table_effective_from.isoformat(),
            "base_salary": self.base_salary,
            "overtime_pay": self.overtime_pay,
            "allowances": [a.model_dump() for a in self.allowances],
            "gross_salary": self.gross_salary,
            "taxable_gross": self.taxable_gross,
            "contributions": [
                {
                    "type": c.type.value,
                    "label": c.label,
                    "base": c.base,
                    "employee_rate": str(c.employee_rate),
                    "employer_rate": str(c.employer_rate),
                    "employee_amount": c.employee_amount,
                    "employer_amount": c.employer_amount,
                    "tax_deductible": c.tax_deductible,
                }
                for c in self.contributions
            ],
            "total_employee_contributions": self.total_employee_contributions,
            "total_employer_contributions": self.total_employer_contributions,
            "monthly_tax": self.monthly_tax,
            "total_deductions": self.total_deductions,
            "net_salary": self.net_salary,
            "employer_cost": self.employer_cost,
            "tax_computation": self.tax_computation.as_dict(),
            "warnings": list(self.warnings),
        }


def assemble_payslip(
    record: CompensationRecord,
    period: PayrollPeriod,
    contributions: Sequence[ContributionResult],
    tax_computation: TaxComputation,
    rule_table_effective_from: date,
    version: int = 1,
) -> Payslip:
    """
    Combine contributions and tax into a payslip.

    Raises:
        InvariantViolationError: if the net salary would be negative
    """
    contributions = tuple(contributions)
    summary = summarize_contributions(contributions)
    gross = record.gross_salary
    monthly_tax = tax_computation.monthly_withholding
    total_deductions = summary.total_employee + monthly_tax
    net_salary = gross - total_deductions

    if net_salary < 0:
        message = (
            f"Net salary would be negative for {period.period_id}: gross {gross}, "
            f"BPJS {summary.total_employee}, PPh 21 {monthly_tax}"
        )
        logger.error(f"[{record.employee_id}] {message}")
        raise InvariantViolationError(message, employee_id=record.employee_id)

    payslip = Payslip(
        period_id=period.period_id,
        employee_id=record.employee_id,
        employee_name=record.employee_name,
        version=version,
        base_salary=record.paid_base_salary,
        overtime_pay=record.overtime_pay,
        allowances=record.allowances,
        gross_salary=gross,
        taxable_gross=record.taxable_gross,
        contributions=contributions,
        total_employee_contributions=summary.total_employee,
        total_employer_contributions=summary.total_employer,
        monthly_tax=monthly_tax,
        total_deductions=total_deductions,
        net_salary=net_salary,
        employer_cost=gross + summary.total_employer,
        tax_computation=tax_computation,
        rule_table_effective_from=rule_table_effective_from,
        superseded_version=version - 1 if version > 1 else None,
    )

    logger.debug(
        f"Payslip {record.employee_id}/{period.period_id} v{version}: "
        f"gross={gross}, deductions={total_deductions}, net={net_salary}"
    )
    return payslip
