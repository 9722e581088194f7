# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Input models: compensation records and payroll periods.

Records are pydantic models so that mappings coming from an HR export can be
validated field by field. Validation happens per employee inside a payroll
run; a bad record fails that employee only.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from payroll_engine.calculator.earnings import calculate_overtime_pay, prorate_base_salary
from payroll_engine.constants import (
    DEFAULT_JKK_RISK_LEVEL,
    DECEMBER_MONTH,
    FULL_ATTENDANCE_TOLERANCE_DAYS,
    MAX_PERIOD_YEAR,
    MIN_PERIOD_YEAR,
    MONTH_NAMES,
    MONTH_NAMES_ID,
)
from payroll_engine.exceptions import InputValidationError

__all__ = ["Allowance", "CompensationRecord", "PayrollPeriod"]

PERIOD_ID_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "record"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


class Allowance(BaseModel):
    """A named monthly allowance (tunjangan)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    amount: int = Field(ge=0)
    taxable: bool = True
    # fixed allowances are part of the BPJS contribution base
    contribution_base: bool = False


class CompensationRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    employee_id: str = Field(min_length=1)
    employee_name: Optional[str] = None
    base_salary: int = Field(ge=0)
    allowances: Tuple[Allowance, ...] = ()
    # raw code, parsed per employee against PTKPStatus
    ptkp_status: str
    ytd_tax_withheld: int = Field(default=0, ge=0)
    employment_start_month: int = Field(default=1, ge=1, le=12)
    jkk_risk_level: int = Field(default=DEFAULT_JKK_RISK_LEVEL, ge=1, le=5)
    overtime_hours: Decimal = Field(default=Decimal("0"), ge=0)
    # attendance; both or neither
    present_days: Optional[int] = Field(default=None, ge=0)
    working_days: Optional[int] = Field(default=None, ge=1)
    # net salary history used by the payslip checks
    average_net_salary: Optional[int] = Field(default=None, ge=0)
    payrolls_processed: int = Field(default=0, ge=0)

    @field_validator("allowances")
    @classmethod
    def _unique_allowance_names(cls, value):
        names = [a.name for a in value]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate allowance names: {', '.join(duplicates)}")
        return value

    @model_validator(mode="after")
    def _attendance_pair(self):
        if (self.present_days is None) != (self.working_days is None):
            raise ValueError("present_days and working_days must be given together")
        return self

    @classmethod
    def parse(cls, data: Union["CompensationRecord", Mapping[str, Any]]) -> "CompensationRecord":
        """
        Validate a mapping into a CompensationRecord.

        Raises:
            InputValidationError: carrying the employee_id when one is present
        """
        if isinstance(data, cls):
            return data

        employee_id = None
        if isinstance(data, Mapping):
            employee_id = data.get("employee_id")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InputValidationError(
                f"Invalid compensation record: {_format_validation_error(e)}",
                employee_id=str(employee_id) if employee_id else None,
            )

    @property
    def total_allowances(self) -> int:
        return sum(a.amount for a in self.allowances)

    @property
    def taxable_allowances(self) -> int:
        return sum(a.amount for a in self.allowances if a.taxable)

    @property
    def paid_base_salary(self) -> int:
        """Base salary prorated by attendance when attendance is given."""
        return prorate_base_salary(self.base_salary, self.present_days, self.working_days)

    @property
    def overtime_pay(self) -> int:
        return calculate_overtime_pay(self.base_salary, self.overtime_hours)

    @property
    def gross_salary(self) -> int:
        return self.paid_base_salary + self.overtime_pay + self.total_allowances

    @property
    def taxable_gross(self) -> int:
        return self.paid_base_salary + self.overtime_pay + self.taxable_allowances

    @property
    def has_full_attendance(self) -> bool:
        if self.present_days is None:
            return True
        return self.present_days >= self.working_days - FULL_ATTENDANCE_TOLERANCE_DAYS

    @property
    def contribution_base_salary(self) -> int:
        """Base salary plus fixed allowances, before caps and floors."""
        return self.base_salary + sum(a.amount for a in self.allowances if a.contribution_base)


class PayrollPeriod(BaseModel):
    """One calendar month; the fiscal year is the calendar year."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(ge=MIN_PERIOD_YEAR, le=MAX_PERIOD_YEAR)
    month: int = Field(ge=1, le=12)

    @classmethod
    def from_id(cls, period_id: Union[str, "PayrollPeriod"]) -> "PayrollPeriod":
        """Parse a ``YYYY-MM`` period id."""
        if isinstance(period_id, cls):
            return period_id

        match = PERIOD_ID_PATTERN.match(str(period_id).strip())
        if not match:
            raise InputValidationError(f"Payroll period must look like YYYY-MM (got {period_id!r})")

        try:
            return cls(year=int(match.group(1)), month=int(match.group(2)))
        except ValidationError as e:
            raise InputValidationError(f"Invalid payroll period {period_id!r}: {_format_validation_error(e)}")

    @property
    def period_id(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def fiscal_year(self) -> int:
        return self.year

    @property
    def effective_date(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def is_final_month(self) -> bool:
        return self.month == DECEMBER_MONTH

    @property
    def name(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    @property
    def name_id(self) -> str:
        return f"{MONTH_NAMES_ID[self.month - 1]} {self.year}"

    def __str__(self) -> str:
        return self.period_id
