# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Error taxonomy for the payroll engine.

- ConfigurationError: malformed rule table or engine settings. Fatal for a run.
- InputValidationError: a compensation record that cannot be processed.
  Scoped to one employee.
- InvariantViolationError: a computation that broke a payroll invariant
  (negative net salary, tax larger than taxable income). Scoped to one
  employee, never expected in normal operation.
"""

from typing import Optional

__all__ = [
    "PayrollEngineError",
    "ConfigurationError",
    "InputValidationError",
    "InvariantViolationError",
]


class PayrollEngineError(Exception):
    """Base class for all errors raised by the payroll engine."""

    def __init__(self, message: str, *, employee_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.employee_id = employee_id

    def __str__(self) -> str:
        if self.employee_id:
            return f"[{self.employee_id}] {self.message}"
        return self.message


class ConfigurationError(PayrollEngineError):
    pass


class InputValidationError(PayrollEngineError):
    pass


class InvariantViolationError(PayrollEngineError):
    pass
