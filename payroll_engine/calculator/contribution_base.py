# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""Contribution base resolution (salary clamped to the program's floor and cap)."""

from payroll_engine.config.rule_table import ContributionDefinition
from payroll_engine.exceptions import InputValidationError

__all__ = ["resolve_contribution_base"]


def resolve_contribution_base(raw_salary: int, definition: ContributionDefinition) -> int:
    """
    Clamp a monthly salary to the contribution base of one BPJS program.

    Args:
        raw_salary: Monthly salary before limits
        definition: Contribution definition carrying the optional floor and cap

    Returns:
        int: floor <= base <= cap; a missing floor is 0, a missing cap is unbounded
    """
    if raw_salary < 0:
        raise InputValidationError(f"Contribution base salary must not be negative (got {raw_salary})")

    base = raw_salary
    if definition.floor is not None and base < definition.floor:
        base = definition.floor
    if definition.cap is not None and base > definition.cap:
        base = definition.cap
    return base
