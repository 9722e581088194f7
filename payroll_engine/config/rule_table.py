# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Statutory rule tables.

A RuleTable holds the BPJS contribution definitions, the PTKP table and the
PPh 21 bracket tables in force from a given effective date. Tables are
validated when they are built and are immutable afterwards, so one instance
can be shared by every worker of a payroll run.

RuleTableRegistry keeps every known version and picks the one in force for a
period, which is what allows a historical period to be recalculated with the
rules of its time.
"""

import bisect
import json
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from payroll_engine.constants import (
    DEFAULT_TAXABLE_INCOME_ROUNDING,
    JKK_RISK_LEVELS,
    RULE_TABLES_FILENAME,
)
from payroll_engine.exceptions import ConfigurationError, InputValidationError
from payroll_engine.log_utils import get_logger
from payroll_engine.utils import to_decimal

__all__ = [
    "PTKPStatus",
    "ContributionType",
    "ContributionDefinition",
    "TaxBracket",
    "RuleTable",
    "RuleTableRegistry",
    "validate_rule_table",
    "validate_brackets",
    "rule_table_from_dict",
    "load_rule_tables",
    "default_rules_path",
]

logger = get_logger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")


class PTKPStatus(str, Enum):
    """Marital/dependent status codes used for PTKP (non-taxable income)."""

    TK0 = "TK/0"  # Single, no dependents
    TK1 = "TK/1"  # Single, 1 dependent
    TK2 = "TK/2"  # Single, 2 dependents
    TK3 = "TK/3"  # Single, 3 dependents
    K0 = "K/0"  # Married, no dependents
    K1 = "K/1"  # Married, 1 dependent
    K2 = "K/2"  # Married, 2 dependents
    K3 = "K/3"  # Married, 3 dependents

    @classmethod
    def parse(cls, code: Union[str, "PTKPStatus"]) -> "PTKPStatus":
        """
        Parse a status code. Accepts ``TK/0`` as well as the ``TK0`` spelling.

        Raises:
            InputValidationError: if the code is not a known status
        """
        if isinstance(code, cls):
            return code

        normalized = str(code or "").strip().upper().replace(" ", "")
        if normalized and "/" not in normalized and normalized[-1].isdigit():
            normalized = f"{normalized[:-1]}/{normalized[-1]}"

        try:
            return cls(normalized)
        except ValueError:
            raise InputValidationError(f"Unknown PTKP status code: {code!r}")


class ContributionType(str, Enum):
    """BPJS programs."""

    KESEHATAN = "kesehatan"  # health insurance
    JHT = "jht"  # Jaminan Hari Tua, old-age savings
    JP = "jp"  # Jaminan Pensiun, pension
    JKK = "jkk"  # Jaminan Kecelakaan Kerja, work accident
    JKM = "jkm"  # Jaminan Kematian, death benefit

    @property
    def label(self) -> str:
        return CONTRIBUTION_LABELS[self]


CONTRIBUTION_LABELS = {
    ContributionType.KESEHATAN: "BPJS Kesehatan",
    ContributionType.JHT: "BPJS JHT",
    ContributionType.JP: "BPJS JP",
    ContributionType.JKK: "BPJS JKK",
    ContributionType.JKM: "BPJS JKM",
}


@dataclass(frozen=True)
class ContributionDefinition:
    type: ContributionType
    employee_rate: Decimal
    employer_rate: Decimal
    cap: Optional[int] = None
    floor: Optional[int] = None
    tax_deductible: bool = False


@dataclass(frozen=True)
class TaxBracket:
    """One progressive bracket; upper_bound None means unbounded."""

    upper_bound: Optional[int]
    rate: Decimal


@dataclass(frozen=True)
class RuleTable:
    effective_from: date
    contributions: Tuple[ContributionDefinition, ...]
    ptkp: Mapping[PTKPStatus, int]
    tax_brackets: Tuple[TaxBracket, ...]
    severance_brackets: Tuple[TaxBracket, ...] = ()
    jkk_risk_rates: Mapping[int, Decimal] = field(default_factory=dict)
    occupational_deduction_rate: Decimal = ZERO
    occupational_deduction_annual_cap: Optional[int] = None
    taxable_income_rounding: int = 1
    # share of monthly taxable gross up to which employee BPJS is deductible; None is uncapped
    contribution_deduction_cap_rate: Optional[Decimal] = None
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "contributions", tuple(self.contributions))
        object.__setattr__(self, "tax_brackets", tuple(self.tax_brackets))
        object.__setattr__(self, "severance_brackets", tuple(self.severance_brackets))
        object.__setattr__(self, "ptkp", MappingProxyType(dict(self.ptkp)))
        object.__setattr__(self, "jkk_risk_rates", MappingProxyType(dict(self.jkk_risk_rates)))

        errors = validate_rule_table(self)
        if errors:
            message = f"Rule table effective {self.effective_from} is invalid: " + "; ".join(errors)
            logger.error(message)
            raise ConfigurationError(message)

    def contribution(self, contribution_type: ContributionType) -> ContributionDefinition:
        for definition in self.contributions:
            if definition.type == contribution_type:
                return definition
        raise ConfigurationError(f"Contribution {contribution_type.value} not defined")

    def ptkp_amount(self, status: Union[str, PTKPStatus]) -> int:
        """Annual PTKP for status. Unknown codes raise InputValidationError."""
        return self.ptkp[PTKPStatus.parse(status)]

    def jkk_rate_for(self, risk_level: int) -> Decimal:
        """Employer JKK rate for a risk class, falling back to the JKK definition."""
        if risk_level not in JKK_RISK_LEVELS:
            raise InputValidationError(f"JKK risk level must be 1-5 (got {risk_level!r})")
        if risk_level in self.jkk_risk_rates:
            return self.jkk_risk_rates[risk_level]
        return self.contribution(ContributionType.JKK).employer_rate

    @property
    def top_marginal_rate(self) -> Decimal:
        return self.tax_brackets[-1].rate if self.tax_brackets else ZERO

    @property
    def total_employee_rate(self) -> Decimal:
        return sum((c.employee_rate for c in self.contributions), ZERO)


def _is_rate(value: Any) -> bool:
    return isinstance(value, Decimal) and value.is_finite() and ZERO <= value <= ONE


def validate_brackets(brackets: Sequence[TaxBracket], label: str = "tax_brackets") -> List[str]:
    """Return a list of validation errors for an ordered bracket table."""
    errors: List[str] = []

    if not brackets:
        return [f"{label} must not be empty"]

    previous_bound = 0
    previous_rate: Optional[Decimal] = None
    for i, bracket in enumerate(brackets, 1):
        last = i == len(brackets)

        if not _is_rate(bracket.rate):
            errors.append(f"{label} row {i} rate {bracket.rate} is not within [0, 1]")
        elif previous_rate is not None and bracket.rate <= previous_rate:
            errors.append(f"{label} row {i} rate {bracket.rate} is not above the previous rate")

        if bracket.upper_bound is None:
            if not last:
                errors.append(f"{label} row {i} is unbounded but is not the last bracket")
        else:
            if last:
                errors.append(f"{label} last bracket must be unbounded")
            if bracket.upper_bound <= previous_bound:
                errors.append(
                    f"{label} row {i} upper bound {bracket.upper_bound} is not above {previous_bound}"
                )
            previous_bound = bracket.upper_bound

        if _is_rate(bracket.rate):
            previous_rate = bracket.rate

    return errors


def validate_rule_table(table: RuleTable) -> List[str]:
    """Return a list of validation errors."""
    errors: List[str] = []

    seen = set()
    for definition in table.contributions:
        name = definition.type.value
        if definition.type in seen:
            errors.append(f"contribution {name} defined more than once")
        seen.add(definition.type)

        for attr in ("employee_rate", "employer_rate"):
            value = getattr(definition, attr)
            if not _is_rate(value):
                errors.append(f"contribution {name} {attr} {value} is not within [0, 1]")

        for attr in ("cap", "floor"):
            value = getattr(definition, attr)
            if value is not None and value < 0:
                errors.append(f"contribution {name} {attr} must not be negative")

        if definition.cap is not None and definition.floor is not None and definition.cap < definition.floor:
            errors.append(f"contribution {name} cap {definition.cap} is below floor {definition.floor}")

    for missing in [t for t in ContributionType if t not in seen]:
        errors.append(f"contribution {missing.value} is missing")

    for status in PTKPStatus:
        if status not in table.ptkp:
            errors.append(f"ptkp entry for {status.value} is missing")
        elif table.ptkp[status] < 0:
            errors.append(f"ptkp amount for {status.value} must not be negative")

    errors.extend(validate_brackets(table.tax_brackets, "tax_brackets"))
    if table.severance_brackets:
        errors.extend(validate_brackets(table.severance_brackets, "severance_brackets"))

    for level, rate in table.jkk_risk_rates.items():
        if level not in JKK_RISK_LEVELS:
            errors.append(f"jkk_risk_rates level {level} is not one of {JKK_RISK_LEVELS}")
        if not _is_rate(rate):
            errors.append(f"jkk_risk_rates level {level} rate {rate} is not within [0, 1]")

    if not _is_rate(table.occupational_deduction_rate):
        errors.append("occupational_deduction rate is not within [0, 1]")
    if table.occupational_deduction_annual_cap is not None and table.occupational_deduction_annual_cap < 0:
        errors.append("occupational_deduction annual_cap must not be negative")

    cap_rate = table.contribution_deduction_cap_rate
    if cap_rate is not None and not _is_rate(cap_rate):
        errors.append(f"contribution_deduction_cap_rate {cap_rate} is not within [0, 1]")

    if not isinstance(table.taxable_income_rounding, int) or table.taxable_income_rounding < 1:
        errors.append("taxable_income_rounding must be a positive integer")

    # employee contributions plus the top marginal rate must leave a positive net
    if not errors and table.total_employee_rate + table.top_marginal_rate >= ONE:
        errors.append(
            "sum of employee contribution rates and the top tax rate must be below 1 "
            f"(got {table.total_employee_rate + table.top_marginal_rate})"
        )

    return errors


# ---------------------------------------------------------------------------
# PARSING
# ---------------------------------------------------------------------------


def _parse_amount(value: Any, label: str, errors: List[str]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, Decimal) and not value.is_finite():
        errors.append(f"{label} must be a whole currency amount (got {value!r})")
        return None
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)) or int(value) != value:
        errors.append(f"{label} must be a whole currency amount (got {value!r})")
        return None
    return int(value)


def _parse_rate(value: Any, label: str, errors: List[str]) -> Decimal:
    try:
        rate = to_decimal(value)
    except (TypeError, ValueError):
        errors.append(f"{label} is not a number (got {value!r})")
        return ZERO
    if not rate.is_finite():
        errors.append(f"{label} is not a finite number (got {value!r})")
        return ZERO
    return rate


def _parse_brackets(rows: Any, label: str, errors: List[str]) -> Tuple[TaxBracket, ...]:
    if not isinstance(rows, list):
        errors.append(f"{label} must be a list")
        return ()

    brackets = []
    for i, row in enumerate(rows, 1):
        if not isinstance(row, dict):
            errors.append(f"{label} row {i} is not a dict")
            continue
        missing = {"upper_bound", "rate"} - row.keys()
        if missing:
            errors.append(f"{label} row {i} missing fields: {', '.join(sorted(missing))}")
            continue
        brackets.append(
            TaxBracket(
                upper_bound=_parse_amount(row["upper_bound"], f"{label} row {i} upper_bound", errors),
                rate=_parse_rate(row["rate"], f"{label} row {i} rate", errors),
            )
        )
    return tuple(brackets)


def rule_table_from_dict(data: Mapping[str, Any]) -> RuleTable:
    """
    Build a RuleTable from its JSON representation.

    Raises:
        ConfigurationError: if the document is malformed or the table is invalid
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Rule table must be a dictionary (got {type(data).__name__})")

    errors: List[str] = []

    raw_date = data.get("effective_from")
    try:
        effective_from = date.fromisoformat(str(raw_date))
    except ValueError:
        raise ConfigurationError(f"effective_from must be an ISO date (got {raw_date!r})")

    contributions = []
    raw_contributions = data.get("contributions", {})
    if not isinstance(raw_contributions, dict):
        errors.append("contributions must be a dictionary")
        raw_contributions = {}
    for key, row in raw_contributions.items():
        try:
            contribution_type = ContributionType(key)
        except ValueError:
            errors.append(f"unknown contribution {key!r}")
            continue
        if not isinstance(row, dict):
            errors.append(f"contribution {key} is not a dict")
            continue
        contributions.append(
            ContributionDefinition(
                type=contribution_type,
                employee_rate=_parse_rate(row.get("employee_rate", 0), f"{key} employee_rate", errors),
                employer_rate=_parse_rate(row.get("employer_rate", 0), f"{key} employer_rate", errors),
                cap=_parse_amount(row.get("cap"), f"{key} cap", errors),
                floor=_parse_amount(row.get("floor"), f"{key} floor", errors),
                tax_deductible=bool(row.get("tax_deductible", False)),
            )
        )

    ptkp: Dict[PTKPStatus, int] = {}
    raw_ptkp = data.get("ptkp", {})
    if not isinstance(raw_ptkp, dict):
        errors.append("ptkp must be a dictionary")
        raw_ptkp = {}
    for code, amount in raw_ptkp.items():
        try:
            status = PTKPStatus.parse(code)
        except InputValidationError:
            errors.append(f"ptkp key {code!r} is not a known status")
            continue
        parsed = _parse_amount(amount, f"ptkp {code}", errors)
        if parsed is not None:
            ptkp[status] = parsed

    jkk_risk_rates: Dict[int, Decimal] = {}
    raw_jkk_rates = data.get("jkk_risk_rates") or {}
    if not isinstance(raw_jkk_rates, dict):
        errors.append("jkk_risk_rates must be a dictionary")
        raw_jkk_rates = {}
    for level, rate in raw_jkk_rates.items():
        try:
            jkk_risk_rates[int(level)] = _parse_rate(rate, f"jkk_risk_rates {level}", errors)
        except ValueError:
            errors.append(f"jkk_risk_rates key {level!r} is not an integer")

    occupational = data.get("occupational_deduction") or {}
    if not isinstance(occupational, dict):
        errors.append("occupational_deduction must be a dictionary")
        occupational = {}
    occupational_rate = _parse_rate(occupational.get("rate", 0), "occupational_deduction rate", errors)
    occupational_cap = _parse_amount(occupational.get("annual_cap"), "occupational_deduction annual_cap", errors)
    rounding = data.get("taxable_income_rounding", DEFAULT_TAXABLE_INCOME_ROUNDING)
    cap_rate = data.get("contribution_deduction_cap_rate")
    if cap_rate is not None:
        cap_rate = _parse_rate(cap_rate, "contribution_deduction_cap_rate", errors)

    tax_brackets = _parse_brackets(data.get("tax_brackets", []), "tax_brackets", errors)
    severance_brackets = _parse_brackets(data.get("severance_brackets", []), "severance_brackets", errors)

    if errors:
        message = f"Rule table {raw_date} is malformed: " + "; ".join(errors)
        logger.error(message)
        raise ConfigurationError(message)

    return RuleTable(
        effective_from=effective_from,
        name=str(data.get("name", "")),
        contributions=tuple(contributions),
        ptkp=ptkp,
        tax_brackets=tax_brackets,
        severance_brackets=severance_brackets,
        jkk_risk_rates=jkk_risk_rates,
        occupational_deduction_rate=occupational_rate,
        occupational_deduction_annual_cap=occupational_cap,
        taxable_income_rounding=rounding,
        contribution_deduction_cap_rate=cap_rate,
    )


class RuleTableRegistry:
    """All known rule table versions, ordered by effective date."""

    def __init__(self, tables: Iterable[RuleTable]):
        ordered = sorted(tables, key=lambda t: t.effective_from)
        if not ordered:
            raise ConfigurationError("At least one rule table is required")

        dates = [t.effective_from for t in ordered]
        duplicates = sorted({d for d in dates if dates.count(d) > 1})
        if duplicates:
            raise ConfigurationError(
                "Duplicate rule tables for effective dates: " + ", ".join(d.isoformat() for d in duplicates)
            )

        self._tables: Tuple[RuleTable, ...] = tuple(ordered)
        self._dates: Tuple[date, ...] = tuple(dates)

    def for_date(self, on: date) -> RuleTable:
        """Return the table in force on the given date."""
        index = bisect.bisect_right(self._dates, on) - 1
        if index < 0:
            raise ConfigurationError(
                f"No rule table in force on {on.isoformat()}; earliest is {self._dates[0].isoformat()}"
            )
        return self._tables[index]

    @property
    def latest(self) -> RuleTable:
        return self._tables[-1]

    def __iter__(self) -> Iterator[RuleTable]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)


def default_rules_path() -> Path:
    """Path of the rule tables bundled with the package."""
    return Path(__file__).with_name(RULE_TABLES_FILENAME)


def load_rule_tables(path: Optional[Union[str, Path]] = None) -> RuleTableRegistry:
    """
    Load every rule table from a JSON document ``{"rule_tables": [...]}``.

    Args:
        path: JSON file; defaults to the bundled rule_tables.json

    Raises:
        ConfigurationError: if the file is missing, unreadable or invalid
    """
    path = Path(path) if path is not None else default_rules_path()
    if not path.exists():
        raise ConfigurationError(f"Rule table file not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            document = json.load(f, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Rule table file {path} is not valid JSON: {e}")

    rows = document.get("rule_tables") if isinstance(document, dict) else None
    if not isinstance(rows, list):
        raise ConfigurationError(f"Rule table file {path} must contain a 'rule_tables' list")

    registry = RuleTableRegistry(rule_table_from_dict(row) for row in rows)
    logger.info(f"Loaded {len(registry)} rule table(s) from {path}")
    return registry
