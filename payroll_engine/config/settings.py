# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Engine settings.

Settings are an explicit value passed to the orchestrator, never a process
wide singleton. EngineSettings.from_env() reads a ``.env`` file (if present)
and the environment.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Type, TypeVar, Union

from dotenv import find_dotenv, load_dotenv

from payroll_engine.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_WORKERS,
    ENV_ANNUALIZATION_POLICY,
    ENV_LOG_LEVEL,
    ENV_MAX_WORKERS,
    ENV_MINIMUM_WAGE,
    ENV_RULES_PATH,
    ENV_WITHHOLDING_POLICY,
)
from payroll_engine.exceptions import ConfigurationError

__all__ = ["AnnualizationPolicy", "WithholdingPolicy", "EngineSettings"]

E = TypeVar("E", bound=Enum)


class AnnualizationPolicy(str, Enum):
    """How monthly income is projected to a full year."""

    # monthly x 12, regardless of hire month
    CALENDAR = "calendar"
    # monthly x months employed in the fiscal year
    PRORATED = "prorated"


class WithholdingPolicy(str, Enum):
    """How the annual tax projection is turned into this month's withholding."""

    # tax due through this month minus tax already withheld
    CUMULATIVE = "cumulative"
    # remaining annual tax spread evenly over the remaining months
    FLAT = "flat"


def _parse_enum(enum_cls: Type[E], value: Union[str, E], name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"{name} must be one of: {allowed} (got {value!r})")


@dataclass(frozen=True)
class EngineSettings:
    rules_path: Optional[Path] = None
    annualization_policy: AnnualizationPolicy = AnnualizationPolicy.CALENDAR
    withholding_policy: WithholdingPolicy = WithholdingPolicy.CUMULATIVE
    max_workers: int = DEFAULT_MAX_WORKERS
    log_level: str = DEFAULT_LOG_LEVEL
    # regional minimum wage (UMP/UMK) checked against full-month net salaries
    minimum_wage: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(
            self,
            "annualization_policy",
            _parse_enum(AnnualizationPolicy, self.annualization_policy, "annualization_policy"),
        )
        object.__setattr__(
            self,
            "withholding_policy",
            _parse_enum(WithholdingPolicy, self.withholding_policy, "withholding_policy"),
        )
        if self.rules_path is not None:
            object.__setattr__(self, "rules_path", Path(self.rules_path))
        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be a positive integer (got {self.max_workers!r})")
        if self.minimum_wage is not None and (
            isinstance(self.minimum_wage, bool) or not isinstance(self.minimum_wage, int) or self.minimum_wage < 0
        ):
            raise ConfigurationError(f"minimum_wage must be a non-negative integer (got {self.minimum_wage!r})")

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "EngineSettings":
        """
        Build settings from environment variables.

        Args:
            env_file: Optional path to a .env file; when omitted python-dotenv
                searches for one starting from the working directory.

        Returns:
            EngineSettings
        """
        if env_file is not None:
            load_dotenv(dotenv_path=env_file)
        else:
            load_dotenv(find_dotenv(usecwd=True))

        raw_workers = os.getenv(ENV_MAX_WORKERS, str(DEFAULT_MAX_WORKERS))
        try:
            max_workers = int(raw_workers)
        except ValueError:
            raise ConfigurationError(f"{ENV_MAX_WORKERS} must be an integer (got {raw_workers!r})")

        raw_minimum_wage = os.getenv(ENV_MINIMUM_WAGE) or None
        try:
            minimum_wage = int(raw_minimum_wage) if raw_minimum_wage else None
        except ValueError:
            raise ConfigurationError(f"{ENV_MINIMUM_WAGE} must be an integer (got {raw_minimum_wage!r})")

        rules_path = os.getenv(ENV_RULES_PATH) or None

        return cls(
            rules_path=Path(rules_path) if rules_path else None,
            annualization_policy=os.getenv(ENV_ANNUALIZATION_POLICY, AnnualizationPolicy.CALENDAR.value),
            withholding_policy=os.getenv(ENV_WITHHOLDING_POLICY, WithholdingPolicy.CUMULATIVE.value),
            max_workers=max_workers,
            log_level=os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper(),
            minimum_wage=minimum_wage,
        )
