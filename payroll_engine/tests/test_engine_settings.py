from pathlib import Path

import pytest

from payroll_engine.config.settings import AnnualizationPolicy, EngineSettings, WithholdingPolicy
from payroll_engine.constants import (
    ENV_ANNUALIZATION_POLICY,
    ENV_LOG_LEVEL,
    ENV_MAX_WORKERS,
    ENV_MINIMUM_WAGE,
    ENV_RULES_PATH,
    ENV_WITHHOLDING_POLICY,
)
from payroll_engine.exceptions import ConfigurationError

ENV_NAMES = [
    ENV_RULES_PATH,
    ENV_ANNUALIZATION_POLICY,
    ENV_WITHHOLDING_POLICY,
    ENV_MAX_WORKERS,
    ENV_LOG_LEVEL,
    ENV_MINIMUM_WAGE,
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # values loaded from a .env file are removed again on teardown
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults():
    settings = EngineSettings()
    assert settings.rules_path is None
    assert settings.annualization_policy == AnnualizationPolicy.CALENDAR
    assert settings.withholding_policy == WithholdingPolicy.CUMULATIVE
    assert settings.max_workers == 4
    assert settings.log_level == "INFO"
    assert settings.minimum_wage is None


def test_policies_accept_strings():
    settings = EngineSettings(annualization_policy="Prorated", withholding_policy="flat", rules_path="rules.json")
    assert settings.annualization_policy == AnnualizationPolicy.PRORATED
    assert settings.withholding_policy == WithholdingPolicy.FLAT
    assert settings.rules_path == Path("rules.json")


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(annualization_policy="monthly"),
        dict(withholding_policy="ter"),
        dict(max_workers=0),
        dict(minimum_wage=-1),
        dict(minimum_wage="4500000"),
    ],
)
def test_invalid_settings(kwargs):
    with pytest.raises(ConfigurationError):
        EngineSettings(**kwargs)


def test_from_env_defaults(clean_env):
    assert EngineSettings.from_env() == EngineSettings()


def test_from_env_reads_environment(clean_env):
    clean_env.setenv(ENV_ANNUALIZATION_POLICY, "prorated")
    clean_env.setenv(ENV_WITHHOLDING_POLICY, "flat")
    clean_env.setenv(ENV_MAX_WORKERS, "8")
    clean_env.setenv(ENV_LOG_LEVEL, "debug")
    clean_env.setenv(ENV_RULES_PATH, "/etc/payroll/rules.json")
    clean_env.setenv(ENV_MINIMUM_WAGE, "5396761")

    settings = EngineSettings.from_env()

    assert settings.annualization_policy == AnnualizationPolicy.PRORATED
    assert settings.withholding_policy == WithholdingPolicy.FLAT
    assert settings.max_workers == 8
    assert settings.log_level == "DEBUG"
    assert settings.rules_path == Path("/etc/payroll/rules.json")
    assert settings.minimum_wage == 5_396_761


def test_from_env_file(clean_env, tmp_path):
    env_file = tmp_path / "payroll.env"
    env_file.write_text(f"{ENV_WITHHOLDING_POLICY}=flat\n{ENV_MAX_WORKERS}=2\n")

    settings = EngineSettings.from_env(env_file)

    assert settings.withholding_policy == WithholdingPolicy.FLAT
    assert settings.max_workers == 2


def test_dotenv_in_working_directory(clean_env, tmp_path):
    (tmp_path / ".env").write_text(f"{ENV_ANNUALIZATION_POLICY}=prorated\n")
    assert EngineSettings.from_env().annualization_policy == AnnualizationPolicy.PRORATED


@pytest.mark.parametrize(
    "name,value",
    [
        (ENV_MAX_WORKERS, "many"),
        (ENV_MAX_WORKERS, "0"),
        (ENV_ANNUALIZATION_POLICY, "weekly"),
        (ENV_WITHHOLDING_POLICY, "ter"),
        (ENV_MINIMUM_WAGE, "UMP"),
    ],
)
def test_from_env_invalid_values(clean_env, name, value):
    clean_env.setenv(name, value)
    with pytest.raises(ConfigurationError):
        EngineSettings.from_env()
