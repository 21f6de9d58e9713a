from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import pytest
import yaml

from workflow_failures.configuration import (
    ConfigError,
    build_check_config,
    parse_check_outside_window,
    parse_lookback_days,
    parse_per_page,
    read_action_inputs,
)
from workflow_failures.contracts import EvaluationPolicy, RunQuery


def _runner_env(**inputs: str) -> dict[str, str]:
    env = {
        "GITHUB_REPOSITORY": "octo-org/octo-repo",
        "GITHUB_TOKEN": "env-token",
    }
    for name, value in inputs.items():
        env[f"INPUT_{name.upper()}"] = value
    return env


def _write_yaml(path: Path, payload: dict[str, Any]) -> None:
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")


@pytest.mark.parametrize("raw", ["TRUE", "True", "true", "  ", "", " yes ", None])
def test_check_outside_window_defaults_to_true(raw):
    assert parse_check_outside_window(raw) is True


@pytest.mark.parametrize("raw", ["false", "FALSE", "False", "  false\n", False])
def test_check_outside_window_false_spellings(raw):
    assert parse_check_outside_window(raw) is False


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("7", 7.0),
        (" 1.5 ", 1.5),
        ("0.25", 0.25),
        ("0.0007", 0.0007),
        ("", 7.0),
        (None, 7.0),
        (30, 30.0),
    ],
)
def test_parse_lookback_days(raw, expected):
    assert parse_lookback_days(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "seven", "nan", "7 days", True])
def test_unparseable_lookback_degrades_to_none(raw):
    assert parse_lookback_days(raw) is None


@pytest.mark.parametrize(
    "raw, expected",
    [("50", 50), (" 100 ", 100), ("", 50), (None, 50), ("abc", 50), ("0", 50), ("-3", 50), (20, 20)],
)
def test_parse_per_page(raw, expected):
    assert parse_per_page(raw) == expected


def test_defaults_come_from_runner_environment():
    config = build_check_config(_runner_env())

    assert config.owner == "octo-org"
    assert config.repo == "octo-repo"
    assert config.github_token == "env-token"
    assert config.to_query() == RunQuery(
        owner="octo-org",
        repo="octo-repo",
        workflow_id="release.yml",
        branch="main",
        per_page=50,
    )
    assert config.to_policy() == EvaluationPolicy(lookback_days=7.0, check_outside_window=True)
    assert config.api_url == "https://api.github.com"


def test_action_inputs_override_defaults():
    env = _runner_env(
        owner="other-org",
        repo="other-repo",
        workflow_id="deploy.yml",
        branch="develop",
        github_token="input-token",
        per_page="20",
        days_to_look_back="0.5",
        check_outside_window="FALSE",
    )

    config = build_check_config(env)

    assert config.to_query() == RunQuery(
        owner="other-org",
        repo="other-repo",
        workflow_id="deploy.yml",
        branch="develop",
        per_page=20,
    )
    assert config.github_token == "input-token"
    assert config.to_policy() == EvaluationPolicy(lookback_days=0.5, check_outside_window=False)


def test_blank_inputs_fall_back_to_defaults():
    env = _runner_env(workflow_id="  ", branch="", days_to_look_back=" ", check_outside_window="  ")

    config = build_check_config(env)

    assert config.workflow_id == "release.yml"
    assert config.branch == "main"
    assert config.days_to_look_back == 7.0
    assert config.check_outside_window is True


def test_invalid_lookback_is_a_soft_failure(caplog):
    config = build_check_config(_runner_env(days_to_look_back="soon"))

    assert config.days_to_look_back is None
    assert config.to_policy().lookback_days is None
    assert "days_to_look_back" in caplog.text


def test_missing_token_is_a_config_error():
    env = _runner_env()
    del env["GITHUB_TOKEN"]

    with pytest.raises(ConfigError, match="github_token"):
        build_check_config(env)


def test_missing_repository_identity_is_a_config_error():
    env = {"GITHUB_TOKEN": "t"}

    with pytest.raises(ConfigError, match="config.owner"):
        build_check_config(env)


def test_token_is_not_in_repr():
    config = build_check_config(_runner_env(github_token="super-secret"))

    assert "super-secret" not in repr(config)


def test_api_url_follows_enterprise_environment():
    env = _runner_env()
    env["GITHUB_API_URL"] = "https://ghe.example.com/api/v3"

    assert build_check_config(env).api_url == "https://ghe.example.com/api/v3"


def test_read_action_inputs_skips_blank_and_unknown_values():
    env = _runner_env(branch="   ", workflow_id="ci.yml")
    env["INPUT_SOMETHING_ELSE"] = "x"

    assert read_action_inputs(env) == {"workflow_id": "ci.yml"}


def test_yaml_config_is_layered_under_action_inputs(tmp_path: Path):
    config_yaml = tmp_path / "check.yaml"
    _write_yaml(
        config_yaml,
        {
            "owner": "yaml-org",
            "repo": "yaml-repo",
            "workflow_id": "nightly.yml",
            "github_token": "${LOCAL_TOKEN}",
            "days_to_look_back": 2,
            "check_outside_window": False,
        },
    )
    env = {"LOCAL_TOKEN": "from-yaml-env", "INPUT_WORKFLOW_ID": "release.yml"}

    config = build_check_config(env, config_path=config_yaml)

    assert config.owner == "yaml-org"
    assert config.repo == "yaml-repo"
    assert config.workflow_id == "release.yml"
    assert config.github_token == "from-yaml-env"
    assert config.days_to_look_back == 2.0
    assert config.check_outside_window is False


def test_yaml_config_accepts_numeric_ids_and_names(tmp_path: Path):
    config_yaml = tmp_path / "check.yaml"
    config_yaml.write_text(
        "owner: 1234\nrepo: 2024\nworkflow_id: 161335\nbranch: 2024\ngithub_token: t\n",
        encoding="utf-8",
    )

    config = build_check_config({}, config_path=config_yaml)

    assert config.to_query() == RunQuery(
        owner="1234", repo="2024", workflow_id="161335", branch="2024", per_page=50
    )


def test_yaml_config_rejects_unknown_keys(tmp_path: Path):
    config_yaml = tmp_path / "check.yaml"
    _write_yaml(config_yaml, {"owner": "o", "repo": "r", "github_token": "t", "days": 3})

    with pytest.raises(ConfigError, match="config.days"):
        build_check_config({}, config_path=config_yaml)


def test_yaml_config_missing_env_var(tmp_path: Path):
    config_yaml = tmp_path / "check.yaml"
    _write_yaml(config_yaml, {"github_token": "${NOT_SET_ANYWHERE}"})

    with pytest.raises(ConfigError, match="NOT_SET_ANYWHERE"):
        build_check_config({}, config_path=config_yaml)


def test_yaml_root_must_be_mapping(tmp_path: Path):
    config_yaml = tmp_path / "check.yaml"
    config_yaml.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        build_check_config({}, config_path=config_yaml)


def test_infinite_lookback_is_kept():
    config = build_check_config(_runner_env(days_to_look_back="inf"))

    assert math.isinf(config.days_to_look_back)
