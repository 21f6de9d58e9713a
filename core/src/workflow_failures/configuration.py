from __future__ import annotations

import logging
import math
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from workflow_failures.contracts import DEFAULT_LOOKBACK_DAYS, EvaluationPolicy, RunQuery
from workflow_failures.contracts.run_history import (
    DEFAULT_BRANCH,
    DEFAULT_PER_PAGE,
    DEFAULT_WORKFLOW_ID,
)
from workflow_failures.github.client import DEFAULT_API_URL

INPUT_NAMES = (
    "owner",
    "repo",
    "workflow_id",
    "branch",
    "github_token",
    "per_page",
    "days_to_look_back",
    "check_outside_window",
)

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

logger = logging.getLogger("workflow_failures.configuration")


class ConfigError(ValueError):
    pass


class CheckConfig(BaseModel):
    """
    Fully resolved configuration for one check.

    Assembled once at the process boundary; nothing downstream reads the environment.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    workflow_id: str = DEFAULT_WORKFLOW_ID
    branch: str = DEFAULT_BRANCH
    github_token: str = Field(min_length=1, repr=False)
    per_page: int = DEFAULT_PER_PAGE
    days_to_look_back: float | None = DEFAULT_LOOKBACK_DAYS
    check_outside_window: bool = True
    api_url: str = DEFAULT_API_URL

    @field_validator("workflow_id", "branch", "api_url", mode="before")
    @classmethod
    def _blank_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("owner", "repo", mode="before")
    @classmethod
    def _numeric_names_as_text(cls, value: Any) -> Any:
        # YAML reads names such as `2024` as numbers.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("per_page", mode="before")
    @classmethod
    def _coerce_per_page(cls, value: Any) -> int:
        return parse_per_page(value)

    @field_validator("days_to_look_back", mode="before")
    @classmethod
    def _coerce_days(cls, value: Any) -> float | None:
        return parse_lookback_days(value)

    @field_validator("check_outside_window", mode="before")
    @classmethod
    def _coerce_check_outside_window(cls, value: Any) -> bool:
        return parse_check_outside_window(value)

    def to_query(self) -> RunQuery:
        return RunQuery(
            owner=self.owner,
            repo=self.repo,
            workflow_id=self.workflow_id,
            branch=self.branch,
            per_page=self.per_page,
        )

    def to_policy(self) -> EvaluationPolicy:
        return EvaluationPolicy(
            lookback_days=self.days_to_look_back,
            check_outside_window=self.check_outside_window,
        )


def parse_lookback_days(value: Any) -> float | None:
    """
    Parse `days_to_look_back`.

    Blank input means the default. Unparseable input yields None, which the
    evaluator treats as a window that contains no run.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_LOOKBACK_DAYS
    if isinstance(value, bool):
        logger.warning("days_to_look_back must be a number, got %r", value)
        return None
    try:
        days = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        logger.warning("days_to_look_back is not a number: %r; no run will count as recent", value)
        return None
    if math.isnan(days):
        logger.warning("days_to_look_back is NaN; no run will count as recent")
        return None
    return days


def parse_per_page(value: Any) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_PER_PAGE
    try:
        per_page = int(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        logger.warning("per_page is not an integer: %r; using %d", value, DEFAULT_PER_PAGE)
        return DEFAULT_PER_PAGE
    if per_page < 1:
        logger.warning("per_page must be positive, got %d; using %d", per_page, DEFAULT_PER_PAGE)
        return DEFAULT_PER_PAGE
    return per_page


def parse_check_outside_window(value: Any) -> bool:
    """Only an explicit "false" (any case, surrounding whitespace ignored) disables the fallback."""
    if isinstance(value, bool):
        return value
    if value is None:
        return True
    return str(value).strip().lower() != "false"


def read_action_inputs(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect the non-blank `INPUT_*` variables a GitHub Actions runner sets for this action."""
    inputs: dict[str, str] = {}
    for name in INPUT_NAMES:
        raw = environ.get(_input_env_name(name), "")
        if raw.strip():
            inputs[name] = raw
    return inputs


def load_yaml(path: str | Path) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise ConfigError(f"YAML root must be a mapping: {path}")
    return payload


def load_config_file(path: str | Path, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    return resolve_env_vars(load_yaml(path), env)


def build_check_config(
    environ: Mapping[str, str] | None = None,
    *,
    config_path: str | Path | None = None,
) -> CheckConfig:
    """
    Resolve the check configuration.

    Precedence: action inputs, then the optional YAML file, then ambient
    fallbacks (GITHUB_TOKEN, GITHUB_REPOSITORY, GITHUB_API_URL).
    """
    env = os.environ if environ is None else environ

    payload: dict[str, Any] = {}
    if config_path is not None:
        payload.update(load_config_file(config_path, env))
    payload.update(read_action_inputs(env))

    if not _present(payload.get("github_token")):
        payload["github_token"] = env.get("GITHUB_TOKEN", "")

    if not (_present(payload.get("owner")) and _present(payload.get("repo"))):
        owner, repo = _split_repository(env.get("GITHUB_REPOSITORY", ""))
        if not _present(payload.get("owner")):
            payload["owner"] = owner
        if not _present(payload.get("repo")):
            payload["repo"] = repo

    if not _present(payload.get("api_url")) and env.get("GITHUB_API_URL"):
        payload["api_url"] = env["GITHUB_API_URL"]

    try:
        return CheckConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error("config", exc)) from exc


def resolve_env_vars(payload: Any, environ: Mapping[str, str]) -> Any:
    return _resolve_env_vars(payload, environ, path="$")


def _resolve_env_vars(payload: Any, environ: Mapping[str, str], *, path: str) -> Any:
    if isinstance(payload, Mapping):
        return {
            str(key): _resolve_env_vars(value, environ, path=f"{path}.{key}")
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [
            _resolve_env_vars(value, environ, path=f"{path}[{index}]")
            for index, value in enumerate(payload)
        ]
    if isinstance(payload, str):
        return _substitute_env(payload, environ, path=path)
    return payload


def _substitute_env(value: str, environ: Mapping[str, str], *, path: str) -> str:
    def replace(match: re.Match[str]) -> str:
        key = match.group(1)
        env_value = environ.get(key)
        if env_value is None:
            raise ConfigError(f"Missing environment variable '{key}' at {path}")
        return env_value

    return _ENV_VAR_PATTERN.sub(replace, value)


def _input_env_name(name: str) -> str:
    # Same mapping as @actions/core getInput.
    return f"INPUT_{name.replace(' ', '_').upper()}"


def _split_repository(raw: str) -> tuple[str, str]:
    owner, _, repo = raw.strip().partition("/")
    return owner, repo


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _format_validation_error(prefix: str, exc: ValidationError) -> str:
    details: list[str] = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in error["loc"])
        details.append(f"{prefix}.{loc}: {error['msg']}")
    return "; ".join(details)
