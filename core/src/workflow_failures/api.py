from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from pathlib import Path

from workflow_failures.configuration import CheckConfig, build_check_config
from workflow_failures.contracts import (
    CheckResult,
    ResultPublisher,
    RunHistoryProvider,
)
from workflow_failures.evaluation import assess
from workflow_failures.github import GitHubRunHistoryClient

OUTPUT_NAME = "has_previous_failure"
FAILURE_MESSAGE = "Failed to check the workflow status"

ProviderFactory = Callable[[CheckConfig], RunHistoryProvider]

logger = logging.getLogger("workflow_failures.api")


def run_check(
    config: CheckConfig,
    *,
    provider: RunHistoryProvider,
    publisher: ResultPublisher,
    now: datetime | None = None,
) -> CheckResult:
    """Fetch the run history once, evaluate it and publish the verdict."""
    start = datetime.now(UTC)
    query = config.to_query()
    try:
        records = provider.list_workflow_runs(query)
        logger.info("Fetched %d run(s) for %s", len(records), query.short_name())
        evaluation = assess(records, config.to_policy(), now if now is not None else start)
        value = "true" if evaluation.has_previous_failure else "false"
        publisher.set_output(OUTPUT_NAME, value)
    except Exception as exc:
        logger.exception("Error checking workflow status for %s", query.short_name())
        return _failed(start, publisher, exc)

    logger.info(
        "Verdict %s=%s (%s, %d of %d run(s) in window)",
        OUTPUT_NAME,
        value,
        evaluation.reason,
        evaluation.runs_in_window,
        evaluation.runs_total,
    )
    end = datetime.now(UTC)
    return CheckResult(
        status="ok",
        has_previous_failure=evaluation.has_previous_failure,
        started_at_utc=start.isoformat(),
        ended_at_utc=end.isoformat(),
        duration_s=(end - start).total_seconds(),
        reason=evaluation.reason,
        runs_fetched=evaluation.runs_total,
        runs_in_window=evaluation.runs_in_window,
    )


def run_from_environment(
    environ: Mapping[str, str] | None = None,
    *,
    publisher: ResultPublisher,
    config_path: str | Path | None = None,
    provider_factory: ProviderFactory | None = None,
    now: datetime | None = None,
) -> CheckResult:
    """Resolve the configuration from the runner environment, then run the check."""
    start = datetime.now(UTC)
    factory = provider_factory or build_github_provider
    try:
        config = build_check_config(environ, config_path=config_path)
        provider = factory(config)
    except Exception as exc:
        logger.exception("Error preparing workflow status check")
        return _failed(start, publisher, exc)

    try:
        return run_check(config, provider=provider, publisher=publisher, now=now)
    finally:
        close = getattr(provider, "close", None)
        if callable(close):
            close()


def build_github_provider(config: CheckConfig) -> GitHubRunHistoryClient:
    return GitHubRunHistoryClient(token=config.github_token, api_url=config.api_url)


def _failed(start: datetime, publisher: ResultPublisher, exc: Exception) -> CheckResult:
    publisher.set_failed(FAILURE_MESSAGE)
    end = datetime.now(UTC)
    return CheckResult(
        status="failed",
        has_previous_failure=None,
        started_at_utc=start.isoformat(),
        ended_at_utc=end.isoformat(),
        duration_s=(end - start).total_seconds(),
        message=str(exc),
    )
