from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

from workflow_failures.contracts import EvaluationPolicy, RunRecord
from workflow_failures.contracts.policy import SECONDS_PER_DAY

Reason = Literal[
    "no_runs",
    "success_in_window",
    "all_failed_in_window",
    "outside_window_disabled",
    "latest_run_succeeded",
    "latest_run_not_successful",
]


@dataclass(frozen=True, slots=True)
class Evaluation:
    has_previous_failure: bool
    reason: Reason
    runs_total: int
    runs_in_window: int


def filter_within_window(
    records: Sequence[RunRecord],
    lookback_days: float | None,
    now: datetime,
) -> tuple[RunRecord, ...]:
    """
    Keep the records started no longer than `lookback_days` before `now`.

    The boundary is inclusive. Records without a start time never match, and an
    invalid lookback (None or NaN) matches nothing. Naive timestamps are taken
    as UTC. Input order is preserved.
    """
    if lookback_days is None or math.isnan(lookback_days):
        return ()
    limit_s = lookback_days * SECONDS_PER_DAY
    now = _as_utc(now)
    return tuple(
        record
        for record in records
        if record.started_at is not None
        and (now - _as_utc(record.started_at)).total_seconds() <= limit_s
    )


def assess(
    records: Sequence[RunRecord],
    policy: EvaluationPolicy,
    now: datetime | None = None,
) -> Evaluation:
    """Run the failure-window decision and report which branch produced it."""
    total = len(records)
    if not records:
        return Evaluation(False, "no_runs", total, 0)

    reference = _as_utc(now) if now is not None else datetime.now(UTC)
    within = filter_within_window(records, policy.lookback_days, reference)

    if not within:
        if not policy.check_outside_window:
            return Evaluation(False, "outside_window_disabled", total, 0)
        # records[0] is the latest run; its age and start time do not matter here.
        if records[0].is_success:
            return Evaluation(False, "latest_run_succeeded", total, 0)
        return Evaluation(True, "latest_run_not_successful", total, 0)

    if any(record.is_success for record in within):
        return Evaluation(False, "success_in_window", total, len(within))
    return Evaluation(True, "all_failed_in_window", total, len(within))


def evaluate(
    records: Sequence[RunRecord],
    policy: EvaluationPolicy,
    now: datetime | None = None,
) -> bool:
    """Return True when the workflow is in a persistent failure state."""
    return assess(records, policy, now).has_previous_failure


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
