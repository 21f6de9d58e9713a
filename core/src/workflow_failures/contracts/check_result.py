from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

CheckStatus = Literal["ok", "failed"]


@dataclass(frozen=True, slots=True)
class CheckResult:
    """
    Public outcome of one invocation.

    `status` describes the invocation, not the workflow: a detected failure is still "ok".
    """

    status: CheckStatus
    has_previous_failure: bool | None

    started_at_utc: str
    ended_at_utc: str
    duration_s: float

    reason: str | None = None
    runs_fetched: int = 0
    runs_in_window: int = 0

    # Human-readable message for quick debugging
    message: str | None = None
