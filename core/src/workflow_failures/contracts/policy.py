from __future__ import annotations

from dataclasses import dataclass

DEFAULT_LOOKBACK_DAYS = 7.0
SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class EvaluationPolicy:
    """
    Policy for one failure-window evaluation.

    `lookback_days=None` is the invalid-lookback state: the window then matches no run.
    """

    lookback_days: float | None = DEFAULT_LOOKBACK_DAYS
    check_outside_window: bool = True
