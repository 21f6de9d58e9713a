from .check_result import CheckResult, CheckStatus
from .policy import DEFAULT_LOOKBACK_DAYS, EvaluationPolicy
from .publisher import ResultPublisher
from .run_history import RunHistoryError, RunHistoryProvider, RunQuery
from .run_record import RunRecord, parse_timestamp

__all__ = [
    "CheckResult",
    "CheckStatus",
    "DEFAULT_LOOKBACK_DAYS",
    "EvaluationPolicy",
    "ResultPublisher",
    "RunHistoryError",
    "RunHistoryProvider",
    "RunQuery",
    "RunRecord",
    "parse_timestamp",
]
