from __future__ import annotations

from collections.abc import Sequence

from workflow_failures.contracts import RunQuery, RunRecord


class FakeRunHistoryProvider:
    """
    In-memory RunHistoryProvider for unit tests.
    """

    def __init__(
        self,
        records: Sequence[RunRecord] = (),
        *,
        error: Exception | None = None,
    ) -> None:
        self._records = list(records)
        self._error = error
        self._queries: list[RunQuery] = []

    @property
    def queries(self) -> list[RunQuery]:
        """Return the received queries in order."""
        return list(self._queries)

    def list_workflow_runs(self, query: RunQuery) -> list[RunRecord]:
        """Return the configured records, or raise the configured error."""
        self._queries.append(query)
        if self._error is not None:
            raise self._error
        return list(self._records[: query.per_page])
