from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from workflow_failures.contracts.run_record import RunRecord

DEFAULT_WORKFLOW_ID = "release.yml"
DEFAULT_BRANCH = "main"
DEFAULT_PER_PAGE = 50


class RunHistoryError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class RunQuery:
    owner: str
    repo: str
    workflow_id: str = DEFAULT_WORKFLOW_ID
    branch: str = DEFAULT_BRANCH
    per_page: int = DEFAULT_PER_PAGE

    def short_name(self) -> str:
        """Human-friendly identifier for logs."""
        return f"{self.owner}/{self.repo}:{self.workflow_id}@{self.branch}"


@runtime_checkable
class RunHistoryProvider(Protocol):
    """
    Facade contract for CI run history backends.
    """

    def list_workflow_runs(self, query: RunQuery) -> list[RunRecord]:
        """Return up to `query.per_page` runs, most recent first."""
        ...
