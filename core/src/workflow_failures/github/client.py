from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from workflow_failures.contracts import RunHistoryError, RunQuery, RunRecord

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT_S = 30.0
_API_VERSION = "2022-11-28"

logger = logging.getLogger("workflow_failures.github")


class GitHubRunHistoryClient:
    """
    GitHub Actions implementation of the RunHistoryProvider facade.

    Fetches a single page of runs for one workflow and branch; the API already
    returns them newest first.
    """

    def __init__(
        self,
        *,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        """Create a client; a session passed in is not closed by this client."""
        if not token:
            raise ValueError("A GitHub token is required.")
        self._api_url = api_url.rstrip("/")
        self._timeout_s = timeout_s
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": _API_VERSION,
        }

    def __enter__(self) -> GitHubRunHistoryClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def list_workflow_runs(self, query: RunQuery) -> list[RunRecord]:
        """Return up to `query.per_page` runs, most recent first."""
        url = self._runs_url(query)
        logger.debug("GET %s branch=%s per_page=%d", url, query.branch, query.per_page)
        response = self._session.get(
            url,
            params={"branch": query.branch, "per_page": query.per_page},
            headers=self._headers,
            timeout=self._timeout_s,
        )
        response.raise_for_status()
        return _parse_workflow_runs(response.json())

    def _runs_url(self, query: RunQuery) -> str:
        return (
            f"{self._api_url}/repos/{quote(query.owner, safe='')}/{quote(query.repo, safe='')}"
            f"/actions/workflows/{quote(query.workflow_id, safe='')}/runs"
        )


def _parse_workflow_runs(payload: Any) -> list[RunRecord]:
    if not isinstance(payload, dict):
        raise RunHistoryError(f"Expected a JSON object, got {type(payload).__name__}")
    runs = payload.get("workflow_runs")
    if not isinstance(runs, list):
        raise RunHistoryError("Response has no 'workflow_runs' list")
    return [RunRecord.from_api_payload(item) for item in runs if isinstance(item, dict)]
