from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

SUCCESS_CONCLUSION = "success"


@dataclass(frozen=True, slots=True)
class RunRecord:
    """
    One historical execution of the monitored workflow.

    Providers hand these out most-recent-first; consumers read "latest" positionally.
    """

    started_at: datetime | None
    conclusion: str | None

    # Audit fields: not used by the decision, only carried for logs.
    run_id: int | None = None
    status: str | None = None
    html_url: str | None = None

    @property
    def is_success(self) -> bool:
        return self.conclusion == SUCCESS_CONCLUSION

    @classmethod
    def from_api_payload(cls, payload: Mapping[str, Any]) -> RunRecord:
        """Build a record from one `workflow_runs[]` item of the GitHub API."""
        run_id = payload.get("id")
        return cls(
            started_at=parse_timestamp(payload.get("run_started_at")),
            conclusion=payload.get("conclusion") or None,
            run_id=run_id if isinstance(run_id, int) and not isinstance(run_id, bool) else None,
            status=payload.get("status") or None,
            html_url=payload.get("html_url") or None,
        )


def parse_timestamp(raw: Any) -> datetime | None:
    if isinstance(raw, datetime):
        parsed = raw
    else:
        text = str(raw or "").strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
