from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ResultPublisher(Protocol):
    """
    Facade contract for reporting a check back to the host runner.
    """

    def set_output(self, name: str, value: str) -> None:
        """Publish a single named output value."""
        ...

    def set_failed(self, message: str) -> None:
        """Mark the invocation as failed at the process level."""
        ...
