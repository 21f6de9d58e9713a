from __future__ import annotations


class FakePublisher:
    """
    In-memory ResultPublisher for unit tests.
    """

    def __init__(self) -> None:
        self._outputs: dict[str, str] = {}
        self._failures: list[str] = []

    @property
    def outputs(self) -> dict[str, str]:
        return dict(self._outputs)

    @property
    def failures(self) -> list[str]:
        return list(self._failures)

    @property
    def exit_code(self) -> int:
        return 1 if self._failures else 0

    def set_output(self, name: str, value: str) -> None:
        self._outputs[name] = value

    def set_failed(self, message: str) -> None:
        self._failures.append(message)
