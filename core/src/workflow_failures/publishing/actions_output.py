from __future__ import annotations

import logging
import os
import sys
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO

logger = logging.getLogger("workflow_failures.publishing")


class ActionsOutputPublisher:
    """
    GitHub Actions implementation of the ResultPublisher facade.

    Outputs are appended to the `GITHUB_OUTPUT` file; without one the legacy
    `::set-output` workflow command is written to the stream instead.
    """

    def __init__(self, *, output_path: Path | None = None, stream: TextIO | None = None) -> None:
        self._output_path = output_path
        self._stream = stream if stream is not None else sys.stdout
        self._exit_code = 0

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> ActionsOutputPublisher:
        env = os.environ if environ is None else environ
        raw = (env.get("GITHUB_OUTPUT") or "").strip()
        return cls(output_path=Path(raw) if raw else None)

    @property
    def exit_code(self) -> int:
        """Process exit code to report: 1 once set_failed was called, else 0."""
        return self._exit_code

    def set_output(self, name: str, value: str) -> None:
        """Publish a single named output value."""
        logger.info("Output %s=%s", name, value)
        if self._output_path is None:
            self._write_command(f"::set-output name={name}::{_escape_data(value)}")
            return
        with self._output_path.open("a", encoding="utf-8") as handle:
            handle.write(_format_output(name, value))

    def set_failed(self, message: str) -> None:
        """Emit an error annotation and mark the process as failed."""
        self._exit_code = 1
        self._write_command(f"::error::{_escape_data(message)}")

    def _write_command(self, line: str) -> None:
        self._stream.write(line + os.linesep)
        self._stream.flush()


def _format_output(name: str, value: str) -> str:
    if "\n" not in value and "\r" not in value:
        return f"{name}={value}\n"
    # Multiline values need a heredoc-style delimiter.
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
