from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from workflow_failures.api import run_from_environment
from workflow_failures.publishing import ActionsOutputPublisher


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Report whether a workflow has gone without a successful run for too long."
    )
    parser.add_argument(
        "--config",
        dest="config_yaml",
        type=Path,
        default=None,
        help="Optional YAML file with input values; INPUT_* variables take precedence",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    publisher = ActionsOutputPublisher.from_environ()
    result = run_from_environment(
        publisher=publisher,
        config_path=args.config_yaml,
    )
    logging.getLogger("workflow_failures.app").debug("%s", result)
    return publisher.exit_code


if __name__ == "__main__":
    sys.exit(main())
