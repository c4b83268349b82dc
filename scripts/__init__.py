"""Helper utilities for command line scripts."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable

from irrigation_engine.errors import EngineError


def add_common_arguments(parser) -> None:
    """Register ``--config``, ``--output`` and ``--log-level`` on ``parser``."""
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON or YAML file with site defaults",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional path to write the result JSON",
    )
    parser.add_argument("--log-level", default=None, help="Logging level")


def configure_logging(level: str | None, default: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, (level or default).upper(), logging.INFO),
        stream=sys.stderr,
    )


def emit(data: Any, output: Path | None = None) -> None:
    """Print ``data`` as JSON or write it to ``output``."""
    text = json.dumps(data, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text)
    else:
        print(text)


def run(func: Callable[[], None]) -> int:
    """Call ``func`` reporting calculation errors as JSON on stderr.

    Returns the process exit status: ``0`` on success and ``2`` when the
    engine rejected the inputs.
    """
    try:
        func()
    except EngineError as exc:
        print(json.dumps(exc.as_dict()), file=sys.stderr)
        return 2
    return 0


__all__ = [
    "add_common_arguments",
    "configure_logging",
    "emit",
    "run",
]
