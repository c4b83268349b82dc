"""Unified command line interface for the irrigation scripts.

Usage::

    python scripts/cli.py <command> [args]

The available commands correspond to modules in the ``scripts`` package
that contain a ``main`` entrypoint, e.g. ``et0-model`` or
``irrigation-plan``.
"""

from __future__ import annotations

import argparse
import importlib
import pkgutil
import sys
from pathlib import Path
from typing import Dict

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _discover_commands() -> Dict[str, str]:
    """Return mapping of command names to module paths."""
    package_dir = Path(__file__).resolve().parent
    commands: Dict[str, str] = {}
    for mod in pkgutil.iter_modules([str(package_dir)]):
        if mod.ispkg or mod.name in {"cli", "__init__"}:
            continue
        commands[mod.name.replace("_", "-")] = f"scripts.{mod.name}"
    return commands


def main(argv: list[str] | None = None) -> int:
    """Run a script subcommand and return its exit status."""
    commands = _discover_commands()
    parser = argparse.ArgumentParser(description="Irrigation engine utilities")
    parser.add_argument("command", choices=sorted(commands))
    parser.add_argument("args", nargs=argparse.REMAINDER)
    ns = parser.parse_args(argv)

    module = importlib.import_module(commands[ns.command])
    return module.main(ns.args)


if __name__ == "__main__":  # pragma: no cover - manual execution
    sys.exit(main())
