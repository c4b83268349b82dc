"""Site defaults used by callers to complete partial inputs."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping

from .utils import load_data

__all__ = [
    "CONFIG_ENV",
    "EngineSettings",
    "load_settings",
]

_LOGGER = logging.getLogger(__name__)

CONFIG_ENV = "IRRIGATION_ENGINE_CONFIG"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(slots=True)
class EngineSettings:
    """Defaults applied by the application layer, never by the calculators."""

    default_elevation_m: float = 500.0
    default_latitude_deg: float = 19.076
    default_area_m2: float = 10000.0
    log_level: str = "INFO"

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _coerce_settings(data: Mapping[str, Any]) -> Dict[str, Any]:
    defaults = EngineSettings()
    result: Dict[str, Any] = {}
    for f in fields(EngineSettings):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.name == "log_level":
            level = str(value).upper()
            if level in _LOG_LEVELS:
                result[f.name] = level
            else:
                _LOGGER.warning("Ignoring invalid log_level %r", value)
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = math.nan
        if not math.isfinite(number):
            _LOGGER.warning(
                "Ignoring invalid %s %r; using %s", f.name, value, getattr(defaults, f.name)
            )
            continue
        result[f.name] = number
    return result


def load_settings(path: str | Path | None = None) -> EngineSettings:
    """Return :class:`EngineSettings` read from ``path``.

    When ``path`` is omitted the ``IRRIGATION_ENGINE_CONFIG`` environment
    variable is consulted. JSON and YAML files are supported; unknown keys
    are ignored and invalid values fall back to the defaults.
    """

    if path is None:
        env = os.getenv(CONFIG_ENV)
        if not env:
            return EngineSettings()
        path = Path(env).expanduser()

    data = load_data(path)
    if not isinstance(data, Mapping):
        _LOGGER.warning("Settings file %s does not contain a mapping; using defaults", path)
        return EngineSettings()
    return EngineSettings(**_coerce_settings(data))
