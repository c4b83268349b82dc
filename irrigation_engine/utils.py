"""Utility helpers shared across the irrigation engine."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, Mapping, TextIO, Union
from os import PathLike

import voluptuous as vol
import yaml

from .errors import DivisionByZero, InvalidInput, MissingInput, OutOfRange

__all__ = [
    "load_data",
    "normalize_key",
    "coerce_mapping",
    "require_value",
    "require_finite",
    "require_positive",
    "require_non_negative",
    "require_in_range",
    "require_nonzero_divisor",
]


PathType = Union[str, PathLike]


def _open_text(path: Path) -> TextIO:
    return open(path, "r", encoding="utf-8")


def load_data(path: PathType) -> Any:
    """Return the parsed contents of ``path`` supporting JSON or YAML."""

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    try:
        with _open_text(p) as f:
            if p.suffix.lower() in {".yaml", ".yml"}:
                return yaml.safe_load(f) or {}
            return json.load(f)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {p}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {p}: {exc}") from exc


def normalize_key(key: str) -> str:
    """Return ``key`` normalized for case-insensitive table lookups.

    Whitespace, hyphens and underscores collapse to a single underscore so
    ``"Post-harvest"``, ``"post harvest"`` and ``"POST_HARVEST"`` all map to
    ``"post_harvest"``.
    """

    value = str(key).casefold()
    for sep in ("_", "-"):
        value = value.replace(sep, " ")
    parts = [p for p in value.strip().split() if p]
    return "_".join(parts)


def require_value(value: Any, *, stage: str, field: str) -> Any:
    """Return ``value`` or raise :class:`MissingInput` when it is ``None``."""

    if value is None:
        raise MissingInput(f"{field} is required", stage=stage, field=field)
    return value


def require_finite(value: Any, *, stage: str, field: str) -> float:
    """Return ``value`` as a finite float."""

    value = require_value(value, stage=stage, field=field)
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number", stage=stage, field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(
            f"{field} must be a number, got {value!r}", stage=stage, field=field
        ) from None
    if not math.isfinite(number):
        raise InvalidInput(f"{field} must be finite", stage=stage, field=field)
    return number


def require_positive(value: Any, *, stage: str, field: str) -> float:
    number = require_finite(value, stage=stage, field=field)
    if number <= 0:
        raise InvalidInput(f"{field} must be positive", stage=stage, field=field)
    return number


def require_non_negative(value: Any, *, stage: str, field: str) -> float:
    number = require_finite(value, stage=stage, field=field)
    if number < 0:
        raise InvalidInput(f"{field} must be non-negative", stage=stage, field=field)
    return number


def require_in_range(
    value: Any, low: float, high: float, *, stage: str, field: str
) -> float:
    """Return ``value`` when it lies within ``[low, high]``.

    Values outside the bounds raise :class:`OutOfRange`.
    """

    number = require_finite(value, stage=stage, field=field)
    if not low <= number <= high:
        raise OutOfRange(
            f"{field}={number} is outside [{low}, {high}]", stage=stage, field=field
        )
    return number


def require_nonzero_divisor(value: Any, *, stage: str, field: str) -> float:
    """Return ``value`` for use as a denominator.

    Zero raises :class:`DivisionByZero`, negative spacings raise
    :class:`InvalidInput`.
    """

    number = require_finite(value, stage=stage, field=field)
    if number == 0:
        raise DivisionByZero(f"{field} must not be zero", stage=stage, field=field)
    if number < 0:
        raise InvalidInput(f"{field} must be positive", stage=stage, field=field)
    return number


def coerce_mapping(
    data: Mapping[str, Any],
    schema: vol.Schema,
    aliases: Mapping[str, str],
    *,
    stage: str,
) -> Dict[str, Any]:
    """Return ``data`` validated against ``schema``.

    Alias keys are renamed and blank or ``None`` values dropped before
    validation. Voluptuous failures are translated into engine errors naming
    the offending field.
    """

    cleaned: Dict[str, Any] = {}
    for key, value in data.items():
        name = aliases.get(key, key)
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        if value is None:
            continue
        cleaned[name] = value

    try:
        return schema(cleaned)
    except vol.MultipleInvalid as exc:
        err = exc.errors[0]
        field = str(err.path[0]) if err.path else None
        if isinstance(err, vol.RequiredFieldInvalid):
            raise MissingInput(f"{field} is required", stage=stage, field=field) from exc
        raise InvalidInput(f"{field}: {err.error_message}", stage=stage, field=field) from exc
