"""Result containers carrying a value together with its provenance."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Mapping, Union

from .errors import InvalidInput

__all__ = [
    "CalculationResult",
    "RemoteET0",
    "LocalET0",
    "UserET0",
    "ET0Result",
    "expect_stage",
    "CLAMPED_TO_ZERO",
    "RELATIVE_SHORTWAVE_LIMITED",
    "RAINFALL_SURPLUS",
]

# Provenance flags
CLAMPED_TO_ZERO = "clamped_to_zero"
RELATIVE_SHORTWAVE_LIMITED = "relative_shortwave_limited"
RAINFALL_SURPLUS = "rainfall_surplus"


@dataclass(frozen=True)
class CalculationResult:
    """Output of a single calculator stage.

    ``inputs`` records the values the ``formula`` was evaluated with so a UI
    or audit log can show how ``value`` was obtained.
    """

    stage: str
    value: float
    unit: str
    formula: str
    inputs: Mapping[str, Any] = field(default_factory=dict)
    flags: tuple[str, ...] = ()

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags

    def as_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "value": self.value,
            "unit": self.unit,
            "formula": self.formula,
            "inputs": dict(self.inputs),
            "flags": list(self.flags),
        }


@dataclass(frozen=True)
class RemoteET0(CalculationResult):
    """ET₀ published by a remote meteorological service."""

    source: ClassVar[str] = "remote"

    def as_dict(self) -> Dict[str, Any]:
        data = super().as_dict()
        data["source"] = self.source
        return data


@dataclass(frozen=True)
class LocalET0(CalculationResult):
    """ET₀ estimated locally with FAO-56 Penman-Monteith."""

    source: ClassVar[str] = "local"

    @property
    def clamped(self) -> bool:
        """Return ``True`` if a negative estimate was raised to zero."""
        return CLAMPED_TO_ZERO in self.flags

    def as_dict(self) -> Dict[str, Any]:
        data = super().as_dict()
        data["source"] = self.source
        return data


@dataclass(frozen=True)
class UserET0(CalculationResult):
    """ET₀ typed in by a person rather than measured or estimated."""

    source: ClassVar[str] = "user"

    def as_dict(self) -> Dict[str, Any]:
        data = super().as_dict()
        data["source"] = self.source
        return data


ET0Result = Union[RemoteET0, LocalET0]


def expect_stage(
    result: Any, stage: str, *, consumer: str, field: str
) -> CalculationResult:
    """Return ``result`` if it was produced by ``stage``.

    Chained calculators only accept the output of the stage before them.
    """

    if not isinstance(result, CalculationResult) or result.stage != stage:
        raise InvalidInput(
            f"{consumer} requires a {stage} result", stage=consumer, field=field
        )
    return result
