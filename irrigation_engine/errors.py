"""Exceptions raised by the irrigation engine calculators."""

from __future__ import annotations

from typing import Any, Dict

__all__ = [
    "EngineError",
    "InvalidInput",
    "MissingInput",
    "DivisionByZero",
    "ZeroDischargeRate",
    "InvalidGrowthStage",
    "OutOfRange",
]


class EngineError(ValueError):
    """Base class for calculation failures.

    ``stage`` names the calculator that rejected the input and ``field`` the
    offending input so a form can highlight it.
    """

    code = "engine_error"

    def __init__(self, message: str, *, stage: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.field = field

    def as_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "stage": self.stage,
            "field": self.field,
            "message": self.message,
        }


class InvalidInput(EngineError):
    """Raised when a value lies outside its physically valid domain."""

    code = "invalid_input"


class OutOfRange(InvalidInput):
    """Raised when a value is present but outside a sanity bound."""

    code = "out_of_range"


class MissingInput(EngineError):
    """Raised when a required value is absent and cannot be derived."""

    code = "missing_input"


class DivisionByZero(EngineError):
    """Raised when a geometry input would force a division by zero."""

    code = "division_by_zero"


class ZeroDischargeRate(DivisionByZero):
    """Raised when an irrigation duration is requested for a zero discharge rate."""

    code = "zero_discharge_rate"


class InvalidGrowthStage(EngineError):
    """Raised for a growth stage outside the fixed enumeration."""

    code = "invalid_growth_stage"

    def __init__(self, stage_name: Any, *, stage: str = "crop_coefficient") -> None:
        super().__init__(
            f"Unknown growth stage: {stage_name!r}", stage=stage, field="growth_stage"
        )
        self.growth_stage = stage_name
