"""Psychrometric primitives from FAO-56 chapter 3.

All temperatures are in °C and pressures in kPa.
"""

from __future__ import annotations

import math

from .errors import InvalidInput, OutOfRange
from .utils import require_finite, require_in_range

__all__ = [
    "MIN_TEMPERATURE_C",
    "MAX_TEMPERATURE_C",
    "saturation_vapor_pressure",
    "actual_vapor_pressure",
    "vapor_pressure_deficit",
    "slope_vapor_pressure_curve",
    "atmospheric_pressure",
    "psychrometric_constant",
]

STAGE = "psychrometrics"

MIN_TEMPERATURE_C = -50.0
MAX_TEMPERATURE_C = 60.0
MIN_ELEVATION_M = -500.0
MAX_ELEVATION_M = 9000.0
MAX_PRESSURE_KPA = 120.0

# FAO-56 eq. 8 coefficient, cp / (epsilon * lambda)
PSYCHROMETRIC_COEFFICIENT = 0.000665


def _temperature(temperature_c: float) -> float:
    return require_in_range(
        temperature_c,
        MIN_TEMPERATURE_C,
        MAX_TEMPERATURE_C,
        stage=STAGE,
        field="temperature_c",
    )


def saturation_vapor_pressure(temperature_c: float) -> float:
    """Return saturation vapor pressure ``es`` (kPa) at ``temperature_c``."""

    t = _temperature(temperature_c)
    return 0.6108 * math.exp((17.27 * t) / (t + 237.3))


def actual_vapor_pressure(temperature_c: float, rh_percent: float) -> float:
    """Return actual vapor pressure ``ea`` (kPa) from relative humidity."""

    rh = require_finite(rh_percent, stage=STAGE, field="rh_percent")
    if not 0 <= rh <= 100:
        raise InvalidInput(
            f"rh_percent={rh} must lie within [0, 100]", stage=STAGE, field="rh_percent"
        )
    return (rh / 100) * saturation_vapor_pressure(temperature_c)


def vapor_pressure_deficit(temperature_c: float, rh_percent: float) -> float:
    """Return ``es - ea`` (kPa)."""

    es = saturation_vapor_pressure(temperature_c)
    return es - actual_vapor_pressure(temperature_c, rh_percent)


def slope_vapor_pressure_curve(temperature_c: float) -> float:
    """Return the slope ``Δ`` (kPa/°C) of the saturation vapor pressure curve."""

    t = _temperature(temperature_c)
    es = saturation_vapor_pressure(t)
    return 4098 * es / (t + 237.3) ** 2


def atmospheric_pressure(elevation_m: float) -> float:
    """Return mean atmospheric pressure (kPa) for ``elevation_m`` above sea level."""

    z = require_in_range(
        elevation_m, MIN_ELEVATION_M, MAX_ELEVATION_M, stage=STAGE, field="elevation_m"
    )
    return 101.3 * ((293 - 0.0065 * z) / 293) ** 5.26


def psychrometric_constant(pressure_kpa: float) -> float:
    """Return the psychrometric constant ``γ`` (kPa/°C) for ``pressure_kpa``."""

    p = require_finite(pressure_kpa, stage=STAGE, field="pressure_kpa")
    if not 0 < p <= MAX_PRESSURE_KPA:
        raise OutOfRange(
            f"pressure_kpa={p} is outside (0, {MAX_PRESSURE_KPA}]",
            stage=STAGE,
            field="pressure_kpa",
        )
    return PSYCHROMETRIC_COEFFICIENT * p
