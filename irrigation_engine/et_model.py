"""FAO-56 Penman-Monteith reference evapotranspiration."""

from __future__ import annotations

import logging
from typing import Any, Dict

import numpy as np
import pandas as pd

from .errors import InvalidInput, MissingInput, OutOfRange
from .psychrometrics import (
    MAX_TEMPERATURE_C,
    MIN_TEMPERATURE_C,
    actual_vapor_pressure,
    atmospheric_pressure,
    psychrometric_constant,
    saturation_vapor_pressure,
    slope_vapor_pressure_curve,
)
from .radiation import (
    ALBEDO,
    STEFAN_BOLTZMANN,
    SOLAR_CONSTANT,
    clear_sky_radiation,
    net_longwave_radiation,
    net_radiation,
    net_shortwave_radiation,
    relative_shortwave_radiation,
)
from .results import CLAMPED_TO_ZERO, RELATIVE_SHORTWAVE_LIMITED, LocalET0
from .utils import (
    require_finite,
    require_in_range,
    require_non_negative,
    require_value,
)
from .weather import WeatherReading

__all__ = [
    "ET0_FORMULA",
    "penman_monteith",
    "calculate_et0",
    "calculate_et0_frame",
]

_LOGGER = logging.getLogger(__name__)

STAGE = "et0"
MAX_WIND_SPEED = 60.0
SOIL_HEAT_FLUX = 0.0  # daily timestep

ET0_FORMULA = (
    "[0.408*Δ*(Rn-G) + γ*(900/(T+273))*u2*(es-ea)] / [Δ + γ*(1+0.34*u2)]"
)


def penman_monteith(
    delta: float,
    net_rad: float,
    gamma: float,
    temperature_c: float,
    wind_speed: float,
    es: float,
    ea: float,
    soil_heat_flux: float = SOIL_HEAT_FLUX,
) -> float:
    """Return the unclamped FAO-56 ET₀ (mm/day) from precomputed terms."""

    numerator = (
        0.408 * delta * (net_rad - soil_heat_flux)
        + gamma * (900 / (temperature_c + 273)) * wind_speed * (es - ea)
    )
    denominator = delta + gamma * (1 + 0.34 * wind_speed)
    return numerator / denominator


def _pressure(reading: WeatherReading) -> float:
    if reading.pressure_kpa is not None:
        return reading.pressure_kpa
    if reading.elevation_m is not None:
        return atmospheric_pressure(reading.elevation_m)
    raise MissingInput(
        "pressure_kpa or elevation_m is required to derive the psychrometric constant",
        stage=STAGE,
        field="elevation_m",
    )


def _temperature_extremes(reading: WeatherReading, mean: float) -> tuple[float, float]:
    tmax = mean if reading.temperature_max_c is None else reading.temperature_max_c
    tmin = mean if reading.temperature_min_c is None else reading.temperature_min_c
    tmax = require_in_range(
        tmax, MIN_TEMPERATURE_C, MAX_TEMPERATURE_C, stage=STAGE, field="temperature_max_c"
    )
    tmin = require_in_range(
        tmin, MIN_TEMPERATURE_C, MAX_TEMPERATURE_C, stage=STAGE, field="temperature_min_c"
    )
    if tmax < tmin:
        raise InvalidInput(
            "temperature_max_c must not be below temperature_min_c",
            stage=STAGE,
            field="temperature_max_c",
        )
    return tmax, tmin


def calculate_et0(reading: WeatherReading) -> LocalET0:
    """Return ET₀ (mm/day) estimated from ``reading``.

    Negative estimates, which night-dominated or saturated conditions can
    produce, are returned as ``0.0`` with the ``clamped_to_zero`` flag set.
    """

    t = require_finite(reading.temperature_c, stage=STAGE, field="temperature_c")
    rh = require_finite(
        reading.relative_humidity_pct, stage=STAGE, field="relative_humidity_pct"
    )
    u2 = require_finite(reading.wind_speed_2m_mps, stage=STAGE, field="wind_speed_2m_mps")
    rs = require_finite(
        reading.solar_radiation_mj_m2_day, stage=STAGE, field="solar_radiation_mj_m2_day"
    )
    pressure = _pressure(reading)
    latitude = require_value(reading.latitude_deg, stage=STAGE, field="latitude_deg")
    day_of_year = require_value(reading.day_of_year, stage=STAGE, field="day_of_year")

    u2 = require_non_negative(u2, stage=STAGE, field="wind_speed_2m_mps")
    u2 = require_in_range(u2, 0, MAX_WIND_SPEED, stage=STAGE, field="wind_speed_2m_mps")

    es = saturation_vapor_pressure(t)
    ea = actual_vapor_pressure(t, rh)
    delta = slope_vapor_pressure_curve(t)
    gamma = psychrometric_constant(pressure)

    rso = clear_sky_radiation(latitude, day_of_year, reading.elevation_m)
    ratio, limited = relative_shortwave_radiation(rs, rso)
    tmax, tmin = _temperature_extremes(reading, t)
    rns = net_shortwave_radiation(rs)
    rnl = net_longwave_radiation(tmax, tmin, ea, ratio)
    rn = net_radiation(rns, rnl)

    et0 = penman_monteith(delta, rn, gamma, t, u2, es, ea)

    flags: list[str] = []
    if limited:
        flags.append(RELATIVE_SHORTWAVE_LIMITED)
    if et0 < 0:
        _LOGGER.debug("Clamping negative ET0 %.4f mm/day to zero", et0)
        et0 = 0.0
        flags.append(CLAMPED_TO_ZERO)

    inputs: Dict[str, Any] = {
        "temperature_c": t,
        "relative_humidity_pct": rh,
        "wind_speed_2m_mps": u2,
        "solar_radiation_mj_m2_day": rs,
        "pressure_kpa": pressure,
        "es": es,
        "ea": ea,
        "delta": delta,
        "gamma": gamma,
        "rso": rso,
        "rns": rns,
        "rnl": rnl,
        "rn": rn,
        "g": SOIL_HEAT_FLUX,
    }
    return LocalET0(
        stage=STAGE,
        value=et0,
        unit="mm/day",
        formula=ET0_FORMULA,
        inputs=inputs,
        flags=tuple(flags),
    )


_COLUMN_BOUNDS = {
    "temperature_c": (MIN_TEMPERATURE_C, MAX_TEMPERATURE_C),
    "temperature_max_c": (MIN_TEMPERATURE_C, MAX_TEMPERATURE_C),
    "temperature_min_c": (MIN_TEMPERATURE_C, MAX_TEMPERATURE_C),
    "wind_speed_2m_mps": (0.0, MAX_WIND_SPEED),
    "solar_radiation_mj_m2_day": (0.0, 50.0),
    "latitude_deg": (-90.0, 90.0),
    "day_of_year": (1.0, 366.0),
    "elevation_m": (-500.0, 9000.0),
    "pressure_kpa": (1e-9, 120.0),
}


def _column(frame: pd.DataFrame, name: str, *, required: bool = True) -> pd.Series:
    """Return column ``name`` as floats.

    Optional columns may be absent or hold blank cells, which come back as
    NaN for the caller to fill per row.
    """
    if name not in frame.columns:
        if not required:
            return pd.Series(np.nan, index=frame.index, dtype=float)
        raise MissingInput(f"column {name} is required", stage=STAGE, field=name)
    series = pd.to_numeric(frame[name], errors="coerce").astype(float)
    missing = series.isna()
    if required and missing.any():
        row = series.index[missing.to_numpy()][0]
        raise MissingInput(f"{name} is missing for row {row!r}", stage=STAGE, field=name)
    if np.isinf(series.to_numpy()).any():
        raise InvalidInput(f"{name} must be finite", stage=STAGE, field=name)
    bounds = _COLUMN_BOUNDS.get(name)
    if bounds is not None:
        low, high = bounds
        present = series[~missing]
        if (present < 0).any() and low >= 0:
            raise InvalidInput(f"{name} must be non-negative", stage=STAGE, field=name)
        if ((present < low) | (present > high)).any():
            raise OutOfRange(f"{name} is outside [{low}, {high}]", stage=STAGE, field=name)
    return series


def calculate_et0_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Vectorized :func:`calculate_et0` over daily weather rows.

    ``frame`` uses the :class:`~irrigation_engine.weather.WeatherReading`
    attribute names as columns. Every row needs ``pressure_kpa`` or
    ``elevation_m``; blank ``temperature_max_c``/``temperature_min_c`` cells
    fall back to ``temperature_c``. The result has the columns ``et0_mm_day``,
    ``clamped`` and ``relative_shortwave_limited`` on the input index.
    """

    temp = _column(frame, "temperature_c")
    rh = _column(frame, "relative_humidity_pct")
    wind = _column(frame, "wind_speed_2m_mps")
    solar = _column(frame, "solar_radiation_mj_m2_day")
    lat = _column(frame, "latitude_deg")
    doy = _column(frame, "day_of_year")

    if ((rh < 0) | (rh > 100)).any():
        raise InvalidInput(
            "relative_humidity_pct must lie within [0, 100]",
            stage=STAGE,
            field="relative_humidity_pct",
        )

    elevation = _column(frame, "elevation_m", required=False)
    pressure = _column(frame, "pressure_kpa", required=False)
    pressure = pressure.fillna(101.3 * ((293 - 0.0065 * elevation) / 293) ** 5.26)
    if pressure.isna().any():
        row = pressure.index[pressure.isna().to_numpy()][0]
        raise MissingInput(
            f"pressure_kpa or elevation_m is required for row {row!r}",
            stage=STAGE,
            field="elevation_m",
        )
    # Rso falls back to sea level where no elevation is known
    elevation = elevation.fillna(0.0)

    tmax = _column(frame, "temperature_max_c", required=False).fillna(temp)
    tmin = _column(frame, "temperature_min_c", required=False).fillna(temp)
    if (tmax < tmin).any():
        raise InvalidInput(
            "temperature_max_c must not be below temperature_min_c",
            stage=STAGE,
            field="temperature_max_c",
        )

    es = 0.6108 * np.exp((17.27 * temp) / (temp + 237.3))
    ea = es * (rh / 100)
    delta = 4098 * es / ((temp + 237.3) ** 2)
    gamma = 0.000665 * pressure

    day_angle = 2 * np.pi * doy / 365
    dr = 1 + 0.033 * np.cos(day_angle)
    decl = 0.409 * np.sin(day_angle - 1.39)
    phi = np.radians(lat)
    ws = np.arccos(np.clip(-np.tan(phi) * np.tan(decl), -1.0, 1.0))
    ra = (
        24 * 60 / np.pi
        * SOLAR_CONSTANT
        * dr
        * (ws * np.sin(phi) * np.sin(decl) + np.cos(phi) * np.cos(decl) * np.sin(ws))
    ).clip(lower=0.0)
    rso = (0.75 + 2e-5 * elevation) * ra
    if (rso <= 0).any():
        raise InvalidInput(
            "clear-sky radiation is zero for this latitude and day of year",
            stage=STAGE,
            field="clear_sky_radiation",
        )

    ratio = solar / rso
    limited = ratio > 1.0
    ratio = ratio.where(~limited, 1.0)

    rns = (1 - ALBEDO) * solar
    rnl = (
        STEFAN_BOLTZMANN
        * ((tmax + 273.16) ** 4 + (tmin + 273.16) ** 4) / 2
        * (0.34 - 0.14 * np.sqrt(ea))
        * (1.35 * ratio - 0.35)
    )
    rn = rns - rnl

    et0 = penman_monteith(delta, rn, gamma, temp, wind, es, ea)
    clamped = et0 < 0
    if clamped.any():
        _LOGGER.debug("Clamping %d negative ET0 values to zero", int(clamped.sum()))

    return pd.DataFrame(
        {
            "et0_mm_day": et0.where(~clamped, 0.0),
            "clamped": clamped,
            "relative_shortwave_limited": limited,
        },
        index=frame.index,
    )
