"""Radiation terms for the daily FAO-56 energy balance.

Radiation values are in MJ m⁻² day⁻¹, latitudes in decimal degrees and
elevations in meters.
"""

from __future__ import annotations

import math

from .errors import InvalidInput
from .utils import require_finite, require_in_range, require_non_negative

__all__ = [
    "ALBEDO",
    "STEFAN_BOLTZMANN",
    "SOLAR_CONSTANT",
    "inverse_relative_distance",
    "solar_declination",
    "sunset_hour_angle",
    "extraterrestrial_radiation",
    "clear_sky_radiation",
    "net_shortwave_radiation",
    "relative_shortwave_radiation",
    "net_longwave_radiation",
    "net_radiation",
]

STAGE = "radiation"

ALBEDO = 0.23  # grass reference crop
STEFAN_BOLTZMANN = 4.903e-9  # MJ K⁻⁴ m⁻² day⁻¹
SOLAR_CONSTANT = 0.0820  # MJ m⁻² min⁻¹
MAX_SOLAR_RADIATION = 50.0


def _day_angle(day_of_year: int) -> float:
    j = require_in_range(day_of_year, 1, 366, stage=STAGE, field="day_of_year")
    return 2 * math.pi * j / 365


def _latitude_rad(latitude_deg: float) -> float:
    lat = require_in_range(latitude_deg, -90, 90, stage=STAGE, field="latitude_deg")
    return math.radians(lat)


def _solar_radiation(rs: float) -> float:
    value = require_non_negative(rs, stage=STAGE, field="solar_radiation")
    return require_in_range(
        value, 0, MAX_SOLAR_RADIATION, stage=STAGE, field="solar_radiation"
    )


def inverse_relative_distance(day_of_year: int) -> float:
    """Return the inverse relative Earth-Sun distance ``dr``."""
    return 1 + 0.033 * math.cos(_day_angle(day_of_year))


def solar_declination(day_of_year: int) -> float:
    """Return solar declination ``δ`` in radians."""
    return 0.409 * math.sin(_day_angle(day_of_year) - 1.39)


def sunset_hour_angle(latitude_deg: float, day_of_year: int) -> float:
    """Return the sunset hour angle ``ωs`` in radians.

    Beyond the polar circles the cosine argument leaves [-1, 1]; it is held
    at the bound so polar night yields 0 and midnight sun yields π.
    """

    phi = _latitude_rad(latitude_deg)
    delta = solar_declination(day_of_year)
    arg = -math.tan(phi) * math.tan(delta)
    return math.acos(min(1.0, max(-1.0, arg)))


def extraterrestrial_radiation(latitude_deg: float, day_of_year: int) -> float:
    """Return daily extraterrestrial radiation ``Ra`` (FAO-56 eq. 21)."""

    phi = _latitude_rad(latitude_deg)
    dr = inverse_relative_distance(day_of_year)
    delta = solar_declination(day_of_year)
    ws = sunset_hour_angle(latitude_deg, day_of_year)
    ra = (
        24 * 60 / math.pi
        * SOLAR_CONSTANT
        * dr
        * (
            ws * math.sin(phi) * math.sin(delta)
            + math.cos(phi) * math.cos(delta) * math.sin(ws)
        )
    )
    # Floating point noise around polar night
    return max(ra, 0.0)


def clear_sky_radiation(
    latitude_deg: float, day_of_year: int, elevation_m: float | None = None
) -> float:
    """Return clear-sky solar radiation ``Rso`` (FAO-56 eq. 37)."""

    ra = extraterrestrial_radiation(latitude_deg, day_of_year)
    z = 0.0 if elevation_m is None else require_in_range(
        elevation_m, -500, 9000, stage=STAGE, field="elevation_m"
    )
    return (0.75 + 2e-5 * z) * ra


def net_shortwave_radiation(solar_radiation: float, albedo: float = ALBEDO) -> float:
    """Return net shortwave radiation ``Rns = (1 - α) Rs``."""
    return (1 - albedo) * _solar_radiation(solar_radiation)


def relative_shortwave_radiation(
    solar_radiation: float, clear_sky: float
) -> tuple[float, bool]:
    """Return ``(Rs/Rso, limited)`` with the ratio limited to 1.0.

    ``limited`` is ``True`` when the measured radiation exceeded the clear-sky
    value and the ratio was held at 1.0.
    """

    rs = _solar_radiation(solar_radiation)
    rso = require_finite(clear_sky, stage=STAGE, field="clear_sky_radiation")
    if rso <= 0:
        raise InvalidInput(
            "clear-sky radiation is zero for this latitude and day of year",
            stage=STAGE,
            field="clear_sky_radiation",
        )
    ratio = rs / rso
    if ratio > 1.0:
        return 1.0, True
    return ratio, False


def net_longwave_radiation(
    temperature_max_c: float,
    temperature_min_c: float,
    actual_vapor_pressure_kpa: float,
    relative_shortwave: float,
) -> float:
    """Return net outgoing longwave radiation ``Rnl`` (FAO-56 eq. 39).

    ``relative_shortwave`` is ``Rs/Rso`` as returned by
    :func:`relative_shortwave_radiation`.
    """

    tmax_k = require_finite(temperature_max_c, stage=STAGE, field="temperature_max_c") + 273.16
    tmin_k = require_finite(temperature_min_c, stage=STAGE, field="temperature_min_c") + 273.16
    ea = require_non_negative(
        actual_vapor_pressure_kpa, stage=STAGE, field="actual_vapor_pressure"
    )
    ratio = require_non_negative(relative_shortwave, stage=STAGE, field="relative_shortwave")
    return (
        STEFAN_BOLTZMANN
        * (tmax_k**4 + tmin_k**4) / 2
        * (0.34 - 0.14 * math.sqrt(ea))
        * (1.35 * ratio - 0.35)
    )


def net_radiation(net_shortwave: float, net_longwave: float) -> float:
    """Return net radiation ``Rn = Rns - Rnl``."""
    return net_shortwave - net_longwave
