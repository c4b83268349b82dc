"""Weather reading consumed by the ET₀ calculators."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping

import voluptuous as vol

from .utils import coerce_mapping

__all__ = [
    "WeatherReading",
    "WEATHER_FIELD_ALIASES",
    "WEATHER_SCHEMA",
    "Confidence",
    "input_confidence",
]

_LOGGER = logging.getLogger(__name__)

STAGE = "weather_reading"

# Request/form keys accepted in addition to the attribute names
WEATHER_FIELD_ALIASES: Dict[str, str] = {
    "temperatureC": "temperature_c",
    "temperatureMaxC": "temperature_max_c",
    "temperatureMinC": "temperature_min_c",
    "relativeHumidityPct": "relative_humidity_pct",
    "windSpeed2m_mps": "wind_speed_2m_mps",
    "solarRadiation_MJm2day": "solar_radiation_mj_m2_day",
    "elevation_m": "elevation_m",
    "pressure_kPa": "pressure_kpa",
    "latitude_deg": "latitude_deg",
    "dayOfYear": "day_of_year",
    "rainfall_mm": "rainfall_mm",
    "remoteET0_mmday": "remote_et0_mm_day",
}


def _lenient_float(value: Any) -> float | None:
    """Return ``value`` as float or ``None`` when it is not numeric."""

    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        _LOGGER.debug("Discarding non-numeric remote ET0 value %r", value)
        return None


_NUMBER = vol.Coerce(float)


def _whole_number(value: float) -> int:
    if not math.isfinite(value) or value != int(value):
        raise vol.Invalid(f"expected a whole number, got {value}")
    return int(value)


WEATHER_SCHEMA = vol.Schema(
    {
        vol.Optional("temperature_c"): _NUMBER,
        vol.Optional("temperature_max_c"): _NUMBER,
        vol.Optional("temperature_min_c"): _NUMBER,
        vol.Optional("relative_humidity_pct"): _NUMBER,
        vol.Optional("wind_speed_2m_mps"): _NUMBER,
        vol.Optional("solar_radiation_mj_m2_day"): _NUMBER,
        vol.Optional("elevation_m"): _NUMBER,
        vol.Optional("pressure_kpa"): _NUMBER,
        vol.Optional("latitude_deg"): _NUMBER,
        vol.Optional("day_of_year"): vol.All(vol.Coerce(float), _whole_number),
        vol.Optional("rainfall_mm"): _NUMBER,
        vol.Optional("remote_et0_mm_day"): _lenient_float,
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True)
class WeatherReading:
    """Daily weather observation for one location.

    Every field is optional at construction time; calculators raise
    :class:`~irrigation_engine.errors.MissingInput` for the values they need.
    ``remote_et0_mm_day`` is the ET₀ already published by a meteorological
    service, if the caller managed to fetch one.
    """

    temperature_c: float | None = None
    relative_humidity_pct: float | None = None
    wind_speed_2m_mps: float | None = None
    solar_radiation_mj_m2_day: float | None = None
    elevation_m: float | None = None
    pressure_kpa: float | None = None
    latitude_deg: float | None = None
    day_of_year: int | None = None
    temperature_max_c: float | None = None
    temperature_min_c: float | None = None
    rainfall_mm: float | None = None
    remote_et0_mm_day: float | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WeatherReading":
        """Build a reading from a request or form payload."""

        values = coerce_mapping(data, WEATHER_SCHEMA, WEATHER_FIELD_ALIASES, stage=STAGE)
        return cls(**values)

    @property
    def has_remote_et0(self) -> bool:
        """Return ``True`` when a finite remote ET₀ is attached."""

        value = self.remote_et0_mm_day
        if value is None or isinstance(value, bool):
            return False
        try:
            return math.isfinite(value)
        except TypeError:
            return False

    def with_site_defaults(
        self,
        *,
        elevation_m: float | None = None,
        latitude_deg: float | None = None,
    ) -> "WeatherReading":
        """Return a copy with missing site fields filled in."""

        changes: Dict[str, Any] = {}
        if self.elevation_m is None and self.pressure_kpa is None and elevation_m is not None:
            changes["elevation_m"] = elevation_m
        if self.latitude_deg is None and latitude_deg is not None:
            changes["latitude_deg"] = latitude_deg
        return replace(self, **changes) if changes else self

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Confidence(str, Enum):
    """Data quality rating of a reading."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _is_set(value: Any) -> bool:
    return value is not None and math.isfinite(value)


def input_confidence(reading: WeatherReading) -> Confidence:
    """Rate how complete ``reading`` is for an ETc recommendation.

    Measured solar radiation counts twice; rainfall, humidity, wind, a
    non-zero elevation and a non-zero latitude count once each. Six points
    or more is ``high``, four or five ``medium``.
    """

    score = 0
    if _is_set(reading.solar_radiation_mj_m2_day):
        score += 2
    if _is_set(reading.rainfall_mm):
        score += 1
    if _is_set(reading.relative_humidity_pct) and reading.relative_humidity_pct > 0:
        score += 1
    if _is_set(reading.wind_speed_2m_mps) and reading.wind_speed_2m_mps >= 0:
        score += 1
    if _is_set(reading.elevation_m) and reading.elevation_m > 0:
        score += 1
    if _is_set(reading.latitude_deg) and reading.latitude_deg != 0:
        score += 1

    if score >= 6:
        return Confidence.HIGH
    if score >= 4:
        return Confidence.MEDIUM
    return Confidence.LOW
