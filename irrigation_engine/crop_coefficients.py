"""Grapevine crop coefficients and crop evapotranspiration (ETc)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping

import pandas as pd

from .errors import InvalidGrowthStage, InvalidInput
from .results import RAINFALL_SURPLUS, CalculationResult, expect_stage
from .utils import (
    normalize_key,
    require_in_range,
    require_non_negative,
    require_positive,
)

__all__ = [
    "GrowthStage",
    "CROP_COEFFICIENTS",
    "DEFAULT_STAGE_DAYS",
    "RAINFALL_EFFICIENCY",
    "get_crop_coefficient",
    "crop_evapotranspiration",
    "calculate_etc",
    "calculate_etc_volume",
    "etc_period_totals",
    "effective_rainfall",
    "calculate_irrigation_need",
    "stage_for_month",
    "seasonal_water_requirements",
    "IRRIGATION_THRESHOLDS",
    "IrrigationRecommendation",
    "recommend_irrigation",
]

_LOGGER = logging.getLogger(__name__)


class GrowthStage(str, Enum):
    """Phenological stages of the grapevine season."""

    BUDBREAK = "budbreak"
    LEAF_DEVELOPMENT = "leaf_development"
    FLOWERING = "flowering"
    FRUIT_SET = "fruit_set"
    VERAISON = "veraison"
    HARVEST = "harvest"
    POST_HARVEST = "post_harvest"
    DORMANT = "dormant"

    @classmethod
    def parse(cls, value: Any) -> "GrowthStage":
        """Return the stage for ``value`` or raise :class:`InvalidGrowthStage`.

        Labels such as ``"Fruit set"`` or ``"post-harvest"`` are accepted.
        """

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidGrowthStage(value)
        try:
            return cls(normalize_key(value))
        except ValueError:
            raise InvalidGrowthStage(value) from None


CROP_COEFFICIENTS: Mapping[GrowthStage, float] = MappingProxyType(
    {
        GrowthStage.BUDBREAK: 0.3,
        GrowthStage.LEAF_DEVELOPMENT: 0.5,
        GrowthStage.FLOWERING: 0.7,
        GrowthStage.FRUIT_SET: 0.8,
        GrowthStage.VERAISON: 0.8,
        GrowthStage.HARVEST: 0.6,
        GrowthStage.POST_HARVEST: 0.4,
        GrowthStage.DORMANT: 0.2,
    }
)

# Typical stage lengths for a single season, in days
DEFAULT_STAGE_DAYS: Mapping[GrowthStage, int] = MappingProxyType(
    {
        GrowthStage.DORMANT: 90,
        GrowthStage.BUDBREAK: 30,
        GrowthStage.FLOWERING: 30,
        GrowthStage.FRUIT_SET: 60,
        GrowthStage.VERAISON: 60,
        GrowthStage.HARVEST: 30,
        GrowthStage.POST_HARVEST: 60,
    }
)

# Northern hemisphere calendar, month -> stage
_MONTH_STAGES: Mapping[int, GrowthStage] = MappingProxyType(
    {
        1: GrowthStage.DORMANT,
        2: GrowthStage.DORMANT,
        3: GrowthStage.BUDBREAK,
        4: GrowthStage.FLOWERING,
        5: GrowthStage.FRUIT_SET,
        6: GrowthStage.FRUIT_SET,
        7: GrowthStage.VERAISON,
        8: GrowthStage.VERAISON,
        9: GrowthStage.HARVEST,
        10: GrowthStage.HARVEST,
        11: GrowthStage.POST_HARVEST,
        12: GrowthStage.DORMANT,
    }
)

RAINFALL_EFFICIENCY = 0.8

ETC_FORMULA = "ETc = ET0 * Kc"
VOLUME_FORMULA = "liters/day = ETc * area_m2"
NEED_FORMULA = "need = max(0, ETc - rainfall * efficiency)"


def get_crop_coefficient(stage: GrowthStage | str) -> float:
    """Return the crop coefficient ``Kc`` for ``stage``."""
    return CROP_COEFFICIENTS[GrowthStage.parse(stage)]


def crop_evapotranspiration(et0_mm_day: float, kc: float) -> float:
    """Return ``ET0 * Kc`` (mm/day)."""

    et0 = require_non_negative(et0_mm_day, stage="etc", field="et0_mm_day")
    coefficient = require_non_negative(kc, stage="etc", field="kc")
    return et0 * coefficient


def calculate_etc(et0: CalculationResult, stage: GrowthStage | str) -> CalculationResult:
    """Return crop evapotranspiration for an ET₀ result and growth stage.

    ``et0`` is the output of :func:`~irrigation_engine.resolver.resolve_et0`
    or :func:`~irrigation_engine.et_model.calculate_et0`; its source is
    carried into the provenance.
    """

    et0 = expect_stage(et0, "et0", consumer="etc", field="et0")
    growth_stage = GrowthStage.parse(stage)
    kc = CROP_COEFFICIENTS[growth_stage]
    value = crop_evapotranspiration(et0.value, kc)
    return CalculationResult(
        stage="etc",
        value=value,
        unit="mm/day",
        formula=ETC_FORMULA,
        inputs={
            "et0_mm_day": et0.value,
            "et0_source": getattr(et0, "source", None),
            "growth_stage": growth_stage.value,
            "kc": kc,
        },
    )


def calculate_etc_volume(etc: CalculationResult, area_m2: float) -> CalculationResult:
    """Return the daily crop water demand in liters over ``area_m2``.

    One millimeter of water over one square meter is one liter.
    """

    etc = expect_stage(etc, "etc", consumer="etc_volume", field="etc")
    area = require_positive(area_m2, stage="etc_volume", field="area_m2")
    return CalculationResult(
        stage="etc_volume",
        value=etc.value * area,
        unit="L/day",
        formula=VOLUME_FORMULA,
        inputs={"etc_mm_day": etc.value, "area_m2": area},
    )


def etc_period_totals(etc: CalculationResult) -> Dict[str, float]:
    """Return daily, weekly and monthly ETc totals in mm."""

    etc = expect_stage(etc, "etc", consumer="etc_totals", field="etc")
    return {
        "daily_mm": etc.value,
        "weekly_mm": etc.value * 7,
        "monthly_mm": etc.value * 30,
    }


def effective_rainfall(rainfall_mm: float, efficiency: float = RAINFALL_EFFICIENCY) -> float:
    """Return the share of ``rainfall_mm`` that reaches the root zone."""

    rain = require_non_negative(rainfall_mm, stage="irrigation_need", field="rainfall_mm")
    eff = require_in_range(efficiency, 0, 1, stage="irrigation_need", field="efficiency")
    return rain * eff


def calculate_irrigation_need(
    etc: CalculationResult,
    rainfall_mm: float | None = None,
    *,
    efficiency: float = RAINFALL_EFFICIENCY,
) -> CalculationResult:
    """Return the net irrigation depth (mm/day) after effective rainfall.

    When rainfall covers the full demand the need is ``0.0`` and the
    ``rainfall_surplus`` flag is set.
    """

    etc = expect_stage(etc, "etc", consumer="irrigation_need", field="etc")
    rain = 0.0 if rainfall_mm is None else rainfall_mm
    effective = effective_rainfall(rain, efficiency)
    need = etc.value - effective
    flags: tuple[str, ...] = ()
    if need < 0:
        _LOGGER.debug("Effective rainfall %.2f mm exceeds ETc %.2f mm", effective, etc.value)
        need = 0.0
        flags = (RAINFALL_SURPLUS,)
    return CalculationResult(
        stage="irrigation_need",
        value=need,
        unit="mm/day",
        formula=NEED_FORMULA,
        inputs={
            "etc_mm_day": etc.value,
            "rainfall_mm": float(rain),
            "efficiency": efficiency,
            "effective_rainfall_mm": effective,
        },
        flags=flags,
    )


def stage_for_month(month: int) -> GrowthStage:
    """Return the calendar growth stage of a northern hemisphere vineyard."""

    value = require_in_range(month, 1, 12, stage="crop_coefficient", field="month")
    if value != int(value):
        raise InvalidInput("month must be a whole number", stage="crop_coefficient", field="month")
    return _MONTH_STAGES[int(value)]


def seasonal_water_requirements(
    et0_mm_day: float,
    stage_days: Mapping[GrowthStage | str, int] | None = None,
) -> pd.DataFrame:
    """Return per-stage crop water requirements for a season.

    Parameters
    ----------
    et0_mm_day : float
        Average reference ET used for every stage.
    stage_days : Mapping, optional
        Stage lengths in days. Defaults to :data:`DEFAULT_STAGE_DAYS`.

    The returned frame has the columns ``stage``, ``days``, ``kc``,
    ``etc_mm_day`` and ``total_etc_mm``.
    """

    et0 = require_non_negative(et0_mm_day, stage="etc", field="et0_mm_day")
    days_map = DEFAULT_STAGE_DAYS if stage_days is None else stage_days

    rows = []
    for stage, days in days_map.items():
        growth_stage = GrowthStage.parse(stage)
        field = f"{growth_stage.value}_days"
        length = require_non_negative(days, stage="etc", field=field)
        if length != int(length):
            raise InvalidInput(
                f"{field} must be a whole number of days, got {length}",
                stage="etc",
                field=field,
            )
        kc = CROP_COEFFICIENTS[growth_stage]
        etc = crop_evapotranspiration(et0, kc)
        rows.append(
            {
                "stage": growth_stage.value,
                "days": int(length),
                "kc": kc,
                "etc_mm_day": etc,
                "total_etc_mm": etc * int(length),
            }
        )
    return pd.DataFrame(rows, columns=["stage", "days", "kc", "etc_mm_day", "total_etc_mm"])


# Minimum net need (mm/day) before irrigating; ``None`` means never
DEFAULT_IRRIGATION_THRESHOLD = 2.0
IRRIGATION_THRESHOLDS: Mapping[GrowthStage, float | None] = MappingProxyType(
    {
        GrowthStage.FLOWERING: 1.5,
        GrowthStage.FRUIT_SET: 1.5,
        GrowthStage.VERAISON: 3.0,
        GrowthStage.DORMANT: None,
    }
)
RAINFALL_SKIP_MM = 10.0

_STAGE_NOTES: Mapping[GrowthStage, str] = MappingProxyType(
    {
        GrowthStage.FLOWERING: "Critical growth stage - maintain consistent moisture",
        GrowthStage.FRUIT_SET: "Critical growth stage - maintain consistent moisture",
        GrowthStage.VERAISON: "Veraison stage - controlled water stress improves fruit quality",
        GrowthStage.DORMANT: "Dormant season - irrigation not recommended",
    }
)

IRRIGATION_METHODS = ("drip", "sprinkler", "surface")


@dataclass(frozen=True)
class IrrigationRecommendation:
    """Whether and how often to irrigate for one day of net demand."""

    should_irrigate: bool
    need_mm_day: float
    threshold_mm_day: float | None
    growth_stage: GrowthStage
    frequency: str
    notes: tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "should_irrigate": self.should_irrigate,
            "need_mm_day": self.need_mm_day,
            "threshold_mm_day": self.threshold_mm_day,
            "growth_stage": self.growth_stage.value,
            "frequency": self.frequency,
            "notes": list(self.notes),
        }


def _frequency(need: float, method: str, soil_type: str | None) -> str:
    if soil_type == "sandy":
        return "more frequent, shorter durations"
    if soil_type == "clay":
        return "less frequent, longer durations"
    if method == "drip":
        return "daily" if need > 4 else "every 2 days"
    if method == "sprinkler":
        return "every 2-3 days"
    return "weekly"


def recommend_irrigation(
    need: CalculationResult,
    stage: GrowthStage | str,
    *,
    rainfall_mm: float | None = None,
    method: str = "drip",
    soil_type: str | None = None,
    relative_humidity_pct: float | None = None,
    wind_speed_2m_mps: float | None = None,
) -> IrrigationRecommendation:
    """Return an irrigate/skip decision for a net irrigation need.

    ``need`` is the output of :func:`calculate_irrigation_need`. Each growth
    stage has its own threshold; dormant vines are never irrigated and more
    than 10 mm of rainfall skips the day. When ``rainfall_mm`` is omitted the
    rainfall recorded in ``need`` is used.
    """

    stage_name = "irrigation_recommendation"
    need = expect_stage(need, "irrigation_need", consumer=stage_name, field="need")
    growth_stage = GrowthStage.parse(stage)
    method_key = normalize_key(method)
    if method_key not in IRRIGATION_METHODS:
        raise InvalidInput(
            f"Unknown irrigation method: {method!r}", stage=stage_name, field="method"
        )
    soil = normalize_key(soil_type) if soil_type else None
    if rainfall_mm is None:
        rainfall_mm = need.inputs.get("rainfall_mm", 0.0)
    rain = require_non_negative(rainfall_mm, stage=stage_name, field="rainfall_mm")

    threshold = IRRIGATION_THRESHOLDS.get(growth_stage, DEFAULT_IRRIGATION_THRESHOLD)
    should_irrigate = threshold is not None and need.value > threshold

    notes: list[str] = []
    if growth_stage in _STAGE_NOTES:
        notes.append(_STAGE_NOTES[growth_stage])
    if should_irrigate and soil == "sandy":
        notes.append("Sandy soil - increase frequency, reduce duration")
    elif should_irrigate and soil == "clay":
        notes.append("Clay soil - longer intervals, deeper watering")
    if relative_humidity_pct is not None and relative_humidity_pct > 80:
        notes.append("High humidity - monitor for disease risk")
    if wind_speed_2m_mps is not None and wind_speed_2m_mps > 5:
        notes.append("Windy conditions - may increase water loss")
    if rain > RAINFALL_SKIP_MM:
        should_irrigate = False
        notes.append("Recent rainfall - irrigation not needed")

    frequency = _frequency(need.value, method_key, soil) if should_irrigate else "as needed"
    return IrrigationRecommendation(
        should_irrigate=should_irrigate,
        need_mm_day=need.value,
        threshold_mm_day=threshold,
        growth_stage=growth_stage,
        frequency=frequency,
        notes=tuple(notes),
    )
