"""Evapotranspiration and drip irrigation sizing for vineyard blocks."""

from __future__ import annotations

from .config import EngineSettings, load_settings
from .crop_coefficients import (
    CROP_COEFFICIENTS,
    GrowthStage,
    calculate_etc,
    calculate_etc_volume,
    calculate_irrigation_need,
    recommend_irrigation,
    crop_evapotranspiration,
    effective_rainfall,
    etc_period_totals,
    get_crop_coefficient,
    seasonal_water_requirements,
    stage_for_month,
)
from .errors import (
    DivisionByZero,
    EngineError,
    InvalidGrowthStage,
    InvalidInput,
    MissingInput,
    OutOfRange,
    ZeroDischargeRate,
)
from .et_model import calculate_et0, calculate_et0_frame, penman_monteith
from .irrigation_sizing import (
    DripperSpacingLayout,
    FarmGeometryProfile,
    IrrigationSizing,
    PlantDripperLayout,
    RefillSpan,
    calculate_irrigation_duration,
    calculate_mad,
    calculate_refill_tank,
    calculate_system_discharge,
    size_irrigation,
)
from .resolver import resolve_et0, resolve_et0_frame
from .results import CalculationResult, LocalET0, RemoteET0, UserET0
from .schedule import (
    IrrigationSchedule,
    build_schedule,
    daily_runtime_hours,
    irrigation_interval_days,
)
from .weather import Confidence, WeatherReading, input_confidence

__all__ = [
    "EngineSettings",
    "load_settings",
    "CROP_COEFFICIENTS",
    "GrowthStage",
    "calculate_etc",
    "calculate_etc_volume",
    "calculate_irrigation_need",
    "recommend_irrigation",
    "crop_evapotranspiration",
    "effective_rainfall",
    "etc_period_totals",
    "get_crop_coefficient",
    "seasonal_water_requirements",
    "stage_for_month",
    "DivisionByZero",
    "EngineError",
    "InvalidGrowthStage",
    "InvalidInput",
    "MissingInput",
    "OutOfRange",
    "ZeroDischargeRate",
    "calculate_et0",
    "calculate_et0_frame",
    "penman_monteith",
    "DripperSpacingLayout",
    "FarmGeometryProfile",
    "IrrigationSizing",
    "PlantDripperLayout",
    "RefillSpan",
    "calculate_irrigation_duration",
    "calculate_mad",
    "calculate_refill_tank",
    "calculate_system_discharge",
    "size_irrigation",
    "resolve_et0",
    "resolve_et0_frame",
    "CalculationResult",
    "LocalET0",
    "RemoteET0",
    "UserET0",
    "IrrigationSchedule",
    "build_schedule",
    "daily_runtime_hours",
    "irrigation_interval_days",
    "WeatherReading",
    "Confidence",
    "input_confidence",
]
