"""Drip irrigation sizing from vineyard geometry.

The chain runs in a fixed order and each step consumes the previous result:

1. :func:`calculate_mad` - maximum allowable deficit of the root zone
2. :func:`calculate_refill_tank` - share of MAD replaced per cycle
3. :func:`calculate_system_discharge` - application rate of the drip system,
   from either a :class:`PlantDripperLayout` or a :class:`DripperSpacingLayout`
4. :func:`calculate_irrigation_duration` - hours needed to apply the refill

MAD and refill tank are water depths in mm (L/m²), the discharge is an
application rate in mm/h and the duration is in hours.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Union

import voluptuous as vol

from .errors import InvalidInput, MissingInput, ZeroDischargeRate
from .results import CalculationResult, expect_stage
from .utils import (
    coerce_mapping,
    normalize_key,
    require_finite,
    require_non_negative,
    require_nonzero_divisor,
    require_positive,
)

__all__ = [
    "RefillSpan",
    "REFILL_SPAN_FACTORS",
    "FarmGeometryProfile",
    "PlantDripperLayout",
    "DripperSpacingLayout",
    "DischargeLayout",
    "IrrigationSizing",
    "maximum_allowable_deficit",
    "calculate_mad",
    "calculate_refill_tank",
    "calculate_system_discharge",
    "calculate_irrigation_duration",
    "size_irrigation",
]

_LOGGER = logging.getLogger(__name__)

MAD_FORMULA = "MAD = (100/DBL) * rootDepth * rootWidth * waterRetention * 100 / 10000"
REFILL_FORMULA = "refillTank = MAD * refillSpanFactor"
PLANT_DRIPPER_FORMULA = (
    "plantsPerUnitArea = 10000 / (DBL * DBP); "
    "dischargeRate = plantsPerUnitArea * drippersPerPlant * dischargePerDripper / 10000"
)
DRIPPER_SPACING_FORMULA = (
    "dischargeRate = (100/DBL) * (100/DBD) * dischargePerDripper * numberOfLines / 10000"
)
DURATION_FORMULA = "hours = refillTank / dischargeRate"


class RefillSpan(str, Enum):
    """Growth intensity category selecting the refill span factor."""

    HEAVY_GROWTH = "heavy_growth"
    GROWTH_PERIOD = "growth_period"
    CONTROLLED_STRESS = "controlled_stress"

    @classmethod
    def parse(cls, value: Any) -> "RefillSpan":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(normalize_key(value))
            except ValueError:
                pass
        raise InvalidInput(
            f"Unknown refill span category: {value!r}",
            stage="refill_tank",
            field="refill_span",
        )


REFILL_SPAN_FACTORS: Mapping[RefillSpan, float] = MappingProxyType(
    {
        RefillSpan.HEAVY_GROWTH: 0.2,
        RefillSpan.GROWTH_PERIOD: 0.3,
        RefillSpan.CONTROLLED_STRESS: 0.4,
    }
)


_GEOMETRY_ALIASES: Dict[str, str] = {
    "dbl": "dbl",
    "dbp": "dbp",
    "dbd": "dbd",
    "rootDepth": "root_depth_m",
    "rootWidth": "root_width_m",
    "waterRetentionPct": "water_retention_pct",
    "drippersPerPlant": "drippers_per_plant",
    "dischargePerDripperLph": "discharge_per_dripper_lph",
    "numberOfLines": "number_of_lines",
    "areaM2": "area_m2",
}

_NUMBER = vol.Coerce(float)

GEOMETRY_SCHEMA = vol.Schema(
    {
        vol.Required("dbl"): vol.Coerce(float),
        vol.Required("root_depth_m"): vol.Coerce(float),
        vol.Required("root_width_m"): vol.Coerce(float),
        vol.Required("water_retention_pct"): vol.Coerce(float),
        vol.Required("area_m2"): vol.Coerce(float),
        vol.Optional("dbp"): _NUMBER,
        vol.Optional("dbd"): _NUMBER,
        vol.Optional("drippers_per_plant"): _NUMBER,
        vol.Optional("discharge_per_dripper_lph"): _NUMBER,
        vol.Optional("number_of_lines"): _NUMBER,
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True)
class PlantDripperLayout:
    """Discharge inputs counted per plant (first system discharge method)."""

    dbl: float
    dbp: float
    drippers_per_plant: float
    discharge_per_dripper_lph: float


@dataclass(frozen=True)
class DripperSpacingLayout:
    """Discharge inputs counted along the drip lines (second method)."""

    dbl: float
    dbd: float
    discharge_per_dripper_lph: float
    number_of_lines: float


DischargeLayout = Union[PlantDripperLayout, DripperSpacingLayout]


@dataclass(frozen=True)
class FarmGeometryProfile:
    """Vineyard block geometry in meters.

    ``dbl`` is the distance between vine lines, ``dbp`` between plants and
    ``dbd`` between drippers. ``water_retention_pct`` is the share of the
    root zone volume held as available water.
    """

    dbl: float
    root_depth_m: float
    root_width_m: float
    water_retention_pct: float
    area_m2: float
    dbp: float | None = None
    dbd: float | None = None
    drippers_per_plant: float | None = None
    discharge_per_dripper_lph: float | None = None
    number_of_lines: float | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FarmGeometryProfile":
        """Build a profile from a request or form payload."""

        values = coerce_mapping(data, GEOMETRY_SCHEMA, _GEOMETRY_ALIASES, stage="farm_geometry")
        return cls(**values)

    def _require(self, name: str) -> float:
        value = getattr(self, name)
        if value is None:
            raise MissingInput(
                f"{name} is required for this discharge method",
                stage="system_discharge",
                field=name,
            )
        return value

    def plant_dripper_layout(self) -> PlantDripperLayout:
        """Return the per-plant discharge layout of this block."""

        return PlantDripperLayout(
            dbl=self.dbl,
            dbp=self._require("dbp"),
            drippers_per_plant=self._require("drippers_per_plant"),
            discharge_per_dripper_lph=self._require("discharge_per_dripper_lph"),
        )

    def dripper_spacing_layout(self) -> DripperSpacingLayout:
        """Return the dripper-spacing discharge layout of this block."""

        return DripperSpacingLayout(
            dbl=self.dbl,
            dbd=self._require("dbd"),
            discharge_per_dripper_lph=self._require("discharge_per_dripper_lph"),
            number_of_lines=self._require("number_of_lines"),
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class IrrigationSizing:
    """Results of every step of the sizing chain."""

    mad: CalculationResult
    refill_tank: CalculationResult
    system_discharge: CalculationResult
    irrigation_duration: CalculationResult

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mad": self.mad.as_dict(),
            "refill_tank": self.refill_tank.as_dict(),
            "system_discharge": self.system_discharge.as_dict(),
            "irrigation_duration": self.irrigation_duration.as_dict(),
        }


def maximum_allowable_deficit(
    dbl: float,
    root_depth_m: float,
    root_width_m: float,
    water_retention_pct: float,
) -> float:
    """Return the maximum allowable deficit in mm."""

    line_spacing = require_nonzero_divisor(dbl, stage="mad", field="dbl")
    depth = require_positive(root_depth_m, stage="mad", field="root_depth_m")
    width = require_positive(root_width_m, stage="mad", field="root_width_m")
    retention = require_positive(water_retention_pct, stage="mad", field="water_retention_pct")
    if retention > 100:
        raise InvalidInput(
            "water_retention_pct must not exceed 100",
            stage="mad",
            field="water_retention_pct",
        )
    return (100 / line_spacing) * depth * width * retention * 100 / 10000


def calculate_mad(profile: FarmGeometryProfile) -> CalculationResult:
    """Return the MAD step result for ``profile``."""

    value = maximum_allowable_deficit(
        profile.dbl,
        profile.root_depth_m,
        profile.root_width_m,
        profile.water_retention_pct,
    )
    return CalculationResult(
        stage="mad",
        value=value,
        unit="mm",
        formula=MAD_FORMULA,
        inputs={
            "dbl": float(profile.dbl),
            "root_depth_m": float(profile.root_depth_m),
            "root_width_m": float(profile.root_width_m),
            "water_retention_pct": float(profile.water_retention_pct),
        },
    )


def calculate_refill_tank(
    mad: CalculationResult, refill_span: RefillSpan | str
) -> CalculationResult:
    """Return the refill tank depth for a MAD result and refill span category."""

    mad = expect_stage(mad, "mad", consumer="refill_tank", field="mad")
    category = RefillSpan.parse(refill_span)
    factor = REFILL_SPAN_FACTORS[category]
    return CalculationResult(
        stage="refill_tank",
        value=mad.value * factor,
        unit="mm",
        formula=REFILL_FORMULA,
        inputs={
            "mad": mad.value,
            "refill_span": category.value,
            "refill_span_factor": factor,
        },
    )


def _plant_dripper_discharge(layout: PlantDripperLayout) -> CalculationResult:
    stage = "system_discharge"
    dbl = require_nonzero_divisor(layout.dbl, stage=stage, field="dbl")
    dbp = require_nonzero_divisor(layout.dbp, stage=stage, field="dbp")
    drippers = require_non_negative(layout.drippers_per_plant, stage=stage, field="drippers_per_plant")
    discharge = require_non_negative(
        layout.discharge_per_dripper_lph, stage=stage, field="discharge_per_dripper_lph"
    )
    plants = 10000 / (dbl * dbp)
    rate = plants * drippers * discharge / 10000
    return CalculationResult(
        stage=stage,
        value=rate,
        unit="mm/h",
        formula=PLANT_DRIPPER_FORMULA,
        inputs={
            "method": "plant_dripper",
            "dbl": dbl,
            "dbp": dbp,
            "drippers_per_plant": drippers,
            "discharge_per_dripper_lph": discharge,
            "plants_per_unit_area": plants,
        },
    )


def _dripper_spacing_discharge(layout: DripperSpacingLayout) -> CalculationResult:
    stage = "system_discharge"
    dbl = require_nonzero_divisor(layout.dbl, stage=stage, field="dbl")
    dbd = require_nonzero_divisor(layout.dbd, stage=stage, field="dbd")
    discharge = require_non_negative(
        layout.discharge_per_dripper_lph, stage=stage, field="discharge_per_dripper_lph"
    )
    lines = require_non_negative(layout.number_of_lines, stage=stage, field="number_of_lines")
    rate = (100 / dbl) * (100 / dbd) * discharge * lines / 10000
    return CalculationResult(
        stage=stage,
        value=rate,
        unit="mm/h",
        formula=DRIPPER_SPACING_FORMULA,
        inputs={
            "method": "dripper_spacing",
            "dbl": dbl,
            "dbd": dbd,
            "discharge_per_dripper_lph": discharge,
            "number_of_lines": lines,
        },
    )


def calculate_system_discharge(layout: DischargeLayout) -> CalculationResult:
    """Return the system application rate for ``layout``.

    Exactly one layout is used per calculation; the two layouts are
    alternative ways of reaching the same rate.
    """

    if isinstance(layout, PlantDripperLayout):
        return _plant_dripper_discharge(layout)
    if isinstance(layout, DripperSpacingLayout):
        return _dripper_spacing_discharge(layout)
    raise InvalidInput(
        f"Unsupported discharge layout: {type(layout).__name__}",
        stage="system_discharge",
        field="layout",
    )


def calculate_irrigation_duration(
    refill_tank: CalculationResult, system_discharge: CalculationResult
) -> CalculationResult:
    """Return the hours needed to apply the refill tank depth."""

    stage = "irrigation_duration"
    refill_tank = expect_stage(refill_tank, "refill_tank", consumer=stage, field="refill_tank")
    system_discharge = expect_stage(
        system_discharge, "system_discharge", consumer=stage, field="system_discharge"
    )
    rate = require_finite(system_discharge.value, stage=stage, field="system_discharge")
    if rate <= 0:
        raise ZeroDischargeRate(
            "system discharge rate must be positive to schedule irrigation",
            stage=stage,
            field="system_discharge",
        )
    return CalculationResult(
        stage=stage,
        value=refill_tank.value / rate,
        unit="h",
        formula=DURATION_FORMULA,
        inputs={"refill_tank": refill_tank.value, "system_discharge": rate},
    )


def size_irrigation(
    profile: FarmGeometryProfile,
    refill_span: RefillSpan | str,
    layout: DischargeLayout,
) -> IrrigationSizing:
    """Run the full sizing chain for ``profile``."""

    mad = calculate_mad(profile)
    refill = calculate_refill_tank(mad, refill_span)
    discharge = calculate_system_discharge(layout)
    duration = calculate_irrigation_duration(refill, discharge)
    _LOGGER.debug(
        "Sized irrigation: MAD %.3f mm, refill %.3f mm, discharge %.3f mm/h, %.3f h",
        mad.value,
        refill.value,
        discharge.value,
        duration.value,
    )
    return IrrigationSizing(
        mad=mad,
        refill_tank=refill,
        system_discharge=discharge,
        irrigation_duration=duration,
    )
