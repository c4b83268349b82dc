"""Combine crop water demand with the irrigation sizing chain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .errors import DivisionByZero, ZeroDischargeRate
from .irrigation_sizing import IrrigationSizing
from .results import CalculationResult, expect_stage

__all__ = [
    "IrrigationSchedule",
    "daily_runtime_hours",
    "irrigation_interval_days",
    "build_schedule",
]

RUNTIME_FORMULA = "hours/day = ETc / dischargeRate"
INTERVAL_FORMULA = "days = refillTank / ETc"


@dataclass(frozen=True)
class IrrigationSchedule:
    """Daily runtime and cycle interval for one block."""

    etc: CalculationResult
    sizing: IrrigationSizing
    runtime_hours_per_day: CalculationResult
    interval_days: CalculationResult

    def as_dict(self) -> Dict[str, Any]:
        return {
            "etc": self.etc.as_dict(),
            "sizing": self.sizing.as_dict(),
            "runtime_hours_per_day": self.runtime_hours_per_day.as_dict(),
            "interval_days": self.interval_days.as_dict(),
        }


def daily_runtime_hours(
    etc: CalculationResult, system_discharge: CalculationResult
) -> CalculationResult:
    """Return hours per day the system must run to replace ETc."""

    stage = "runtime"
    etc = expect_stage(etc, "etc", consumer=stage, field="etc")
    system_discharge = expect_stage(
        system_discharge, "system_discharge", consumer=stage, field="system_discharge"
    )
    if system_discharge.value <= 0:
        raise ZeroDischargeRate(
            "system discharge rate must be positive to schedule irrigation",
            stage=stage,
            field="system_discharge",
        )
    return CalculationResult(
        stage=stage,
        value=etc.value / system_discharge.value,
        unit="h/day",
        formula=RUNTIME_FORMULA,
        inputs={"etc_mm_day": etc.value, "system_discharge": system_discharge.value},
    )


def irrigation_interval_days(
    refill_tank: CalculationResult, etc: CalculationResult
) -> CalculationResult:
    """Return days until ETc has used up the refill tank depth."""

    stage = "interval"
    refill_tank = expect_stage(refill_tank, "refill_tank", consumer=stage, field="refill_tank")
    etc = expect_stage(etc, "etc", consumer=stage, field="etc")
    if etc.value <= 0:
        raise DivisionByZero(
            "ETc is zero, no irrigation interval can be derived",
            stage=stage,
            field="etc",
        )
    return CalculationResult(
        stage=stage,
        value=refill_tank.value / etc.value,
        unit="days",
        formula=INTERVAL_FORMULA,
        inputs={"refill_tank": refill_tank.value, "etc_mm_day": etc.value},
    )


def build_schedule(etc: CalculationResult, sizing: IrrigationSizing) -> IrrigationSchedule:
    """Return an :class:`IrrigationSchedule` for ``etc`` and ``sizing``."""

    return IrrigationSchedule(
        etc=etc,
        sizing=sizing,
        runtime_hours_per_day=daily_runtime_hours(etc, sizing.system_discharge),
        interval_days=irrigation_interval_days(sizing.refill_tank, etc),
    )
