#!/usr/bin/env python3
"""Resolve reference ET₀ for one day and derive the vineyard water demand."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from irrigation_engine.config import load_settings
from irrigation_engine.crop_coefficients import (
    calculate_etc,
    calculate_etc_volume,
    calculate_irrigation_need,
    etc_period_totals,
    recommend_irrigation,
    stage_for_month,
)
from irrigation_engine.resolver import resolve_et0
from irrigation_engine.weather import WeatherReading, input_confidence
from scripts import add_common_arguments, configure_logging, emit, run

_LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Calculate ET0 (FAO-56 Penman-Monteith) and crop ETc"
    )
    parser.add_argument("temperature_c", type=float, help="Mean air temperature (°C)")
    parser.add_argument("rh_percent", type=float, help="Mean relative humidity (%%)")
    parser.add_argument("wind_m_s", type=float, help="Wind speed at 2 m (m/s)")
    parser.add_argument(
        "solar_mj_m2_day", type=float, help="Incoming solar radiation (MJ/m²/day)"
    )
    parser.add_argument("--tmax", type=float, help="Daily maximum temperature (°C)")
    parser.add_argument("--tmin", type=float, help="Daily minimum temperature (°C)")
    parser.add_argument("--elevation", type=float, help="Site elevation (m)")
    parser.add_argument("--pressure", type=float, help="Atmospheric pressure (kPa)")
    parser.add_argument("--latitude", type=float, help="Site latitude (degrees)")
    parser.add_argument(
        "--day-of-year", type=int, help="Day of year, defaults to today"
    )
    parser.add_argument(
        "--remote-et0", type=float, help="ET0 published by a weather service (mm/day)"
    )
    parser.add_argument(
        "--stage",
        help="Growth stage for ETc; defaults to the stage of the current month",
    )
    parser.add_argument("--area", type=float, help="Block area (m²) for the daily volume")
    parser.add_argument("--rainfall", type=float, help="Rainfall of the day (mm)")
    parser.add_argument(
        "--method",
        default="drip",
        choices=["drip", "sprinkler", "surface"],
        help="Irrigation method used for the recommended frequency",
    )
    parser.add_argument("--soil", help="Soil type, e.g. sandy or clay")
    add_common_arguments(parser)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    configure_logging(args.log_level, settings.log_level)

    def _calculate() -> None:
        today = date.today()
        reading = WeatherReading(
            temperature_c=args.temperature_c,
            relative_humidity_pct=args.rh_percent,
            wind_speed_2m_mps=args.wind_m_s,
            solar_radiation_mj_m2_day=args.solar_mj_m2_day,
            elevation_m=args.elevation,
            pressure_kpa=args.pressure,
            latitude_deg=args.latitude,
            day_of_year=(
                args.day_of_year
                if args.day_of_year is not None
                else today.timetuple().tm_yday
            ),
            temperature_max_c=args.tmax,
            temperature_min_c=args.tmin,
            rainfall_mm=args.rainfall,
            remote_et0_mm_day=args.remote_et0,
        ).with_site_defaults(
            elevation_m=settings.default_elevation_m,
            latitude_deg=settings.default_latitude_deg,
        )
        stage = args.stage or stage_for_month(today.month)
        _LOGGER.debug("Using growth stage %s", stage)

        et0 = resolve_et0(reading)
        etc = calculate_etc(et0, stage)
        area = args.area if args.area is not None else settings.default_area_m2
        need = calculate_irrigation_need(etc, reading.rainfall_mm)
        recommendation = recommend_irrigation(
            need,
            stage,
            method=args.method,
            soil_type=args.soil,
            relative_humidity_pct=reading.relative_humidity_pct,
            wind_speed_2m_mps=reading.wind_speed_2m_mps,
        )
        result = {
            "et0": et0.as_dict(),
            "etc": etc.as_dict(),
            "etc_totals_mm": etc_period_totals(etc),
            "etc_volume": calculate_etc_volume(etc, area).as_dict(),
            "irrigation_need": need.as_dict(),
            "recommendation": recommendation.as_dict(),
            "confidence": input_confidence(reading).value,
        }
        emit(result, args.output)

    return run(_calculate)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
