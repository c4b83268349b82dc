#!/usr/bin/env python3
"""Resolve ET₀ for every row of a daily weather CSV file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from irrigation_engine.config import load_settings
from irrigation_engine.resolver import resolve_et0_frame
from scripts import add_common_arguments, configure_logging, emit, run


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Resolve remote or locally estimated ET0 for daily weather rows"
    )
    parser.add_argument(
        "weather_csv",
        type=Path,
        help="CSV with WeatherReading column names, one row per day",
    )
    add_common_arguments(parser)
    args = parser.parse_args(argv)
    settings = load_settings(args.config)
    configure_logging(args.log_level, settings.log_level)

    def _calculate() -> None:
        frame = pd.read_csv(args.weather_csv)
        if "latitude_deg" not in frame.columns:
            frame["latitude_deg"] = settings.default_latitude_deg
        if "elevation_m" not in frame.columns and "pressure_kpa" not in frame.columns:
            frame["elevation_m"] = settings.default_elevation_m
        resolved = resolve_et0_frame(frame)
        emit(
            {
                "rows": resolved.assign(clamped=resolved["clamped"].astype(bool)).to_dict(
                    orient="records"
                ),
                "mean_et0_mm_day": float(resolved["et0_mm_day"].mean()),
            },
            args.output,
        )

    return run(_calculate)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
