#!/usr/bin/env python3
"""Print the seasonal crop water requirement table."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from irrigation_engine.config import load_settings
from irrigation_engine.crop_coefficients import seasonal_water_requirements
from irrigation_engine.errors import InvalidInput
from irrigation_engine.utils import load_data, require_positive
from scripts import add_common_arguments, configure_logging, emit, run


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Estimate per-stage and seasonal vineyard water use"
    )
    parser.add_argument("et0", type=float, help="Average reference ET0 (mm/day)")
    parser.add_argument(
        "--stage-days",
        type=Path,
        help="JSON or YAML mapping of growth stage to length in days",
    )
    parser.add_argument("--area", type=float, help="Block area (m²) for liter totals")
    add_common_arguments(parser)
    args = parser.parse_args(argv)
    settings = load_settings(args.config)
    configure_logging(args.log_level, settings.log_level)

    def _calculate() -> None:
        stage_days = None
        if args.stage_days:
            stage_days = load_data(args.stage_days)
            if not isinstance(stage_days, dict):
                raise InvalidInput(
                    f"{args.stage_days} does not contain a mapping",
                    stage="etc",
                    field="stage_days",
                )
        table = seasonal_water_requirements(args.et0, stage_days)
        area = require_positive(
            args.area if args.area is not None else settings.default_area_m2,
            stage="etc_volume",
            field="area_m2",
        )
        table["total_liters"] = table["total_etc_mm"] * area
        season_mm = float(table["total_etc_mm"].sum())
        emit(
            {
                "et0_mm_day": args.et0,
                "area_m2": area,
                "stages": table.to_dict(orient="records"),
                "season_total_mm": season_mm,
                "season_total_liters": season_mm * area,
            },
            args.output,
        )

    return run(_calculate)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
