#!/usr/bin/env python3
"""Size a drip irrigation cycle for a vineyard block."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from irrigation_engine.config import load_settings
from irrigation_engine.crop_coefficients import GrowthStage, calculate_etc
from irrigation_engine.errors import InvalidInput
from irrigation_engine.irrigation_sizing import (
    FarmGeometryProfile,
    RefillSpan,
    size_irrigation,
)
from irrigation_engine.results import UserET0
from irrigation_engine.schedule import build_schedule
from irrigation_engine.utils import load_data, require_non_negative
from scripts import add_common_arguments, configure_logging, emit, run

METHODS = ("plant-dripper", "dripper-spacing")
USER_ET0_FORMULA = "ET0 entered on the command line"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the MAD, refill tank, discharge and duration chain"
    )
    parser.add_argument(
        "profile",
        type=Path,
        help="JSON or YAML file describing the block geometry",
    )
    parser.add_argument(
        "--refill-span",
        default=RefillSpan.GROWTH_PERIOD.value,
        choices=[span.value for span in RefillSpan],
        help="Growth intensity category of the block",
    )
    parser.add_argument(
        "--method",
        default=METHODS[0],
        choices=METHODS,
        help="System discharge method",
    )
    parser.add_argument(
        "--et0", type=float, help="Reference ET0 (mm/day) to derive a daily schedule"
    )
    parser.add_argument(
        "--stage",
        choices=[stage.value for stage in GrowthStage],
        help="Growth stage used with --et0",
    )
    add_common_arguments(parser)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if (args.et0 is None) != (args.stage is None):
        parser.error("--et0 and --stage must be given together")
    settings = load_settings(args.config)
    configure_logging(args.log_level, settings.log_level)

    def _calculate() -> None:
        data = load_data(args.profile)
        if not isinstance(data, dict):
            raise InvalidInput(
                f"{args.profile} does not contain a mapping",
                stage="farm_geometry",
                field="profile",
            )
        profile = FarmGeometryProfile.from_mapping(data)
        if args.method == "plant-dripper":
            layout = profile.plant_dripper_layout()
        else:
            layout = profile.dripper_spacing_layout()
        sizing = size_irrigation(profile, args.refill_span, layout)

        result = {"profile": profile.as_dict(), "sizing": sizing.as_dict()}
        if args.et0 is not None:
            value = require_non_negative(args.et0, stage="et0", field="et0_mm_day")
            et0 = UserET0(
                stage="et0",
                value=value,
                unit="mm/day",
                formula=USER_ET0_FORMULA,
                inputs={"user_et0_mm_day": value},
            )
            etc = calculate_etc(et0, args.stage)
            result["schedule"] = build_schedule(etc, sizing).as_dict()
        emit(result, args.output)

    return run(_calculate)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
