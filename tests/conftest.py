import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from irrigation_engine.irrigation_sizing import FarmGeometryProfile
from irrigation_engine.weather import WeatherReading


@pytest.fixture
def summer_reading() -> WeatherReading:
    """Mid-latitude summer day at 100 m elevation."""
    return WeatherReading(
        temperature_c=25,
        relative_humidity_pct=60,
        wind_speed_2m_mps=2,
        solar_radiation_mj_m2_day=20,
        elevation_m=100,
        latitude_deg=45,
        day_of_year=180,
    )


@pytest.fixture
def vineyard_profile() -> FarmGeometryProfile:
    """Block planted 3 m x 1.5 m with four 2 L/h drippers per vine."""
    return FarmGeometryProfile(
        dbl=3,
        dbp=1.5,
        dbd=0.5,
        root_depth_m=0.6,
        root_width_m=1.5,
        water_retention_pct=15,
        area_m2=10000,
        drippers_per_plant=4,
        discharge_per_dripper_lph=2,
        number_of_lines=2,
    )


@pytest.fixture(autouse=True)
def _no_engine_config(monkeypatch):
    monkeypatch.delenv("IRRIGATION_ENGINE_CONFIG", raising=False)
