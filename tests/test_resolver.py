import math
from dataclasses import replace

import pandas as pd
import pytest

from irrigation_engine.errors import InvalidInput, MissingInput
from irrigation_engine.et_model import calculate_et0
from irrigation_engine.resolver import resolve_et0, resolve_et0_frame
from irrigation_engine.results import LocalET0, RemoteET0
from irrigation_engine.weather import WeatherReading


def test_remote_value_returned_unchanged():
    result = resolve_et0(WeatherReading(remote_et0_mm_day=5.37))
    assert isinstance(result, RemoteET0)
    assert result.source == "remote"
    assert result.value == 5.37
    assert result.stage == "et0"
    assert result.as_dict()["source"] == "remote"


def test_remote_value_wins_over_local_inputs(summer_reading):
    result = resolve_et0(replace(summer_reading, remote_et0_mm_day=3.2))
    assert isinstance(result, RemoteET0)
    assert result.value == 3.2


def test_local_fallback(summer_reading):
    result = resolve_et0(summer_reading)
    assert isinstance(result, LocalET0)
    assert result == calculate_et0(summer_reading)


@pytest.mark.parametrize("remote", [math.nan, math.inf])
def test_non_finite_remote_falls_back(summer_reading, remote):
    result = resolve_et0(replace(summer_reading, remote_et0_mm_day=remote))
    assert result.source == "local"


def test_negative_remote_rejected():
    with pytest.raises(InvalidInput) as exc:
        resolve_et0(WeatherReading(remote_et0_mm_day=-0.5))
    assert exc.value.field == "remote_et0_mm_day"


def test_no_remote_and_incomplete_weather():
    with pytest.raises(MissingInput):
        resolve_et0(WeatherReading(temperature_c=20))


def test_resolve_frame_mixes_sources(summer_reading):
    frame = pd.DataFrame(
        [
            {**summer_reading.as_dict(), "remote_et0_mm_day": 6.1},
            summer_reading.as_dict(),
        ]
    ).drop(columns=["pressure_kpa", "temperature_max_c", "temperature_min_c", "rainfall_mm"])
    result = resolve_et0_frame(frame)

    assert result["source"].tolist() == ["remote", "local"]
    assert result.loc[0, "et0_mm_day"] == 6.1
    assert result.loc[1, "et0_mm_day"] == pytest.approx(calculate_et0(summer_reading).value)
    assert not result["clamped"].any()


def test_resolve_frame_all_remote():
    frame = pd.DataFrame({"remote_et0_mm_day": [4.0, "n/a", 2.5]})
    with pytest.raises(MissingInput):
        resolve_et0_frame(frame)

    frame = pd.DataFrame({"remote_et0_mm_day": [4.0, 2.5]})
    result = resolve_et0_frame(frame)
    assert result["et0_mm_day"].tolist() == [4.0, 2.5]
    assert result["source"].tolist() == ["remote", "remote"]


def test_resolve_frame_negative_remote():
    with pytest.raises(InvalidInput):
        resolve_et0_frame(pd.DataFrame({"remote_et0_mm_day": [-1.0]}))
