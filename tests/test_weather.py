import math
from dataclasses import replace

import pytest

from irrigation_engine.errors import InvalidInput
from irrigation_engine.weather import Confidence, WeatherReading, input_confidence


def test_from_mapping_accepts_request_keys():
    reading = WeatherReading.from_mapping(
        {
            "temperatureC": "25",
            "relativeHumidityPct": 60,
            "windSpeed2m_mps": "2",
            "solarRadiation_MJm2day": 20,
            "elevation_m": 100,
            "latitude_deg": "45",
            "dayOfYear": "180",
            "remoteET0_mmday": "",
            "station": "ignored",
        }
    )
    assert reading == WeatherReading(
        temperature_c=25.0,
        relative_humidity_pct=60.0,
        wind_speed_2m_mps=2.0,
        solar_radiation_mj_m2_day=20.0,
        elevation_m=100.0,
        latitude_deg=45.0,
        day_of_year=180,
    )
    assert not reading.has_remote_et0


def test_from_mapping_snake_case_and_remote():
    reading = WeatherReading.from_mapping({"remote_et0_mm_day": "4.2", "rainfall_mm": 3})
    assert reading.has_remote_et0
    assert reading.remote_et0_mm_day == 4.2
    assert reading.rainfall_mm == 3.0


def test_non_numeric_remote_is_discarded():
    reading = WeatherReading.from_mapping({"remoteET0_mmday": "unavailable"})
    assert reading.remote_et0_mm_day is None
    assert not reading.has_remote_et0
    assert not WeatherReading(remote_et0_mm_day=math.nan).has_remote_et0


def test_from_mapping_rejects_bad_numbers():
    with pytest.raises(InvalidInput) as exc:
        WeatherReading.from_mapping({"temperatureC": "warm"})
    assert exc.value.field == "temperature_c"
    assert exc.value.stage == "weather_reading"


def test_with_site_defaults():
    reading = WeatherReading(temperature_c=20).with_site_defaults(
        elevation_m=500, latitude_deg=19.076
    )
    assert reading.elevation_m == 500
    assert reading.latitude_deg == 19.076

    with_pressure = WeatherReading(pressure_kpa=95.0).with_site_defaults(elevation_m=500)
    assert with_pressure.elevation_m is None

    site = WeatherReading(elevation_m=10, latitude_deg=-33)
    assert site.with_site_defaults(elevation_m=500, latitude_deg=19) is site


@pytest.mark.parametrize("value", ["180.7", 12.5, "inf"])
def test_from_mapping_rejects_partial_day_of_year(value):
    with pytest.raises(InvalidInput) as exc:
        WeatherReading.from_mapping({"dayOfYear": value})
    assert exc.value.field == "day_of_year"


def test_from_mapping_accepts_integral_day_of_year():
    assert WeatherReading.from_mapping({"dayOfYear": "180.0"}).day_of_year == 180


def test_input_confidence(summer_reading):
    assert input_confidence(replace(summer_reading, rainfall_mm=0.0)) is Confidence.HIGH
    assert input_confidence(summer_reading) is Confidence.HIGH

    no_site = replace(summer_reading, elevation_m=None, latitude_deg=None)
    assert input_confidence(no_site) is Confidence.MEDIUM

    partial = WeatherReading(relative_humidity_pct=60, wind_speed_2m_mps=2, latitude_deg=45)
    assert input_confidence(partial) is Confidence.LOW
    assert input_confidence(WeatherReading(solar_radiation_mj_m2_day=math.nan)) is Confidence.LOW
    assert Confidence.MEDIUM.value == "medium"
