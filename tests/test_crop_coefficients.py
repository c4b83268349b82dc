import pandas as pd
import pytest

from irrigation_engine.crop_coefficients import (
    CROP_COEFFICIENTS,
    DEFAULT_STAGE_DAYS,
    GrowthStage,
    calculate_etc,
    calculate_etc_volume,
    calculate_irrigation_need,
    crop_evapotranspiration,
    effective_rainfall,
    etc_period_totals,
    get_crop_coefficient,
    recommend_irrigation,
    seasonal_water_requirements,
    stage_for_month,
)
from irrigation_engine.errors import InvalidGrowthStage, InvalidInput, OutOfRange
from irrigation_engine.resolver import resolve_et0
from irrigation_engine.results import RAINFALL_SURPLUS, CalculationResult
from irrigation_engine.weather import WeatherReading


def _remote(value: float):
    return resolve_et0(WeatherReading(remote_et0_mm_day=value))


def test_crop_coefficient_table():
    expected = {
        "budbreak": 0.3,
        "leaf_development": 0.5,
        "flowering": 0.7,
        "fruit_set": 0.8,
        "veraison": 0.8,
        "harvest": 0.6,
        "post_harvest": 0.4,
        "dormant": 0.2,
    }
    assert {stage.value: kc for stage, kc in CROP_COEFFICIENTS.items()} == expected
    for stage, kc in expected.items():
        assert get_crop_coefficient(stage) == kc


def test_stage_labels_are_normalized():
    assert GrowthStage.parse("Fruit set") is GrowthStage.FRUIT_SET
    assert GrowthStage.parse("post-harvest") is GrowthStage.POST_HARVEST
    assert get_crop_coefficient(GrowthStage.VERAISON) == 0.8


@pytest.mark.parametrize("label", ["ripening", "", None, 3])
def test_unknown_growth_stage(label):
    with pytest.raises(InvalidGrowthStage) as exc:
        get_crop_coefficient(label)
    assert exc.value.field == "growth_stage"
    assert exc.value.growth_stage == label


def test_calculate_etc_carries_source():
    etc = calculate_etc(_remote(5.0), "flowering")
    assert etc.stage == "etc"
    assert etc.value == pytest.approx(3.5)
    assert etc.unit == "mm/day"
    assert etc.inputs["et0_source"] == "remote"
    assert etc.inputs["kc"] == 0.7


def test_calculate_etc_from_local(summer_reading):
    et0 = resolve_et0(summer_reading)
    etc = calculate_etc(et0, "dormant")
    assert etc.value == pytest.approx(et0.value * 0.2)
    assert etc.inputs["et0_source"] == "local"


def test_etc_is_linear_in_et0():
    for stage in GrowthStage:
        single = crop_evapotranspiration(4.0, get_crop_coefficient(stage))
        double = crop_evapotranspiration(8.0, get_crop_coefficient(stage))
        assert double == pytest.approx(2 * single)
    assert crop_evapotranspiration(0.0, 0.8) == 0.0


def test_etc_doubles_with_kc():
    for et0 in (0.7, 4.2, 9.35):
        assert crop_evapotranspiration(et0, 0.8) == pytest.approx(
            2 * crop_evapotranspiration(et0, 0.4), abs=1e-9
        )


def test_calculate_etc_rejects_other_stage_results():
    bogus = CalculationResult(stage="mad", value=4.5, unit="mm", formula="")
    with pytest.raises(InvalidInput) as exc:
        calculate_etc(bogus, "flowering")
    assert exc.value.stage == "etc"


def test_calculate_etc_volume():
    etc = calculate_etc(_remote(5.0), "fruit_set")
    volume = calculate_etc_volume(etc, 10000)
    assert volume.unit == "L/day"
    assert volume.value == pytest.approx(40000)
    with pytest.raises(InvalidInput):
        calculate_etc_volume(etc, 0)


def test_etc_period_totals():
    totals = etc_period_totals(calculate_etc(_remote(5.0), "harvest"))
    assert totals == pytest.approx({"daily_mm": 3.0, "weekly_mm": 21.0, "monthly_mm": 90.0})


def test_irrigation_need_after_rainfall():
    etc = calculate_etc(_remote(5.0), "veraison")
    assert effective_rainfall(10) == pytest.approx(8.0)

    need = calculate_irrigation_need(etc, 2.5)
    assert need.value == pytest.approx(2.0)
    assert not need.has_flag(RAINFALL_SURPLUS)

    surplus = calculate_irrigation_need(etc, 10)
    assert surplus.value == 0.0
    assert surplus.has_flag(RAINFALL_SURPLUS)

    assert calculate_irrigation_need(etc).value == pytest.approx(4.0)
    with pytest.raises(InvalidInput):
        calculate_irrigation_need(etc, -1)


def test_stage_for_month():
    assert stage_for_month(1) is GrowthStage.DORMANT
    assert stage_for_month(4) is GrowthStage.FLOWERING
    assert stage_for_month(8) is GrowthStage.VERAISON
    assert stage_for_month(12) is GrowthStage.DORMANT
    with pytest.raises(OutOfRange):
        stage_for_month(13)


def test_seasonal_water_requirements():
    table = seasonal_water_requirements(5.0)
    assert list(table.columns) == ["stage", "days", "kc", "etc_mm_day", "total_etc_mm"]
    assert len(table) == len(DEFAULT_STAGE_DAYS)
    assert table["days"].sum() == 360

    flowering = table.set_index("stage").loc["flowering"]
    assert flowering["etc_mm_day"] == pytest.approx(3.5)
    assert flowering["total_etc_mm"] == pytest.approx(105.0)


def test_seasonal_water_requirements_custom_stages():
    table = seasonal_water_requirements(4.0, {"Fruit set": 10, "harvest": 5})
    expected = pd.DataFrame(
        {
            "stage": ["fruit_set", "harvest"],
            "days": [10, 5],
            "kc": [0.8, 0.6],
            "etc_mm_day": [3.2, 2.4],
            "total_etc_mm": [32.0, 12.0],
        }
    )
    pd.testing.assert_frame_equal(table, expected)


def test_seasonal_water_requirements_rejects_partial_days():
    with pytest.raises(InvalidInput) as exc:
        seasonal_water_requirements(4.0, {"budbreak": 30.9})
    assert exc.value.field == "budbreak_days"
    table = seasonal_water_requirements(4.0, {"budbreak": 30.0})
    assert table["days"].tolist() == [30]


def _need(et0: float, stage: str, rainfall_mm: float | None = None):
    return calculate_irrigation_need(calculate_etc(_remote(et0), stage), rainfall_mm)


def test_recommend_irrigation_stage_thresholds():
    flowering = recommend_irrigation(_need(3.0, "flowering"), "flowering")
    assert flowering.need_mm_day == pytest.approx(2.1)
    assert flowering.should_irrigate
    assert flowering.threshold_mm_day == 1.5
    assert flowering.frequency == "every 2 days"
    assert "Critical growth stage - maintain consistent moisture" in flowering.notes

    veraison = recommend_irrigation(_need(3.0, "veraison"), "veraison")
    assert veraison.need_mm_day == pytest.approx(2.4)
    assert not veraison.should_irrigate
    assert veraison.frequency == "as needed"

    harvest = recommend_irrigation(_need(5.0, "harvest"), "harvest")
    assert harvest.threshold_mm_day == 2.0
    assert harvest.should_irrigate


def test_recommend_irrigation_never_in_dormancy():
    result = recommend_irrigation(_need(20.0, "dormant"), "dormant")
    assert result.need_mm_day == pytest.approx(4.0)
    assert not result.should_irrigate
    assert result.threshold_mm_day is None
    assert result.as_dict()["growth_stage"] == "dormant"


def test_recommend_irrigation_skips_after_rain():
    need = _need(6.0, "fruit_set")
    result = recommend_irrigation(need, "fruit_set", rainfall_mm=12)
    assert not result.should_irrigate
    assert "Recent rainfall - irrigation not needed" in result.notes

    recorded = recommend_irrigation(_need(20.0, "fruit_set", 12), "fruit_set")
    assert recorded.need_mm_day == pytest.approx(6.4)
    assert not recorded.should_irrigate


def test_recommend_irrigation_frequency():
    heavy = _need(6.0, "fruit_set")
    light = _need(4.0, "fruit_set")
    assert recommend_irrigation(heavy, "fruit_set").frequency == "daily"
    assert recommend_irrigation(light, "fruit_set").frequency == "every 2 days"
    assert recommend_irrigation(light, "fruit_set", method="sprinkler").frequency == "every 2-3 days"
    assert recommend_irrigation(light, "fruit_set", method="surface").frequency == "weekly"

    sandy = recommend_irrigation(light, "fruit_set", soil_type="Sandy")
    assert sandy.frequency == "more frequent, shorter durations"
    assert "Sandy soil - increase frequency, reduce duration" in sandy.notes
    clay = recommend_irrigation(light, "fruit_set", soil_type="clay")
    assert clay.frequency == "less frequent, longer durations"


def test_recommend_irrigation_weather_notes():
    result = recommend_irrigation(
        _need(4.0, "harvest"),
        "harvest",
        relative_humidity_pct=85,
        wind_speed_2m_mps=6,
    )
    assert result.notes == (
        "High humidity - monitor for disease risk",
        "Windy conditions - may increase water loss",
    )


def test_recommend_irrigation_rejects_bad_inputs():
    with pytest.raises(InvalidInput) as exc:
        recommend_irrigation(_need(4.0, "harvest"), "harvest", method="flood")
    assert exc.value.field == "method"

    etc = calculate_etc(_remote(4.0), "harvest")
    with pytest.raises(InvalidInput) as exc:
        recommend_irrigation(etc, "harvest")
    assert exc.value.stage == "irrigation_recommendation"

    with pytest.raises(InvalidGrowthStage):
        recommend_irrigation(_need(4.0, "harvest"), "ripening")
