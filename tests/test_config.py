import json
import logging

import pytest

from irrigation_engine.config import CONFIG_ENV, EngineSettings, load_settings


def test_defaults():
    settings = load_settings()
    assert settings == EngineSettings()
    assert settings.default_elevation_m == 500
    assert settings.default_latitude_deg == pytest.approx(19.076)
    assert settings.default_area_m2 == 10000
    assert settings.log_level == "INFO"


def test_load_yaml(tmp_path):
    path = tmp_path / "site.yaml"
    path.write_text("default_elevation_m: 120\nlog_level: debug\nunknown: 1\n")
    settings = load_settings(path)
    assert settings.default_elevation_m == 120.0
    assert settings.log_level == "DEBUG"
    assert settings.default_area_m2 == 10000


def test_load_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "site.json"
    path.write_text(json.dumps({"default_latitude_deg": -33.9, "default_area_m2": "2500"}))
    monkeypatch.setenv(CONFIG_ENV, str(path))
    settings = load_settings()
    assert settings.default_latitude_deg == -33.9
    assert settings.default_area_m2 == 2500.0


def test_invalid_values_fall_back(tmp_path, caplog):
    path = tmp_path / "site.json"
    path.write_text(json.dumps({"default_elevation_m": "high", "log_level": "LOUD"}))
    with caplog.at_level(logging.WARNING):
        settings = load_settings(path)
    assert settings == EngineSettings()
    assert "default_elevation_m" in caplog.text
    assert "log_level" in caplog.text


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")
