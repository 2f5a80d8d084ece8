from pathlib import Path

import pytest

from aquaculture_suitability.config.constants import DEFAULT_AREA_CRS, DEFAULT_TEMP_HIGH, DEFAULT_TEMP_LOW
from aquaculture_suitability.connectors.settings import SettingsResource

ENV_VARS = [
    "SST_DIR",
    "DEPTH_PATH",
    "REGIONS_PATH",
    "REGION_LABEL_FIELD",
    "START_YEAR",
    "END_YEAR",
    "TEMP_LOW",
    "TEMP_HIGH",
    "DEPTH_LOW",
    "DEPTH_HIGH",
    "AREA_CRS",
    "OUTPUT_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_settings_create_uses_defaults() -> None:
    settings = SettingsResource.create()

    assert settings.temp_low == DEFAULT_TEMP_LOW
    assert settings.temp_high == DEFAULT_TEMP_HIGH
    assert settings.area_crs == DEFAULT_AREA_CRS
    assert settings.region_label_field == "rgn"
    assert (settings.start_year, settings.end_year) == (2008, 2012)


def test_settings_create_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Test that SettingsResource correctly loads and coerces environment variables.
    """
    monkeypatch.setenv("SST_DIR", "/data/sst")
    monkeypatch.setenv("START_YEAR", "2010")
    monkeypatch.setenv("END_YEAR", "2011")
    monkeypatch.setenv("TEMP_LOW", "11")
    monkeypatch.setenv("TEMP_HIGH", "30.5")
    monkeypatch.setenv("DEPTH_LOW", "-70")
    monkeypatch.setenv("AREA_CRS", "EPSG:32611")

    settings = SettingsResource.create()

    assert settings.sst_dir == "/data/sst"
    assert settings.start_year == 2010
    assert settings.end_year == 2011
    assert settings.temp_low == 11.0
    assert settings.temp_high == 30.5
    assert settings.depth_low == -70.0
    assert settings.area_crs == "EPSG:32611"
    thresholds = settings.thresholds()
    assert (thresholds.temp_low, thresholds.temp_high) == (11.0, 30.5)


def test_settings_rejects_inverted_thresholds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEMP_LOW", "25")
    monkeypatch.setenv("TEMP_HIGH", "20")

    with pytest.raises(ValueError, match="temp_low"):
        SettingsResource.create()


def test_settings_rejects_inverted_years(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("START_YEAR", "2012")
    monkeypatch.setenv("END_YEAR", "2008")

    with pytest.raises(ValueError, match="START_YEAR"):
        SettingsResource.create()


def test_settings_rejects_non_numeric_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEPTH_HIGH", "shallow")

    with pytest.raises(ValueError, match="DEPTH_HIGH"):
        SettingsResource.create()


def test_settings_swallow_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("START_YEAR", "2012")
    monkeypatch.setenv("END_YEAR", "2008")
    monkeypatch.setenv("DEPTH_HIGH", "shallow")

    settings = SettingsResource.create(swallow_errors=True)

    assert settings.start_year == 2012
    assert settings.depth_high == 0.0


def test_output_path_creates_directory(tmp_path: Path) -> None:
    settings = SettingsResource(output_dir=str(tmp_path / "out"))

    path = settings.output_path("report.html")

    assert path == tmp_path / "out" / "report.html"
    assert path.parent.is_dir()
