import json

import pytest

from commute_insights_api.core.config import PROJECT_ROOT, Settings
from commute_insights_api.services.catalogue import ConnectorCatalogue


def test_bundled_catalogues_load():
    catalogue = ConnectorCatalogue.from_files(
        PROJECT_ROOT / "data" / "connector_stops.json",
        PROJECT_ROOT / "data" / "microsoft_buildings.json",
    )

    assert len(catalogue.stops) == 11
    assert len({stop.id for stop in catalogue.stops}) == len(catalogue.stops)
    assert catalogue.find_building("BUILDING 109") is not None
    capitol_hill = catalogue.get_stop("capitol-hill")
    assert set(capitol_hill.radii) == {"5", "10", "15"}
    assert capitol_hill.location.lat == pytest.approx(47.6153)


def test_lookups(catalogue):
    assert catalogue.get_stop("far").name == "Far Stop"
    assert catalogue.get_stop("missing") is None
    assert catalogue.find_building("BUILDING 111").id == "building-111"
    assert catalogue.find_building("building 111") is None
    assert catalogue.building_options() == [
        {"value": "BUILDING 109", "label": "BUILDING 109"},
        {"value": "BUILDING 111", "label": "BUILDING 111"},
    ]


def test_from_settings_uses_data_dir(tmp_path):
    (tmp_path / "connector_stops.json").write_text(
        json.dumps([{"id": "a", "name": "A", "coordinates": [-122.3, 47.6]}]), encoding="utf-8"
    )
    (tmp_path / "microsoft_buildings.json").write_text("[]", encoding="utf-8")

    catalogue = ConnectorCatalogue.from_settings(Settings(data_dir=tmp_path))

    assert [stop.id for stop in catalogue.stops] == ["a"]
    assert catalogue.buildings == []


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConnectorCatalogue.from_files(tmp_path / "nope.json", tmp_path / "nope.json")


def test_catalogue_must_be_a_list(tmp_path):
    path = tmp_path / "stops.json"
    path.write_text('{"id": "a"}', encoding="utf-8")
    with pytest.raises(ValueError):
        ConnectorCatalogue.from_files(path, path)


def test_settings_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("API_ALLOWED_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("DEFAULT_UNITS", "imperial")
    monkeypatch.setenv("CONNECTOR_STOPS_PATH", str(tmp_path / "custom.json"))

    config = Settings(data_dir=tmp_path)

    assert config.allowed_origins == ["https://a.example", "https://b.example"]
    assert config.default_units == "imperial"
    assert config.connector_stops_path == tmp_path / "custom.json"
    assert config.views_dir.is_dir()
    with pytest.raises(FileNotFoundError):
        config.ensure_files()


def test_invalid_units(tmp_path, monkeypatch):
    monkeypatch.setenv("DEFAULT_UNITS", "furlongs")
    with pytest.raises(ValueError):
        Settings(data_dir=tmp_path)
