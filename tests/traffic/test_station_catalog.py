from __future__ import annotations

import json
from pathlib import Path

import pytest

from bikeflow.traffic.station_catalog import StationCatalog


def _write_json(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_loads_nested_bluebikes_payload(tmp_path):
    path = _write_json(
        tmp_path / "stations.json",
        {
            "data": {
                "stations": [
                    {"short_name": "M32006", "name": "MIT at Mass Ave", "lon": -71.0934, "lat": 42.3581},
                    {"short_name": "A32000", "name": "Fan Pier", "lon": "-71.0441", "lat": "42.3533"},
                ]
            }
        },
    )

    catalog = StationCatalog.from_json(path)

    assert len(catalog) == 2
    assert [station.id for station in catalog] == ["M32006", "A32000"]
    mit = catalog.get("M32006")
    assert mit is not None
    assert mit.name == "MIT at Mass Ave"
    assert mit.longitude == pytest.approx(-71.0934)
    assert catalog.get("A32000").latitude == pytest.approx(42.3533)
    assert "M32006" in catalog
    assert catalog.get("missing") is None


def test_accepts_alternate_keys_and_top_level_list(tmp_path):
    path = _write_json(
        tmp_path / "stations.json",
        [{"Number": "B1", "NAME": "Back Bay", "Long": -71.08, "Lat": 42.35}],
    )

    (station,) = StationCatalog.from_json(path).stations

    assert station.id == "B1"
    assert station.name == "Back Bay"


def test_skips_malformed_and_duplicate_records(tmp_path, caplog):
    path = _write_json(
        tmp_path / "stations.json",
        {
            "stations": [
                {"short_name": "A", "lon": -71.0, "lat": 42.0},
                {"short_name": "", "lon": -71.0, "lat": 42.0},
                {"short_name": "B", "lon": "not-a-number", "lat": 42.0},
                {"short_name": "A", "lon": -72.0, "lat": 43.0},
                "junk",
            ]
        },
    )

    with caplog.at_level("WARNING"):
        catalog = StationCatalog.from_json(path)

    assert [station.id for station in catalog] == ["A"]
    assert catalog.get("A").longitude == pytest.approx(-71.0)
    assert "Duplicate station id A" in caplog.text


def test_to_dataframe_keeps_order(tmp_path):
    path = _write_json(
        tmp_path / "stations.json",
        {"stations": [{"id": "Z", "lon": 1, "lat": 2}, {"id": "Y", "lon": 3, "lat": 4}]},
    )
    df = StationCatalog.from_json(path).to_dataframe()
    assert list(df["station_id"]) == ["Z", "Y"]
    assert list(df.columns) == ["station_id", "name", "longitude", "latitude"]


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        StationCatalog.from_json(tmp_path / "nope.json")


def test_invalid_json_raises_value_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        StationCatalog.from_json(path)


def test_payload_without_stations_is_rejected(tmp_path):
    path = _write_json(tmp_path / "stations.json", {"data": {"other": []}})
    with pytest.raises(ValueError):
        StationCatalog.from_json(path)


def test_lookup_and_membership_ignore_surrounding_whitespace():
    catalog = StationCatalog.from_records([{"id": "A", "lon": -71.0, "lat": 42.0}])

    assert " A " in catalog
    assert catalog.get(" A ") is catalog.get("A")
    assert "B" not in catalog
