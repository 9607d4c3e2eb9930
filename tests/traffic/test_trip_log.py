from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import Dict, List

import pytest

from bikeflow.traffic.trip_log import iter_trip_chunks, load_trip_log

FIELDNAMES = [
    "ride_id",
    "bike_type",
    "started_at",
    "ended_at",
    "start_station_id",
    "end_station_id",
    "is_member",
]


def _write_trips_csv(path: Path, rows: List[Dict[str, object]], fieldnames=FIELDNAMES) -> Path:
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return path


def _row(ride_id: str, start: str, end: str, started_at: str, ended_at: str) -> Dict[str, object]:
    return {
        "ride_id": ride_id,
        "bike_type": "classic_bike",
        "started_at": started_at,
        "ended_at": ended_at,
        "start_station_id": start,
        "end_station_id": end,
        "is_member": 1,
    }


def test_load_trip_log_parses_rows(tmp_path):
    path = _write_trips_csv(
        tmp_path / "trips.csv",
        [
            _row("r1", "A32000", "M32006", "2024-03-01 08:05:12.331", "2024-03-01 08:25:40.100"),
            _row("r2", "M32006", "A32000", "2024-03-01 17:45:00.000", "2024-03-01 18:02:00.000"),
        ],
    )

    trips = load_trip_log(path)

    assert len(trips) == 2
    first = trips[0]
    assert first.start_station_id == "A32000"
    assert first.end_station_id == "M32006"
    assert isinstance(first.started_at, datetime)
    assert first.start_minute == 8 * 60 + 5
    assert trips[1].end_minute == 18 * 60 + 2


def test_station_ids_stay_strings(tmp_path):
    path = _write_trips_csv(
        tmp_path / "trips.csv",
        [_row("r1", "00123", " 45 ", "2024-03-01 08:00:00", "2024-03-01 08:10:00")],
    )
    (trip,) = load_trip_log(path)
    assert trip.start_station_id == "00123"
    assert trip.end_station_id == "45"


def test_malformed_rows_are_skipped(tmp_path, caplog):
    path = _write_trips_csv(
        tmp_path / "trips.csv",
        [
            _row("ok", "A", "B", "2024-03-01 08:00:00", "2024-03-01 08:10:00"),
            _row("bad-ts", "A", "B", "yesterday-ish", "2024-03-01 08:10:00"),
            _row("no-start", "", "B", "2024-03-01 09:00:00", "2024-03-01 09:10:00"),
            _row("no-end-ts", "A", "B", "2024-03-01 09:00:00", ""),
            _row("ok2", "B", "A", "2024-03-01 10:00:00", "2024-03-01 10:10:00"),
        ],
    )

    with caplog.at_level("WARNING"):
        trips = load_trip_log(path)

    assert [(t.start_station_id, t.end_station_id) for t in trips] == [("A", "B"), ("B", "A")]
    assert "Skipped 3 malformed trip rows" in caplog.text


def test_chunks_are_streamed_and_reported(tmp_path):
    rows = [
        _row(f"r{i}", "A", "B", "2024-03-01 08:00:00", "2024-03-01 08:10:00") for i in range(7)
    ]
    path = _write_trips_csv(tmp_path / "trips.csv", rows)

    chunk_sizes = [len(chunk) for chunk in iter_trip_chunks(path, chunksize=3)]
    reported: List[int] = []
    trips = load_trip_log(path, chunksize=3, on_chunk=reported.append)

    assert chunk_sizes == [3, 3, 1]
    assert reported == [3, 3, 1]
    assert len(trips) == 7


def test_missing_required_columns_raise(tmp_path):
    path = _write_trips_csv(
        tmp_path / "trips.csv",
        [{"ride_id": "r1", "started_at": "2024-03-01 08:00:00"}],
        fieldnames=["ride_id", "started_at"],
    )
    with pytest.raises(ValueError, match="missing required columns"):
        load_trip_log(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_trip_log(tmp_path / "absent.csv")


def test_mixed_iso_timestamp_precisions_are_all_kept(tmp_path, caplog):
    path = _write_trips_csv(
        tmp_path / "trips.csv",
        [
            _row("ms", "A", "B", "2024-03-01 08:00:00.123", "2024-03-01 08:20:00.456"),
            _row("sec", "B", "C", "2024-03-01 09:00:00", "2024-03-01 09:15:00"),
            _row("min", "C", "A", "2024-03-01 10:00", "2024-03-01 10:30"),
        ],
    )

    with caplog.at_level("WARNING"):
        trips = load_trip_log(path)

    assert [trip.start_minute for trip in trips] == [8 * 60, 9 * 60, 10 * 60]
    assert [trip.end_minute for trip in trips] == [8 * 60 + 20, 9 * 60 + 15, 10 * 60 + 30]
    assert "malformed" not in caplog.text
