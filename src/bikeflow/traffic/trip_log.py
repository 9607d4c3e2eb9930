"""Streaming loader for the bike-share trip log."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence

import pandas as pd

from .domain_types import Trip

logger = logging.getLogger(__name__)


TRIP_COLUMNS: Sequence[str] = [
    "start_station_id",
    "end_station_id",
    "started_at",
    "ended_at",
]


def _check_trip_columns(csv_path: str | Path) -> None:
    header_df = pd.read_csv(csv_path, nrows=0)
    missing = [column for column in TRIP_COLUMNS if column not in header_df.columns]
    if missing:
        raise ValueError(f"{csv_path} is missing required columns: {', '.join(missing)}")


def _chunk_to_trips(chunk: pd.DataFrame) -> tuple[List[Trip], int]:
    """Convert one CSV chunk into trips; returns ``(trips, malformed_count)``."""
    start_ids = chunk["start_station_id"].astype("string").str.strip()
    end_ids = chunk["end_station_id"].astype("string").str.strip()
    started = pd.to_datetime(chunk["started_at"], errors="coerce", format="ISO8601")
    ended = pd.to_datetime(chunk["ended_at"], errors="coerce", format="ISO8601")
    valid = (
        start_ids.notna()
        & (start_ids != "")
        & end_ids.notna()
        & (end_ids != "")
        & started.notna()
        & ended.notna()
    )
    trips = [
        Trip(
            start_station_id=str(start_id),
            end_station_id=str(end_id),
            started_at=start_ts.to_pydatetime(),
            ended_at=end_ts.to_pydatetime(),
        )
        for start_id, end_id, start_ts, end_ts in zip(
            start_ids[valid], end_ids[valid], started[valid], ended[valid]
        )
    ]
    return trips, int((~valid).sum())


def iter_trip_chunks(
    csv_path: str | Path,
    *,
    chunksize: int = 100_000,
) -> Iterator[List[Trip]]:
    """Yield trips chunk by chunk, skipping rows with missing ids or bad timestamps."""
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"Trip log not found at {path}")
    _check_trip_columns(path)
    reader = pd.read_csv(
        path,
        usecols=list(TRIP_COLUMNS),
        dtype={"start_station_id": str, "end_station_id": str, "started_at": str, "ended_at": str},
        chunksize=chunksize,
    )
    chunk_idx = 0
    total_malformed = 0
    for chunk in reader:
        chunk_idx += 1
        trips, malformed = _chunk_to_trips(chunk)
        total_malformed += malformed
        if logger.isEnabledFor(logging.DEBUG) and (chunk_idx <= 5 or chunk_idx % 10 == 0):
            logger.debug(
                "iter_trip_chunks file=%s chunk=%s kept %s trips (malformed=%s)",
                os.path.basename(path),
                chunk_idx,
                len(trips),
                malformed,
            )
        yield trips
    if total_malformed:
        logger.warning(
            "Skipped %s malformed trip rows in %s (missing station id or unparseable timestamp).",
            total_malformed,
            path,
        )


def load_trip_log(
    csv_path: str | Path,
    *,
    chunksize: int = 100_000,
    on_chunk: Optional[Callable[[int], None]] = None,
) -> List[Trip]:
    """Load the whole trip log into memory.

    ``on_chunk`` receives the number of trips kept from each chunk, which the CLI
    uses to drive its progress display.
    """
    trips: List[Trip] = []
    for chunk_trips in iter_trip_chunks(csv_path, chunksize=chunksize):
        trips.extend(chunk_trips)
        if on_chunk is not None:
            on_chunk(len(chunk_trips))
    logger.info("Loaded %s trips from %s", len(trips), csv_path)
    return trips
