"""Helpers for loading the bike-share station catalog."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .domain_types import Station

logger = logging.getLogger(__name__)


ID_KEYS: Sequence[str] = ("short_name", "Number", "station_id", "id")
LONGITUDE_KEYS: Sequence[str] = ("lon", "Long", "longitude", "lng")
LATITUDE_KEYS: Sequence[str] = ("lat", "Lat", "latitude")
NAME_KEYS: Sequence[str] = ("name", "NAME", "Name")


def _first_present(record: Mapping[str, object], keys: Iterable[str]) -> object:
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _to_coordinate(value: object) -> Optional[float]:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _extract_station_records(payload: object) -> List[Mapping[str, object]]:
    """Return the raw station list from the accepted JSON shapes."""
    if isinstance(payload, list):
        records = payload
    elif isinstance(payload, Mapping):
        data = payload.get("data")
        if isinstance(data, Mapping) and "stations" in data:
            records = data["stations"]
        elif "stations" in payload:
            records = payload["stations"]
        else:
            raise ValueError("Station catalog must contain a 'stations' list (optionally under 'data')")
    else:
        raise TypeError("Station catalog JSON must be an object or a list")
    if not isinstance(records, list):
        raise TypeError("'stations' must be a list of station records")
    return [record for record in records if isinstance(record, Mapping)]


@dataclass
class StationCatalog:
    """Ordered registry of known stations."""

    stations: Tuple[Station, ...] = ()
    _by_id: Dict[str, Station] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.stations = tuple(self.stations)
        self._by_id = {}
        for station in self.stations:
            if station.id in self._by_id:
                raise ValueError(f"Duplicate station id '{station.id}' in catalog")
            self._by_id[station.id] = station

    def __len__(self) -> int:
        return len(self.stations)

    def __iter__(self):
        return iter(self.stations)

    def __contains__(self, station_id: object) -> bool:
        return str(station_id).strip() in self._by_id

    def get(self, station_id: str) -> Optional[Station]:
        """Return the station registered under ``station_id`` if any."""
        return self._by_id.get(str(station_id).strip())

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "station_id": station.id,
                    "name": station.name,
                    "longitude": station.longitude,
                    "latitude": station.latitude,
                }
                for station in self.stations
            ],
            columns=["station_id", "name", "longitude", "latitude"],
        )

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, object]]) -> "StationCatalog":
        stations: List[Station] = []
        seen: set[str] = set()
        skipped = 0
        for record in records:
            raw_id = _first_present(record, ID_KEYS)
            station_id = str(raw_id).strip() if raw_id is not None else ""
            longitude = _to_coordinate(_first_present(record, LONGITUDE_KEYS))
            latitude = _to_coordinate(_first_present(record, LATITUDE_KEYS))
            if not station_id or longitude is None or latitude is None:
                skipped += 1
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("Skipping malformed station record: %s", dict(record))
                continue
            if station_id in seen:
                logger.warning("Duplicate station id %s; keeping the first record.", station_id)
                continue
            seen.add(station_id)
            name = _first_present(record, NAME_KEYS)
            stations.append(
                Station(
                    id=station_id,
                    longitude=longitude,
                    latitude=latitude,
                    name=str(name) if name is not None else None,
                )
            )
        if skipped:
            logger.warning("Skipped %s station records without an id or valid coordinates.", skipped)
        return cls(stations=tuple(stations))

    @classmethod
    def from_json(cls, path: str | Path) -> "StationCatalog":
        """Load stations from a JSON file."""
        catalog_path = Path(path)
        if not catalog_path.exists():
            raise FileNotFoundError(f"Station catalog not found at {catalog_path}")
        with catalog_path.open("r", encoding="utf-8") as handle:
            try:
                payload = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Station catalog at {catalog_path} is not valid JSON: {exc}") from exc
        catalog = cls.from_records(_extract_station_records(payload))
        logger.info("Loaded %s stations from %s", len(catalog), catalog_path)
        return catalog
