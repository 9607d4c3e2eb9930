"""Core dataclasses shared across the traffic package."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional


def minutes_since_midnight(timestamp: datetime) -> int:
    """Return ``hours * 60 + minutes`` for a timestamp, ignoring seconds and date."""
    return timestamp.hour * 60 + timestamp.minute


def flow_ratio(departures: int, total_traffic: int) -> float:
    """Return ``departures / total_traffic``, falling back to 0.0 for idle stations."""
    if total_traffic <= 0:
        return 0.0
    return departures / total_traffic


@dataclass(frozen=True)
class Station:
    """Fixed bike-share dock location."""

    id: str
    longitude: float
    latitude: float
    name: Optional[str] = None


@dataclass(frozen=True)
class Trip:
    """Single bike rental between two stations."""

    start_station_id: str
    end_station_id: str
    started_at: datetime
    ended_at: datetime

    @property
    def start_minute(self) -> int:
        return minutes_since_midnight(self.started_at)

    @property
    def end_minute(self) -> int:
        return minutes_since_midnight(self.ended_at)


@dataclass(frozen=True)
class StationTraffic:
    """Station annotated with the counts of one aggregation pass."""

    station: Station
    arrivals: int = 0
    departures: int = 0

    def __post_init__(self) -> None:
        if self.arrivals < 0 or self.departures < 0:
            raise ValueError("Traffic counts must be non-negative")

    @property
    def id(self) -> str:
        return self.station.id

    @property
    def total_traffic(self) -> int:
        return self.arrivals + self.departures

    @property
    def flow_ratio(self) -> float:
        return flow_ratio(self.departures, self.total_traffic)

    def to_record(self) -> Dict[str, object]:
        return {
            "station_id": self.station.id,
            "name": self.station.name,
            "longitude": self.station.longitude,
            "latitude": self.station.latitude,
            "arrivals": self.arrivals,
            "departures": self.departures,
            "total_traffic": self.total_traffic,
        }
