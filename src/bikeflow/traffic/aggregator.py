"""Per-station arrival/departure counting."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Sequence

from .domain_types import Station, StationTraffic, Trip


def aggregate_traffic(stations: Sequence[Station], trips: Iterable[Trip]) -> List[StationTraffic]:
    """Count arrivals and departures for every station.

    Returns one fresh :class:`StationTraffic` per input station, in input order.
    Stations without trips get zero counts. Trips referencing unknown station ids
    are ignored. No state is kept between calls.
    """
    departures: Counter[str] = Counter()
    arrivals: Counter[str] = Counter()
    for trip in trips:
        departures[trip.start_station_id] += 1
        arrivals[trip.end_station_id] += 1
    return [
        StationTraffic(
            station=station,
            arrivals=arrivals.get(station.id, 0),
            departures=departures.get(station.id, 0),
        )
        for station in stations
    ]
