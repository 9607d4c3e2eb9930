"""Time-selection state and per-selection traffic snapshots.

A :class:`TrafficMapSession` owns the loaded inputs and the current time
selection. It is either "unfiltered" (``NO_FILTER``) or "filtered at minute M".
Every call to :meth:`TrafficMapSession.set_time_filter` performs exactly one
filter + aggregation + scale pass over the full trip set and publishes a new,
immutable :class:`TrafficSnapshot`. Nothing from a previous pass is reused, so
the same selection always yields the same snapshot contents.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from bikeflow.traffic.aggregator import aggregate_traffic
from bikeflow.traffic.domain_types import Station, StationTraffic, Trip
from bikeflow.traffic.loaders import DataLoadError, LoadedInputs, load_inputs
from bikeflow.traffic.scales import (
    FILTERED_RADIUS_RANGE,
    UNFILTERED_RADIUS_RANGE,
    FlowRatioQuantizer,
    RadiusScale,
    build_radius_scale,
)
from bikeflow.traffic.time_filter import (
    DEFAULT_WINDOW_MINUTES,
    NO_FILTER,
    filter_trips_by_minute,
    format_time_label,
    is_filtered,
    validate_time_filter,
)

logger = logging.getLogger(__name__)


SNAPSHOT_COLUMNS: Sequence[str] = [
    "station_id",
    "name",
    "longitude",
    "latitude",
    "arrivals",
    "departures",
    "total_traffic",
    "flow_ratio",
    "flow_bucket",
    "radius",
]


@dataclass(frozen=True)
class TrafficSnapshot:
    """Station statistics and scales for one time selection."""

    time_filter: int
    stations: Tuple[StationTraffic, ...]
    radius_scale: RadiusScale
    quantizer: FlowRatioQuantizer
    trip_count: int

    @property
    def label(self) -> str:
        return format_time_label(self.time_filter)

    @property
    def is_filtered(self) -> bool:
        return is_filtered(self.time_filter)

    @property
    def max_total_traffic(self) -> int:
        return max((entry.total_traffic for entry in self.stations), default=0)

    def radius_for(self, entry: StationTraffic) -> float:
        return self.radius_scale(entry.total_traffic)

    def flow_bucket_for(self, entry: StationTraffic) -> float:
        return self.quantizer(entry.flow_ratio)

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular view of the snapshot, one row per station."""
        if not self.stations:
            return pd.DataFrame(columns=list(SNAPSHOT_COLUMNS))
        df = pd.DataFrame([entry.to_record() for entry in self.stations])
        df["flow_ratio"] = [entry.flow_ratio for entry in self.stations]
        df["flow_bucket"] = self.quantizer.apply(df["flow_ratio"].to_numpy())
        df["radius"] = self.radius_scale.apply(df["total_traffic"].to_numpy())
        return df[list(SNAPSHOT_COLUMNS)]

    def summary(self) -> Dict[str, object]:
        buckets = np.asarray([self.flow_bucket_for(entry) for entry in self.stations], dtype=float)
        return {
            "label": self.label,
            "trips": self.trip_count,
            "stations": len(self.stations),
            "active_stations": sum(1 for entry in self.stations if entry.total_traffic > 0),
            "max_total_traffic": self.max_total_traffic,
            "departure_heavy": int((buckets == 1.0).sum()),
            "balanced": int((buckets == 0.5).sum()),
            "arrival_heavy": int((buckets == 0.0).sum()),
        }


@dataclass
class TrafficMapSession:
    """Holds the loaded inputs and recomputes a snapshot on each time selection."""

    stations: Tuple[Station, ...] = ()
    trips: Tuple[Trip, ...] = ()
    window_minutes: int = DEFAULT_WINDOW_MINUTES
    unfiltered_radius_range: Tuple[float, float] = UNFILTERED_RADIUS_RANGE
    filtered_radius_range: Tuple[float, float] = FILTERED_RADIUS_RANGE
    quantizer: FlowRatioQuantizer = field(default_factory=FlowRatioQuantizer)
    has_data: bool = False
    load_error: Optional[DataLoadError] = None
    recompute_count: int = 0
    _snapshot: Optional[TrafficSnapshot] = field(default=None, init=False, repr=False)

    @classmethod
    def from_inputs(cls, inputs: LoadedInputs, **kwargs) -> "TrafficMapSession":
        session = cls(**kwargs)
        session._attach(inputs)
        return session

    @property
    def snapshot(self) -> Optional[TrafficSnapshot]:
        return self._snapshot

    @property
    def time_filter(self) -> int:
        return self._snapshot.time_filter if self._snapshot is not None else NO_FILTER

    def load(self, catalog_path: str | Path, trips_path: str | Path, **load_kwargs) -> bool:
        """Load both inputs and compute the unfiltered snapshot.

        Returns ``False`` and keeps the session empty when a load fails; the
        failure is logged and kept on :attr:`load_error`.
        """
        try:
            inputs = load_inputs(catalog_path, trips_path, **load_kwargs)
        except DataLoadError as exc:
            logger.error("No traffic data available: %s", exc)
            self.load_error = exc
            self.has_data = False
            self.stations = ()
            self.trips = ()
            self._snapshot = None
            return False
        self._attach(inputs)
        return True

    def set_time_filter(self, time_filter: int) -> TrafficSnapshot:
        """Select a minute of day (or ``NO_FILTER``) and recompute the snapshot."""
        if not self.has_data:
            raise RuntimeError("Traffic data has not been loaded")
        time_filter = validate_time_filter(time_filter)
        self._snapshot = self._compute(time_filter)
        return self._snapshot

    def clear_time_filter(self) -> TrafficSnapshot:
        return self.set_time_filter(NO_FILTER)

    def _attach(self, inputs: LoadedInputs) -> None:
        self.stations = tuple(inputs.catalog.stations)
        self.trips = tuple(inputs.trips)
        self.has_data = True
        self.load_error = None
        self.set_time_filter(NO_FILTER)

    def _compute(self, time_filter: int) -> TrafficSnapshot:
        self.recompute_count += 1
        active_trips = filter_trips_by_minute(
            self.trips, time_filter, window_minutes=self.window_minutes
        )
        traffic: List[StationTraffic] = aggregate_traffic(self.stations, active_trips)
        radius_scale = build_radius_scale(
            traffic,
            filtered=is_filtered(time_filter),
            unfiltered_range=self.unfiltered_radius_range,
            filtered_range=self.filtered_radius_range,
        )
        snapshot = TrafficSnapshot(
            time_filter=time_filter,
            stations=tuple(traffic),
            radius_scale=radius_scale,
            quantizer=self.quantizer,
            trip_count=len(active_trips),
        )
        logger.info(
            "Recomputed traffic for %s: %s trips across %s stations (max total=%s)",
            snapshot.label,
            snapshot.trip_count,
            len(snapshot.stations),
            snapshot.max_total_traffic,
        )
        return snapshot
