"""Traffic package exports."""

from .aggregator import aggregate_traffic
from .domain_types import Station, StationTraffic, Trip, flow_ratio, minutes_since_midnight
from .loaders import (
    DataLoadError,
    LoadedInputs,
    StationCatalogLoadError,
    TripLogLoadError,
    load_inputs,
)
from .scales import FlowRatioQuantizer, RadiusScale, build_radius_scale
from .station_catalog import StationCatalog
from .time_filter import NO_FILTER, filter_trips_by_minute, format_time_label
from .trip_log import load_trip_log

__all__ = [
    "DataLoadError",
    "FlowRatioQuantizer",
    "LoadedInputs",
    "NO_FILTER",
    "RadiusScale",
    "Station",
    "StationCatalog",
    "StationCatalogLoadError",
    "StationTraffic",
    "Trip",
    "TripLogLoadError",
    "aggregate_traffic",
    "build_radius_scale",
    "filter_trips_by_minute",
    "flow_ratio",
    "format_time_label",
    "load_inputs",
    "load_trip_log",
    "minutes_since_midnight",
]
