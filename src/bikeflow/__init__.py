"""
Bike-share station traffic over bike-lane maps for Boston/Cambridge.
"""

from .traffic import (
    NO_FILTER,
    Station,
    StationTraffic,
    Trip,
    aggregate_traffic,
    filter_trips_by_minute,
    format_time_label,
)

__all__ = [
    "NO_FILTER",
    "Station",
    "StationTraffic",
    "Trip",
    "aggregate_traffic",
    "filter_trips_by_minute",
    "format_time_label",
]
