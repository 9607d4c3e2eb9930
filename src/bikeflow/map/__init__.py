"""Map package exports."""

from .bike_lanes import BikeLaneNetwork, load_bike_lanes
from .config import BikeLaneLayer, MapConfig
from .renderer import build_map, render_map_html
from .session import TrafficMapSession, TrafficSnapshot

__all__ = [
    "BikeLaneLayer",
    "BikeLaneNetwork",
    "MapConfig",
    "TrafficMapSession",
    "TrafficSnapshot",
    "build_map",
    "load_bike_lanes",
    "render_map_html",
]
