from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from bikeflow.traffic.scales import FILTERED_RADIUS_RANGE, UNFILTERED_RADIUS_RANGE
from bikeflow.traffic.time_filter import DEFAULT_WINDOW_MINUTES

logger = logging.getLogger(__name__)

DEFAULT_CENTER: Tuple[float, float] = (42.36027, -71.09415)  # (lat, lon) Boston/Cambridge
DEFAULT_LANE_COLOR = "#32D400"


def _parse_range(value: object, label: str) -> Tuple[float, float]:
    if not isinstance(value, Sequence) or isinstance(value, str) or len(value) != 2:
        raise TypeError(f"{label} must be a two-element list [min, max]")
    low, high = float(value[0]), float(value[1])
    if low < 0 or high < low:
        raise ValueError(f"{label} must satisfy 0 <= min <= max: {list(value)!r}")
    return low, high


@dataclass(frozen=True)
class BikeLaneLayer:
    """One GeoJSON overlay of bike-lane geometries."""

    name: str
    path: str
    color: str = DEFAULT_LANE_COLOR
    weight: float = 5.0
    opacity: float = 0.6

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Bike-lane layers require a non-empty name")
        if not self.path.strip():
            raise ValueError(f"Bike-lane layer {self.name!r} requires a path")
        if self.weight <= 0:
            raise ValueError(f"Bike-lane layer {self.name!r} weight must be positive")
        if not 0.0 <= self.opacity <= 1.0:
            raise ValueError(f"Bike-lane layer {self.name!r} opacity must lie in [0, 1]")

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "path": self.path,
            "color": self.color,
            "weight": float(self.weight),
            "opacity": float(self.opacity),
        }


@dataclass
class MapConfig:
    """Rendering and data-source settings for the traffic map."""

    center: Tuple[float, float] = DEFAULT_CENTER
    zoom_start: int = 12
    min_zoom: int = 5
    max_zoom: int = 18
    tiles: str = "CartoDB positron"
    stations_path: Optional[str] = None
    trips_path: Optional[str] = None
    bike_lanes: List[BikeLaneLayer] = field(default_factory=list)
    departure_color: str = "steelblue"
    arrival_color: str = "darkorange"
    unfiltered_radius_range: Tuple[float, float] = UNFILTERED_RADIUS_RANGE
    filtered_radius_range: Tuple[float, float] = FILTERED_RADIUS_RANGE
    window_minutes: int = DEFAULT_WINDOW_MINUTES

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        lat, lon = self.center
        if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
            raise ValueError(f"Map center out of range: {self.center!r}")
        if not self.min_zoom <= self.zoom_start <= self.max_zoom:
            raise ValueError("zoom_start must lie between min_zoom and max_zoom")
        if self.window_minutes <= 0:
            raise ValueError("window_minutes must be positive")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "MapConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Map config YAML not found at {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            try:
                data = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ValueError(f"Map config at {config_path} is not valid YAML: {exc}") from exc
        if not isinstance(data, Mapping):
            raise TypeError("Map config YAML must contain a mapping at the top level")
        return cls.from_mapping(data, base_dir=config_path.parent)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object], base_dir: Path | None = None) -> "MapConfig":
        """Build a config from parsed YAML; relative data paths resolve against ``base_dir``."""
        kwargs: Dict[str, object] = {}
        if "center" in data:
            center = data["center"]
            if isinstance(center, Mapping):
                kwargs["center"] = (float(center["lat"]), float(center["lon"]))
            else:
                kwargs["center"] = _parse_center(center)
        for key in ("zoom_start", "min_zoom", "max_zoom", "window_minutes"):
            if key in data:
                kwargs[key] = int(data[key])
        for key in ("tiles", "departure_color", "arrival_color"):
            if key in data:
                kwargs[key] = str(data[key])
        for key in ("stations_path", "trips_path"):
            if data.get(key):
                kwargs[key] = _resolve_path(str(data[key]), base_dir)
        for key in ("unfiltered_radius_range", "filtered_radius_range"):
            if key in data:
                kwargs[key] = _parse_range(data[key], key)
        lanes = data.get("bike_lanes") or []
        if not isinstance(lanes, list):
            raise TypeError("'bike_lanes' must be a list of layer definitions")
        layers: List[BikeLaneLayer] = []
        for raw in lanes:
            if not isinstance(raw, Mapping):
                raise TypeError("Bike-lane layer entries must be mappings")
            layers.append(
                BikeLaneLayer(
                    name=str(raw.get("name") or ""),
                    path=_resolve_path(str(raw.get("path") or ""), base_dir),
                    color=str(raw.get("color", DEFAULT_LANE_COLOR)),
                    weight=float(raw.get("weight", 5.0)),
                    opacity=float(raw.get("opacity", 0.6)),
                )
            )
        kwargs["bike_lanes"] = layers
        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            logger.warning("Ignoring unknown map config keys: %s", ", ".join(sorted(unknown)))
        return cls(**kwargs)  # type: ignore[arg-type]

    def to_yaml(self, path: str | Path) -> None:
        output: Dict[str, object] = {
            "center": [float(self.center[0]), float(self.center[1])],
            "zoom_start": self.zoom_start,
            "min_zoom": self.min_zoom,
            "max_zoom": self.max_zoom,
            "tiles": self.tiles,
            "departure_color": self.departure_color,
            "arrival_color": self.arrival_color,
            "unfiltered_radius_range": list(self.unfiltered_radius_range),
            "filtered_radius_range": list(self.filtered_radius_range),
            "window_minutes": self.window_minutes,
            "bike_lanes": [layer.to_dict() for layer in self.bike_lanes],
        }
        if self.stations_path:
            output["stations_path"] = self.stations_path
        if self.trips_path:
            output["trips_path"] = self.trips_path
        dest = Path(path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(output, handle, sort_keys=True)


_KNOWN_KEYS = {
    "center",
    "zoom_start",
    "min_zoom",
    "max_zoom",
    "tiles",
    "stations_path",
    "trips_path",
    "bike_lanes",
    "departure_color",
    "arrival_color",
    "unfiltered_radius_range",
    "filtered_radius_range",
    "window_minutes",
}


def _parse_center(value: object) -> Tuple[float, float]:
    if not isinstance(value, Sequence) or isinstance(value, str) or len(value) != 2:
        raise TypeError("center must be [lat, lon] or a mapping with 'lat' and 'lon'")
    return float(value[0]), float(value[1])


def _resolve_path(raw: str, base_dir: Path | None) -> str:
    if not raw or base_dir is None:
        return raw
    candidate = Path(raw).expanduser()
    if candidate.is_absolute():
        return str(candidate)
    return str(base_dir / candidate)


__all__ = ["BikeLaneLayer", "MapConfig"]
