"""Helpers for loading bike-lane overlays."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import pandas as pd
from shapely.errors import ShapelyError
from shapely.geometry import mapping, shape
from shapely.geometry.base import BaseGeometry

from .config import BikeLaneLayer

logger = logging.getLogger(__name__)

LINE_TYPES = {"LineString", "MultiLineString"}


@dataclass
class BikeLaneNetwork:
    """Bike-lane geometries of one overlay layer."""

    layer: BikeLaneLayer
    geo_dataframe: pd.DataFrame

    @classmethod
    def from_geojson(cls, layer: BikeLaneLayer) -> "BikeLaneNetwork":
        """Load the layer's GeoJSON file, keeping line geometries only."""
        lines, dropped = _read_line_features(layer.path)
        if dropped:
            logger.info("Dropped %s non-line features from bike-lane layer %s", dropped, layer.name)
        if not lines:
            logger.warning("Bike-lane layer %s at %s has no line features", layer.name, layer.path)
        return cls(layer=layer, geo_dataframe=pd.DataFrame({"geometry": lines}))

    @property
    def feature_count(self) -> int:
        return len(self.geo_dataframe)

    def total_length(self) -> float:
        """Sum of geometry lengths in the source coordinate units."""
        if self.geo_dataframe.empty:
            return 0.0
        return float(sum(geom.length for geom in self.geo_dataframe["geometry"]))

    def to_feature_collection(self) -> Dict[str, object]:
        features = [
            {"type": "Feature", "properties": {}, "geometry": mapping(geom)}
            for geom in self.geo_dataframe.get("geometry", [])
        ]
        return {"type": "FeatureCollection", "features": features}


def _read_line_features(path: str) -> Tuple[List[BaseGeometry], int]:
    """Return ``(line_geometries, dropped_count)`` for a GeoJSON FeatureCollection."""
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise TypeError(f"{path} does not contain a GeoJSON object")

    lines: List[BaseGeometry] = []
    dropped = 0
    for feature in payload.get("features") or []:
        geometry = (feature or {}).get("geometry")
        if not geometry or geometry.get("type") not in LINE_TYPES:
            dropped += 1
            continue
        geom = shape(geometry)
        if geom.is_empty:
            dropped += 1
            continue
        lines.append(geom)
    return lines, dropped


def load_bike_lanes(layers: Sequence[BikeLaneLayer]) -> List[BikeLaneNetwork]:
    """Load every configured layer; layers that cannot be read are logged and skipped."""
    networks: List[BikeLaneNetwork] = []
    for layer in layers:
        try:
            network = BikeLaneNetwork.from_geojson(layer)
        except (OSError, ValueError, TypeError, AttributeError, ShapelyError) as exc:
            logger.warning("Skipping bike-lane layer %s (%s): %s", layer.name, layer.path, exc)
            continue
        logger.info("Loaded %s bike-lane features for %s", network.feature_count, layer.name)
        networks.append(network)
    return networks
