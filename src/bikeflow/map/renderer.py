"""Folium rendering of a traffic snapshot over bike-lane overlays."""

from __future__ import annotations

import html
import logging
from pathlib import Path
from typing import Sequence

import folium
from branca.colormap import LinearColormap

from .bike_lanes import BikeLaneNetwork
from .config import MapConfig
from .session import TrafficSnapshot

logger = logging.getLogger(__name__)


def flow_colormap(config: MapConfig) -> LinearColormap:
    """Blend from arrival color (ratio 0) to departure color (ratio 1)."""
    return LinearColormap(
        [config.arrival_color, config.departure_color],
        vmin=0.0,
        vmax=1.0,
        caption="Departure share",
    )


def station_tooltip(total: int, departures: int, arrivals: int) -> str:
    return f"{total} trips ({departures} departures, {arrivals} arrivals)"


def build_map(
    snapshot: TrafficSnapshot,
    config: MapConfig,
    bike_lanes: Sequence[BikeLaneNetwork] = (),
) -> folium.Map:
    """Build the interactive map for one snapshot."""
    fmap = folium.Map(
        location=list(config.center),
        zoom_start=config.zoom_start,
        min_zoom=config.min_zoom,
        max_zoom=config.max_zoom,
        tiles=config.tiles,
    )

    for network in bike_lanes:
        layer = network.layer
        folium.GeoJson(
            network.to_feature_collection(),
            name=layer.name,
            style_function=lambda _feature, layer=layer: {
                "color": layer.color,
                "weight": layer.weight,
                "opacity": layer.opacity,
            },
        ).add_to(fmap)

    colormap = flow_colormap(config)
    stations_layer = folium.FeatureGroup(name=f"Station traffic ({snapshot.label})")
    # Largest circles first so that small stations stay clickable on top.
    ordered = sorted(snapshot.stations, key=lambda entry: entry.total_traffic, reverse=True)
    for entry in ordered:
        radius = snapshot.radius_for(entry)
        if radius <= 0:
            continue
        fill = colormap(snapshot.flow_bucket_for(entry))
        folium.CircleMarker(
            location=[entry.station.latitude, entry.station.longitude],
            radius=radius,
            color="white",
            weight=1,
            fill=True,
            fill_color=fill,
            fill_opacity=0.6,
            tooltip=station_tooltip(entry.total_traffic, entry.departures, entry.arrivals),
        ).add_to(stations_layer)
    stations_layer.add_to(fmap)

    fmap.get_root().html.add_child(folium.Element(_header_html(snapshot)))
    fmap.get_root().html.add_child(folium.Element(_legend_html(colormap)))
    folium.LayerControl(collapsed=True).add_to(fmap)
    return fmap


def render_map_html(
    snapshot: TrafficSnapshot,
    config: MapConfig,
    output_path: str | Path,
    bike_lanes: Sequence[BikeLaneNetwork] = (),
) -> Path:
    fmap = build_map(snapshot, config, bike_lanes)
    dest = Path(output_path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    fmap.save(str(dest))
    logger.info("Map for %s written to %s", snapshot.label, dest)
    return dest


def _header_html(snapshot: TrafficSnapshot) -> str:
    label = html.escape(snapshot.label)
    return (
        '<div style="position: fixed; top: 10px; left: 50px; z-index: 1000; '
        'background: white; padding: 6px 10px; border-radius: 4px; font-family: sans-serif;">'
        "<strong>Bike traffic</strong> "
        f"<time>{label}</time> "
        f"<em>({snapshot.trip_count} trips)</em>"
        "</div>"
    )


def _legend_html(colormap: LinearColormap) -> str:
    swatches = [
        ("More departures", colormap(1.0)),
        ("Balanced", colormap(0.5)),
        ("More arrivals", colormap(0.0)),
    ]
    items = "".join(
        f'<div><span style="display:inline-block;width:12px;height:12px;'
        f'border-radius:50%;background:{color};margin-right:6px;"></span>'
        f"{html.escape(text)}</div>"
        for text, color in swatches
    )
    return (
        '<div style="position: fixed; bottom: 20px; left: 10px; z-index: 1000; '
        'background: white; padding: 6px 10px; border-radius: 4px; font-family: sans-serif;">'
        f"<strong>Legend</strong>{items}</div>"
    )
