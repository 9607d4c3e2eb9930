"""CLI entry point that renders the bike-traffic map for one or more times of day."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, List

from rich.console import Console
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from bikeflow.map.bike_lanes import load_bike_lanes
from bikeflow.map.config import MapConfig
from bikeflow.map.renderer import render_map_html
from bikeflow.map.session import TrafficMapSession, TrafficSnapshot
from bikeflow.traffic.time_filter import NO_FILTER, parse_time_of_day

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_HTML = "output/bike_traffic_map.html"


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", default=None, help="Optional YAML map configuration.")
    parser.add_argument("--stations", default=None, help="Station catalog JSON (overrides config).")
    parser.add_argument("--trips", default=None, help="Trip log CSV (overrides config).")
    parser.add_argument(
        "--time",
        dest="times",
        action="append",
        default=None,
        help=(
            "Time of day to filter on, as HH:MM (24-hour clock) or 'any'. "
            "Repeat to render several maps; defaults to 'any'."
        ),
    )
    parser.add_argument(
        "--output-html",
        default=DEFAULT_OUTPUT_HTML,
        help="Destination HTML map. With several --time values a _HHMM suffix is added.",
    )
    parser.add_argument(
        "--output-csv",
        default=None,
        help="Optional CSV of per-station statistics (same suffix rule as --output-html).",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=100_000,
        help="Chunk size for streaming trip-log ingestion.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Verbosity for the CLI logger.",
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def output_path_for(base: str | Path, time_filter: int, multiple: bool) -> Path:
    path = Path(base)
    if not multiple:
        return path
    if time_filter == NO_FILTER:
        suffix = "any"
    else:
        hours, minutes = divmod(time_filter, 60)
        suffix = f"{hours:02d}{minutes:02d}"
    return path.with_name(f"{path.stem}_{suffix}{path.suffix}")


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = MapConfig.from_yaml(args.config) if args.config else MapConfig()
    except (OSError, ValueError, TypeError, KeyError) as exc:
        raise SystemExit(f"Invalid map config: {exc}") from exc
    stations_path = args.stations or config.stations_path
    trips_path = args.trips or config.trips_path
    if not stations_path or not trips_path:
        raise SystemExit("Both a station catalog (--stations) and a trip log (--trips) are required.")

    try:
        time_filters: List[int] = [parse_time_of_day(token) for token in (args.times or ["any"])]
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    session = TrafficMapSession(
        window_minutes=config.window_minutes,
        unfiltered_radius_range=config.unfiltered_radius_range,
        filtered_radius_range=config.filtered_radius_range,
    )

    progress_console = Console(stderr=True)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        TextColumn("{task.completed:,} trips", justify="right"),
        TimeElapsedColumn(),
        console=progress_console,
        transient=True,
        disable=not progress_console.is_terminal,
    )
    with progress:
        task = progress.add_task("Loading trip log", total=None)
        logger.info("Loading stations from %s and trips from %s", stations_path, trips_path)
        loaded = session.load(
            stations_path,
            trips_path,
            chunksize=args.chunk_size,
            on_trip_chunk=lambda count: progress.advance(task, count),
        )
    if not loaded:
        raise SystemExit(f"No map rendered: {session.load_error}")

    bike_lanes = load_bike_lanes(config.bike_lanes)
    multiple = len(time_filters) > 1
    for time_filter in time_filters:
        snapshot = session.set_time_filter(time_filter)
        html_path = render_map_html(
            snapshot,
            config,
            output_path_for(args.output_html, time_filter, multiple),
            bike_lanes,
        )
        if args.output_csv:
            _write_station_csv(output_path_for(args.output_csv, time_filter, multiple), snapshot)
        logger.info("Snapshot %s: %s", html_path.name, snapshot.summary())


def _write_station_csv(path: Path, snapshot: TrafficSnapshot) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    snapshot.to_dataframe().to_csv(path, index=False)
    logger.info("Station statistics for %s written to %s", snapshot.label, path)


if __name__ == "__main__":
    main()
