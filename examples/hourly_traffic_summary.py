from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from bikeflow.map.session import TrafficMapSession
from bikeflow.traffic.time_filter import NO_FILTER


def _hour_filters(step_minutes: int) -> List[int]:
    return [NO_FILTER] + list(range(0, 24 * 60, step_minutes))


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Print per-hour station traffic summaries.")
    parser.add_argument("--stations", required=True, help="Station catalog JSON")
    parser.add_argument("--trips", required=True, help="Trip log CSV")
    parser.add_argument("--step-minutes", type=int, default=60)
    parser.add_argument("--top-n", type=int, default=5, help="Busiest stations to list per time")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    session = TrafficMapSession()
    if not session.load(args.stations, args.trips):
        raise SystemExit(f"Could not load inputs: {session.load_error}")

    print("=== Station traffic by time of day ===")
    for time_filter in _hour_filters(args.step_minutes):
        snapshot = session.set_time_filter(time_filter)
        summary = snapshot.summary()
        print(
            f"{summary['label']:>9}: {summary['trips']:>7,} trips, "
            f"{summary['active_stations']} active stations, "
            f"{summary['departure_heavy']} departure-heavy / {summary['arrival_heavy']} arrival-heavy"
        )
        busiest = sorted(snapshot.stations, key=lambda entry: entry.total_traffic, reverse=True)
        for entry in busiest[: args.top_n]:
            if entry.total_traffic == 0:
                break
            name = entry.station.name or entry.id
            print(f"    {name}: {entry.departures} out / {entry.arrivals} in")


if __name__ == "__main__":
    main()
