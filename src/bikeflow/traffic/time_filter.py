"""Time-of-day selection of active trips."""

from __future__ import annotations

import numbers
from typing import Sequence

from .domain_types import Trip

NO_FILTER = -1
MINUTES_PER_DAY = 1440
DEFAULT_WINDOW_MINUTES = 60
ANY_TIME_LABEL = "any time"


def validate_time_filter(value: object) -> int:
    """Return ``value`` as an int in [-1, 1439] or raise."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(f"Time filter must be an integer minute of day, got {value!r}")
    if value < NO_FILTER or value >= MINUTES_PER_DAY:
        raise ValueError(f"Time filter must lie in [-1, 1439]: {value}")
    return int(value)


def is_filtered(time_filter: int) -> bool:
    return time_filter != NO_FILTER


def filter_trips_by_minute(
    trips: Sequence[Trip],
    time_filter: int,
    *,
    window_minutes: int = DEFAULT_WINDOW_MINUTES,
) -> Sequence[Trip]:
    """Return the trips active around ``time_filter``.

    ``NO_FILTER`` returns ``trips`` itself. Otherwise a trip is kept when its start
    or end minute lies within ``window_minutes`` (inclusive) of the selected minute.
    Distances do not wrap around midnight: 23:30 does not match a 00:10 trip.
    """
    time_filter = validate_time_filter(time_filter)
    if not is_filtered(time_filter):
        return trips
    return [
        trip
        for trip in trips
        if abs(time_filter - trip.start_minute) <= window_minutes
        or abs(time_filter - trip.end_minute) <= window_minutes
    ]


def format_time_label(time_filter: int) -> str:
    """Render a filter value as a 12-hour clock label, e.g. ``2:15 PM``."""
    time_filter = validate_time_filter(time_filter)
    if not is_filtered(time_filter):
        return ANY_TIME_LABEL
    hours, minutes = divmod(time_filter, 60)
    suffix = "AM" if hours < 12 else "PM"
    hour12 = hours % 12 or 12
    return f"{hour12}:{minutes:02d} {suffix}"


def parse_time_of_day(token: object) -> int:
    """
    Parse a CLI time selection into a filter value.

    Args:
        token: ``HH:MM`` (24-hour clock), a bare minute count, or ``any``.
    Returns:
        Minutes since midnight, or ``NO_FILTER`` for ``any``/``-1``.
    """
    if not isinstance(token, str) or not token.strip():
        raise ValueError("Time selection must be a non-empty string")
    text = token.strip().lower()
    if text in {"any", "any time", "none"}:
        return NO_FILTER
    if ":" not in text:
        try:
            return validate_time_filter(int(text))
        except ValueError as exc:
            raise ValueError(f"Unrecognised time selection: {token!r}") from exc
    parts = text.split(":")
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise ValueError(f"Time selection must be in HH:MM format: {token!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if hour > 23 or minute > 59:
        raise ValueError(f"Time selection out of range: {token!r}")
    return hour * 60 + minute
