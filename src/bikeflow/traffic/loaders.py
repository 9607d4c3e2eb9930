"""Joint loading of the station catalog and the trip log."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .domain_types import Trip
from .station_catalog import StationCatalog
from .trip_log import load_trip_log

logger = logging.getLogger(__name__)


class DataLoadError(RuntimeError):
    """Raised when one or more required inputs could not be loaded."""

    def __init__(self, message: str, failures: Sequence["DataLoadError"] = ()):
        super().__init__(message)
        self.failures: Tuple[DataLoadError, ...] = tuple(failures)


class StationCatalogLoadError(DataLoadError):
    """Station catalog could not be read or parsed."""


class TripLogLoadError(DataLoadError):
    """Trip log could not be read or parsed."""


@dataclass(frozen=True)
class LoadedInputs:
    catalog: StationCatalog
    trips: Tuple[Trip, ...]


def load_inputs(
    catalog_path: str | Path,
    trips_path: str | Path,
    *,
    chunksize: int = 100_000,
    on_trip_chunk: Optional[Callable[[int], None]] = None,
) -> LoadedInputs:
    """Load both inputs concurrently and return once both have resolved.

    Each failure is logged on its own. A single failure raises the matching
    :class:`StationCatalogLoadError` or :class:`TripLogLoadError`; when both fail a
    plain :class:`DataLoadError` is raised with both listed in ``failures``.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="bikeflow-load") as pool:
        catalog_future = pool.submit(StationCatalog.from_json, catalog_path)
        trips_future = pool.submit(
            load_trip_log, trips_path, chunksize=chunksize, on_chunk=on_trip_chunk
        )
        catalog, catalog_error = _resolve(
            catalog_future, StationCatalogLoadError, f"Failed to load station catalog {catalog_path}"
        )
        trips, trips_error = _resolve(
            trips_future, TripLogLoadError, f"Failed to load trip log {trips_path}"
        )

    failures: List[DataLoadError] = [err for err in (catalog_error, trips_error) if err is not None]
    if failures:
        if len(failures) == 1:
            raise failures[0]
        raise DataLoadError("; ".join(str(err) for err in failures), failures=failures)
    return LoadedInputs(catalog=catalog, trips=tuple(trips))


def _resolve(future: Future, error_cls: type, message: str):
    try:
        return future.result(), None
    except (OSError, ValueError, TypeError, KeyError) as exc:
        logger.error("%s: %s", message, exc)
        error = error_cls(f"{message}: {exc}")
        error.__cause__ = exc
        return None, error
