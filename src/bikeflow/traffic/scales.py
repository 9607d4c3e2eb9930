"""Visual scales derived from an aggregated station set."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

from .domain_types import StationTraffic

UNFILTERED_RADIUS_RANGE: Tuple[float, float] = (0.0, 25.0)
FILTERED_RADIUS_RANGE: Tuple[float, float] = (3.0, 50.0)
FLOW_LEVELS: Tuple[float, ...] = (0.0, 0.5, 1.0)


@dataclass(frozen=True)
class RadiusScale:
    """Square-root scale so that circle area tracks traffic volume."""

    domain_max: float
    range_min: float
    range_max: float

    def __post_init__(self) -> None:
        if self.domain_max < 0:
            raise ValueError("Radius scale domain maximum must be non-negative")
        if self.range_max < self.range_min:
            raise ValueError("Radius scale range must be increasing")

    def __call__(self, value: float) -> float:
        if self.domain_max == 0:
            return self.range_min
        fraction = math.sqrt(max(float(value), 0.0)) / math.sqrt(self.domain_max)
        return self.range_min + (self.range_max - self.range_min) * fraction

    def apply(self, values: Sequence[float]) -> np.ndarray:
        array = np.clip(np.asarray(values, dtype=float), 0.0, None)
        if self.domain_max == 0:
            return np.full(array.shape, self.range_min, dtype=float)
        fraction = np.sqrt(array) / math.sqrt(self.domain_max)
        return self.range_min + (self.range_max - self.range_min) * fraction


@dataclass(frozen=True)
class FlowRatioQuantizer:
    """Uniform quantizer mapping a ratio in [0, 1] onto discrete levels.

    With the default three levels the thresholds are 1/3 and 2/3; a value sitting
    exactly on a threshold belongs to the upper bucket.
    """

    levels: Tuple[float, ...] = FLOW_LEVELS
    domain: Tuple[float, float] = (0.0, 1.0)
    _thresholds: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.levels) < 1:
            raise ValueError("Quantizer requires at least one output level")
        low, high = self.domain
        if high <= low:
            raise ValueError("Quantizer domain must be increasing")
        count = len(self.levels)
        thresholds = np.array([low + (high - low) * i / count for i in range(1, count)], dtype=float)
        object.__setattr__(self, "_thresholds", thresholds)

    @property
    def thresholds(self) -> Tuple[float, ...]:
        return tuple(float(t) for t in self._thresholds)

    def __call__(self, ratio: float) -> float:
        index = int(np.digitize(float(ratio), self._thresholds))
        return self.levels[index]

    def apply(self, ratios: Sequence[float]) -> np.ndarray:
        indices = np.digitize(np.asarray(ratios, dtype=float), self._thresholds)
        return np.asarray(self.levels, dtype=float)[indices]


def build_radius_scale(
    traffic: Sequence[StationTraffic],
    *,
    filtered: bool,
    unfiltered_range: Tuple[float, float] = UNFILTERED_RADIUS_RANGE,
    filtered_range: Tuple[float, float] = FILTERED_RADIUS_RANGE,
) -> RadiusScale:
    """Radius scale over ``[0, max(total_traffic)]`` for the current station set."""
    domain_max = max((entry.total_traffic for entry in traffic), default=0)
    range_min, range_max = filtered_range if filtered else unfiltered_range
    return RadiusScale(domain_max=float(domain_max), range_min=float(range_min), range_max=float(range_max))
