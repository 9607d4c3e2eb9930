from __future__ import annotations

import numpy as np
import pytest

from bikeflow.traffic.domain_types import Station, StationTraffic, flow_ratio
from bikeflow.traffic.scales import FlowRatioQuantizer, RadiusScale, build_radius_scale


def _traffic(station_id: str, arrivals: int, departures: int) -> StationTraffic:
    return StationTraffic(
        station=Station(id=station_id, longitude=-71.0, latitude=42.0),
        arrivals=arrivals,
        departures=departures,
    )


def test_radius_scale_is_square_root():
    scale = RadiusScale(domain_max=100.0, range_min=0.0, range_max=25.0)
    assert scale(0) == pytest.approx(0.0)
    assert scale(25) == pytest.approx(12.5)
    assert scale(100) == pytest.approx(25.0)


def test_radius_scale_with_offset_range():
    scale = RadiusScale(domain_max=400.0, range_min=3.0, range_max=50.0)
    assert scale(0) == pytest.approx(3.0)
    assert scale(100) == pytest.approx(3.0 + 47.0 * 0.5)
    assert scale(400) == pytest.approx(50.0)


def test_radius_scale_with_zero_domain_maps_to_range_minimum():
    scale = RadiusScale(domain_max=0.0, range_min=3.0, range_max=50.0)
    assert scale(0) == 3.0
    assert list(scale.apply([0, 0])) == [3.0, 3.0]


def test_radius_scale_vectorised_matches_scalar():
    scale = RadiusScale(domain_max=81.0, range_min=0.0, range_max=25.0)
    values = [0, 1, 9, 36, 81]
    np.testing.assert_allclose(scale.apply(values), [scale(v) for v in values])


def test_radius_scale_validates_inputs():
    with pytest.raises(ValueError):
        RadiusScale(domain_max=-1.0, range_min=0.0, range_max=1.0)
    with pytest.raises(ValueError):
        RadiusScale(domain_max=1.0, range_min=5.0, range_max=1.0)


def test_build_radius_scale_picks_range_by_filter_state():
    traffic = [_traffic("A", 10, 6), _traffic("B", 1, 0)]

    unfiltered = build_radius_scale(traffic, filtered=False)
    filtered = build_radius_scale(traffic, filtered=True)

    assert unfiltered.domain_max == 16
    assert (unfiltered.range_min, unfiltered.range_max) == (0.0, 25.0)
    assert (filtered.range_min, filtered.range_max) == (3.0, 50.0)
    assert filtered(16) == pytest.approx(50.0)


def test_build_radius_scale_on_empty_station_set():
    scale = build_radius_scale([], filtered=False)
    assert scale.domain_max == 0
    assert scale(10) == 0.0


@pytest.mark.parametrize(
    "ratio, bucket",
    [
        (0.0, 0.0),
        (0.2, 0.0),
        (0.25, 0.0),
        (1 / 3, 0.5),
        (0.5, 0.5),
        (0.6, 0.5),
        (2 / 3, 1.0),
        (0.75, 1.0),
        (0.9, 1.0),
        (1.0, 1.0),
    ],
)
def test_flow_quantizer_buckets(ratio, bucket):
    assert FlowRatioQuantizer()(ratio) == bucket


def test_flow_quantizer_thresholds_and_vector_form():
    quantizer = FlowRatioQuantizer()
    assert quantizer.thresholds == pytest.approx((1 / 3, 2 / 3))
    assert list(quantizer.apply([0.1, 0.5, 0.95])) == [0.0, 0.5, 1.0]


def test_flow_quantizer_rejects_degenerate_domain():
    with pytest.raises(ValueError):
        FlowRatioQuantizer(domain=(1.0, 1.0))


def test_flow_ratio_zero_traffic_fallback():
    assert flow_ratio(0, 0) == 0.0
    assert flow_ratio(3, 4) == pytest.approx(0.75)
    assert FlowRatioQuantizer()(flow_ratio(0, 0)) == 0.0
