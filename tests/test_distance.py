import pytest

from routetrack.distance import DistanceAccumulator
from routetrack.geometry import MercatorPoint, distance_on_earth
from routetrack.polyline import Polyline
from routetrack.polyline_iter import INVALID_ITER, PolylineIter, begin, end, iter_to_index

POINTS = [(0.0, 0.0), (0.01, 0.0), (0.01, 0.01), (0.02, 0.01)]


@pytest.fixture
def polyline():
    return Polyline(POINTS)


@pytest.fixture
def distances(polyline):
    return DistanceAccumulator(polyline)


def test_cumulative_distances(distances):
    assert distances.segment_distance_m(0) == 0.0
    assert distances.segment_distance_m(1) == pytest.approx(distance_on_earth(POINTS[0], POINTS[1]))
    assert distances.segment_distance_m(3) == pytest.approx(
        sum(distance_on_earth(POINTS[i], POINTS[i + 1]) for i in range(3))
    )
    assert distances.total_m == distances.segment_distance_m(3)
    assert distances.segment_length_m(1) == pytest.approx(distance_on_earth(POINTS[1], POINTS[2]))


def test_empty_and_single_point_routes():
    assert DistanceAccumulator(Polyline()).total_m == 0.0
    assert DistanceAccumulator(Polyline([(1.0, 1.0)])).total_m == 0.0


def test_update_follows_polyline_changes(polyline, distances):
    total = distances.total_m
    polyline.pop_back()
    distances.update()
    assert distances.total_m == pytest.approx(total - distance_on_earth(POINTS[2], POINTS[3]))


def test_distance_between_same_segment(distances):
    a = PolylineIter(MercatorPoint(0.002, 0.0), 0)
    b = PolylineIter(MercatorPoint(0.007, 0.0), 0)
    assert distances.distance_between(a, b) == pytest.approx(
        distance_on_earth((0.002, 0.0), (0.007, 0.0))
    )


def test_distance_between_spans_segments(distances):
    a = PolylineIter(MercatorPoint(0.005, 0.0), 0)
    b = PolylineIter(MercatorPoint(0.015, 0.01), 2)
    expected = (
        distance_on_earth((0.005, 0.0), POINTS[1])
        + distance_on_earth(POINTS[1], POINTS[2])
        + distance_on_earth(POINTS[2], (0.015, 0.01))
    )
    assert distances.distance_between(a, b) == pytest.approx(expected, rel=1e-12)


def test_distance_between_begin_and_end(polyline, distances):
    assert distances.distance_between(begin(polyline), end(polyline)) == pytest.approx(
        distances.total_m, rel=1e-12
    )


def test_distance_between_rejects_bad_references(polyline, distances):
    with pytest.raises(ValueError, match="out of order"):
        distances.distance_between(end(polyline), begin(polyline))
    with pytest.raises(ValueError):
        distances.distance_between(INVALID_ITER, end(polyline))
    with pytest.raises(ValueError):
        distances.distance_between(begin(polyline), PolylineIter(MercatorPoint(0.0, 0.0), 7))


def test_walk_forward_within_segment(polyline, distances):
    half = distances.segment_length_m(0) / 2
    walked = distances.walk_forward(begin(polyline), half)
    assert walked.segment_index == 0
    assert walked.point.x == pytest.approx(0.005, abs=1e-9)
    assert walked.point.y == pytest.approx(0.0, abs=1e-12)


def test_walk_forward_across_segments(polyline, distances):
    target = distances.segment_distance_m(2) + distances.segment_length_m(2) / 4
    walked = distances.walk_forward(begin(polyline), target)
    assert walked.segment_index == 2
    assert walked.point.x == pytest.approx(0.0125, abs=1e-9)
    assert distances.distance_between(begin(polyline), walked) == pytest.approx(target, abs=1e-3)


def test_walk_forward_to_vertex(polyline, distances):
    walked = distances.walk_forward(begin(polyline), distances.segment_distance_m(1))
    assert walked == PolylineIter(MercatorPoint(*POINTS[1]), 0)


def test_walk_forward_past_end_clamps(polyline, distances):
    assert distances.walk_forward(iter_to_index(polyline, 1), 1e9) == end(polyline)
    assert distances.walk_forward(end(polyline), 10.0) == end(polyline)


def test_walk_forward_zero_distance(polyline, distances):
    start = PolylineIter(MercatorPoint(0.003, 0.0), 0)
    assert distances.walk_forward(start, 0.0) == start
