import math
import pytest

from routetrack.geometry import (
    MercatorPoint,
    Position,
    UncertaintyRegion,
    distance_on_earth,
    from_lat_lon,
    project_to_segment,
    rect_by_center_and_size_in_meters,
    to_lat_lon,
)


def test_mercator_x_is_longitude():
    point = from_lat_lon(Position(latitude=0.0, longitude=12.5))
    assert point.x == pytest.approx(12.5, abs=1e-9)
    assert point.y == pytest.approx(0.0, abs=1e-9)


def test_mercator_y_stretches_latitude():
    point = from_lat_lon(Position(latitude=45.0, longitude=0.0))
    expected = math.degrees(math.log(math.tan(math.pi / 4 + math.radians(45.0) / 2)))
    assert point.y == pytest.approx(expected, abs=1e-9)


def test_lat_lon_round_trip():
    pos = Position(latitude=47.12322, longitude=-122.85051)
    back = to_lat_lon(from_lat_lon(pos))
    assert back.latitude == pytest.approx(pos.latitude, abs=1e-9)
    assert back.longitude == pytest.approx(pos.longitude, abs=1e-9)


def test_distance_on_earth_along_equator():
    # One degree of longitude on the WGS84 equator
    assert distance_on_earth((0.0, 0.0), (1.0, 0.0)) == pytest.approx(111319.4908, abs=1e-3)


def test_distance_on_earth_zero_and_symmetric():
    p1 = MercatorPoint(2.3522, 56.0)
    p2 = MercatorPoint(-0.1278, 59.9)
    assert distance_on_earth(p1, p1) == 0.0
    assert distance_on_earth(p1, p2) == pytest.approx(distance_on_earth(p2, p1), rel=1e-9)


def test_rect_by_center_and_size_in_meters():
    rect = rect_by_center_and_size_in_meters((4.0, 0.0), 2.0)
    min_x, min_y, max_x, max_y = rect.bounds

    assert min_x < 4.0 < max_x
    assert min_y < 0.0 < max_y
    # 2 m east and west of the center
    assert distance_on_earth((min_x, 0.0), (4.0, 0.0)) == pytest.approx(2.0, rel=1e-2)
    assert distance_on_earth((4.0, 0.0), (max_x, 0.0)) == pytest.approx(2.0, rel=1e-2)


def test_uncertainty_region_containment_is_closed():
    region = UncertaintyRegion.from_fix((1.0, 1.0), 10.0)
    min_x, min_y, max_x, max_y = region.rect.bounds

    assert region.center == MercatorPoint(1.0, 1.0)
    assert region.contains((1.0, 1.0))
    assert region.contains((min_x, min_y))
    assert region.contains((max_x, 1.0))
    assert not region.contains((max_x + 1e-6, 1.0))


def test_uncertainty_region_rejects_negative_accuracy():
    with pytest.raises(ValueError):
        UncertaintyRegion.from_fix((0.0, 0.0), -1.0)


def test_project_to_segment_interior():
    point, t = project_to_segment((1.0, 5.0), (0.0, 0.0), (4.0, 0.0))
    assert point == MercatorPoint(1.0, 0.0)
    assert t == pytest.approx(0.25)


def test_project_to_segment_clamps_to_endpoints():
    point, t = project_to_segment((-1.0, 1.0), (0.0, 0.0), (4.0, 0.0))
    assert point == MercatorPoint(0.0, 0.0)
    assert t == 0.0

    point, t = project_to_segment((5.0001, 0.0), (3.0, 0.0), (5.0, 0.0))
    assert point == MercatorPoint(5.0, 0.0)
    assert t == 1.0


def test_project_to_zero_length_segment():
    point, t = project_to_segment((3.0, 3.0), (1.0, 1.0), (1.0, 1.0))
    assert point == MercatorPoint(1.0, 1.0)
    assert t == 0.0
