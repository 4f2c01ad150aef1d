import pytest
from shapely.geometry import LineString

from routetrack.geometry import MercatorPoint, Position
from routetrack.polyline import Polyline
from routetrack.polyline_iter import INVALID_ITER, PolylineIter, begin, end, fits, iter_to_index


def test_polyline_creation_and_basic_properties():
    points = [(0.0, 0.0), (3.0, 0.0), (5.0, 0.0)]
    polyline = Polyline(points)

    assert len(polyline) == 3
    assert polyline[0] == MercatorPoint(0.0, 0.0)
    assert polyline[-1] == MercatorPoint(5.0, 0.0)
    assert list(polyline) == [MercatorPoint(*p) for p in points]
    assert polyline.front() == MercatorPoint(0.0, 0.0)
    assert polyline.back() == MercatorPoint(5.0, 0.0)
    assert polyline.segment_count == 2
    assert polyline.is_valid()

    empty = Polyline()
    assert len(empty) == 0
    assert empty.segment_count == 0
    assert not empty.is_valid()


def test_append_and_pop_back():
    polyline = Polyline([(0.0, 0.0), (3.0, 0.0), (5.0, 0.0)])
    polyline.append(Polyline([(6.0, 0.0), (7.0, 0.0)]))

    assert polyline == Polyline([(0.0, 0.0), (3.0, 0.0), (5.0, 0.0), (6.0, 0.0), (7.0, 0.0)])
    assert polyline.pop_back() == MercatorPoint(7.0, 0.0)
    assert polyline == Polyline([(0.0, 0.0), (3.0, 0.0), (5.0, 0.0), (6.0, 0.0)])

    with pytest.raises(IndexError):
        Polyline().pop_back()


def test_copy_is_independent():
    polyline = Polyline([(0.0, 0.0), (1.0, 0.0)])
    duplicate = polyline.copy()
    duplicate.pop_back()
    assert len(polyline) == 2


def test_from_positions_converts_to_mercator():
    polyline = Polyline.from_positions(
        [Position(latitude=0.0, longitude=10.0), Position(latitude=0.0, longitude=11.0)]
    )
    assert polyline[0].x == pytest.approx(10.0, abs=1e-9)
    assert polyline[1].x == pytest.approx(11.0, abs=1e-9)

    positions = polyline.to_positions()
    assert positions[1].longitude == pytest.approx(11.0, abs=1e-9)
    assert positions[1].latitude == pytest.approx(0.0, abs=1e-9)


def test_from_positions_rejects_polar_points():
    with pytest.raises(ValueError, match="Mercator limit"):
        Polyline.from_positions(
            [Position(latitude=80.0, longitude=0.0), Position(latitude=89.0, longitude=0.0)]
        )


def test_from_positions_rejects_antimeridian_crossing():
    with pytest.raises(ValueError, match="antimeridian"):
        Polyline.from_positions(
            [Position(latitude=0.0, longitude=179.5), Position(latitude=0.0, longitude=-179.5)]
        )


def test_get_linestring():
    polyline = Polyline([(0.0, 0.0), (3.0, 0.0)])
    assert polyline.get_linestring().equals(LineString([(0.0, 0.0), (3.0, 0.0)]))

    with pytest.raises(ValueError):
        Polyline([(0.0, 0.0)]).get_linestring()


def test_get_bbox_with_buffer_expands():
    polyline = Polyline.from_positions(
        [Position(latitude=10.0, longitude=20.0), Position(latitude=10.1, longitude=20.2)]
    )
    south, west, north, east = polyline.get_bbox()
    assert south == pytest.approx(10.0, abs=1e-9)
    assert east == pytest.approx(20.2, abs=1e-9)

    b_south, b_west, b_north, b_east = polyline.get_bbox(1000.0)
    assert b_south < south and b_west < west
    assert b_north > north and b_east > east


def test_begin_and_end_references():
    polyline = Polyline([(0.0, 0.0), (3.0, 0.0), (5.0, 0.0)])

    assert begin(polyline) == PolylineIter(MercatorPoint(0.0, 0.0), 0)
    assert end(polyline) == PolylineIter(MercatorPoint(5.0, 0.0), 2)
    assert iter_to_index(polyline, 1) == PolylineIter(MercatorPoint(3.0, 0.0), 1)
    assert begin(Polyline()) == INVALID_ITER


def test_invalid_reference():
    assert not INVALID_ITER.is_valid()
    assert INVALID_ITER == PolylineIter()
    assert PolylineIter(MercatorPoint(0.0, 0.0), 0).is_valid()


def test_fits():
    polyline = Polyline([(0.0, 0.0), (3.0, 0.0), (5.0, 0.0)])

    assert fits(polyline, PolylineIter(MercatorPoint(4.0, 0.0), 1))
    assert fits(polyline, end(polyline))
    # The sentinel index must carry the last point
    assert not fits(polyline, PolylineIter(MercatorPoint(4.0, 0.0), 2))
    assert not fits(polyline, PolylineIter(MercatorPoint(5.0, 0.0), 3))
    assert not fits(polyline, INVALID_ITER)
