"""
Geometry primitives for route following.

Route points live in a Mercator plane measured in degrees: x is the longitude,
y is the Mercator-stretched latitude. This module converts between that plane
and geographic coordinates with pyproj, measures real distances on the WGS84
ellipsoid, builds uncertainty rectangles around position fixes, and projects
points onto route segments.
"""

from typing import NamedTuple, Tuple
import logging
import math
import pyproj
from shapely.geometry import Point, Polygon, box

logger = logging.getLogger(__name__)

# Spherical Mercator (EPSG:3857) uses the WGS84 equatorial radius
EARTH_EQUATORIAL_RADIUS_M = 6378137.0
MERCATOR_METERS_PER_DEGREE = math.pi * EARTH_EQUATORIAL_RADIUS_M / 180.0

# Latitude at which the Mercator y coordinate reaches 180 degrees
MAX_MERCATOR_LATITUDE = 85.05112877980659

# Degrees of latitude per metre along a meridian
DEGREES_PER_METRE = 360.0 / 40008245.0

_TO_MERCATOR = pyproj.Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
_FROM_MERCATOR = pyproj.Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)
_GEOD = pyproj.Geod(ellps="WGS84")


class Position(NamedTuple):
    """Represents a geographic position with latitude and longitude."""

    latitude: float
    longitude: float


class MercatorPoint(NamedTuple):
    """A point in the Mercator plane, in degrees."""

    x: float
    y: float


def to_lat_lon(point: Tuple[float, float]) -> Position:
    """
    Convert a Mercator point to a geographic position.

    Args:
        point: (x, y) Mercator coordinates in degrees

    Returns:
        Position with latitude and longitude in decimal degrees
    """
    x, y = point
    lon, lat = _FROM_MERCATOR.transform(
        x * MERCATOR_METERS_PER_DEGREE, y * MERCATOR_METERS_PER_DEGREE
    )
    return Position(latitude=lat, longitude=lon)


def from_lat_lon(position: Position) -> MercatorPoint:
    """
    Convert a geographic position to a Mercator point.

    Latitudes beyond the Mercator limit are clamped to it.

    Args:
        position: Position in decimal degrees

    Returns:
        MercatorPoint in degrees
    """
    lat = max(-MAX_MERCATOR_LATITUDE, min(MAX_MERCATOR_LATITUDE, position.latitude))
    x_m, y_m = _TO_MERCATOR.transform(position.longitude, lat)
    return MercatorPoint(x_m / MERCATOR_METERS_PER_DEGREE, y_m / MERCATOR_METERS_PER_DEGREE)


def distance_on_earth(point1: Tuple[float, float], point2: Tuple[float, float]) -> float:
    """
    Geodesic distance between two Mercator points.

    Both points are converted to geographic coordinates and measured on the
    WGS84 ellipsoid, so the result is a real-world distance rather than a
    planar one.

    Args:
        point1: First Mercator point
        point2: Second Mercator point

    Returns:
        Distance in meters
    """
    if point1[0] == point2[0] and point1[1] == point2[1]:
        return 0.0
    pos1 = to_lat_lon(point1)
    pos2 = to_lat_lon(point2)
    _, _, distance = _GEOD.inv(pos1.longitude, pos1.latitude, pos2.longitude, pos2.latitude)
    return distance


def rect_by_center_and_size_in_meters(
    center: Tuple[float, float], size_m: float
) -> Polygon:
    """
    Build a Mercator rectangle around a point.

    The rectangle extends ``size_m`` meters north, south, east and west of the
    center. The longitude extent is widened by the cosine of the farthest
    latitude so the rectangle never undershoots on the poleward side.

    Args:
        center: Mercator point at the center of the rectangle
        size_m: Half-extent of the rectangle in meters

    Returns:
        Axis-aligned shapely Polygon in Mercator coordinates
    """
    position = to_lat_lon(center)

    lat_offset = size_m * DEGREES_PER_METRE
    min_lat = max(-MAX_MERCATOR_LATITUDE, position.latitude - lat_offset)
    max_lat = min(MAX_MERCATOR_LATITUDE, position.latitude + lat_offset)

    cos_lat = max(math.cos(math.radians(max(abs(min_lat), abs(max_lat)))), 0.00001)
    lon_offset = size_m * DEGREES_PER_METRE / cos_lat
    min_lon = max(-180.0, position.longitude - lon_offset)
    max_lon = min(180.0, position.longitude + lon_offset)

    south_west = from_lat_lon(Position(min_lat, min_lon))
    north_east = from_lat_lon(Position(max_lat, max_lon))
    return box(south_west.x, south_west.y, north_east.x, north_east.y)


class UncertaintyRegion(NamedTuple):
    """A position fix: the reported point and the rectangle of plausible true positions."""

    center: MercatorPoint
    rect: Polygon

    @classmethod
    def from_fix(
        cls, center: Tuple[float, float], accuracy_m: float
    ) -> "UncertaintyRegion":
        """
        Expand a fix into an uncertainty region.

        Args:
            center: Reported fix as a Mercator point
            accuracy_m: Reported accuracy radius in meters

        Returns:
            UncertaintyRegion around the fix

        Raises:
            ValueError: If accuracy_m is negative
        """
        if accuracy_m < 0:
            raise ValueError("Accuracy radius must be greater than or equal to 0")
        center = MercatorPoint(*center)
        return cls(center, rect_by_center_and_size_in_meters(center, accuracy_m))

    def contains(self, point: Tuple[float, float]) -> bool:
        """Closed containment test: points on the boundary are inside."""
        return self.rect.covers(Point(point[0], point[1]))


def project_to_segment(
    point: Tuple[float, float],
    seg_start: Tuple[float, float],
    seg_end: Tuple[float, float],
) -> Tuple[MercatorPoint, float]:
    """
    Project a point onto a segment in the Mercator plane.

    Args:
        point: Point to project
        seg_start: Start of the segment
        seg_end: End of the segment

    Returns:
        Tuple of (closest_point, t) where t in [0, 1] is the interpolation
        parameter along the segment. A zero-length segment projects every
        point onto its start with t = 0.
    """
    start = MercatorPoint(*seg_start)
    end = MercatorPoint(*seg_end)

    dx = end.x - start.x
    dy = end.y - start.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return start, 0.0

    t = ((point[0] - start.x) * dx + (point[1] - start.y) * dy) / length_sq
    if t <= 0.0:
        return start, 0.0
    if t >= 1.0:
        return end, 1.0

    return MercatorPoint(start.x + dx * t, start.y + dy * t), t
