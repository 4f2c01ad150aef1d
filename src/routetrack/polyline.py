"""
Ordered route geometry container.
"""

from typing import Iterable, Iterator, List, Tuple, Union
import logging
from math import cos, radians
from shapely.geometry import LineString

from .geometry import MercatorPoint, Position, from_lat_lon, to_lat_lon, MAX_MERCATOR_LATITUDE

logger = logging.getLogger(__name__)


class Polyline:
    """An ordered sequence of Mercator points forming a route."""

    def __init__(self, points: Iterable[Tuple[float, float]] = ()):
        """Initializes a Polyline.

        Args:
            points: Mercator points, in route order. Plain (x, y) tuples are
                converted to MercatorPoint.
        """
        self.points: List[MercatorPoint] = [MercatorPoint(*p) for p in points]

    @classmethod
    def from_positions(cls, positions: Iterable[Position]) -> "Polyline":
        """
        Build a polyline from geographic positions.

        Args:
            positions: Positions in decimal degrees, in route order

        Returns:
            Polyline in Mercator coordinates

        Raises:
            ValueError: If a position lies beyond the Mercator latitude limit
                or the route crosses the antimeridian.
        """
        positions = list(positions)

        for i, pos in enumerate(positions):
            if abs(pos.latitude) > MAX_MERCATOR_LATITUDE:
                raise ValueError(
                    f"Route point {i} at latitude {pos.latitude:.3f}° is beyond "
                    f"the Mercator limit of {MAX_MERCATOR_LATITUDE:.3f}°"
                )

        for i in range(1, len(positions)):
            lon_diff = abs(positions[i].longitude - positions[i - 1].longitude)
            if lon_diff > 180.0:
                raise ValueError(
                    f"Route crosses antimeridian between points {i-1} and {i} "
                    f"(longitude jump: {lon_diff:.3f}°)"
                )

        return cls(from_lat_lon(pos) for pos in positions)

    def to_positions(self) -> List[Position]:
        """Return the route points as geographic positions."""
        return [to_lat_lon(p) for p in self.points]

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, index):
        return self.points[index]

    def __iter__(self) -> Iterator[MercatorPoint]:
        return iter(self.points)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Polyline):
            return NotImplemented
        return self.points == other.points

    def __repr__(self) -> str:
        return f"Polyline({self.points!r})"

    def copy(self) -> "Polyline":
        return Polyline(self.points)

    def is_valid(self) -> bool:
        """A polyline can be followed only if it has at least one segment."""
        return len(self.points) >= 2

    @property
    def segment_count(self) -> int:
        return max(0, len(self.points) - 1)

    def front(self) -> MercatorPoint:
        return self.points[0]

    def back(self) -> MercatorPoint:
        return self.points[-1]

    def append(self, other: Union["Polyline", Iterable[Tuple[float, float]]]) -> None:
        """Extend this polyline with another polyline's points, in order."""
        self.points.extend(MercatorPoint(*p) for p in other)

    def pop_back(self) -> MercatorPoint:
        """
        Remove and return the last point.

        Raises:
            IndexError: If the polyline is empty
        """
        if not self.points:
            raise IndexError("pop_back from an empty polyline")
        return self.points.pop()

    def get_linestring(self) -> LineString:
        """
        Return the polyline as a shapely LineString in Mercator coordinates.

        Raises:
            ValueError: If the polyline has fewer than two points
        """
        if len(self.points) < 2:
            raise ValueError("At least two points are required to create a LineString.")
        return LineString(self.points)

    def get_bbox(self, buffer: float = 0.0) -> Tuple[float, float, float, float]:
        """
        Get the geographic bounding box of this polyline, optionally with a buffer.

        Args:
            buffer: Buffer distance in meters (default: 0.0)

        Returns:
            Tuple of (south, west, north, east) in decimal degrees

        Raises:
            ValueError: If the polyline is empty
        """
        if not self.points:
            raise ValueError("Cannot compute bounding box of an empty polyline")

        positions = self.to_positions()
        min_lat = min(pos.latitude for pos in positions)
        max_lat = max(pos.latitude for pos in positions)
        min_lon = min(pos.longitude for pos in positions)
        max_lon = max(pos.longitude for pos in positions)

        # 1 degree latitude ≈ 111 km; longitude shrinks with latitude
        avg_lat = (min_lat + max_lat) / 2
        lat_buffer = buffer / 111000.0
        lon_buffer = buffer / (111000.0 * abs(cos(radians(avg_lat))))

        bbox = (
            max(-90.0, min_lat - lat_buffer),
            max(-180.0, min_lon - lon_buffer),
            min(90.0, max_lat + lat_buffer),
            min(180.0, max_lon + lon_buffer),
        )
        logger.debug(
            f"Polyline bounding box: ({bbox[0]:.4f}, {bbox[1]:.4f}, {bbox[2]:.4f}, {bbox[3]:.4f}) with {buffer}m buffer"
        )
        return bbox
