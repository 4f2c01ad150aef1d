"""
Along-route distance calculations.
"""

from typing import List
import logging

from .geometry import MercatorPoint, distance_on_earth
from .polyline import Polyline
from .polyline_iter import PolylineIter, end, fits

logger = logging.getLogger(__name__)


class DistanceAccumulator:
    """
    Cumulative geodesic distances along a polyline.

    The accumulator keeps a reference to the polyline it measures and caches
    the distance from the first point to every vertex. Call ``update()`` after
    the polyline changes.
    """

    def __init__(self, polyline: Polyline):
        self._polyline = polyline
        self._cumulative: List[float] = []
        self.update()

    def update(self) -> None:
        """Recompute cumulative distances from the polyline's current points."""
        points = self._polyline.points
        if not points:
            self._cumulative = []
            return

        cumulative = [0.0]
        for i in range(1, len(points)):
            cumulative.append(cumulative[-1] + distance_on_earth(points[i - 1], points[i]))
        self._cumulative = cumulative

        logger.debug(
            f"Cumulative distances updated for {len(points)} points: {cumulative[-1]:.2f} m total"
        )

    def segment_distance_m(self, index: int) -> float:
        """Distance in meters from the first point to vertex ``index``."""
        return self._cumulative[index]

    def segment_length_m(self, index: int) -> float:
        """Length in meters of segment [index, index + 1]."""
        return self._cumulative[index + 1] - self._cumulative[index]

    @property
    def total_m(self) -> float:
        return self._cumulative[-1] if self._cumulative else 0.0

    def distance_between(self, it1: PolylineIter, it2: PolylineIter) -> float:
        """
        Distance in meters along the route from ``it1`` to ``it2``.

        Sums the rest of ``it1``'s segment, every whole segment in between, and
        the start of ``it2``'s segment. References on the same segment are
        measured point to point.

        Args:
            it1: Start reference
            it2: End reference, not before ``it1`` in segment order

        Returns:
            Geodesic distance in meters

        Raises:
            ValueError: If either reference does not fit the route or the
                references are in reverse segment order
        """
        if not fits(self._polyline, it1) or not fits(self._polyline, it2):
            raise ValueError(f"Reference does not fit a route of {len(self._polyline)} points")
        if it1.segment_index > it2.segment_index:
            raise ValueError(
                f"References out of order: segment {it1.segment_index} is after segment {it2.segment_index}"
            )

        if it1.segment_index == it2.segment_index:
            return distance_on_earth(it1.point, it2.point)

        points = self._polyline.points
        head = distance_on_earth(it1.point, points[it1.segment_index + 1])
        middle = self._cumulative[it2.segment_index] - self._cumulative[it1.segment_index + 1]
        tail = distance_on_earth(points[it2.segment_index], it2.point)
        return head + middle + tail

    def walk_forward(self, start: PolylineIter, distance_m: float) -> PolylineIter:
        """
        Travel ``distance_m`` meters along the route from ``start``.

        Within a segment the position is interpolated linearly in the Mercator
        plane. Walking past the last point stops at the end sentinel.

        Args:
            start: Reference to start from
            distance_m: Distance to travel in meters

        Returns:
            Reference reached after the walk
        """
        if not fits(self._polyline, start):
            raise ValueError(f"Reference does not fit a route of {len(self._polyline)} points")

        points = self._polyline.points
        remaining = max(0.0, distance_m)
        index = start.segment_index
        current = start.point

        while index < len(points) - 1:
            seg_end = points[index + 1]
            left = distance_on_earth(current, seg_end)
            if remaining <= left:
                if remaining == left:
                    return PolylineIter(seg_end, index)
                fraction = remaining / left
                point = MercatorPoint(
                    current.x + (seg_end.x - current.x) * fraction,
                    current.y + (seg_end.y - current.y) * fraction,
                )
                return PolylineIter(point, index)
            remaining -= left
            index += 1
            current = seg_end

        return end(self._polyline)
