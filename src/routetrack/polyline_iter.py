"""
Position references on a route.

A PolylineIter names a location on a route by the segment it falls on and the
exact projected point within that segment. It does not hold the route itself;
the owner supplies the route whenever the reference is interpreted, so a
reference never dangles when the route is extended or trimmed.
"""

from dataclasses import dataclass
from typing import Optional

from .geometry import MercatorPoint
from .polyline import Polyline


@dataclass(frozen=True)
class PolylineIter:
    """
    A location on a route.

    Attributes:
        point: Projected point on segment ``segment_index``, or None for an
            invalid reference
        segment_index: Index of the segment [route[i], route[i + 1]]. The end
            sentinel uses the index of the last point.
    """

    point: Optional[MercatorPoint] = None
    segment_index: int = -1

    def is_valid(self) -> bool:
        return self.point is not None and self.segment_index >= 0


# Returned when no acceptable match was found
INVALID_ITER = PolylineIter()


def begin(polyline: Polyline) -> PolylineIter:
    """Reference to the first point of the route, on segment 0."""
    if not polyline:
        return INVALID_ITER
    return PolylineIter(polyline.front(), 0)


def end(polyline: Polyline) -> PolylineIter:
    """End sentinel: the last point, on the index of the last point."""
    if not polyline:
        return INVALID_ITER
    return PolylineIter(polyline.back(), len(polyline) - 1)


def iter_to_index(polyline: Polyline, index: int) -> PolylineIter:
    """
    Reference sitting on route vertex ``index``.

    Raises:
        IndexError: If the route has no vertex ``index``
    """
    if not 0 <= index < len(polyline):
        raise IndexError(f"Vertex {index} is outside a route of {len(polyline)} points")
    return PolylineIter(polyline[index], index)


def fits(polyline: Polyline, it: PolylineIter) -> bool:
    """Check that a valid reference addresses an existing segment or the end sentinel."""
    if not it.is_valid():
        return False
    last = len(polyline) - 1
    if it.segment_index < last:
        return True
    return it.segment_index == last and it.point == polyline.back()
