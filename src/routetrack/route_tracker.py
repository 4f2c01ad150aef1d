#!/usr/bin/env python3
"""
Route tracker: the current position of a traveler along a route.
"""

from typing import Iterable, List, Optional, Tuple, Union
import logging

from .config import TrackerConfig
from .distance import DistanceAccumulator
from .geometry import MercatorPoint, Position, UncertaintyRegion
from .matcher import ProjectionMatcher
from .polyline import Polyline
from .polyline_iter import INVALID_ITER, PolylineIter, begin, end, fits, iter_to_index

logger = logging.getLogger(__name__)


class RouteTracker:
    """
    Follows a route as position fixes arrive.

    The tracker owns a copy of the route geometry and a single current
    reference. Fixes move the reference forward with ``update_projection`` or
    ``update_projection_by_prediction``; distance and direction queries are
    answered relative to it.

    Usage:
        tracker = RouteTracker(points)
        matched = tracker.update_projection(UncertaintyRegion.from_fix(fix, 20.0))
        if matched.is_valid():
            remaining = tracker.get_distance_to_end_m()

    A tracker is not thread-safe; one caller at a time may update it.
    """

    def __init__(
        self,
        points: Iterable[Tuple[float, float]] = (),
        config: Optional[TrackerConfig] = None,
    ):
        """Initializes a RouteTracker.

        Construction never fails on short routes; ``is_valid()`` reports
        whether the route can be followed.

        Args:
            points: Mercator points of the route, or a Polyline
            config: Tunables; defaults to TrackerConfig()
        """
        self.config = config or TrackerConfig()
        self._polyline = Polyline(points)
        self._distances = DistanceAccumulator(self._polyline)
        self._matcher = ProjectionMatcher(self._polyline, self._distances, self.config)
        self._current = begin(self._polyline)

    @classmethod
    def from_positions(
        cls, positions: Iterable[Position], config: Optional[TrackerConfig] = None
    ) -> "RouteTracker":
        """Build a tracker from geographic positions."""
        return cls(Polyline.from_positions(positions), config)

    def __len__(self) -> int:
        return len(self._polyline)

    def __iter__(self):
        return iter(self._polyline)

    # ------------------------------------------------------------------
    # Contract checks
    # ------------------------------------------------------------------

    def _violation(self, message: str, fallback):
        """Raise in strict mode, otherwise log and return the fallback."""
        if self.config.strict:
            raise ValueError(message)
        logger.warning(f"{message}; falling back to {fallback!r}")
        return fallback

    def is_valid(self) -> bool:
        """The route has at least one segment and the current reference fits it."""
        return self._polyline.is_valid() and fits(self._polyline, self._current)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def get_polyline(self) -> Polyline:
        """Return a copy of the route geometry."""
        return self._polyline.copy()

    def append(self, other: Union["RouteTracker", Polyline, Iterable[Tuple[float, float]]]) -> None:
        """
        Extend the route with another route's points.

        The current reference keeps its segment and point.

        Args:
            other: Another tracker, a Polyline, or Mercator points
        """
        if isinstance(other, RouteTracker):
            other = other._polyline
        self._polyline.append(list(other))
        self._distances.update()
        if not self._current.is_valid():
            self._current = begin(self._polyline)
        logger.debug(f"Route extended to {len(self._polyline)} points")

    def pop_back(self) -> None:
        """
        Remove the last point of the route.

        A current reference on the removed segment or at the removed end is
        clamped to the end of the new last segment.
        """
        if not self._polyline:
            self._violation("pop_back on an empty route", None)
            return

        self._polyline.pop_back()
        self._distances.update()

        count = len(self._polyline)
        if count == 0:
            self._current = INVALID_ITER
        elif count == 1:
            self._current = begin(self._polyline)
        elif self._current.segment_index >= count - 1:
            self._current = PolylineIter(self._polyline.back(), count - 2)
            logger.debug(f"Current reference clamped to segment {count - 2}")

    def swap(self, other: "RouteTracker") -> None:
        """Exchange route geometry and tracking state with another tracker."""
        self.config, other.config = other.config, self.config
        self._polyline, other._polyline = other._polyline, self._polyline
        self._distances, other._distances = other._distances, self._distances
        self._matcher, other._matcher = other._matcher, self._matcher
        self._current, other._current = other._current, self._current

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    @property
    def current_iter(self) -> PolylineIter:
        return self._current

    def begin(self) -> PolylineIter:
        return begin(self._polyline)

    def end(self) -> PolylineIter:
        return end(self._polyline)

    def iter_to_index(self, index: int) -> PolylineIter:
        """Reference sitting on route vertex ``index``."""
        return iter_to_index(self._polyline, index)

    # ------------------------------------------------------------------
    # Distances
    # ------------------------------------------------------------------

    def get_distance_m(self, it1: PolylineIter, it2: PolylineIter) -> float:
        """
        Distance in meters along the route between two references.

        Args:
            it1: Start reference
            it2: End reference, not before ``it1`` in segment order

        Returns:
            Geodesic distance in meters
        """
        if not self._polyline.is_valid():
            return self._violation(
                f"Distance query on a route of {len(self._polyline)} points", 0.0
            )
        try:
            return self._distances.distance_between(it1, it2)
        except ValueError as e:
            return self._violation(str(e), 0.0)

    def get_total_distance_m(self) -> float:
        return self.get_distance_m(self.begin(), self.end())

    def get_distance_to_end_m(self) -> float:
        return self.get_distance_m(self._current, self.end())

    def get_distance_from_begin_m(self) -> float:
        return self.get_distance_m(self.begin(), self._current)

    def get_segment_distance_m(self, index: int) -> float:
        """Distance in meters from the route start to vertex ``index``."""
        return self._distances.segment_distance_m(index)

    # ------------------------------------------------------------------
    # Direction
    # ------------------------------------------------------------------

    def get_current_direction_point(self, tolerance_m: float) -> Optional[MercatorPoint]:
        """
        A route vertex ahead of the current position, for deriving a heading.

        Walks the route vertices after the current reference until at least
        ``tolerance_m`` meters have been covered.

        Args:
            tolerance_m: Minimum distance ahead in meters

        Returns:
            The first vertex at least ``tolerance_m`` ahead, or the last point
            if the route ends first
        """
        if not self.is_valid():
            return self._violation("Direction query on an invalid route", None)

        points = self._polyline.points
        last = len(points) - 1
        index = min(self._current.segment_index + 1, last)
        walked = self._distances.distance_between(self._current, iter_to_index(self._polyline, index))

        while index < last and walked < tolerance_m:
            walked += self._distances.segment_length_m(index)
            index += 1

        return points[index]

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def _can_update(self) -> bool:
        if self.is_valid():
            return True
        self._violation(
            f"Projection on a route of {len(self._polyline)} points "
            f"from reference {self._current!r}",
            INVALID_ITER,
        )
        return False

    def _accept(self, candidate: PolylineIter) -> PolylineIter:
        if candidate.is_valid():
            self._current = candidate
            logger.debug(
                f"Matched segment {candidate.segment_index} at "
                f"({candidate.point.x:.6f}, {candidate.point.y:.6f})"
            )
        else:
            logger.debug("No match; keeping current reference")
        return candidate

    def update_projection(self, region: UncertaintyRegion) -> PolylineIter:
        """
        Move the current reference to the furthest forward projection of a fix.

        Args:
            region: Uncertainty region of the fix

        Returns:
            The accepted reference, or an invalid one if no forward segment
            projects into the region (the current reference is then unchanged)
        """
        if not self._can_update():
            return INVALID_ITER
        return self._accept(self._matcher.match(region, self._current))

    def update_projection_by_prediction(
        self, region: UncertaintyRegion, predicted_distance_m: float
    ) -> PolylineIter:
        """
        Move the current reference using a predicted travel distance.

        Args:
            region: Uncertainty region of the fix
            predicted_distance_m: Expected travel since the current reference,
                in meters. Zero or less behaves like ``update_projection``.

        Returns:
            The accepted reference, or an invalid one if no forward segment
            projects into the region (the current reference is then unchanged)
        """
        if not self._can_update():
            return INVALID_ITER
        return self._accept(
            self._matcher.match_by_prediction(region, self._current, predicted_distance_m)
        )

    def get_positions(self) -> List[Position]:
        """Return the route as geographic positions."""
        return self._polyline.to_positions()
