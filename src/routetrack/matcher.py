"""
Matching position fixes to a route.

The matcher only ever searches forward from the current reference, and only
through a bounded window of segments. This keeps each update cheap and stops a
fix from snapping onto a later pass of the route over the same spot.
"""

from typing import Callable, NamedTuple, Optional
import logging

from .config import TrackerConfig
from .distance import DistanceAccumulator
from .geometry import UncertaintyRegion, project_to_segment
from .polyline import Polyline
from .polyline_iter import INVALID_ITER, PolylineIter

logger = logging.getLogger(__name__)


class Candidate(NamedTuple):
    """A projection of a fix onto one segment, with its score (lower is better)."""

    it: PolylineIter
    t: float
    score: float


class ProjectionMatcher:
    """Finds the best forward reference on a polyline for a position fix."""

    def __init__(
        self,
        polyline: Polyline,
        distances: DistanceAccumulator,
        config: Optional[TrackerConfig] = None,
    ):
        self.polyline = polyline
        self.distances = distances
        self.config = config or TrackerConfig()

    def _last_segment(self, index: int) -> int:
        # The end sentinel sits on the last point, not on a segment
        return min(index, self.polyline.segment_count - 1)

    def _window_end(self, from_index: int) -> int:
        """One past the last segment scanned when the window reaches ahead of ``from_index``."""
        segment_count = self.polyline.segment_count
        look_ahead = self.config.look_ahead_segments
        if look_ahead is None:
            return segment_count
        return min(from_index + 1 + look_ahead, segment_count)

    def _window_start(self, current_index: int, centre_index: int) -> int:
        """First segment scanned around ``centre_index``, never before ``current_index``."""
        look_ahead = self.config.look_ahead_segments
        if look_ahead is None:
            return current_index
        return max(current_index, centre_index - look_ahead)

    def _is_better(self, candidate: Candidate, best: Optional[Candidate]) -> bool:
        if best is None:
            return True
        tolerance = self.config.tie_tolerance_m
        if candidate.score < best.score - tolerance:
            return True
        if candidate.score > best.score + tolerance:
            return False
        # Tied: prefer progress along the route
        if candidate.it.segment_index != best.it.segment_index:
            return candidate.it.segment_index > best.it.segment_index
        return candidate.t < best.t

    def best_projection(
        self,
        region: UncertaintyRegion,
        first_segment: int,
        last_segment: int,
        score: Callable[[PolylineIter], float],
    ) -> PolylineIter:
        """
        Best projection of the region center onto segments in a range.

        A segment is a candidate only if the projected point lies inside the
        region's rectangle. Zero-length segments are skipped. Candidates are
        compared by score; equal scores (within ``tie_tolerance_m``) go to the
        larger segment index, then to the smaller position within the segment.

        Args:
            region: Uncertainty region of the fix
            first_segment: First segment index to scan
            last_segment: One past the last segment index to scan
            score: Scoring function for candidate references (lower is better)

        Returns:
            The best candidate reference, or INVALID_ITER if none qualifies
        """
        points = self.polyline.points
        best: Optional[Candidate] = None

        for i in range(first_segment, last_segment):
            seg_start, seg_end = points[i], points[i + 1]
            if seg_start == seg_end:
                continue

            projected, t = project_to_segment(region.center, seg_start, seg_end)
            if not region.contains(projected):
                continue

            it = PolylineIter(projected, i)
            candidate = Candidate(it, t, score(it))
            if self._is_better(candidate, best):
                best = candidate

        if best is None:
            logger.debug(
                f"No projection of ({region.center.x:.6f}, {region.center.y:.6f}) "
                f"inside its region on segments {first_segment}-{last_segment - 1}"
            )
            return INVALID_ITER
        return best.it

    def match(self, region: UncertaintyRegion, current: PolylineIter) -> PolylineIter:
        """
        Furthest forward projection of a fix.

        Every admissible segment in the window scores the same, so the one
        furthest along the route wins.

        Args:
            region: Uncertainty region of the fix
            current: Current reference on the polyline

        Returns:
            Reference on the largest admissible segment index, or INVALID_ITER
        """
        first = self._last_segment(current.segment_index)
        return self.best_projection(region, first, self._window_end(first), lambda it: 0.0)

    def match_by_prediction(
        self,
        region: UncertaintyRegion,
        current: PolylineIter,
        predicted_distance_m: float,
    ) -> PolylineIter:
        """
        Forward projection of a fix biased toward a predicted position.

        The predicted position is ``predicted_distance_m`` along the route from
        ``current`` (clamped to the route end). The search window is centred on
        the predicted segment, reaching ``look_ahead_segments`` either side of
        it but never behind ``current``. Each candidate is scored by how far its
        along-route distance from ``current`` differs from the prediction.

        Args:
            region: Uncertainty region of the fix
            current: Current reference on the polyline
            predicted_distance_m: Expected travel since ``current`` in meters

        Returns:
            Reference closest to the prediction, or INVALID_ITER
        """
        if predicted_distance_m <= 0.0:
            return self.match(region, current)

        predicted = self.distances.walk_forward(current, predicted_distance_m)
        centre = self._last_segment(predicted.segment_index)
        first = self._window_start(self._last_segment(current.segment_index), centre)
        last = self._window_end(centre)

        logger.debug(
            f"Predicted {predicted_distance_m:.2f} m ahead reaches segment "
            f"{predicted.segment_index}; scanning segments {first}-{last - 1}"
        )

        def score(it: PolylineIter) -> float:
            # Only reachable when current is the end sentinel
            if it.segment_index < current.segment_index:
                return float("inf")
            travelled = self.distances.distance_between(current, it)
            return abs(travelled - predicted_distance_m)

        return self.best_projection(region, first, last, score)
