"""
Replay recorded fixes against a route.
"""

from typing import Iterable, List, NamedTuple, Optional
import logging

from .geometry import UncertaintyRegion, distance_on_earth, from_lat_lon
from .gpx import Fix
from .polyline_iter import PolylineIter
from .route_tracker import RouteTracker

logger = logging.getLogger(__name__)


class FixResult(NamedTuple):
    """Outcome of feeding one fix to a tracker."""

    fix: Fix
    matched: PolylineIter
    current: PolylineIter
    distance_from_begin_m: float
    distance_to_end_m: float


def predict_distance(previous: Optional[Fix], fix: Fix) -> float:
    """
    Expected travel between two fixes, in meters.

    Uses recorded speed and elapsed time when both are available, otherwise
    twice the straight-line distance between the fixes as a safety margin.
    Returns 0 for the first fix.
    """
    if previous is None:
        return 0.0

    if fix.speed is not None and fix.time is not None and previous.time is not None:
        elapsed = (fix.time - previous.time).total_seconds()
        if elapsed > 0:
            return fix.speed * elapsed

    return 2.0 * distance_on_earth(
        from_lat_lon(previous.position), from_lat_lon(fix.position)
    )


def replay_fixes(
    tracker: RouteTracker,
    fixes: Iterable[Fix],
    accuracy_m: float,
    predict: bool = False,
) -> List[FixResult]:
    """
    Feed fixes to a tracker one at a time.

    Args:
        tracker: Tracker following the route
        fixes: Recorded fixes in order
        accuracy_m: Accuracy radius applied to every fix, in meters
        predict: Use prediction-biased projection after the first fix

    Returns:
        One FixResult per fix
    """
    results = []
    previous: Optional[Fix] = None

    for fix in fixes:
        region = UncertaintyRegion.from_fix(from_lat_lon(fix.position), accuracy_m)
        if predict:
            matched = tracker.update_projection_by_prediction(
                region, predict_distance(previous, fix)
            )
        else:
            matched = tracker.update_projection(region)

        results.append(
            FixResult(
                fix=fix,
                matched=matched,
                current=tracker.current_iter,
                distance_from_begin_m=tracker.get_distance_from_begin_m(),
                distance_to_end_m=tracker.get_distance_to_end_m(),
            )
        )
        previous = fix

    matched_count = sum(1 for r in results if r.matched.is_valid())
    logger.info(f"Replayed {len(results)} fixes, {matched_count} matched")
    return results
