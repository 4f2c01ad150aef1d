"""
Module for collecting and logging metrics of a route replay.
"""

import argparse
import logging
from typing import List, NamedTuple

from .replay import FixResult
from .route_tracker import RouteTracker

logger = logging.getLogger(__name__)


class ReplayMetrics(NamedTuple):
    """Container for replay metrics data."""

    total_fixes: int
    matched_fixes: int
    unmatched_fixes: int
    final_segment_index: int
    route_length_m: float
    distance_from_begin_m: float
    distance_to_end_m: float


def collect_metrics(results: List[FixResult], tracker: RouteTracker) -> ReplayMetrics:
    """
    Collect metrics from replay results.

    Args:
        results: FixResult objects from a replay
        tracker: The tracker the fixes were replayed against

    Returns:
        ReplayMetrics containing all collected metrics
    """
    matched = sum(1 for r in results if r.matched.is_valid())

    return ReplayMetrics(
        total_fixes=len(results),
        matched_fixes=matched,
        unmatched_fixes=len(results) - matched,
        final_segment_index=tracker.current_iter.segment_index,
        route_length_m=tracker.get_total_distance_m(),
        distance_from_begin_m=tracker.get_distance_from_begin_m(),
        distance_to_end_m=tracker.get_distance_to_end_m(),
    )


def log_metrics(metrics: ReplayMetrics, args: argparse.Namespace) -> None:
    """
    Log structured metrics after a replay.

    Args:
        metrics: ReplayMetrics containing collected metrics
        args: argparse.Namespace object containing settings like metrics flag
    """
    if not args.metrics:
        return

    logger.debug("=== ROUTETRACK_METRICS ===")
    logger.debug(f"total_fixes={metrics.total_fixes}")
    logger.debug(f"matched_fixes={metrics.matched_fixes}")
    logger.debug(f"unmatched_fixes={metrics.unmatched_fixes}")
    logger.debug(f"final_segment_index={metrics.final_segment_index}")
    logger.debug(f"route_length_m={metrics.route_length_m:.2f}")
    logger.debug(f"distance_from_begin_m={metrics.distance_from_begin_m:.2f}")
    logger.debug(f"distance_to_end_m={metrics.distance_to_end_m:.2f}")
    logger.debug("=== END_ROUTETRACK_METRICS ===")
