#!/usr/bin/env python3
"""
GPX input: route geometry and recorded position fixes.
"""

from datetime import datetime
from typing import List, NamedTuple, Optional, TextIO
import sys
import logging
import gpxpy
import gpxpy.gpx

from .config import TrackerConfig
from .geometry import Position
from .polyline import Polyline
from .route_tracker import RouteTracker

logger = logging.getLogger(__name__)


class Fix(NamedTuple):
    """A recorded position fix."""

    position: Position
    time: Optional[datetime] = None
    speed: Optional[float] = None  # meters per second, when recorded


def _parse(file_input: TextIO) -> gpxpy.gpx.GPX:
    return gpxpy.parse(file_input)


def _open_and(filename: str, reader):
    if filename == "-":
        logger.debug("Reading GPX data from stdin")
        return reader(sys.stdin)
    logger.debug(f"Reading GPX file: {filename}")
    with open(filename, "r", encoding="utf-8") as f:
        return reader(f)


def parse_gpx_to_polyline(file_input: TextIO) -> Polyline:
    """
    Parse GPX data and concatenate all tracks/segments into a single route.

    GPX route points (``<rte>``) are used when the file has no track points.

    Args:
        file_input: File-like object containing GPX data

    Returns:
        Polyline in Mercator coordinates

    Raises:
        ValueError: If the route crosses the antimeridian or approaches a pole
        gpxpy.gpx.GPXException: If GPX data is malformed
    """
    gpx_data = _parse(file_input)

    positions = [
        Position(latitude=point.latitude, longitude=point.longitude)
        for track in gpx_data.tracks
        for segment in track.segments
        for point in segment.points
    ]

    if not positions:
        positions = [
            Position(latitude=point.latitude, longitude=point.longitude)
            for route in gpx_data.routes
            for point in route.points
        ]

    if not positions:
        logger.warning("No track or route points found in GPX data")

    polyline = Polyline.from_positions(positions)
    logger.debug(f"Parsed {len(polyline)} route points from GPX data")
    return polyline


def parse_gpx_to_fixes(file_input: TextIO) -> List[Fix]:
    """
    Parse GPX track points as position fixes, in recorded order.

    Args:
        file_input: File-like object containing GPX data

    Returns:
        List of Fix objects

    Raises:
        gpxpy.gpx.GPXException: If GPX data is malformed
    """
    gpx_data = _parse(file_input)

    fixes = []
    for track in gpx_data.tracks:
        for segment in track.segments:
            for point in segment.points:
                fixes.append(
                    Fix(
                        position=Position(latitude=point.latitude, longitude=point.longitude),
                        time=point.time,
                        speed=point.speed,
                    )
                )

    logger.debug(f"Parsed {len(fixes)} fixes from GPX data")
    return fixes


def load_polyline(filename: str) -> Polyline:
    """
    Load a route from a GPX file.

    Args:
        filename: Path to GPX file, or "-" for stdin

    Raises:
        ValueError: If the route fails validation
        FileNotFoundError: If file doesn't exist
        PermissionError: If file can't be read
        gpxpy.gpx.GPXException: If GPX file is malformed
    """
    return _open_and(filename, parse_gpx_to_polyline)


def load_fixes(filename: str) -> List[Fix]:
    """
    Load recorded fixes from a GPX file.

    Args:
        filename: Path to GPX file, or "-" for stdin

    Raises:
        FileNotFoundError: If file doesn't exist
        PermissionError: If file can't be read
        gpxpy.gpx.GPXException: If GPX file is malformed
    """
    return _open_and(filename, parse_gpx_to_fixes)


def tracker_from_file(filename: str, config: Optional[TrackerConfig] = None) -> RouteTracker:
    """Load a GPX route and start following it."""
    return RouteTracker(load_polyline(filename), config)
