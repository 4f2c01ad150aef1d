#!/usr/bin/env python3
"""
Routetrack - follow a route from a stream of noisy position fixes.

This package matches position fixes onto a precomputed route, keeps the
traveler's current position along it, and answers distance and direction
queries relative to that position.
"""
import importlib.metadata

__version__ = importlib.metadata.version("routetrack")

# Import main classes for public API
from .config import TrackerConfig
from .geometry import MercatorPoint, Position, UncertaintyRegion
from .polyline import Polyline
from .polyline_iter import PolylineIter
from .route_tracker import RouteTracker

__all__ = [
    "TrackerConfig",
    "MercatorPoint",
    "Position",
    "UncertaintyRegion",
    "Polyline",
    "PolylineIter",
    "RouteTracker",
]
