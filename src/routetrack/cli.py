#!/usr/bin/env python3
"""
Route following replay tool.
This script loads a route from a GPX file, replays a recorded GPX track
against it one fix at a time, prints the tracked progress for each fix,
and generates an interactive HTML map of the matches.

Requirements:
    pip install gpxpy folium shapely pyproj

"""

from typing import List, Optional
import webbrowser
import argparse
import logging
import sys
import os
from gpxpy import gpx

from . import __version__
from . import visualization
from .config import TrackerConfig
from .file_utils import generate_output_filename
from .geometry import to_lat_lon
from .gpx import load_fixes, load_polyline
from .metrics import collect_metrics, log_metrics
from .replay import FixResult, replay_fixes
from .route_tracker import RouteTracker

# Configure logging
logger = logging.getLogger("routetrack")


def non_negative_int(value: str) -> int:
    """argparse type for counts that must not be negative."""
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {value}")
    return number


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Replay a recorded GPX track against a GPX route",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "route",
        type=str,
        nargs="?",
        help="GPX file with the route to follow",
    )
    parser.add_argument(
        "track",
        type=str,
        nargs="?",
        help="GPX file with the recorded fixes",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output HTML map file (default: auto-generated based on track filename)",
    )
    parser.add_argument(
        "--accuracy",
        type=float,
        default=20.0,
        help="Accuracy radius applied to every fix in meters (default: 20.0)",
    )
    parser.add_argument(
        "--look-ahead",
        type=non_negative_int,
        default=10,
        help="Segments searched past the current one for each fix (default: 10)",
    )
    parser.add_argument(
        "--predict",
        action="store_true",
        help="Bias matching toward the position predicted from the previous fix",
    )
    parser.add_argument(
        "--direction-tolerance",
        type=float,
        default=20.0,
        help="Minimum distance ahead for the reported direction point in meters (default: 20.0)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--no-map",
        action="store_true",
        help="Don't write an HTML map",
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        help="Don't automatically open the HTML file in browser",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Output structured metrics after processing",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"routetrack {__version__}",
    )
    return parser


def determine_output_filename(track_filename: str, output_arg: Optional[str]) -> str:
    """
    Determine the output filename to use.

    Args:
        track_filename: Path to the replayed GPX track
        output_arg: Value from --output argument (None if not specified)

    Returns:
        Output filename to use

    Raises:
        RuntimeError: If auto-generation fails
        ValueError: If constructed filename would be illegal
    """
    if output_arg is not None:
        return output_arg

    try:
        return generate_output_filename(track_filename)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Failed to generate output filename: {e}")
        raise


def open_file_in_browser(filename: str) -> None:
    """
    Open the specified file in the default browser.

    Args:
        filename: Path to the file to open
    """
    abs_path = os.path.abspath(filename)
    try:
        webbrowser.open(f"file://{abs_path}")
        logger.debug(f"Opening {abs_path} in your default browser...")
    except webbrowser.Error as e:
        logger.warning(f"Could not automatically open browser: {e}")
        logger.warning(f"Please manually open {abs_path}")


def setup_logging(args: argparse.Namespace) -> None:
    """Setup logging configuration."""
    level = getattr(logging, args.log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # pyproj logs every transformer lookup at DEBUG
    logging.getLogger("pyproj").setLevel(logging.WARNING)


def print_progress(
    tracker: RouteTracker, results: List[FixResult], direction_tolerance: float
) -> None:
    """
    Print one line per replayed fix, then the final position and heading point.

    Args:
        tracker: Tracker after the replay
        results: FixResult objects from the replay
        direction_tolerance: Minimum distance ahead for the direction point
    """
    if not results:
        print("No fixes to replay")
        return

    index_width = len(str(len(results) - 1))
    total_km = tracker.get_total_distance_m() / 1000
    distance_width = len(f"{total_km:.0f}") + 4  # +4 for ".XXX"

    for i, result in enumerate(results):
        if result.matched.is_valid():
            status = f"segment {result.matched.segment_index}"
        else:
            status = "no match"
        print(
            f"{i:{index_width}d}: {result.distance_from_begin_m / 1000:{distance_width}.3f} km done, "
            f"{result.distance_to_end_m / 1000:{distance_width}.3f} km to go ({status})"
        )

    direction = to_lat_lon(tracker.get_current_direction_point(direction_tolerance))
    print(
        f"Heading toward ({direction.latitude:.6f}, {direction.longitude:.6f}) "
        f"on a {total_km:.3f} km route"
    )


def main():
    """
    Parses command-line arguments, loads the route and track,
    replays the fixes, and generates an interactive map.
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    if not args.route or not args.track:
        parser.print_help()
        sys.exit(1)

    setup_logging(args)

    # Load the route and the recorded fixes
    try:
        polyline = load_polyline(args.route)
        fixes = load_fixes(args.track)
    except FileNotFoundError as e:
        logger.error(f"GPX file not found: {e.filename}")
        sys.exit(1)
    except PermissionError as e:
        logger.error(f"Cannot read GPX file (permission denied): {e.filename}")
        sys.exit(1)
    except gpx.GPXException as e:
        logger.error(f"Invalid GPX file: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Unusable route: {e}")
        sys.exit(1)

    config = TrackerConfig(look_ahead_segments=args.look_ahead)
    tracker = RouteTracker(polyline, config)
    if not tracker.is_valid():
        logger.error(f"Route needs at least two points, found {len(tracker)}")
        sys.exit(1)

    logger.info(f"Loaded route with {len(tracker)} points")
    logger.info(f"Total route distance: {tracker.get_total_distance_m() / 1000:.2f} km")

    results = replay_fixes(tracker, fixes, args.accuracy, predict=args.predict)
    print_progress(tracker, results, args.direction_tolerance)

    metrics = collect_metrics(results, tracker)

    if not args.no_map:
        try:
            output_filename = determine_output_filename(args.track, args.output)
            logger.debug(f"Output filename: {output_filename}")
            visualization.create_replay_map(
                tracker.get_polyline(), results, output_filename, metrics
            )
        except (RuntimeError, ValueError, OSError) as e:
            logger.error(f"Failed to create map: {e}")
            sys.exit(1)

        if not args.no_open:
            open_file_in_browser(output_filename)

    log_metrics(metrics, args)


if __name__ == "__main__":
    main()
