#!/usr/bin/env python3
"""
Filename utilities for generating output filenames.
"""

import os
import logging

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 180


def _reserve(candidate: str) -> bool:
    """Create ``candidate`` exclusively; False if it already exists."""
    try:
        with open(candidate, "x"):
            pass
        return True
    except FileExistsError:
        return False
    except (PermissionError, OSError) as e:
        logger.error(f"Cannot create file {candidate}: {e}")
        raise ValueError(f"Cannot create file: {e}")


def generate_output_filename(track_filename: str) -> str:
    """
    Generates an output HTML filename for a replay map and reserves it by
    creating an empty file.

    The name is the track file name without its .gpx extension plus
    " replay.html"; if that exists, " replay (1).html", " replay (2).html"
    and so on are tried.

    Args:
        track_filename: Path to the replayed GPX track

    Returns:
        Output filename that has been created as an empty file

    Raises:
        RuntimeError: If no available filename found after MAX_ATTEMPTS tries
        ValueError: If a file cannot be created
    """
    track_dir = os.path.dirname(track_filename)
    base_name = os.path.basename(track_filename)
    if base_name.lower().endswith(".gpx"):
        base_name = base_name[:-4]
    base_output = os.path.join(track_dir, base_name + " replay")

    candidate = base_output + ".html"
    if _reserve(candidate):
        return candidate

    for i in range(1, MAX_ATTEMPTS + 1):
        candidate = f"{base_output} ({i}).html"
        if _reserve(candidate):
            return candidate

    logger.error(
        f"Could not find an available filename after {MAX_ATTEMPTS} attempts. "
        f"Please clean up your output directory or specify --output explicitly."
    )
    raise RuntimeError(f"No available filename found after {MAX_ATTEMPTS} attempts")
