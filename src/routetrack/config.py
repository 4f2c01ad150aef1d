from dataclasses import dataclass
from typing import Optional


@dataclass
class TrackerConfig:
    """Tunables for following a route."""

    # Segments scanned past the current one (None scans to the route end)
    look_ahead_segments: Optional[int] = 10
    # Candidates scoring within this many meters of each other are tied
    tie_tolerance_m: float = 0.01
    # Raise ValueError on contract violations instead of logging and falling back
    strict: bool = True

    def __post_init__(self):
        if self.look_ahead_segments is not None and self.look_ahead_segments < 0:
            raise ValueError(
                f"look_ahead_segments must be non-negative, got {self.look_ahead_segments}"
            )
