"""
Trend Extractor

Trend is "most recent session vs. the one before it" inside the challenge
window, not a rolling average.
"""

from dataclasses import dataclass
from typing import Sequence

from app.models.workout import Workout
from app.services.leaderboard.volume import compute_volume


@dataclass(frozen=True)
class VolumeTrend:
    current: float
    previous: float
    percentage_change: float


def percentage_change(current: float, previous: float) -> float:
    """Relative change in percent; 0 when there is nothing to compare to."""
    if not previous:
        return 0.0
    return (current - previous) / previous * 100


def extract_trend(workouts_newest_first: Sequence[Workout]) -> VolumeTrend:
    """
    Current vs. previous volume for one user's in-window workouts.

    ``workouts_newest_first`` must already be filtered to the challenge
    window and sorted most recent first.
    """
    current = compute_volume(workouts_newest_first[0]) if workouts_newest_first else 0.0
    previous = (
        compute_volume(workouts_newest_first[1])
        if len(workouts_newest_first) > 1
        else 0.0
    )
    return VolumeTrend(
        current=current,
        previous=previous,
        percentage_change=percentage_change(current, previous),
    )
