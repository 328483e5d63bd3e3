"""
Volume Calculator

"Volume load" is the workout score the challenge leaderboards rank by:
for each exercise take the mean of ``reps * weight`` over its sets, then
sum those means across the workout's exercises.

Inputs are assumed validated (non-negative reps and weight). Sanitizing
user input is the job of the workout payload models, not of this module.
"""

import math
from typing import Optional

from app.models.workout import Workout, WorkoutExercise


def exercise_volume(exercise: WorkoutExercise) -> Optional[float]:
    """Mean ``reps * weight`` over the exercise's sets, or None without sets."""
    sets = exercise.sets or []
    if not sets:
        return None
    return math.fsum(s.reps * s.weight for s in sets) / len(sets)


def compute_volume(workout: Workout) -> float:
    """
    Volume load of a single workout.

    Exercises without sets contribute nothing. A workout without exercises
    scores 0. ``math.fsum`` keeps the result independent of the order of
    exercises and sets.
    """
    per_exercise = [exercise_volume(exercise) for exercise in workout.exercises or []]
    return math.fsum(v for v in per_exercise if v is not None)
