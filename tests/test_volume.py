"""Tests for the volume load calculation."""

import itertools

import pytest
from pydantic import ValidationError

from app.models.workout import Workout, WorkoutExercise, WorkoutSet
from app.services.leaderboard.volume import compute_volume, exercise_volume


def _workout(*exercises):
    return Workout(
        name="Session",
        exercises=[
            {"name": f"Lift {i}", "sets": [{"reps": r, "weight": w} for r, w in sets]}
            for i, sets in enumerate(exercises)
        ],
    )


def test_workout_without_exercises_scores_zero():
    assert compute_volume(Workout(name="Rest day")) == 0


def test_exercise_without_sets_contributes_nothing():
    assert exercise_volume(WorkoutExercise(name="Plank")) is None
    assert compute_volume(_workout([], [(10, 50)])) == 500


def test_missing_sets_are_treated_as_empty():
    exercise = WorkoutExercise(name="Deadlift", sets=None)
    assert exercise.sets == []
    assert compute_volume(Workout(name="Pull", exercises=None)) == 0


def test_single_exercise_is_mean_of_set_products():
    # (10 * 100 + 8 * 100) / 2
    assert compute_volume(_workout([(10, 100), (8, 100)])) == 900


def test_volume_sums_exercise_means():
    workout = _workout([(10, 100), (8, 100)], [(5, 40), (5, 60), (5, 50)])
    assert compute_volume(workout) == 900 + 250


def test_volume_is_independent_of_exercise_and_set_order():
    exercises = [
        [(10, 102.5), (8, 107.5), (6, 112.5)],
        [(12, 22.5), (12, 25.0)],
        [(5, 140.0)],
    ]
    expected = compute_volume(_workout(*exercises))

    for order in itertools.permutations(exercises):
        assert compute_volume(_workout(*order)) == expected
    shuffled_sets = [list(reversed(sets)) for sets in exercises]
    assert compute_volume(_workout(*shuffled_sets)) == expected


@pytest.mark.parametrize("reps, weight", [(-1, 50), (5, -2.5)])
def test_negative_reps_or_weight_are_rejected_before_calculation(reps, weight):
    with pytest.raises(ValidationError):
        WorkoutSet(reps=reps, weight=weight)
