"""Tests for the session-over-session trend."""

from datetime import datetime, timedelta, timezone

import pytest

from app.models.workout import Workout
from app.services.leaderboard.trend import extract_trend, percentage_change


def _session(volume_sets, days_ago):
    return Workout(
        name="Session",
        created_at=datetime.now(timezone.utc) - timedelta(days=days_ago),
        exercises=[{"name": "Squat", "sets": [{"reps": r, "weight": w} for r, w in volume_sets]}],
    )


def test_no_workouts_gives_zero_trend():
    trend = extract_trend([])
    assert (trend.current, trend.previous, trend.percentage_change) == (0, 0, 0)


def test_single_workout_has_no_percentage_change():
    trend = extract_trend([_session([(10, 90)], 1)])
    assert trend.current == 900
    assert trend.previous == 0
    assert trend.percentage_change == 0


def test_change_compares_latest_with_the_one_before():
    workouts = [_session([(10, 90)], 1), _session([(10, 60)], 3), _session([(1, 1)], 5)]
    trend = extract_trend(workouts)
    assert trend.current == 900
    assert trend.previous == 600
    assert trend.percentage_change == pytest.approx(50.0)


def test_decline_is_negative():
    trend = extract_trend([_session([(10, 45)], 1), _session([(10, 60)], 2)])
    assert trend.percentage_change == pytest.approx(-25.0)


def test_previous_zero_volume_guards_division():
    trend = extract_trend([_session([(10, 90)], 1), Workout(name="Empty")])
    assert trend.previous == 0
    assert trend.percentage_change == 0


@pytest.mark.parametrize(
    "current, previous, expected",
    [(900, 600, 50.0), (600, 600, 0.0), (0, 600, -100.0), (900, 0, 0.0)],
)
def test_percentage_change(current, previous, expected):
    assert percentage_change(current, previous) == pytest.approx(expected)
