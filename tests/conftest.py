"""
Pytest configuration and fixtures for GymBro API tests.

Tests run against an in-memory fake of the Supabase client (tests/fakes.py)
installed as the process-wide client, so no Supabase project is needed.
"""

from datetime import datetime, timedelta, timezone
from typing import Generator, List, Optional, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.core import database
from app.core.auth import get_current_user
from app.core.config import settings
from main import app
from tests.fakes import FakeSupabase

TEST_JWT_SECRET = "test-jwt-secret"


def make_token(user_id: str, secret: str = TEST_JWT_SECRET, audience: str = "authenticated") -> str:
    """Signed access token shaped like the ones Supabase Auth issues."""
    return jwt.encode(
        {
            "sub": user_id,
            "aud": audience,
            "email": f"{user_id}@gymbro-test.example.com",
            "role": "authenticated",
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        },
        secret,
        algorithm="HS256",
    )


def seed_challenge(
    db: FakeSupabase,
    challenge_id: str = "challenge-1",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    name: str = "October Volume Cup",
    created_by: str = "user-you",
    created_at: Optional[datetime] = None,
) -> dict:
    now = datetime.now(timezone.utc)
    row = {
        "id": challenge_id,
        "name": name,
        "description": None,
        "start_date": (start or now - timedelta(days=7)).isoformat(),
        "end_date": (end or now + timedelta(days=7)).isoformat(),
        "created_by": created_by,
        "created_at": (created_at or now - timedelta(days=8)).isoformat(),
    }
    db.tables.setdefault("challenges", []).append(row)
    return row


def seed_participant(
    db: FakeSupabase,
    challenge_id: str,
    user_id: str,
    username: Optional[str] = None,
    joined_at: Optional[datetime] = None,
    progress: int = 0,
) -> dict:
    """Add a participant row and, if a username is given, the user's profile."""
    row = {
        "id": f"participant-{challenge_id}-{user_id}",
        "challenge_id": challenge_id,
        "user_id": user_id,
        "progress": progress,
        "created_at": (joined_at or datetime.now(timezone.utc) - timedelta(days=6)).isoformat(),
    }
    db.tables.setdefault("challenge_participants", []).append(row)
    if username:
        seed_profile(db, user_id, username)
    return row


def seed_profile(db: FakeSupabase, user_id: str, username: str, avatar_url: Optional[str] = None) -> None:
    profiles = db.tables.setdefault("profiles", [])
    if not any(p["id"] == user_id for p in profiles):
        profiles.append(
            {"id": user_id, "username": username, "full_name": None, "avatar_url": avatar_url}
        )


def seed_workout(
    db: FakeSupabase,
    user_id: str,
    created_at: datetime,
    exercises: Sequence[Sequence[Tuple[int, float]]],
    name: str = "Session",
) -> str:
    """
    Add a workout whose exercises are given as lists of (reps, weight) sets.
    """
    workout_id = f"workout-{len(db.tables.get('workouts', [])) + 1}"
    db.tables.setdefault("workouts", []).append(
        {
            "id": workout_id,
            "user_id": user_id,
            "challenge_id": None,
            "name": name,
            "notes": None,
            "created_at": created_at.isoformat(),
        }
    )
    for position, sets in enumerate(exercises):
        exercise_id = f"{workout_id}-exercise-{position}"
        db.tables.setdefault("workout_exercises", []).append(
            {"id": exercise_id, "workout_id": workout_id, "name": f"Lift {position}", "position": position}
        )
        for set_position, (reps, weight) in enumerate(sets):
            db.tables.setdefault("workout_sets", []).append(
                {
                    "id": f"{exercise_id}-set-{set_position}",
                    "workout_exercise_id": exercise_id,
                    "reps": reps,
                    "weight": weight,
                    "position": set_position,
                }
            )
    return workout_id


def days_ago(days: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


@pytest.fixture
def supabase(monkeypatch) -> FakeSupabase:
    """Fresh fake Supabase installed as the process-wide client."""
    fake = FakeSupabase()
    monkeypatch.setattr(database, "_supabase", fake)
    return fake


@pytest.fixture
def current_user_id() -> str:
    return "user-you"


@pytest.fixture
def client(supabase: FakeSupabase, current_user_id: str) -> Generator[TestClient, None, None]:
    """Test client with the acting user fixed to ``current_user_id``."""
    app.dependency_overrides[get_current_user] = lambda: {
        "id": current_user_id,
        "email": f"{current_user_id}@gymbro-test.example.com",
    }
    with TestClient(app, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(supabase: FakeSupabase) -> Generator[TestClient, None, None]:
    """Test client with real token verification."""
    with TestClient(app, base_url="http://test") as c:
        yield c


@pytest.fixture
def jwt_secret(monkeypatch) -> str:
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", TEST_JWT_SECRET)
    return TEST_JWT_SECRET


@pytest.fixture
def api_base() -> str:
    """Base path for API v1 endpoints."""
    return "/api/v1"


@pytest.fixture
def ranked_challenge(supabase: FakeSupabase) -> List[str]:
    """
    Active challenge with three participants:
    user-you at 900 (up from 600), user-b at 600, user-c without workouts.
    """
    seed_challenge(supabase, "challenge-1")
    seed_participant(supabase, "challenge-1", "user-c", "carol", joined_at=days_ago(6.5))
    seed_participant(supabase, "challenge-1", "user-b", "bob", joined_at=days_ago(6.4))
    seed_participant(supabase, "challenge-1", "user-you", "you", joined_at=days_ago(6.3))
    seed_workout(supabase, "user-you", days_ago(3), [[(10, 60)]])
    seed_workout(supabase, "user-you", days_ago(1), [[(10, 100), (8, 100)]])
    seed_workout(supabase, "user-b", days_ago(2), [[(6, 100)]])
    return ["user-you", "user-b", "user-c"]
