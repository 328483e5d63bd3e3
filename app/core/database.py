"""
Database Configuration

Supabase client for REST API access (already pooled via PostgREST).

All tables (challenges, challenge_participants, workouts, workout_exercises,
workout_sets, profiles, leaderboard_cache, challenge_invitations,
friend_requests, notifications) are managed by Supabase migrations.
The client is created on first use so that importing the app does not
require credentials.
"""

from typing import Optional

from supabase import create_client, Client
from app.core.config import settings


_supabase: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get Supabase client instance.

    This uses the REST API which is already connection-pooled via PostgREST.
    """
    global _supabase

    if _supabase is None:
        _supabase = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
    return _supabase
