"""
Leaderboard Aggregator

Turns a challenge's participants and their in-window workouts into ranked
standings. ``rank_standings`` is the pure part; ``LeaderboardAggregator``
loads the inputs from Supabase and hands them over.

Every entry point (view refresh, webhook refresh, the RPC endpoints) goes
through this module so the numbers cannot drift between call sites.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from app.core.database import get_supabase_client
from app.models.challenge import Challenge
from app.models.leaderboard import LeaderboardEntry, VolumeTrendRow
from app.models.workout import Workout
from app.services.leaderboard.store import execute, rows
from app.services.leaderboard.trend import VolumeTrend, extract_trend, percentage_change
from app.services.logger import logger

UNKNOWN_USERNAME = "Unknown athlete"

WORKOUT_COLUMNS = (
    "id, user_id, challenge_id, name, notes, created_at, "
    "workout_exercises(id, name, position, workout_sets(reps, weight, position))"
)


def _newest_first(workouts: Iterable[Workout]) -> List[Workout]:
    return sorted(
        workouts,
        key=lambda w: w.created_at.timestamp() if w.created_at else float("-inf"),
        reverse=True,
    )


def compute_trends(
    participant_ids: Sequence[str],
    workouts_by_user: Dict[str, List[Workout]],
) -> Dict[str, VolumeTrend]:
    """Trend per participant; participants without workouts get a zero trend."""
    return {
        user_id: extract_trend(_newest_first(workouts_by_user.get(user_id, [])))
        for user_id in participant_ids
    }


def rank_standings(
    participant_ids: Sequence[str],
    profiles: Dict[str, Dict[str, Any]],
    workouts_by_user: Dict[str, List[Workout]],
    viewer_id: Optional[str] = None,
    updated_at: Optional[datetime] = None,
) -> List[LeaderboardEntry]:
    """
    Rank participants by current volume, highest first.

    Ties keep the order of ``participant_ids`` (Python's sort is stable),
    so callers control tie-breaking by the order they pass participants in.
    """
    trends = compute_trends(participant_ids, workouts_by_user)
    ordered = sorted(
        participant_ids, key=lambda user_id: trends[user_id].current, reverse=True
    )

    entries = []
    for position, user_id in enumerate(ordered, start=1):
        profile = profiles.get(user_id) or {}
        trend = trends[user_id]
        entries.append(
            LeaderboardEntry(
                user_id=user_id,
                username=profile.get("username") or UNKNOWN_USERNAME,
                avatar_url=profile.get("avatar_url"),
                current_volume=trend.current,
                percentage_change=trend.percentage_change,
                rank=position,
                is_you=user_id == viewer_id,
                updated_at=updated_at,
            )
        )
    return entries


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


class LeaderboardAggregator:
    """Loads challenge data from Supabase and ranks participants."""

    def __init__(self, supabase=None) -> None:
        self._supabase = supabase

    @property
    def supabase(self):
        return self._supabase or get_supabase_client()

    async def load_challenge(self, challenge_id: str) -> Optional[Challenge]:
        result = execute(
            "load challenge",
            self.supabase.table("challenges")
            .select("id, name, description, start_date, end_date, created_by, created_at")
            .eq("id", challenge_id)
            .maybe_single(),
        )
        found = rows(result)
        return Challenge.from_row(found[0]) if found else None

    async def load_participant_ids(self, challenge_id: str) -> List[str]:
        """Participant user ids in join order."""
        result = execute(
            "load participants",
            self.supabase.table("challenge_participants")
            .select("user_id, created_at")
            .eq("challenge_id", challenge_id)
            .order("created_at"),
        )
        return _unique(row.get("user_id") for row in rows(result))

    async def load_profiles(self, user_ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
        if not user_ids:
            return {}
        result = execute(
            "load profiles",
            self.supabase.table("profiles")
            .select("id, username, avatar_url")
            .in_("id", list(user_ids)),
        )
        return {row["id"]: row for row in rows(result)}

    async def load_workouts(
        self, user_ids: Sequence[str], challenge: Challenge
    ) -> Dict[str, List[Workout]]:
        """In-window workouts per user, newest first."""
        if not user_ids:
            return {}
        result = execute(
            "load workouts",
            self.supabase.table("workouts")
            .select(WORKOUT_COLUMNS)
            .in_("user_id", list(user_ids))
            .gte("created_at", challenge.start_date.isoformat())
            .lte("created_at", challenge.end_date.isoformat())
            .order("created_at", desc=True),
        )

        workouts_by_user: Dict[str, List[Workout]] = {}
        for row in rows(result):
            try:
                workout = Workout.from_row(row)
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid workout {row.get('id')} in challenge {challenge.id}",
                    {"workout_id": row.get("id"), "user_id": row.get("user_id"), "error": str(e)},
                )
                continue
            workouts_by_user.setdefault(workout.user_id, []).append(workout)
        return {
            user_id: _newest_first(workouts)
            for user_id, workouts in workouts_by_user.items()
        }

    async def aggregate(
        self,
        challenge_id: str,
        viewer_id: Optional[str] = None,
        updated_at: Optional[datetime] = None,
    ) -> List[LeaderboardEntry]:
        """
        Ranked standings for a challenge.

        An unknown challenge or one without participants yields an empty
        list. Store failures raise StoreUnavailableError.
        """
        challenge = await self.load_challenge(challenge_id)
        if challenge is None:
            logger.info(
                f"Leaderboard requested for unknown challenge {challenge_id}",
                {"challenge_id": challenge_id},
            )
            return []

        participant_ids = await self.load_participant_ids(challenge_id)
        if not participant_ids:
            return []

        profiles = await self.load_profiles(participant_ids)
        workouts_by_user = await self.load_workouts(participant_ids, challenge)

        return rank_standings(
            participant_ids,
            profiles,
            workouts_by_user,
            viewer_id=viewer_id,
            updated_at=updated_at,
        )

    async def volume_trends(
        self, challenge_id: str, user_id: str
    ) -> List[VolumeTrendRow]:
        """
        The user's trend next to the challenge-wide average.

        The average row is the mean current and previous volume over all
        participants, zero-workout participants included.
        """
        challenge = await self.load_challenge(challenge_id)
        if challenge is None:
            return []

        participant_ids = await self.load_participant_ids(challenge_id)
        if not participant_ids:
            return []

        subjects = _unique([*participant_ids, user_id])
        profiles = await self.load_profiles([user_id])
        workouts_by_user = await self.load_workouts(subjects, challenge)
        trends = compute_trends(subjects, workouts_by_user)

        mine = trends[user_id]
        field_trends = [trends[pid] for pid in participant_ids]
        avg_current = sum(t.current for t in field_trends) / len(field_trends)
        avg_previous = sum(t.previous for t in field_trends) / len(field_trends)

        return [
            VolumeTrendRow(
                user_id=user_id,
                username=(profiles.get(user_id) or {}).get("username")
                or UNKNOWN_USERNAME,
                current_volume=mine.current,
                previous_volume=mine.previous,
                percentage_change=mine.percentage_change,
                is_you=True,
            ),
            VolumeTrendRow(
                username="Average",
                current_volume=avg_current,
                previous_volume=avg_previous,
                percentage_change=percentage_change(avg_current, avg_previous),
                is_average=True,
            ),
        ]

    async def affected_challenges(self, user_id: str, moment: datetime) -> List[str]:
        """Challenges the user takes part in whose window contains ``moment``."""
        memberships = execute(
            "load memberships",
            self.supabase.table("challenge_participants")
            .select("challenge_id")
            .eq("user_id", user_id),
        )
        challenge_ids = _unique(row.get("challenge_id") for row in rows(memberships))
        if not challenge_ids:
            return []

        result = execute(
            "load affected challenges",
            self.supabase.table("challenges")
            .select("id")
            .in_("id", challenge_ids)
            .lte("start_date", moment.isoformat())
            .gte("end_date", moment.isoformat()),
        )
        return [row["id"] for row in rows(result)]


leaderboard_aggregator = LeaderboardAggregator()
