"""
Challenge Service

Handles challenge creation, listing by lifecycle state, participation and
manual progress updates.
"""

from datetime import datetime, timezone
from typing import Dict, Any, Optional, List

from app.core.database import get_supabase_client
from app.models.challenge import ChallengeCreate
from app.services.logger import logger

CHALLENGE_COLUMNS = "id, name, description, start_date, end_date, created_by, created_at"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChallengeService:
    """Service for managing challenges"""

    def __init__(self, supabase=None) -> None:
        self._supabase = supabase

    @property
    def supabase(self):
        return self._supabase or get_supabase_client()

    async def create_challenge(self, user_id: str, data: ChallengeCreate) -> Dict[str, Any]:
        """
        Create a challenge and auto-join the creator as first participant.

        Args:
            user_id: User creating the challenge
            data: Validated challenge payload (end_date >= start_date)

        Returns:
            Created challenge row
        """
        try:
            result = (
                self.supabase.table("challenges")
                .insert(
                    {
                        "name": data.name,
                        "description": data.description,
                        "start_date": data.start_date.isoformat(),
                        "end_date": data.end_date.isoformat(),
                        "created_by": user_id,
                    }
                )
                .execute()
            )

            if not result.data:
                raise Exception("Failed to create challenge")

            challenge = result.data[0]

            self.supabase.table("challenge_participants").insert(
                {
                    "challenge_id": challenge["id"],
                    "user_id": user_id,
                    "progress": 0,
                }
            ).execute()

            logger.info(
                f"Created challenge '{data.name}' by user {user_id}",
                {"challenge_id": challenge["id"], "user_id": user_id},
            )
            return challenge

        except Exception as e:
            logger.error(
                f"Failed to create challenge for user {user_id}",
                {"error": str(e), "user_id": user_id, "name": data.name},
            )
            raise

    async def list_challenges(
        self, status: str = "active", now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """
        List challenges by lifecycle state.

        - active: start_date <= now <= end_date, newest first
        - upcoming: start_date > now, soonest first
        - past: end_date < now, most recently ended first
        """
        now_iso = (now or _utcnow()).isoformat()
        query = self.supabase.table("challenges").select(CHALLENGE_COLUMNS)

        if status == "active":
            query = (
                query.lte("start_date", now_iso)
                .gte("end_date", now_iso)
                .order("created_at", desc=True)
            )
        elif status == "upcoming":
            query = query.gt("start_date", now_iso).order("start_date")
        elif status == "past":
            query = query.lt("end_date", now_iso).order("end_date", desc=True)
        else:
            raise ValueError(
                f"Invalid status '{status}'. Must be one of: active, upcoming, past"
            )

        result = query.execute()
        return result.data or []

    async def list_active_for_user(
        self, user_id: str, now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """Active challenges the user participates in (for challenge selectors)."""
        active = await self.list_challenges("active", now=now)
        if not active:
            return []

        memberships = (
            self.supabase.table("challenge_participants")
            .select("challenge_id")
            .eq("user_id", user_id)
            .execute()
        )
        joined = {row["challenge_id"] for row in (memberships.data or [])}
        return [challenge for challenge in active if challenge["id"] in joined]

    async def get_challenge(self, challenge_id: str) -> Optional[Dict[str, Any]]:
        result = (
            self.supabase.table("challenges")
            .select(CHALLENGE_COLUMNS)
            .eq("id", challenge_id)
            .maybe_single()
            .execute()
        )
        if not result or not result.data:
            return None
        return result.data

    async def get_participant(
        self, challenge_id: str, user_id: str
    ) -> Optional[Dict[str, Any]]:
        result = (
            self.supabase.table("challenge_participants")
            .select("*")
            .eq("challenge_id", challenge_id)
            .eq("user_id", user_id)
            .maybe_single()
            .execute()
        )
        if not result or not result.data:
            return None
        return result.data

    async def join_challenge(self, challenge_id: str, user_id: str) -> Dict[str, Any]:
        """Join a challenge. Raises ValueError if unknown or already joined."""
        try:
            if not await self.get_challenge(challenge_id):
                raise ValueError("Challenge not found")

            if await self.get_participant(challenge_id, user_id):
                raise ValueError("Already joined this challenge")

            result = (
                self.supabase.table("challenge_participants")
                .insert({"challenge_id": challenge_id, "user_id": user_id, "progress": 0})
                .execute()
            )
            if not result.data:
                raise Exception("Failed to join challenge")

            logger.info(
                f"User {user_id} joined challenge {challenge_id}",
                {"challenge_id": challenge_id, "user_id": user_id},
            )
            return result.data[0]

        except ValueError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to join challenge {challenge_id} for user {user_id}",
                {"error": str(e), "challenge_id": challenge_id, "user_id": user_id},
            )
            raise

    async def update_progress(
        self, challenge_id: str, user_id: str, progress: int
    ) -> Dict[str, Any]:
        """
        Set the participant's manual progress percentage.

        The first update creates the membership row when there is none.
        """
        if not 0 <= progress <= 100:
            raise ValueError("Progress must be between 0 and 100")

        try:
            if not await self.get_challenge(challenge_id):
                raise ValueError("Challenge not found")

            now_iso = _utcnow().isoformat()
            existing = await self.get_participant(challenge_id, user_id)

            if existing:
                result = (
                    self.supabase.table("challenge_participants")
                    .update({"progress": progress, "updated_at": now_iso})
                    .eq("id", existing["id"])
                    .execute()
                )
            else:
                result = (
                    self.supabase.table("challenge_participants")
                    .insert(
                        {
                            "challenge_id": challenge_id,
                            "user_id": user_id,
                            "progress": progress,
                        }
                    )
                    .execute()
                )

            if not result.data:
                raise Exception("Failed to update progress")
            return result.data[0]

        except ValueError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to update progress for challenge {challenge_id}, user {user_id}",
                {"error": str(e), "challenge_id": challenge_id, "user_id": user_id},
            )
            raise

    async def list_participants(self, challenge_id: str) -> List[Dict[str, Any]]:
        """Participants with their profile, highest progress first."""
        participants = (
            self.supabase.table("challenge_participants")
            .select("id, challenge_id, user_id, progress, created_at, updated_at")
            .eq("challenge_id", challenge_id)
            .order("progress", desc=True)
            .execute()
        )
        rows = participants.data or []
        if not rows:
            return []

        profiles = (
            self.supabase.table("profiles")
            .select("id, username, full_name, avatar_url")
            .in_("id", [p["user_id"] for p in rows])
            .execute()
        )
        profiles_map = {p["id"]: p for p in (profiles.data or [])}

        return [{**p, "profile": profiles_map.get(p["user_id"])} for p in rows]


# Global instance
challenge_service = ChallengeService()
