"""
Profile Service

Public profile rows (``profiles``) keyed by the Supabase auth user id. The
leaderboard shows ``username`` and ``avatar_url`` from here, so a profile
is created on first use when the user does not have one yet.
"""

import random
import re
from typing import Dict, Any, Optional
from urllib.parse import quote

from app.core.database import get_supabase_client
from app.models.social import ProfileUpdate
from app.services.logger import logger

PROFILE_COLUMNS = "id, username, full_name, avatar_url"
AVATAR_URL_TEMPLATE = (
    "https://ui-avatars.com/api/?name={initial}&background=10b981&color=ffffff"
)


def default_username(email: Optional[str]) -> str:
    """Email local part with non-alphanumerics removed, else ``user_<n>``."""
    local_part = (email or "").split("@")[0]
    username = re.sub(r"[^a-zA-Z0-9]", "", local_part)
    return username or f"user_{random.randint(0, 9999)}"


def default_avatar_url(email: Optional[str], username: str) -> str:
    initial = ((email or "")[:1] or username[:1]).upper()
    return AVATAR_URL_TEMPLATE.format(initial=quote(initial))


class ProfileService:
    def __init__(self, supabase=None) -> None:
        self._supabase = supabase

    @property
    def supabase(self):
        return self._supabase or get_supabase_client()

    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = (
            self.supabase.table("profiles")
            .select(PROFILE_COLUMNS)
            .eq("id", user_id)
            .maybe_single()
            .execute()
        )
        if not result or not result.data:
            return None
        return result.data

    async def get_or_create(
        self, user_id: str, email: Optional[str] = None, full_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """Return the user's profile, creating a default one on first call."""
        existing = await self.get_profile(user_id)
        if existing:
            return existing

        username = default_username(email)
        result = (
            self.supabase.table("profiles")
            .insert(
                {
                    "id": user_id,
                    "username": username,
                    "full_name": full_name,
                    "avatar_url": default_avatar_url(email, username),
                }
            )
            .execute()
        )
        if not result.data:
            raise Exception("Failed to create profile")

        logger.info(f"Created profile for user {user_id}", {"user_id": user_id})
        return result.data[0]

    async def update_profile(self, user_id: str, data: ProfileUpdate) -> Dict[str, Any]:
        """
        Update the caller's profile. Raises ValueError when the username is
        taken or the profile does not exist.
        """
        current = await self.get_profile(user_id)
        if not current:
            raise ValueError("Profile not found")

        if data.username and data.username != current.get("username"):
            taken = (
                self.supabase.table("profiles")
                .select("id")
                .eq("username", data.username)
                .neq("id", user_id)
                .execute()
            )
            if taken.data:
                raise ValueError("Username already taken")

        update_data = {k: v for k, v in data.model_dump().items() if v is not None}
        if not update_data:
            return current

        result = (
            self.supabase.table("profiles")
            .update(update_data)
            .eq("id", user_id)
            .execute()
        )
        return result.data[0] if result.data else {**current, **update_data}


profile_service = ProfileService()
