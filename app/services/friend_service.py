"""
Friend Service

Friend requests between users. A friendship is an accepted request in
either direction; there is no separate friends table.
"""

from datetime import datetime, timezone
from typing import Dict, Any, List

from app.core.database import get_supabase_client
from app.services.logger import logger

PROFILE_COLUMNS = "id, username, full_name, avatar_url"


class FriendService:
    def __init__(self, supabase=None) -> None:
        self._supabase = supabase

    @property
    def supabase(self):
        return self._supabase or get_supabase_client()

    async def send_request(self, sender_id: str, receiver_id: str) -> Dict[str, Any]:
        """Send a friend request. Raises ValueError on self or duplicate requests."""
        if sender_id == receiver_id:
            raise ValueError("You cannot send a friend request to yourself")

        existing = (
            self.supabase.table("friend_requests")
            .select("id, status")
            .or_(
                f"and(sender_id.eq.{sender_id},receiver_id.eq.{receiver_id}),"
                f"and(sender_id.eq.{receiver_id},receiver_id.eq.{sender_id})"
            )
            .execute()
        )
        if existing.data:
            raise ValueError("A friend request already exists between these users")

        result = (
            self.supabase.table("friend_requests")
            .insert({"sender_id": sender_id, "receiver_id": receiver_id, "status": "pending"})
            .execute()
        )
        if not result.data:
            raise Exception("Failed to send friend request")

        logger.info(
            f"Friend request from {sender_id} to {receiver_id}",
            {"sender_id": sender_id, "receiver_id": receiver_id},
        )
        return result.data[0]

    async def respond(self, request_id: str, user_id: str, status: str) -> Dict[str, Any]:
        """Accept or reject a pending request addressed to ``user_id``."""
        if status not in ("accepted", "rejected"):
            raise ValueError("Status must be 'accepted' or 'rejected'")

        request = (
            self.supabase.table("friend_requests")
            .select("*")
            .eq("id", request_id)
            .maybe_single()
            .execute()
        )
        if not request or not request.data:
            raise ValueError("Friend request not found")
        if request.data["receiver_id"] != user_id:
            raise ValueError("This friend request is not addressed to you")
        if request.data.get("status") != "pending":
            raise ValueError("Friend request has already been answered")

        result = (
            self.supabase.table("friend_requests")
            .update({"status": status, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", request_id)
            .execute()
        )
        return result.data[0] if result.data else {**request.data, "status": status}

    async def list_pending(self, user_id: str) -> List[Dict[str, Any]]:
        """Pending requests addressed to the user, with the sender's profile."""
        requests = (
            self.supabase.table("friend_requests")
            .select("*")
            .eq("receiver_id", user_id)
            .eq("status", "pending")
            .order("created_at", desc=True)
            .execute()
        )
        rows = requests.data or []
        if not rows:
            return []

        profiles = await self._profiles([r["sender_id"] for r in rows])
        return [{**r, "sender": profiles.get(r["sender_id"])} for r in rows]

    async def friend_ids(self, user_id: str) -> List[str]:
        accepted = (
            self.supabase.table("friend_requests")
            .select("sender_id, receiver_id")
            .eq("status", "accepted")
            .or_(f"sender_id.eq.{user_id},receiver_id.eq.{user_id}")
            .execute()
        )
        ids = []
        for row in accepted.data or []:
            other = row["receiver_id"] if row["sender_id"] == user_id else row["sender_id"]
            if other not in ids:
                ids.append(other)
        return ids

    async def list_friends(self, user_id: str) -> List[Dict[str, Any]]:
        ids = await self.friend_ids(user_id)
        profiles = await self._profiles(ids)
        return [profiles[i] for i in ids if i in profiles]

    async def search_profiles(self, query: str, user_id: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Username search for adding friends; never returns the caller."""
        if not query.strip():
            return []
        result = (
            self.supabase.table("profiles")
            .select(PROFILE_COLUMNS)
            .ilike("username", f"%{query.strip()}%")
            .neq("id", user_id)
            .limit(limit)
            .execute()
        )
        return result.data or []

    async def _profiles(self, user_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        if not user_ids:
            return {}
        result = (
            self.supabase.table("profiles")
            .select(PROFILE_COLUMNS)
            .in_("id", user_ids)
            .execute()
        )
        return {p["id"]: p for p in (result.data or [])}


friend_service = FriendService()
