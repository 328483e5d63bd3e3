"""
Notification Service

In-app notifications (``notifications`` table), e.g. "challenge_accepted"
rows written when an invitation is accepted.
"""

from typing import Dict, Any, List

from app.core.database import get_supabase_client
from app.services.logger import logger


class NotificationService:
    def __init__(self, supabase=None) -> None:
        self._supabase = supabase

    @property
    def supabase(self):
        return self._supabase or get_supabase_client()

    async def list_notifications(
        self, user_id: str, unread_only: bool = False, limit: int = 50
    ) -> List[Dict[str, Any]]:
        query = self.supabase.table("notifications").select("*").eq("user_id", user_id)
        if unread_only:
            query = query.eq("is_read", False)
        result = query.order("created_at", desc=True).limit(limit).execute()
        return result.data or []

    async def mark_read(self, notification_id: str, user_id: str) -> Dict[str, Any]:
        """Mark one of the user's notifications as read."""
        result = (
            self.supabase.table("notifications")
            .update({"is_read": True})
            .eq("id", notification_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not result.data:
            raise ValueError("Notification not found")
        return result.data[0]

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of the user as read; returns how many."""
        result = (
            self.supabase.table("notifications")
            .update({"is_read": True})
            .eq("user_id", user_id)
            .eq("is_read", False)
            .execute()
        )
        updated = len(result.data or [])
        logger.info(
            f"Marked {updated} notifications read for user {user_id}",
            {"user_id": user_id, "updated": updated},
        )
        return updated


notification_service = NotificationService()
