"""
Challenge Invitation Service

Participants invite accepted friends to a challenge. Accepting an
invitation is how most users become participants.
"""

from datetime import datetime, timezone
from typing import Dict, Any, List

from app.core.database import get_supabase_client
from app.services.friend_service import FriendService, friend_service
from app.services.logger import logger


class InvitationService:
    def __init__(self, supabase=None, friends: FriendService = None) -> None:
        self._supabase = supabase
        self.friends = friends or friend_service

    @property
    def supabase(self):
        return self._supabase or get_supabase_client()

    async def send_invitations(
        self, challenge_id: str, sender_id: str, receiver_ids: List[str]
    ) -> List[Dict[str, Any]]:
        """
        Invite friends to a challenge.

        Receivers who are not friends of the sender are rejected. Receivers
        already participating or already holding a pending invitation from
        the sender are skipped silently.
        """
        challenge = (
            self.supabase.table("challenges")
            .select("id, name")
            .eq("id", challenge_id)
            .maybe_single()
            .execute()
        )
        if not challenge or not challenge.data:
            raise ValueError("Challenge not found")

        friend_ids = set(await self.friends.friend_ids(sender_id))
        strangers = [r for r in receiver_ids if r not in friend_ids]
        if strangers:
            raise ValueError("You can only invite friends")

        participants = (
            self.supabase.table("challenge_participants")
            .select("user_id")
            .eq("challenge_id", challenge_id)
            .execute()
        )
        pending = (
            self.supabase.table("challenge_invitations")
            .select("receiver_id")
            .eq("challenge_id", challenge_id)
            .eq("sender_id", sender_id)
            .eq("status", "pending")
            .execute()
        )
        skip = {p["user_id"] for p in (participants.data or [])}
        skip |= {i["receiver_id"] for i in (pending.data or [])}

        invitations = []
        for receiver_id in receiver_ids:
            if receiver_id in skip:
                continue
            skip.add(receiver_id)
            invitations.append(
                {
                    "challenge_id": challenge_id,
                    "sender_id": sender_id,
                    "receiver_id": receiver_id,
                    "status": "pending",
                }
            )

        if not invitations:
            return []

        result = self.supabase.table("challenge_invitations").insert(invitations).execute()
        logger.info(
            f"Sent {len(invitations)} invitations for challenge {challenge_id}",
            {"challenge_id": challenge_id, "sender_id": sender_id},
        )
        return result.data or []

    async def list_pending(self, receiver_id: str) -> List[Dict[str, Any]]:
        result = (
            self.supabase.table("challenge_invitations")
            .select("*, challenge:challenges(name, description)")
            .eq("receiver_id", receiver_id)
            .eq("status", "pending")
            .order("created_at", desc=True)
            .execute()
        )
        return result.data or []

    async def respond(
        self, invitation_id: str, user_id: str, status: str
    ) -> Dict[str, Any]:
        """
        Accept or dismiss an invitation addressed to ``user_id``.

        Accepting adds the user as a participant (if not one already) and
        notifies the sender.
        """
        if status not in ("accepted", "dismissed"):
            raise ValueError("Status must be 'accepted' or 'dismissed'")

        invitation = (
            self.supabase.table("challenge_invitations")
            .select("*, challenge:challenges(name)")
            .eq("id", invitation_id)
            .maybe_single()
            .execute()
        )
        if not invitation or not invitation.data:
            raise ValueError("Invitation not found")

        data = invitation.data
        if data["receiver_id"] != user_id:
            raise ValueError("This invitation is not addressed to you")
        if data.get("status") != "pending":
            raise ValueError("Invitation has already been answered")

        try:
            self.supabase.table("challenge_invitations").update(
                {"status": status, "updated_at": datetime.now(timezone.utc).isoformat()}
            ).eq("id", invitation_id).execute()

            if status == "accepted":
                await self._join(data["challenge_id"], user_id)

                challenge_name = (data.get("challenge") or {}).get("name") or "a challenge"
                self.supabase.table("notifications").insert(
                    {
                        "user_id": data["sender_id"],
                        "type": "challenge_accepted",
                        "content": f'Your invitation to join "{challenge_name}" was accepted',
                        "related_id": data["challenge_id"],
                        "is_read": False,
                    }
                ).execute()

            return {**data, "status": status}

        except Exception as e:
            logger.error(
                f"Failed to respond to invitation {invitation_id}",
                {"error": str(e), "invitation_id": invitation_id, "user_id": user_id},
            )
            raise

    async def _join(self, challenge_id: str, user_id: str) -> None:
        existing = (
            self.supabase.table("challenge_participants")
            .select("id")
            .eq("challenge_id", challenge_id)
            .eq("user_id", user_id)
            .execute()
        )
        if existing.data:
            return
        self.supabase.table("challenge_participants").insert(
            {"challenge_id": challenge_id, "user_id": user_id, "progress": 0}
        ).execute()


invitation_service = InvitationService()
