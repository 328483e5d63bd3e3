"""
Leaderboard Cache

Denormalized projection of the last computed standings, one row per
(challenge_id, user_id) in the ``leaderboard_cache`` table. It is never a
source of truth and can be dropped and rebuilt from workouts at any time.

Writes are upserts, so concurrent refreshes converge (last write wins per
row). Rows of participants who left are not deleted; they keep showing
until the challenge ends.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from app.core.database import get_supabase_client
from app.models.leaderboard import LeaderboardEntry
from app.services.leaderboard.store import execute, rows
from app.services.logger import logger

CACHE_TABLE = "leaderboard_cache"
CACHE_CONFLICT_KEY = "challenge_id,user_id"

# Rows written without a rank sort after ranked ties, then by user id.
UNRANKED = 2**31 - 1


def order_entries(entries: Sequence[LeaderboardEntry]) -> List[LeaderboardEntry]:
    """
    Volume descending, ties by stored rank then user id, then renumber
    ranks 1..n.

    Stored ranks come from the aggregator's stable sort, so a freshly
    written cache reads back in exactly the aggregator's order.
    """
    ordered = sorted(entries, key=lambda e: (-e.current_volume, e.rank, e.user_id))
    return [
        entry.model_copy(update={"rank": position})
        for position, entry in enumerate(ordered, start=1)
    ]


class LeaderboardCache:
    def __init__(self, supabase=None) -> None:
        self._supabase = supabase

    @property
    def supabase(self):
        return self._supabase or get_supabase_client()

    async def write(
        self,
        challenge_id: str,
        entries: Sequence[LeaderboardEntry],
        updated_at: Optional[datetime] = None,
    ) -> None:
        """Upsert one row per entry keyed on (challenge_id, user_id)."""
        if not entries:
            return

        stamp = (updated_at or datetime.now(timezone.utc)).isoformat()
        payload = [
            {
                "challenge_id": challenge_id,
                "user_id": entry.user_id,
                "username": entry.username,
                "avatar_url": entry.avatar_url,
                "current_volume": entry.current_volume,
                "percentage_change": entry.percentage_change,
                "rank": entry.rank,
                "updated_at": stamp,
            }
            for entry in entries
        ]

        execute(
            "upsert leaderboard cache",
            self.supabase.table(CACHE_TABLE).upsert(
                payload, on_conflict=CACHE_CONFLICT_KEY
            ),
        )
        logger.info(
            f"Wrote {len(payload)} leaderboard cache rows for challenge {challenge_id}",
            {"challenge_id": challenge_id, "rows": len(payload)},
        )

    async def read(
        self,
        challenge_id: str,
        viewer_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LeaderboardEntry]:
        """Cached standings, volume descending with the aggregator's tie order."""
        result = execute(
            "read leaderboard cache",
            self.supabase.table(CACHE_TABLE)
            .select(
                "user_id, username, avatar_url, current_volume, "
                "percentage_change, rank, updated_at"
            )
            .eq("challenge_id", challenge_id)
            .order("current_volume", desc=True)
            .order("rank"),
        )

        entries = order_entries(
            LeaderboardEntry(
                user_id=row["user_id"],
                username=row.get("username") or "",
                avatar_url=row.get("avatar_url"),
                current_volume=row.get("current_volume") or 0.0,
                percentage_change=row.get("percentage_change") or 0.0,
                rank=row.get("rank") or UNRANKED,
                is_you=row["user_id"] == viewer_id,
                updated_at=row.get("updated_at"),
            )
            for row in rows(result)
        )
        return entries[:limit] if limit else entries


leaderboard_cache = LeaderboardCache()
