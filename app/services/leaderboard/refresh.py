"""
Refresh Trigger

Policy: eager, server-computed. Every read of a challenge leaderboard
recomputes the standings, upserts them into the cache and then serves the
cache, so the displayed numbers and the cached numbers are reconciled in
one request. Change notifications (database webhooks) and workout
submissions run the same ``refresh``; they are an extra freshness source,
never the only one.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from app.core.config import settings
from app.models.leaderboard import LeaderboardEntry, LeaderboardResponse
from app.services.leaderboard.aggregator import (
    LeaderboardAggregator,
    leaderboard_aggregator,
)
from app.services.leaderboard.cache import LeaderboardCache, leaderboard_cache
from app.services.leaderboard.errors import StoreUnavailableError
from app.services.logger import logger

# Tables whose changes can move a challenge leaderboard, and the events that matter.
WATCHED_EVENTS = {
    "challenge_participants": {"INSERT", "UPDATE"},
    "challenge_invitations": {"INSERT", "UPDATE"},
    "workouts": {"INSERT"},
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def is_entry_stale(entry: LeaderboardEntry, latest_workout_at: Optional[datetime]) -> bool:
    """A cached entry is stale when a contributing workout is newer than it."""
    if latest_workout_at is None:
        return False
    if entry.updated_at is None:
        return True
    return _aware(entry.updated_at) < _aware(latest_workout_at)


def cache_age(entries: Iterable[LeaderboardEntry], now: datetime) -> Optional[timedelta]:
    """Time since the most recent write of a cached projection."""
    stamps = [_aware(e.updated_at) for e in entries if e.updated_at is not None]
    if not stamps:
        return None
    return _aware(now) - max(stamps)


class LeaderboardRefresher:
    def __init__(
        self,
        aggregator: Optional[LeaderboardAggregator] = None,
        cache: Optional[LeaderboardCache] = None,
        max_staleness_seconds: Optional[int] = None,
    ) -> None:
        self.aggregator = aggregator or leaderboard_aggregator
        self.cache = cache or leaderboard_cache
        self.max_staleness = timedelta(
            seconds=(
                max_staleness_seconds
                if max_staleness_seconds is not None
                else int(settings.LEADERBOARD_MAX_STALENESS_SECONDS)
            )
        )

    async def refresh(
        self, challenge_id: str, now: Optional[datetime] = None
    ) -> List[LeaderboardEntry]:
        """Recompute standings and write them through to the cache."""
        stamp = now or _utcnow()
        entries = await self.aggregator.aggregate(challenge_id, updated_at=stamp)
        await self.cache.write(challenge_id, entries, updated_at=stamp)
        return entries

    async def get_standings(
        self,
        challenge_id: str,
        viewer_id: str,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> LeaderboardResponse:
        """
        Refresh, then read the cache.

        If the refresh fails, a cached projection no older than the
        staleness bound is served with ``stale=True``. Otherwise the
        StoreUnavailableError reaches the caller.
        """
        stamp = now or _utcnow()
        try:
            await self.refresh(challenge_id, now=stamp)
        except StoreUnavailableError as e:
            fallback = await self._fallback(challenge_id, viewer_id, limit, stamp)
            if fallback is None:
                raise
            logger.warning(
                f"Serving cached leaderboard for challenge {challenge_id} after failed refresh",
                {"challenge_id": challenge_id, "error": str(e)},
            )
            return fallback

        entries = await self.cache.read(challenge_id, viewer_id=viewer_id, limit=limit)
        return LeaderboardResponse(
            challenge_id=challenge_id, entries=entries, refreshed_at=stamp
        )

    async def _fallback(
        self,
        challenge_id: str,
        viewer_id: str,
        limit: Optional[int],
        now: datetime,
    ) -> Optional[LeaderboardResponse]:
        try:
            cached = await self.cache.read(challenge_id, viewer_id=viewer_id, limit=limit)
        except StoreUnavailableError:
            return None

        age = cache_age(cached, now)
        if age is None or age > self.max_staleness:
            return None

        return LeaderboardResponse(
            challenge_id=challenge_id,
            entries=cached,
            refreshed_at=now - age,
            stale=True,
        )

    async def refresh_many(self, challenge_ids: Iterable[str]) -> List[str]:
        """
        Refresh several challenges, returning the ids that failed.

        Used from background triggers, where there is no caller to report
        to; the next view of a failed challenge refreshes it again.
        """
        failed = []
        for challenge_id in challenge_ids:
            try:
                await self.refresh(challenge_id)
            except StoreUnavailableError as e:
                logger.error(
                    f"Background leaderboard refresh failed for challenge {challenge_id}",
                    {"challenge_id": challenge_id, "error": str(e)},
                )
                failed.append(challenge_id)
        return failed

    async def challenges_for_event(self, event: Dict[str, Any]) -> List[str]:
        """Challenge ids whose standings a change notification may affect."""
        table = event.get("table")
        event_type = (event.get("type") or "").upper()
        if event_type not in WATCHED_EVENTS.get(table, set()):
            return []

        record = event.get("record") or {}
        if table == "workouts":
            user_id = record.get("user_id")
            if not user_id:
                return []
            created_at = record.get("created_at")
            moment = (
                datetime.fromisoformat(created_at) if created_at else _utcnow()
            )
            return await self.aggregator.affected_challenges(user_id, moment)

        challenge_id = record.get("challenge_id")
        return [challenge_id] if challenge_id else []

    async def refresh_for_workout(
        self, user_id: str, moment: Optional[datetime] = None
    ) -> List[str]:
        """Refresh the challenges a newly logged workout counts toward."""
        try:
            challenge_ids = await self.aggregator.affected_challenges(
                user_id, moment or _utcnow()
            )
        except StoreUnavailableError as e:
            logger.error(
                f"Could not resolve challenges for workout of user {user_id}",
                {"user_id": user_id, "error": str(e)},
            )
            return []
        await self.refresh_many(challenge_ids)
        return challenge_ids

    async def handle_change_event(self, event: Dict[str, Any]) -> List[str]:
        """Refresh every challenge touched by a change notification."""
        try:
            challenge_ids = await self.challenges_for_event(event)
        except StoreUnavailableError as e:
            logger.error(
                "Could not resolve challenges for change notification",
                {"table": event.get("table"), "error": str(e)},
            )
            return []
        if not challenge_ids:
            logger.info(
                "Ignoring change notification",
                {"table": event.get("table"), "type": event.get("type")},
            )
            return []
        await self.refresh_many(challenge_ids)
        return challenge_ids


leaderboard_refresher = LeaderboardRefresher()
