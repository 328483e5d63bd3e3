"""
Leaderboard procedure endpoints

HTTP versions of the ``update_leaderboard_cache`` and
``get_user_volume_trends`` procedures. Both run the same aggregation as
the challenge leaderboard view, so their numbers always agree with it.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from app.core.auth import get_current_user
from app.models.leaderboard import LeaderboardEntry, VolumeTrendRow
from app.services.leaderboard import (
    StoreUnavailableError,
    leaderboard_aggregator,
    leaderboard_refresher,
)
from app.services.logger import logger

router = APIRouter(redirect_slashes=False)


class UpdateLeaderboardCacheRequest(BaseModel):
    challenge_id: str


@router.post("/update_leaderboard_cache", response_model=List[LeaderboardEntry])
async def update_leaderboard_cache(
    request: UpdateLeaderboardCacheRequest,
    current_user: dict = Depends(get_current_user),
):
    """Recompute a challenge's standings and rewrite its cache rows"""
    try:
        return await leaderboard_refresher.refresh(request.challenge_id)
    except StoreUnavailableError as e:
        logger.error(
            f"update_leaderboard_cache failed for challenge {request.challenge_id}",
            {"error": str(e), "challenge_id": request.challenge_id},
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to update leaderboard",
        )


@router.get("/get_user_volume_trends", response_model=List[VolumeTrendRow])
async def get_user_volume_trends(
    challenge_id: str = Query(...),
    user_id: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
):
    """A user's volume trend next to the challenge average (defaults to the caller)"""
    subject_id = user_id or current_user["id"]
    try:
        return await leaderboard_aggregator.volume_trends(challenge_id, subject_id)
    except StoreUnavailableError as e:
        logger.error(
            f"get_user_volume_trends failed for challenge {challenge_id}",
            {"error": str(e), "challenge_id": challenge_id, "user_id": subject_id},
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to load volume trends",
        )
