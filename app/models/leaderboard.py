from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class LeaderboardEntry(BaseModel):
    """One participant's standing; also the shape of a `leaderboard_cache` row."""

    user_id: str
    username: str = Field(..., description="Display name from the user's profile")
    avatar_url: Optional[str] = None
    current_volume: float = 0.0
    percentage_change: float = 0.0
    rank: int = Field(..., ge=1, description="1-based position in the standings")
    is_you: bool = False
    updated_at: Optional[datetime] = None


class LeaderboardResponse(BaseModel):
    challenge_id: str
    entries: List[LeaderboardEntry] = Field(default_factory=list)
    refreshed_at: Optional[datetime] = None
    stale: bool = Field(
        default=False,
        description="True when the refresh failed and a cached projection was served",
    )


class VolumeTrendRow(BaseModel):
    user_id: Optional[str] = None
    username: str
    current_volume: float = 0.0
    previous_volume: float = 0.0
    percentage_change: float = 0.0
    is_you: bool = False
    is_average: bool = False
