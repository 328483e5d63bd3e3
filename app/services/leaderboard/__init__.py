"""
Volume leaderboard engine.

volume -> trend -> aggregator -> cache, driven by refresh.
"""

from app.services.leaderboard.aggregator import (
    LeaderboardAggregator,
    leaderboard_aggregator,
    rank_standings,
)
from app.services.leaderboard.cache import LeaderboardCache, leaderboard_cache
from app.services.leaderboard.errors import LeaderboardError, StoreUnavailableError
from app.services.leaderboard.refresh import LeaderboardRefresher, leaderboard_refresher
from app.services.leaderboard.selection import LatestRequestGuard
from app.services.leaderboard.trend import VolumeTrend, extract_trend
from app.services.leaderboard.volume import compute_volume, exercise_volume

__all__ = [
    "LatestRequestGuard",
    "LeaderboardAggregator",
    "LeaderboardCache",
    "LeaderboardError",
    "LeaderboardRefresher",
    "StoreUnavailableError",
    "VolumeTrend",
    "compute_volume",
    "exercise_volume",
    "extract_trend",
    "leaderboard_aggregator",
    "leaderboard_cache",
    "leaderboard_refresher",
    "rank_standings",
]
