from services.leaderboard.errors import (
    LeaderboardError,
    LeaderboardOperationError,
    StoreConnectionError,
)
from services.leaderboard.service import RedisLeaderboardService, leaderboard_service
from services.leaderboard.timeframes import (
    ALL_TIMEFRAMES,
    LEADERBOARD_KEYS,
    resolve_timeframe,
    resolve_timeframes,
)

__all__ = [
    "ALL_TIMEFRAMES",
    "LEADERBOARD_KEYS",
    "LeaderboardError",
    "LeaderboardOperationError",
    "RedisLeaderboardService",
    "StoreConnectionError",
    "leaderboard_service",
    "resolve_timeframe",
    "resolve_timeframes",
]
