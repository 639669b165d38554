from .leaderboard import (
    LeaderboardEntry,
    PnlUpdate,
    Timeframe,
    TimeframeStats,
)

__all__ = [
    "LeaderboardEntry",
    "PnlUpdate",
    "Timeframe",
    "TimeframeStats",
]
