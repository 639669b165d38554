"""
Redis Leaderboard Service

Ranks wallets by realized PnL over the 1h / 1d / 7d / 30d windows. Each
window is one Redis sorted set scored by PnL in USD; rank is always read
from the live sorted-set order, never stored.

Producers push scores through ``update_wallet_pnl`` / ``batch_update_pnl``;
consumers read ``get_top_wallets``, ``get_wallet_rank`` and friends.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from models.leaderboard import LeaderboardEntry, Timeframe, TimeframeStats
from services.leaderboard.connection import RedisConnectionManager
from services.leaderboard.lifecycle import LeaderboardLifecycle
from services.leaderboard.queries import LeaderboardQueryService
from services.leaderboard.timeframes import LEADERBOARD_KEYS, TimeframeLike
from services.leaderboard.updates import LeaderboardUpdater


class RedisLeaderboardService:
    """Facade wiring the connection, lifecycle, update and query pieces."""

    def __init__(
        self,
        connection: Optional[RedisConnectionManager] = None,
        *,
        atomic_writes: Optional[bool] = None,
    ):
        self.connection = connection or RedisConnectionManager()
        self.lifecycle = LeaderboardLifecycle(self.connection, LEADERBOARD_KEYS)
        self.updates = LeaderboardUpdater(self.connection, atomic=atomic_writes, keys=LEADERBOARD_KEYS)
        self.queries = LeaderboardQueryService(self.connection, LEADERBOARD_KEYS)

    @property
    def is_running(self) -> bool:
        return self.connection.is_connected

    # ==================== Lifecycle ====================

    async def start(self) -> None:
        await self.lifecycle.start()

    async def shutdown(self) -> None:
        await self.lifecycle.shutdown()

    async def clear_all_leaderboards(self) -> None:
        await self.lifecycle.clear_all_leaderboards()

    # ==================== Writes ====================

    async def update_wallet_pnl(
        self,
        wallet_address: str,
        pnl_usd: float,
        timeframes: Optional[Iterable[TimeframeLike]] = None,
    ) -> None:
        await self.updates.update_wallet_pnl(wallet_address, pnl_usd, timeframes)

    async def batch_update_pnl(
        self,
        updates: Iterable[Any],
        timeframes: Optional[Iterable[TimeframeLike]] = None,
    ) -> int:
        return await self.updates.batch_update_pnl(updates, timeframes)

    async def remove_wallet(self, wallet_address: str) -> None:
        await self.updates.remove_wallet(wallet_address)

    # ==================== Reads ====================

    async def get_top_wallets(
        self, timeframe: TimeframeLike = Timeframe.ONE_DAY, limit: int = 100
    ) -> list[LeaderboardEntry]:
        return await self.queries.get_top_wallets(timeframe, limit)

    async def get_wallet_rank(
        self, wallet_address: str, timeframe: TimeframeLike = Timeframe.ONE_DAY
    ) -> Optional[LeaderboardEntry]:
        return await self.queries.get_wallet_rank(wallet_address, timeframe)

    async def get_wallets_by_rank_range(
        self,
        start_rank: int,
        end_rank: int,
        timeframe: TimeframeLike = Timeframe.ONE_DAY,
    ) -> list[LeaderboardEntry]:
        return await self.queries.get_wallets_by_rank_range(start_rank, end_rank, timeframe)

    async def get_leaderboard_size(self, timeframe: TimeframeLike = Timeframe.ONE_DAY) -> int:
        return await self.queries.get_leaderboard_size(timeframe)

    async def get_leaderboard_stats(self) -> dict[Timeframe, TimeframeStats]:
        return await self.queries.get_leaderboard_stats()


leaderboard_service = RedisLeaderboardService()
