from __future__ import annotations

from typing import Iterable, Mapping, Optional

from models.leaderboard import LeaderboardEntry, Timeframe, TimeframeStats
from services.leaderboard.connection import RedisConnectionManager
from services.leaderboard.timeframes import LEADERBOARD_KEYS, TimeframeLike, resolve_timeframe


def _to_entries(
    rows: Iterable[tuple[str, float]],
    first_rank: int,
    timeframe: Timeframe,
) -> list[LeaderboardEntry]:
    # ZREVRANGE ... WITHSCORES yields (member, score) in descending order
    return [
        LeaderboardEntry(
            wallet_address=member,
            pnl_usd=float(score),
            rank=first_rank + offset,
            period=timeframe,
        )
        for offset, (member, score) in enumerate(rows)
    ]


def _first_score(rows: list) -> Optional[float]:
    if not rows:
        return None
    return float(rows[0][1])


class LeaderboardQueryService:
    """Read side of the ranking engine. Every call is a live round trip."""

    def __init__(
        self,
        connection: RedisConnectionManager,
        keys: Optional[Mapping[Timeframe, str]] = None,
    ):
        self._connection = connection
        self._keys = keys if keys is not None else LEADERBOARD_KEYS

    async def get_top_wallets(
        self,
        timeframe: TimeframeLike = Timeframe.ONE_DAY,
        limit: int = 100,
    ) -> list[LeaderboardEntry]:
        """Highest PnL first, ranked 1..n."""
        tf = resolve_timeframe(timeframe)
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        async with self._connection.session("get_top_wallets", timeframe=tf.value) as redis:
            rows = await redis.zrevrange(self._keys[tf], 0, limit - 1, withscores=True)
        return _to_entries(rows, 1, tf)

    async def get_wallet_rank(
        self,
        wallet_address: str,
        timeframe: TimeframeLike = Timeframe.ONE_DAY,
    ) -> Optional[LeaderboardEntry]:
        """The wallet's score and 1-based rank, or ``None`` when unranked."""
        tf = resolve_timeframe(timeframe)
        key = self._keys[tf]

        async with self._connection.session(
            "get_wallet_rank", timeframe=tf.value, wallet_address=wallet_address
        ) as redis:
            # Score and rank read in one MULTI so they describe the same state.
            async with redis.pipeline(transaction=True) as pipe:
                pipe.zscore(key, wallet_address)
                pipe.zrevrank(key, wallet_address)
                score, rank = await pipe.execute()

        if score is None or rank is None:
            return None
        return LeaderboardEntry(
            wallet_address=wallet_address,
            pnl_usd=float(score),
            rank=int(rank) + 1,  # ZREVRANK is 0-based from the top
            period=tf,
        )

    async def get_wallets_by_rank_range(
        self,
        start_rank: int,
        end_rank: int,
        timeframe: TimeframeLike = Timeframe.ONE_DAY,
    ) -> list[LeaderboardEntry]:
        """Entries ranked ``start_rank..end_rank`` inclusive (1-based)."""
        tf = resolve_timeframe(timeframe)
        if start_rank < 1:
            raise ValueError(f"start_rank must be >= 1, got {start_rank}")
        if end_rank < start_rank:
            return []

        async with self._connection.session(
            "get_wallets_by_rank_range", timeframe=tf.value
        ) as redis:
            rows = await redis.zrevrange(
                self._keys[tf], start_rank - 1, end_rank - 1, withscores=True
            )
        return _to_entries(rows, start_rank, tf)

    async def get_leaderboard_size(self, timeframe: TimeframeLike = Timeframe.ONE_DAY) -> int:
        tf = resolve_timeframe(timeframe)
        async with self._connection.session("get_leaderboard_size", timeframe=tf.value) as redis:
            return int(await redis.zcard(self._keys[tf]))

    async def get_leaderboard_stats(self) -> dict[Timeframe, TimeframeStats]:
        """Wallet count plus top, bottom and their midpoint per timeframe."""
        stats: dict[Timeframe, TimeframeStats] = {}
        for tf, key in self._keys.items():
            async with self._connection.session(
                "get_leaderboard_stats", timeframe=tf.value
            ) as redis:
                async with redis.pipeline(transaction=True) as pipe:
                    pipe.zcard(key)
                    pipe.zrevrange(key, 0, 0, withscores=True)
                    pipe.zrevrange(key, -1, -1, withscores=True)
                    total, top_rows, bottom_rows = await pipe.execute()

            stats[tf] = TimeframeStats.from_extremes(
                total_wallets=int(total or 0),
                top_pnl=_first_score(top_rows),
                bottom_pnl=_first_score(bottom_rows),
            )
        return stats
