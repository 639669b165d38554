from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional

from config import settings
from models.leaderboard import PnlUpdate, Timeframe
from services.leaderboard.connection import RedisConnectionManager
from services.leaderboard.timeframes import LEADERBOARD_KEYS, TimeframeLike, resolve_timeframes
from utils.logger import get_logger

logger = get_logger("leaderboard")


def _coerce_update(item: Any) -> PnlUpdate:
    if isinstance(item, PnlUpdate):
        return item
    if isinstance(item, Mapping):
        return PnlUpdate.model_validate(item)
    if isinstance(item, (tuple, list)) and len(item) == 2:
        wallet_address, pnl_usd = item
        return PnlUpdate(wallet_address=str(wallet_address), pnl_usd=float(pnl_usd))
    raise ValueError(f"Unsupported PnL update item: {item!r}")


def collapse_updates(updates: Iterable[Any]) -> dict[str, float]:
    """Map wallet -> score, later items overriding earlier ones."""
    scores: dict[str, float] = {}
    for item in updates:
        update = _coerce_update(item)
        scores[update.wallet_address] = float(update.pnl_usd)
    return scores


class LeaderboardUpdater:
    """Writes wallet scores into the per-timeframe sorted sets.

    Each call is one pipelined round trip. Unless ``atomic`` is set the
    pipeline is not a transaction: other clients' commands can land between
    the per-timeframe writes, and a failure can leave some timeframes
    written and others not.
    """

    def __init__(
        self,
        connection: RedisConnectionManager,
        *,
        atomic: Optional[bool] = None,
        keys: Optional[Mapping[Timeframe, str]] = None,
    ):
        self._connection = connection
        self._atomic = settings.LEADERBOARD_ATOMIC_WRITES if atomic is None else atomic
        self._keys = keys if keys is not None else LEADERBOARD_KEYS

    @property
    def atomic(self) -> bool:
        return self._atomic

    async def update_wallet_pnl(
        self,
        wallet_address: str,
        pnl_usd: float,
        timeframes: Optional[Iterable[TimeframeLike]] = None,
    ) -> None:
        targets = resolve_timeframes(timeframes)
        if not targets:
            return
        score = float(pnl_usd)
        if not math.isfinite(score):
            raise ValueError(f"PnL must be a finite number, got {pnl_usd!r}")

        async with self._connection.session(
            "update_wallet_pnl", wallet_address=wallet_address
        ) as redis:
            async with redis.pipeline(transaction=self._atomic) as pipe:
                for timeframe in targets:
                    pipe.zadd(self._keys[timeframe], {wallet_address: score})
                await pipe.execute()

        logger.debug(
            "Updated wallet PnL",
            wallet_address=wallet_address,
            pnl_usd=round(score, 2),
            timeframes=[tf.value for tf in targets],
        )

    async def batch_update_pnl(
        self,
        updates: Iterable[Any],
        timeframes: Optional[Iterable[TimeframeLike]] = None,
    ) -> int:
        """Write many scores at once; returns the number of distinct wallets."""
        targets = resolve_timeframes(timeframes)
        scores = collapse_updates(updates)
        if not scores or not targets:
            return 0

        async with self._connection.session("batch_update_pnl") as redis:
            async with redis.pipeline(transaction=self._atomic) as pipe:
                for timeframe in targets:
                    pipe.zadd(self._keys[timeframe], scores)
                await pipe.execute()

        logger.info(
            "Batch updated wallet PnL",
            wallets=len(scores),
            timeframes=[tf.value for tf in targets],
        )
        return len(scores)

    async def remove_wallet(self, wallet_address: str) -> None:
        """Drop the wallet from every timeframe. Absent entries are ignored."""
        async with self._connection.session(
            "remove_wallet", wallet_address=wallet_address
        ) as redis:
            async with redis.pipeline(transaction=self._atomic) as pipe:
                for key in self._keys.values():
                    pipe.zrem(key, wallet_address)
                await pipe.execute()

        logger.info("Removed wallet from all leaderboards", wallet_address=wallet_address)
