from __future__ import annotations

from typing import Mapping, Optional

from models.leaderboard import Timeframe
from services.leaderboard.connection import RedisConnectionManager, _exception_text
from services.leaderboard.errors import LeaderboardOperationError
from services.leaderboard.timeframes import LEADERBOARD_KEYS
from utils.logger import get_logger

logger = get_logger("leaderboard")

_PLACEHOLDER_MEMBER = "__leaderboard_init__"


class LeaderboardLifecycle:
    """Startup, shutdown and whole-keyspace maintenance of the leaderboards."""

    def __init__(
        self,
        connection: RedisConnectionManager,
        keys: Optional[Mapping[Timeframe, str]] = None,
    ):
        self._connection = connection
        self._keys = keys if keys is not None else LEADERBOARD_KEYS

    async def start(self) -> None:
        logger.info("Starting Redis leaderboard service...")
        await self._connection.connect()
        initialized = await self.initialize_leaderboards()
        logger.info(
            "Redis leaderboard service started",
            timeframes=[tf.value for tf in self._keys],
            initialized=[tf.value for tf in initialized],
        )

    async def initialize_leaderboards(self) -> list[Timeframe]:
        """Make sure every timeframe key is either absent or a sorted set.

        Redis drops a sorted set once its last member goes, so an empty
        leaderboard is an absent key. Absent keys get an add/remove of a
        placeholder inside MULTI/EXEC, which proves the key is writable and
        leaves it empty. Keys already holding a sorted set are untouched.
        """
        initialized: list[Timeframe] = []
        for timeframe, key in self._keys.items():
            async with self._connection.session(
                "initialize_leaderboards", timeframe=timeframe.value
            ) as redis:
                key_type = await redis.type(key)
                if key_type == "zset":
                    continue
                if key_type != "none":
                    raise LeaderboardOperationError(
                        "initialize_leaderboards",
                        f"key {key!r} holds a {key_type}, expected a sorted set",
                        timeframe=timeframe.value,
                    )
                async with redis.pipeline(transaction=True) as pipe:
                    pipe.zadd(key, {_PLACEHOLDER_MEMBER: 0})
                    pipe.zrem(key, _PLACEHOLDER_MEMBER)
                    await pipe.execute()
            initialized.append(timeframe)
            logger.info("Initialized leaderboard", timeframe=timeframe.value, key=key)
        return initialized

    async def clear_all_leaderboards(self) -> None:
        """Delete every timeframe's sorted set outright."""
        async with self._connection.session("clear_all_leaderboards") as redis:
            async with redis.pipeline(transaction=False) as pipe:
                for key in self._keys.values():
                    pipe.delete(key)
                await pipe.execute()
        logger.warning("All leaderboards cleared", keys=list(self._keys.values()))

    async def shutdown(self) -> None:
        logger.info("Shutting down Redis leaderboard service...")
        try:
            await self._connection.close()
        except Exception as exc:
            # Teardown must finish even if the socket is already gone.
            logger.error("Error shutting down Redis leaderboard service", error=_exception_text(exc))
            return
        logger.info("Redis leaderboard service shut down")
