"""Owns the single Redis connection the ranking engine talks through."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from config import settings
from services.leaderboard.errors import (
    LeaderboardError,
    LeaderboardOperationError,
    StoreConnectionError,
)
from utils.logger import get_logger

logger = get_logger("leaderboard")

# Faults that mean "the store did not answer correctly". redis.TimeoutError
# is a RedisError; asyncio timeouts come from wait_for around a command.
STORE_FAULTS = (RedisError, OSError, asyncio.TimeoutError)


def _exception_text(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or repr(exc)


class RedisConnectionManager:
    """Builds, probes and hands out the shared ``redis.asyncio.Redis`` client.

    Parameters default to :data:`config.settings`. Passing ``client`` skips
    construction (used to point the engine at an already configured client).
    """

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        password: Optional[str] = None,
        db: Optional[int] = None,
        socket_timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        probe_timeout: Optional[float] = None,
        client: Optional[Redis] = None,
    ):
        self.url = url if url is not None else settings.REDIS_URL
        self.host = host or settings.REDIS_HOST
        self.port = port if port is not None else settings.REDIS_PORT
        self.password = password if password is not None else settings.REDIS_PASSWORD
        self.db = db if db is not None else settings.REDIS_DATABASE
        self.socket_timeout = (
            socket_timeout if socket_timeout is not None else settings.REDIS_SOCKET_TIMEOUT_SECONDS
        )
        self.connect_timeout = (
            connect_timeout if connect_timeout is not None else settings.REDIS_CONNECT_TIMEOUT_SECONDS
        )
        self.probe_timeout = (
            probe_timeout if probe_timeout is not None else settings.REDIS_PROBE_TIMEOUT_SECONDS
        )
        self._client: Optional[Redis] = client
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected and self._client is not None

    def describe(self) -> dict:
        """Connection target for logs. Never includes the password."""
        if self.url:
            target = self.url.split("@")[-1]
            return {"target": target}
        return {"host": self.host, "port": self.port, "db": self.db}

    def _build_client(self) -> Redis:
        common = {
            "decode_responses": True,
            "socket_timeout": self.socket_timeout,
            "socket_connect_timeout": self.connect_timeout,
        }
        if self.url:
            return Redis.from_url(self.url, **common)
        return Redis(
            host=self.host,
            port=self.port,
            password=self.password,
            db=self.db,
            **common,
        )

    async def ping(self) -> bool:
        """Bounded liveness probe against the current client."""
        if self._client is None:
            return False
        try:
            return bool(await asyncio.wait_for(self._client.ping(), timeout=self.probe_timeout))
        except STORE_FAULTS as exc:
            logger.warning("Redis liveness probe failed", error=_exception_text(exc), **self.describe())
            return False

    async def connect(self) -> None:
        """Create the client if needed and verify the store answers PING."""
        if self._client is None:
            self._client = self._build_client()

        try:
            await asyncio.wait_for(self._client.ping(), timeout=self.probe_timeout)
        except STORE_FAULTS as exc:
            self._connected = False
            logger.error(
                "Failed to connect to Redis",
                error=_exception_text(exc),
                error_type=type(exc).__name__,
                **self.describe(),
            )
            raise StoreConnectionError(
                f"Redis liveness probe failed: {_exception_text(exc)}"
            ) from exc

        self._connected = True
        logger.info("Connected to Redis", **self.describe())

    @asynccontextmanager
    async def session(
        self,
        operation: str,
        *,
        timeframe: Optional[str] = None,
        wallet_address: Optional[str] = None,
    ) -> AsyncIterator[Redis]:
        """Scoped use of the client for one engine operation.

        Store faults raised inside the block surface as
        :class:`LeaderboardOperationError` tagged with ``operation``.
        """
        if self._client is None or not self._connected:
            raise StoreConnectionError(
                f"{operation} called before the Redis connection was established"
            )

        try:
            yield self._client
        except LeaderboardError:
            raise
        except STORE_FAULTS as exc:
            logger.error(
                "Redis command failed",
                operation=operation,
                timeframe=timeframe,
                wallet_address=wallet_address,
                error=_exception_text(exc),
                error_type=type(exc).__name__,
            )
            raise LeaderboardOperationError(
                operation,
                _exception_text(exc),
                timeframe=timeframe,
                wallet_address=wallet_address,
            ) from exc

    async def close(self) -> None:
        """Release the client and its pooled sockets. Safe to call twice."""
        client = self._client
        self._client = None
        self._connected = False
        if client is not None:
            await client.aclose()
