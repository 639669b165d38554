import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from models.leaderboard import Timeframe
from services.leaderboard.errors import LeaderboardOperationError, StoreConnectionError
from services.leaderboard.lifecycle import LeaderboardLifecycle
from services.leaderboard.timeframes import LEADERBOARD_KEYS


@pytest.mark.asyncio
async def test_start_initializes_every_timeframe_empty(leaderboard, fake_redis):
    await leaderboard.start()

    assert leaderboard.is_running is True
    for timeframe, key in LEADERBOARD_KEYS.items():
        assert await fake_redis.zcard(key) == 0
        assert await leaderboard.get_leaderboard_size(timeframe) == 0


@pytest.mark.asyncio
async def test_initialization_is_idempotent(leaderboard, fake_redis):
    await leaderboard.start()
    await leaderboard.update_wallet_pnl("WalletA", 42.0, ["1d"])
    before = {key: await fake_redis.zrange(key, 0, -1, withscores=True) for key in LEADERBOARD_KEYS.values()}

    await leaderboard.start()
    initialized = await leaderboard.lifecycle.initialize_leaderboards()

    after = {key: await fake_redis.zrange(key, 0, -1, withscores=True) for key in LEADERBOARD_KEYS.values()}
    assert after == before
    assert Timeframe.ONE_DAY not in initialized
    assert await fake_redis.zscore(LEADERBOARD_KEYS[Timeframe.ONE_DAY], "__leaderboard_init__") is None


@pytest.mark.asyncio
async def test_start_fails_when_key_holds_foreign_data(leaderboard, fake_redis):
    await fake_redis.set(LEADERBOARD_KEYS[Timeframe.SEVEN_DAYS], "not-a-zset")

    with pytest.raises(LeaderboardOperationError) as exc_info:
        await leaderboard.start()

    assert exc_info.value.operation == "initialize_leaderboards"
    assert exc_info.value.timeframe == "7d"


@pytest.mark.asyncio
async def test_start_propagates_connection_failure(leaderboard, redis_server):
    redis_server.connected = False

    with pytest.raises(StoreConnectionError):
        await leaderboard.start()

    assert leaderboard.is_running is False


@pytest.mark.asyncio
async def test_clear_all_leaderboards_deletes_keys(leaderboard, fake_redis):
    await leaderboard.start()
    await leaderboard.batch_update_pnl([("W1", 1.0), ("W2", 2.0)])

    await leaderboard.clear_all_leaderboards()

    for key in LEADERBOARD_KEYS.values():
        assert await fake_redis.exists(key) == 0
    assert await leaderboard.get_top_wallets("1d", 10) == []
    stats = await leaderboard.get_leaderboard_stats()
    assert all(row.total_wallets == 0 for row in stats.values())


@pytest.mark.asyncio
async def test_shutdown_swallows_teardown_errors(connection, monkeypatch):
    lifecycle = LeaderboardLifecycle(connection)
    await lifecycle.start()
    monkeypatch.setattr(connection, "close", AsyncMock(side_effect=RuntimeError("socket gone")))

    await lifecycle.shutdown()

    connection.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_shutdown_releases_connection(leaderboard):
    await leaderboard.start()

    await leaderboard.shutdown()

    assert leaderboard.is_running is False
    with pytest.raises(StoreConnectionError):
        await leaderboard.get_leaderboard_size("1d")
