"""Shared fixtures for leaderboard engine tests."""

import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

import pytest
from fakeredis import FakeAsyncRedis, FakeServer

from services.leaderboard.connection import RedisConnectionManager
from services.leaderboard.service import RedisLeaderboardService


@pytest.fixture
def redis_server():
    """Isolated in-memory Redis server per test."""
    return FakeServer()


@pytest.fixture
def fake_redis(redis_server):
    return FakeAsyncRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def connection(fake_redis):
    return RedisConnectionManager(client=fake_redis, probe_timeout=1.0)


@pytest.fixture
def leaderboard(connection):
    """Engine wired to the fake server. Tests call ``await leaderboard.start()``."""
    return RedisLeaderboardService(connection, atomic_writes=False)
