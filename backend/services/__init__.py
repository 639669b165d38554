from importlib import import_module

__all__ = [
    "leaderboard_service",
    "RedisLeaderboardService",
]

_LAZY_EXPORTS = {
    "leaderboard_service": ("services.leaderboard.service", "leaderboard_service"),
    "RedisLeaderboardService": ("services.leaderboard.service", "RedisLeaderboardService"),
}


def __getattr__(name):
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module 'services' has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
