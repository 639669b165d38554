from .routes_leaderboard import router as leaderboard_router

__all__ = ["leaderboard_router"]
