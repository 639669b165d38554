"""Error taxonomy for the leaderboard ranking engine.

A wallet missing from a timeframe is never an error; queries report it as
``None`` or an empty list.
"""

from __future__ import annotations

from typing import Optional


class LeaderboardError(Exception):
    """Base class for ranking engine failures."""


class StoreConnectionError(LeaderboardError, ConnectionError):
    """The ordered-set store is unreachable or failed its liveness probe."""


class LeaderboardOperationError(LeaderboardError):
    """A store command failed while serving an update or a query.

    For writes the caller must assume the affected timeframes are in an
    unknown state: pipelined commands may have been partially applied.
    """

    def __init__(
        self,
        operation: str,
        detail: str,
        *,
        timeframe: Optional[str] = None,
        wallet_address: Optional[str] = None,
    ):
        self.operation = operation
        self.detail = detail
        self.timeframe = timeframe
        self.wallet_address = wallet_address
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [f"{self.operation} failed"]
        if self.timeframe:
            parts.append(f"timeframe={self.timeframe}")
        if self.wallet_address:
            parts.append(f"wallet={self.wallet_address}")
        return f"{' '.join(parts)}: {self.detail}"
