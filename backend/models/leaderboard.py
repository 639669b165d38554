"""Leaderboard value types shared by the ranking engine and the API layer."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Timeframe(str, Enum):
    """Rolling windows a wallet's PnL is ranked over."""

    ONE_HOUR = "1h"
    ONE_DAY = "1d"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"


class LeaderboardEntry(BaseModel):
    """One ranked row. Built fresh from the store on every query."""

    model_config = ConfigDict(frozen=True)

    wallet_address: str
    pnl_usd: float
    rank: int = Field(ge=1)  # 1-based, derived from the store's order
    period: Timeframe


class PnlUpdate(BaseModel):
    """A single (wallet, score) pair submitted by a producer."""

    model_config = ConfigDict(populate_by_name=True)

    wallet_address: str = Field(alias="walletAddress")
    pnl_usd: float = Field(alias="pnlUsd", allow_inf_nan=False)


class TimeframeStats(BaseModel):
    total_wallets: int = 0
    top_pnl: Optional[float] = None
    bottom_pnl: Optional[float] = None
    # Midpoint of top and bottom, not a mean over every entry.
    average_pnl: Optional[float] = None

    @classmethod
    def from_extremes(
        cls,
        total_wallets: int,
        top_pnl: Optional[float],
        bottom_pnl: Optional[float],
    ) -> "TimeframeStats":
        if total_wallets <= 0 or top_pnl is None or bottom_pnl is None:
            return cls(total_wallets=max(total_wallets, 0))
        return cls(
            total_wallets=total_wallets,
            top_pnl=top_pnl,
            bottom_pnl=bottom_pnl,
            average_pnl=(top_pnl + bottom_pnl) / 2,
        )
