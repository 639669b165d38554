"""API routes for the Redis-backed PnL leaderboards."""

from __future__ import annotations

from typing import Any, NoReturn, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from config import settings
from models.leaderboard import LeaderboardEntry, PnlUpdate, Timeframe
from services.leaderboard import (
    LeaderboardError,
    LeaderboardOperationError,
    leaderboard_service,
)
from utils.logger import get_logger
from utils.utcnow import utcnow

logger = get_logger("api")

router = APIRouter(prefix="/leaderboard", tags=["Leaderboard"])


class PnlUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    wallet_address: str = Field(alias="walletAddress", min_length=1)
    pnl_usd: float = Field(alias="pnlUsd", allow_inf_nan=False)
    timeframes: Optional[list[Timeframe]] = None


class BatchPnlUpdateRequest(BaseModel):
    updates: list[PnlUpdate]
    timeframes: Optional[list[Timeframe]] = None


def _envelope(data: Any, **meta: Any) -> dict:
    body = {"success": True, "data": data, "timestamp": utcnow().isoformat() + "Z"}
    if meta:
        body["meta"] = meta
    return body


def _entries(rows: list[LeaderboardEntry]) -> list[dict]:
    return [row.model_dump(mode="json") for row in rows]


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, ValueError):
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if isinstance(exc, LeaderboardOperationError):
        raise HTTPException(
            status_code=503,
            detail={"error": "Leaderboard store unavailable", "operation": exc.operation},
        ) from exc
    if isinstance(exc, LeaderboardError):
        raise HTTPException(
            status_code=503, detail={"error": "Leaderboard store unavailable"}
        ) from exc
    raise exc


def _max_limit() -> int:
    return max(1, int(settings.LEADERBOARD_MAX_LIMIT))


@router.get("")
async def get_leaderboard(
    timeframe: Timeframe = Query(default=Timeframe.ONE_DAY),
    limit: Optional[int] = Query(default=None, ge=1),
):
    limit = limit or settings.LEADERBOARD_DEFAULT_LIMIT
    if limit > _max_limit():
        raise HTTPException(status_code=422, detail=f"limit must be <= {_max_limit()}")
    try:
        rows = await leaderboard_service.get_top_wallets(timeframe, limit)
    except (ValueError, LeaderboardError) as exc:
        _raise_http(exc)
    return _envelope(_entries(rows), timeframe=timeframe.value, count=len(rows), limit=limit)


@router.get("/range")
async def get_leaderboard_range(
    start_rank: int = Query(..., ge=1),
    end_rank: int = Query(..., ge=1),
    timeframe: Timeframe = Query(default=Timeframe.ONE_DAY),
):
    if end_rank - start_rank + 1 > _max_limit():
        raise HTTPException(status_code=422, detail=f"range must span <= {_max_limit()} ranks")
    try:
        rows = await leaderboard_service.get_wallets_by_rank_range(start_rank, end_rank, timeframe)
    except (ValueError, LeaderboardError) as exc:
        _raise_http(exc)
    return _envelope(
        _entries(rows),
        timeframe=timeframe.value,
        start_rank=start_rank,
        end_rank=end_rank,
        count=len(rows),
    )


@router.get("/size")
async def get_leaderboard_size(timeframe: Timeframe = Query(default=Timeframe.ONE_DAY)):
    try:
        size = await leaderboard_service.get_leaderboard_size(timeframe)
    except (ValueError, LeaderboardError) as exc:
        _raise_http(exc)
    return _envelope({"timeframe": timeframe.value, "total_wallets": size})


@router.get("/stats")
async def get_leaderboard_stats():
    try:
        stats = await leaderboard_service.get_leaderboard_stats()
    except LeaderboardError as exc:
        _raise_http(exc)
    return _envelope({tf.value: row.model_dump() for tf, row in stats.items()})


@router.get("/wallets/{wallet_address}")
async def get_wallet_rank(
    wallet_address: str,
    timeframe: Timeframe = Query(default=Timeframe.ONE_DAY),
):
    try:
        entry = await leaderboard_service.get_wallet_rank(wallet_address, timeframe)
    except (ValueError, LeaderboardError) as exc:
        _raise_http(exc)
    if entry is None:
        raise HTTPException(status_code=404, detail="Wallet not ranked in this timeframe")
    return _envelope(entry.model_dump(mode="json"))


@router.post("/pnl")
async def update_wallet_pnl(request: PnlUpdateRequest):
    try:
        await leaderboard_service.update_wallet_pnl(
            request.wallet_address, request.pnl_usd, request.timeframes
        )
    except (ValueError, LeaderboardError) as exc:
        _raise_http(exc)
    timeframes = list(Timeframe) if request.timeframes is None else request.timeframes
    return _envelope(
        {
            "wallet_address": request.wallet_address,
            "pnl_usd": request.pnl_usd,
            "timeframes": [tf.value for tf in timeframes],
        }
    )


@router.post("/pnl/batch")
async def batch_update_pnl(request: BatchPnlUpdateRequest):
    try:
        written = await leaderboard_service.batch_update_pnl(request.updates, request.timeframes)
    except (ValueError, LeaderboardError) as exc:
        _raise_http(exc)
    timeframes = list(Timeframe) if request.timeframes is None else request.timeframes
    return _envelope(
        {
            "submitted": len(request.updates),
            "wallets_written": written,
            "timeframes": [tf.value for tf in timeframes],
        }
    )


@router.delete("/wallets/{wallet_address}")
async def remove_wallet(wallet_address: str):
    try:
        await leaderboard_service.remove_wallet(wallet_address)
    except LeaderboardError as exc:
        _raise_http(exc)
    return _envelope({"wallet_address": wallet_address, "removed": True})


@router.delete("")
async def clear_all_leaderboards():
    if not settings.LEADERBOARD_ALLOW_CLEAR:
        raise HTTPException(status_code=403, detail="Clearing leaderboards is disabled")
    try:
        await leaderboard_service.clear_all_leaderboards()
    except LeaderboardError as exc:
        _raise_http(exc)
    logger.warning("Leaderboards cleared through API")
    return _envelope({"cleared": [tf.value for tf in Timeframe]})
