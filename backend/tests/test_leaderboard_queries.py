import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from models.leaderboard import Timeframe, TimeframeStats

SCORES = {
    "W01": 1200.0,
    "W02": 950.5,
    "W03": 950.25,
    "W04": 400.0,
    "W05": 0.0,
    "W06": -15.75,
    "W07": -300.0,
}


async def _seed(leaderboard, timeframes=("1d",)):
    await leaderboard.start()
    await leaderboard.batch_update_pnl(list(SCORES.items()), list(timeframes))


@pytest.mark.asyncio
async def test_two_wallet_scenario(leaderboard):
    await leaderboard.start()
    await leaderboard.update_wallet_pnl("WalletA", 100.5, ["1d"])
    await leaderboard.update_wallet_pnl("WalletB", 250.0, ["1d"])

    top = await leaderboard.get_top_wallets("1d", 2)

    assert [(e.wallet_address, e.pnl_usd, e.rank, e.period) for e in top] == [
        ("WalletB", 250.0, 1, Timeframe.ONE_DAY),
        ("WalletA", 100.5, 2, Timeframe.ONE_DAY),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [1, 3, 7, 50])
async def test_top_wallets_are_non_increasing_with_sequential_ranks(leaderboard, limit):
    await _seed(leaderboard)

    top = await leaderboard.get_top_wallets("1d", limit)

    assert len(top) == min(limit, len(SCORES))
    assert [e.rank for e in top] == list(range(1, len(top) + 1))
    scores = [e.pnl_usd for e in top]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.asyncio
async def test_top_wallets_rejects_non_positive_limit(leaderboard):
    await leaderboard.start()

    with pytest.raises(ValueError):
        await leaderboard.get_top_wallets("1d", 0)


@pytest.mark.asyncio
async def test_top_wallets_on_empty_timeframe(leaderboard):
    await leaderboard.start()

    assert await leaderboard.get_top_wallets("1h", 10) == []


@pytest.mark.asyncio
async def test_wallet_rank_matches_top_ordering(leaderboard):
    await _seed(leaderboard)

    top = await leaderboard.get_top_wallets("1d", len(SCORES))

    for entry in top:
        ranked = await leaderboard.get_wallet_rank(entry.wallet_address, "1d")
        assert ranked == entry


@pytest.mark.asyncio
async def test_zero_score_is_ranked_but_absent_wallet_is_not(leaderboard):
    await _seed(leaderboard)

    zero = await leaderboard.get_wallet_rank("W05", "1d")
    missing = await leaderboard.get_wallet_rank("W99", "1d")
    other_timeframe = await leaderboard.get_wallet_rank("W05", "7d")

    assert zero is not None
    assert zero.pnl_usd == 0.0
    assert zero.rank == 5
    assert missing is None
    assert other_timeframe is None


@pytest.mark.asyncio
async def test_rank_range_matches_top_wallets_slice(leaderboard):
    await _seed(leaderboard)
    top = await leaderboard.get_top_wallets("1d", len(SCORES))
    size = await leaderboard.get_leaderboard_size("1d")

    for start in range(1, size + 1):
        for end in range(start, size + 1):
            rows = await leaderboard.get_wallets_by_rank_range(start, end, "1d")
            assert len(rows) == end - start + 1
            assert [r.rank for r in rows] == list(range(start, end + 1))
            assert [r.pnl_usd for r in rows] == [e.pnl_usd for e in top[start - 1 : end]]


@pytest.mark.asyncio
async def test_rank_range_past_the_end_returns_existing_entries_only(leaderboard):
    await _seed(leaderboard)

    rows = await leaderboard.get_wallets_by_rank_range(6, 20, "1d")
    beyond = await leaderboard.get_wallets_by_rank_range(50, 60, "1d")

    assert [r.rank for r in rows] == [6, 7]
    assert beyond == []


@pytest.mark.asyncio
async def test_inverted_rank_range_is_empty(leaderboard):
    await _seed(leaderboard)

    assert await leaderboard.get_wallets_by_rank_range(2, 1, "1d") == []


@pytest.mark.asyncio
async def test_rank_range_rejects_start_below_one(leaderboard):
    await _seed(leaderboard)

    with pytest.raises(ValueError):
        await leaderboard.get_wallets_by_rank_range(0, 3, "1d")


@pytest.mark.asyncio
async def test_leaderboard_size_counts_distinct_wallets(leaderboard):
    await _seed(leaderboard, timeframes=("1d", "7d"))
    await leaderboard.update_wallet_pnl("W01", 1.0, ["1d"])

    assert await leaderboard.get_leaderboard_size("1d") == len(SCORES)
    assert await leaderboard.get_leaderboard_size(Timeframe.SEVEN_DAYS) == len(SCORES)
    assert await leaderboard.get_leaderboard_size("30d") == 0


@pytest.mark.asyncio
async def test_stats_for_empty_timeframe_are_null(leaderboard):
    await leaderboard.start()

    stats = await leaderboard.get_leaderboard_stats()

    assert list(stats) == list(Timeframe)
    assert stats[Timeframe.THIRTY_DAYS] == TimeframeStats(
        total_wallets=0, top_pnl=None, bottom_pnl=None, average_pnl=None
    )


@pytest.mark.asyncio
async def test_stats_average_is_midpoint_of_top_and_bottom(leaderboard):
    await _seed(leaderboard)

    stats = await leaderboard.get_leaderboard_stats()
    day = stats[Timeframe.ONE_DAY]

    assert day.total_wallets == len(SCORES)
    assert day.top_pnl == pytest.approx(1200.0)
    assert day.bottom_pnl == pytest.approx(-300.0)
    assert day.average_pnl == pytest.approx(450.0)
    true_mean = sum(SCORES.values()) / len(SCORES)
    assert day.average_pnl != pytest.approx(true_mean)
    assert stats[Timeframe.ONE_HOUR].total_wallets == 0


@pytest.mark.asyncio
async def test_stats_single_wallet_has_equal_extremes(leaderboard):
    await leaderboard.start()
    await leaderboard.update_wallet_pnl("Solo", -42.0, ["1h"])

    hour = (await leaderboard.get_leaderboard_stats())[Timeframe.ONE_HOUR]

    assert hour.total_wallets == 1
    assert hour.top_pnl == hour.bottom_pnl == hour.average_pnl == pytest.approx(-42.0)
