"""Fixed mapping from timeframe to the sorted-set key that ranks it."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

from models.leaderboard import Timeframe

TimeframeLike = Union[Timeframe, str]

LEADERBOARD_KEYS: Mapping[Timeframe, str] = MappingProxyType(
    {
        Timeframe.ONE_HOUR: "leaderboard:pnl:1h",
        Timeframe.ONE_DAY: "leaderboard:pnl:1d",
        Timeframe.SEVEN_DAYS: "leaderboard:pnl:7d",
        Timeframe.THIRTY_DAYS: "leaderboard:pnl:30d",
    }
)

ALL_TIMEFRAMES: tuple[Timeframe, ...] = tuple(LEADERBOARD_KEYS)


def resolve_timeframe(value: TimeframeLike) -> Timeframe:
    """Coerce ``"7d"`` style input to a registered :class:`Timeframe`."""
    if isinstance(value, Timeframe):
        return value
    try:
        return Timeframe(str(value).strip())
    except ValueError:
        allowed = ", ".join(tf.value for tf in ALL_TIMEFRAMES)
        raise ValueError(f"Unknown timeframe {value!r}; expected one of: {allowed}") from None


def resolve_timeframes(values: Optional[Iterable[TimeframeLike]]) -> list[Timeframe]:
    """``None`` selects every timeframe. Duplicates collapse, order is kept."""
    if values is None:
        return list(ALL_TIMEFRAMES)
    if isinstance(values, (str, Timeframe)):
        values = [values]
    resolved: list[Timeframe] = []
    for value in values:
        timeframe = resolve_timeframe(value)
        if timeframe not in resolved:
            resolved.append(timeframe)
    return resolved
