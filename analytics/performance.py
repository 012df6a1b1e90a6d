"""
Trader Performance Calculator

Pure reductions over a wallet's closed and open positions:
1. Aggregate performance summary (P&L, volume, win rate, ROI)
2. P&L per reporting window (1D ... MAX)
3. Cumulative daily P&L history for charting

Nothing here performs I/O; "now" is always an explicit input so the same
position snapshot yields the same output.
"""

import math
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from models.positions import (
    PerformanceSummary,
    PnLDataPoint,
    Position,
    TimeRange,
)
from services.errors import ComputeError

SECONDS_PER_DAY = 86400

_RANGE_DAYS = {
    TimeRange.ONE_DAY: 1,
    TimeRange.ONE_WEEK: 7,
    TimeRange.ONE_MONTH: 30,
    TimeRange.ONE_YEAR: 365,
}


def _utc_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _day_label(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()


def range_start(time_range: TimeRange, now: Optional[datetime] = None) -> Optional[int]:
    """
    Unix-second start of a reporting window.

    Returns:
        None for MAX (no lower bound)
    """
    now = _utc_now(now)
    if time_range is TimeRange.MAX:
        return None
    if time_range is TimeRange.YEAR_TO_DATE:
        return int(datetime(now.year, 1, 1, tzinfo=timezone.utc).timestamp())
    return int(now.timestamp()) - _RANGE_DAYS[time_range] * SECONDS_PER_DAY


def calculate_period_pnl(
    closed_positions: Iterable[Position],
    unrealized_pnl: float,
    now: Optional[datetime] = None,
) -> Dict[str, float]:
    """
    P&L for every reporting window.

    Each window sums the realized P&L of positions closed inside it and adds
    the current unrealized P&L of open positions.
    """
    closed = list(closed_positions)
    period_pnl: Dict[str, float] = {}

    for time_range in TimeRange:
        start = range_start(time_range, now)
        if start is None:
            realized = sum(p.pnl for p in closed)
        else:
            realized = sum(
                p.pnl for p in closed
                if p.closed_at is not None and p.closed_at >= start
            )
        period_pnl[time_range.value] = realized + unrealized_pnl

    return period_pnl


def calculate_performance(
    closed_positions: Iterable[Position],
    open_positions: Iterable[Position],
    now: Optional[datetime] = None,
) -> PerformanceSummary:
    """
    Reduce a wallet's positions into a PerformanceSummary.

    Args:
        closed_positions: Settled/exited positions
        open_positions: Positions still marked to market
        now: Reference time for period P&L (defaults to current UTC time)

    Returns:
        PerformanceSummary; an empty wallet yields all zeros

    Raises:
        ComputeError: If any metric is NaN or infinite
    """
    closed = list(closed_positions)
    opened = list(open_positions)

    realized_pnl = 0.0
    total_volume = 0.0
    wins = 0
    losses = 0

    for position in closed:
        contribution = position.pnl
        realized_pnl += contribution
        total_volume += position.entry_value
        # Break-even positions are neither wins nor losses
        if contribution > 0:
            wins += 1
        elif contribution < 0:
            losses += 1

    unrealized_pnl = 0.0
    for position in opened:
        unrealized_pnl += position.pnl
        total_volume += position.entry_value

    decided = wins + losses
    win_rate = wins / decided if decided > 0 else 0.0

    total_pnl = realized_pnl + unrealized_pnl
    # Capital deployed is the entry notional of both sets
    roi = total_pnl / total_volume if total_volume > 0 else 0.0

    summary = PerformanceSummary(
        realized_pnl=realized_pnl,
        unrealized_pnl=unrealized_pnl,
        total_pnl=total_pnl,
        total_volume=total_volume,
        win_rate=win_rate,
        roi=roi,
        wins=wins,
        losses=losses,
        closed_count=len(closed),
        open_count=len(opened),
        period_pnl=calculate_period_pnl(closed, unrealized_pnl, now),
    )
    _ensure_finite(summary)
    return summary


def _ensure_finite(summary: PerformanceSummary) -> None:
    metrics = {
        "realized_pnl": summary.realized_pnl,
        "unrealized_pnl": summary.unrealized_pnl,
        "total_pnl": summary.total_pnl,
        "total_volume": summary.total_volume,
        "win_rate": summary.win_rate,
        "roi": summary.roi,
    }
    metrics.update({f"period_pnl[{k}]": v for k, v in summary.period_pnl.items()})

    bad = [name for name, value in metrics.items() if not math.isfinite(value)]
    if bad:
        raise ComputeError(f"Non-finite performance metrics: {', '.join(bad)}")


# ========== P&L History ==========

def build_pnl_history(
    closed_positions: Iterable[Position],
    open_positions: Iterable[Position],
    now: Optional[datetime] = None,
) -> List[PnLDataPoint]:
    """
    All-time cumulative P&L, one point per UTC day with closed positions.

    The series ends with the live total (all realized + current unrealized)
    at `now`, unless the last daily point already equals it. Positions with
    no close timestamp count toward the live total but get no daily point.
    """
    now = _utc_now(now)
    daily_pnl: Dict[int, float] = {}
    total_realized = 0.0

    for position in closed_positions:
        total_realized += position.pnl
        if not position.closed_at:
            continue
        day = (position.closed_at // SECONDS_PER_DAY) * SECONDS_PER_DAY
        daily_pnl[day] = daily_pnl.get(day, 0.0) + position.pnl

    unrealized = sum(p.pnl for p in open_positions)
    live_pnl = total_realized + unrealized

    points: List[PnLDataPoint] = []
    cumulative = 0.0
    for day in sorted(daily_pnl):
        cumulative += daily_pnl[day]
        points.append(PnLDataPoint(date=_day_label(day), timestamp=day, pnl=cumulative))

    if not points or points[-1].pnl != live_pnl:
        now_ts = int(now.timestamp())
        points.append(PnLDataPoint(date=_day_label(now_ts), timestamp=now_ts, pnl=live_pnl))

    return points


def filter_pnl_history(
    points: List[PnLDataPoint],
    time_range: TimeRange,
    now: Optional[datetime] = None,
) -> List[PnLDataPoint]:
    """
    Slice an all-time cumulative series to a reporting window.

    The slice is prefixed with a point at the window start carrying the
    cumulative value reached just before it. When nothing falls inside the
    window the full series is returned.
    """
    start = range_start(time_range, now)
    if start is None:
        return points

    in_range = [p for p in points if p.timestamp >= start]
    if not in_range:
        return points

    before = [p for p in points if p.timestamp < start]
    cumulative_at_start = max(before, key=lambda p: p.timestamp).pnl if before else 0.0

    start_point = PnLDataPoint(date=_day_label(start), timestamp=start, pnl=cumulative_at_start)
    return [start_point, *in_range]
