"""
Trader position and performance models.

Defines dataclasses for:
- Positions (open and closed exposures of one wallet)
- Performance summaries derived from position sets
- Raw trader statistics
- Cumulative P&L history points

All of them are frozen: a recomputation produces a new object instead of
mutating the cached one.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class Side(str, Enum):
    """Direction of a position"""
    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def sign(self) -> int:
        return 1 if self is Side.LONG else -1


class TimeRange(str, Enum):
    """Reporting windows used for period P&L and history slicing"""
    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    YEAR_TO_DATE = "YTD"
    ONE_YEAR = "1Y"
    MAX = "MAX"


@dataclass(frozen=True)
class Position:
    """One market exposure held, or formerly held, by a wallet."""

    market_id: str  # Market condition ID
    outcome: str = ""  # Outcome label (e.g. "Yes")
    side: Side = Side.LONG
    size: float = 0.0  # Token quantity
    entry_price: float = 0.0  # Average entry price
    mark_price: float = 0.0  # Current price when open, effective exit price when closed
    is_closed: bool = False

    opened_at: Optional[int] = None  # Unix seconds
    closed_at: Optional[int] = None  # Unix seconds, closed positions only

    asset: str = ""  # ERC-1155 token ID
    title: str = ""

    @property
    def entry_value(self) -> float:
        """Entry notional (capital deployed)"""
        return self.size * self.entry_price

    @property
    def mark_value(self) -> float:
        """Exit value when closed, current mark value when open"""
        return self.size * self.mark_price

    @property
    def pnl(self) -> float:
        """Realized (closed) or unrealized (open) P&L, signed by side"""
        return self.side.sign * (self.mark_value - self.entry_value)


@dataclass(frozen=True)
class PerformanceSummary:
    """Aggregate performance metrics for one wallet."""

    realized_pnl: float = 0.0  # Σ pnl over closed positions
    unrealized_pnl: float = 0.0  # Σ pnl over open positions
    total_pnl: float = 0.0  # realized + unrealized
    total_volume: float = 0.0  # Σ entry notional over both sets
    win_rate: float = 0.0  # wins / (wins + losses)
    roi: float = 0.0  # total_pnl / capital deployed
    wins: int = 0
    losses: int = 0
    closed_count: int = 0
    open_count: int = 0
    period_pnl: Dict[str, float] = field(default_factory=dict)  # TimeRange value -> P&L


@dataclass(frozen=True)
class PerformanceReport:
    """Performance summary as served and cached for one wallet."""

    address: str
    performance: PerformanceSummary
    last_updated: datetime


@dataclass(frozen=True)
class TraderStats:
    """Raw trader statistics from the Data API (no derived computation)."""

    trading_volume: float = 0.0
    portfolio_value: float = 0.0
    markets_traded: int = 0
    total_pnl: float = 0.0
    user_name: Optional[str] = None
    profile_image: Optional[str] = None
    x_username: Optional[str] = None


@dataclass(frozen=True)
class TraderStatsReport:
    address: str
    stats: TraderStats
    last_updated: datetime


@dataclass(frozen=True)
class PnLDataPoint:
    """Cumulative P&L at a point in time."""

    date: str  # ISO date (UTC)
    timestamp: int  # Unix seconds
    pnl: float


@dataclass(frozen=True)
class PnLHistoryReport:
    address: str
    range: TimeRange
    data: List[PnLDataPoint]
    last_updated: datetime


# Type aliases for convenience
PositionList = List[Position]
