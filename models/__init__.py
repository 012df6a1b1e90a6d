"""Domain models for trader positions and derived performance."""
from .positions import (
    Side,
    Position,
    PositionList,
    TimeRange,
    PerformanceSummary,
    PerformanceReport,
    TraderStats,
    TraderStatsReport,
    PnLDataPoint,
    PnLHistoryReport,
)

__all__ = [
    "Side",
    "Position",
    "PositionList",
    "TimeRange",
    "PerformanceSummary",
    "PerformanceReport",
    "TraderStats",
    "TraderStatsReport",
    "PnLDataPoint",
    "PnLHistoryReport",
]
