"""
Pydantic schemas for trader endpoints

Responses are serialized with camelCase keys (lastUpdated, realizedPnl, ...).
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.positions import TimeRange


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON, built from dataclasses"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PerformanceSummaryResponse(CamelModel):
    """Derived performance metrics"""
    realized_pnl: float = 0.0
    unrealized_pnl: float = 0.0
    total_pnl: float = 0.0
    total_volume: float = 0.0
    win_rate: float = 0.0
    roi: float = 0.0
    wins: int = 0
    losses: int = 0
    closed_count: int = 0
    open_count: int = 0
    period_pnl: Dict[str, float] = Field(default_factory=dict)


class TraderPerformanceResponse(CamelModel):
    """GET /traders/{address}/performance"""
    address: str
    performance: PerformanceSummaryResponse
    last_updated: datetime


class TraderStatsResponse(CamelModel):
    """Raw trader statistics"""
    trading_volume: float = 0.0
    portfolio_value: float = 0.0
    markets_traded: int = 0
    total_pnl: float = 0.0
    user_name: Optional[str] = None
    profile_image: Optional[str] = None
    x_username: Optional[str] = None


class TraderResponse(CamelModel):
    """GET /traders/{address}"""
    address: str
    stats: TraderStatsResponse
    last_updated: datetime


class PnLDataPointResponse(CamelModel):
    date: str
    timestamp: int
    pnl: float


class PnLHistoryResponse(CamelModel):
    """GET /traders/{address}/pnl-history"""
    address: str
    range: TimeRange
    data: List[PnLDataPointResponse]
    last_updated: datetime


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request"""
    error: ErrorDetail
