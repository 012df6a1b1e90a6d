"""
Trader endpoints: raw stats, derived performance and P&L history

Failures use the app-wide envelope {"error": {"code": ..., "message": ...}}.
Clients of the older API that read `error` as a plain message string must
read `error.message` instead.
"""
from fastapi import APIRouter, Query

from api.dependencies import PerformanceServiceDep, PnLHistoryServiceDep, StatsServiceDep
from api.exceptions import service_errors_as_http
from api.schemas.traders import (
    ErrorResponse,
    PnLHistoryResponse,
    TraderPerformanceResponse,
    TraderResponse,
)
from models.positions import TimeRange

router = APIRouter(
    prefix="/traders",
    tags=["traders"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@router.get("/{address}", response_model=TraderResponse)
async def get_trader(address: str, stats_service: StatsServiceDep):
    """
    Raw trader statistics (volume, portfolio value, markets traded, P&L)

    Errors: 400 INVALID_ADDRESS, 500 UPSTREAM_ERROR; `error` is an object, not a string.
    """
    with service_errors_as_http(address):
        report = await stats_service.get_trader_stats(address)
    return TraderResponse.model_validate(report)


@router.get("/{address}/performance", response_model=TraderPerformanceResponse)
async def get_trader_performance(address: str, performance_service: PerformanceServiceDep):
    """
    Realized/unrealized P&L, win rate and ROI from open and closed positions

    Errors: 400 INVALID_ADDRESS, 500 UPSTREAM_ERROR or COMPUTE_ERROR; `error` is an
    object, not a string.
    """
    with service_errors_as_http(address):
        report = await performance_service.get_performance_report(address)
    return TraderPerformanceResponse.model_validate(report)


@router.get("/{address}/pnl-history", response_model=PnLHistoryResponse)
async def get_trader_pnl_history(
    address: str,
    pnl_history_service: PnLHistoryServiceDep,
    time_range: TimeRange = Query(TimeRange.MAX, alias="range", description="1D, 1W, 1M, YTD, 1Y or MAX"),
):
    """
    Cumulative daily P&L, sliced to the requested window

    Errors: 400 INVALID_ADDRESS or INVALID_REQUEST, 500 UPSTREAM_ERROR; `error` is
    an object, not a string.
    """
    with service_errors_as_http(address):
        report = await pnl_history_service.get_pnl_history(address, time_range)
    return PnLHistoryResponse.model_validate(report)
