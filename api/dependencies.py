"""
FastAPI Dependencies
Shared dependencies for dependency injection
"""
import logging
from typing import Annotated

from fastapi import Depends

from clients.polymarket import PolymarketDataAPI, PolymarketPositionSource
from config.settings import settings
from services.traders import (
    TraderPerformanceService,
    TraderPnLHistoryService,
    TraderStatsService,
)
from utils.rich_logging import log_cache_summary

logger = logging.getLogger(__name__)

# Global instances (initialized on startup)
_position_source: PolymarketPositionSource | None = None
_performance_service: TraderPerformanceService | None = None
_stats_service: TraderStatsService | None = None
_pnl_history_service: TraderPnLHistoryService | None = None


def initialize_dependencies():
    """Initialize all dependencies (called on startup)"""
    global _position_source, _performance_service, _stats_service, _pnl_history_service

    logger.info("Initializing API dependencies...")

    # One Data API client so every service shares its rate limiter
    _position_source = PolymarketPositionSource(PolymarketDataAPI())

    single_flight = settings.ENABLE_SINGLE_FLIGHT
    _performance_service = TraderPerformanceService(_position_source, single_flight=single_flight)
    _stats_service = TraderStatsService(_position_source, single_flight=single_flight)
    _pnl_history_service = TraderPnLHistoryService(_position_source, single_flight=single_flight)

    logger.info(
        f"API dependencies initialized. Data API: {_position_source.api.base_url}, "
        f"single-flight: {single_flight}"
    )


def cleanup_dependencies():
    """Cleanup dependencies (called on shutdown)"""
    global _position_source, _performance_service, _stats_service, _pnl_history_service
    logger.info("Cleaning up API dependencies...")

    services = [s for s in (_performance_service, _stats_service, _pnl_history_service) if s is not None]
    if services:
        log_cache_summary(s.get_cache_info() for s in services)

    _position_source = None
    _performance_service = None
    _stats_service = None
    _pnl_history_service = None


def get_performance_service() -> TraderPerformanceService:
    """Get trader performance service instance"""
    if _performance_service is None:
        raise RuntimeError("Dependencies not initialized. Call initialize_dependencies() first.")
    return _performance_service


def get_stats_service() -> TraderStatsService:
    """Get trader stats service instance"""
    if _stats_service is None:
        raise RuntimeError("Dependencies not initialized. Call initialize_dependencies() first.")
    return _stats_service


def get_pnl_history_service() -> TraderPnLHistoryService:
    """Get P&L history service instance"""
    if _pnl_history_service is None:
        raise RuntimeError("Dependencies not initialized. Call initialize_dependencies() first.")
    return _pnl_history_service


# Dependency injection annotations
PerformanceServiceDep = Annotated[TraderPerformanceService, Depends(get_performance_service)]
StatsServiceDep = Annotated[TraderStatsService, Depends(get_stats_service)]
PnLHistoryServiceDep = Annotated[TraderPnLHistoryService, Depends(get_pnl_history_service)]
