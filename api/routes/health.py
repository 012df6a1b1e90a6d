"""
Health check endpoints
"""
from datetime import datetime, timezone
from fastapi import APIRouter

from api.dependencies import PerformanceServiceDep, PnLHistoryServiceDep, StatsServiceDep
from config.settings import settings

router = APIRouter()


@router.get("/")
async def root():
    """Simple health check endpoint"""
    return {
        "status": "online",
        "service": "Trader Performance API",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health")
async def health(
    performance_service: PerformanceServiceDep,
    stats_service: StatsServiceDep,
    pnl_history_service: PnLHistoryServiceDep,
):
    """Detailed health check with cache status"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
        "single_flight": settings.ENABLE_SINGLE_FLIGHT,
        "caches": [
            performance_service.get_cache_info(),
            stats_service.get_cache_info(),
            pnl_history_service.get_cache_info(),
        ],
    }
