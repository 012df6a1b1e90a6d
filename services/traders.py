"""
Trader services: cached performance, statistics and P&L history per wallet.

Every lookup follows the same path:
1. Validate and lowercase the wallet address
2. Serve a fresh cache entry when there is one
3. Otherwise load from upstream (concurrent misses for one key share a single
   load), compute, write the cache once and return

A failed or cancelled load never touches the cache, so the next call simply
retries upstream.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Protocol, Sequence, Tuple, TypeVar

from analytics.performance import build_pnl_history, calculate_performance, filter_pnl_history
from config.settings import settings
from config.system_constants import (
    PERFORMANCE_CACHE_TTL_SECONDS,
    PNL_HISTORY_CACHE_TTL_SECONDS,
    TRADER_STATS_CACHE_TTL_SECONDS,
)
from models.positions import (
    PerformanceReport,
    PerformanceSummary,
    PnLHistoryReport,
    Position,
    PositionList,
    TimeRange,
    TraderStats,
    TraderStatsReport,
)
from services.errors import InvalidAddressError, TraderServiceError, UpstreamError
from utils.cache import TTLCache
from utils.single_flight import SingleFlight
from utils.wallet import is_valid_wallet

logger = logging.getLogger(__name__)

V = TypeVar("V")
R = TypeVar("R")


class PositionSource(Protocol):
    """Supplier of a wallet's closed and open positions."""

    async def fetch_closed_positions(self, address: str) -> Sequence[Position]:
        ...

    async def fetch_open_positions(self, address: str) -> Sequence[Position]:
        ...


class TraderStatsSource(Protocol):
    """Supplier of raw trader statistics."""

    async def fetch_trader_stats(self, address: str) -> TraderStats:
        ...


def validate_address(address: Any) -> str:
    """
    Return the normalized (lowercase) wallet address.

    Raises:
        InvalidAddressError: If address is not 0x + 40 hex characters
    """
    if not is_valid_wallet(address):
        raise InvalidAddressError(address)
    return address.lower()


async def _call_upstream(what: str, address: str, call: Callable[[str], Awaitable[R]]) -> R:
    """Run an upstream call for address, reporting any provider failure as UpstreamError."""
    try:
        return await call(address)
    except TraderServiceError:
        raise
    except Exception as e:
        logger.warning(f"Upstream {what} fetch failed for {address}: {type(e).__name__}: {e}")
        raise UpstreamError(f"Failed to fetch {what} for {address}: {e}") from e


async def fetch_positions(source: PositionSource, address: str) -> Tuple[PositionList, PositionList]:
    """
    Fetch closed and open positions concurrently.

    Both legs must succeed. When one fails, the other is cancelled and the
    failure propagates; cancelling the caller cancels both legs.
    """
    async def closed_leg() -> PositionList:
        return list(await _call_upstream("closed positions", address, source.fetch_closed_positions))

    async def open_leg() -> PositionList:
        return list(await _call_upstream("open positions", address, source.fetch_open_positions))

    legs = (asyncio.ensure_future(closed_leg()), asyncio.ensure_future(open_leg()))
    try:
        closed, opened = await asyncio.gather(*legs)
    except BaseException:
        for leg in legs:
            leg.cancel()
        raise
    return closed, opened


class CachedTraderService(Generic[V]):
    """
    Base for per-wallet cached lookups.

    Subclasses build a cache key from the validated address and pass a loader
    to _get_or_load().
    """

    def __init__(self, cache: TTLCache[str, V], *, single_flight: bool = True):
        self.cache = cache
        self._flights: Optional[SingleFlight[V]] = SingleFlight(name=cache.name) if single_flight else None

    async def _get_or_load(self, key: str, load: Callable[[], Awaitable[V]]) -> V:
        value, found = await self.cache.get(key)
        if found:
            return value

        if self._flights is None:
            return await self._load_and_store(key, load)
        return await self._flights.do(key, lambda: self._load_and_store(key, load))

    async def _load_and_store(self, key: str, load: Callable[[], Awaitable[V]]) -> V:
        value = await load()
        await self.cache.put(key, value)
        return value

    def get_cache_info(self) -> Dict[str, Any]:
        return self.cache.get_info()


class TraderPerformanceService(CachedTraderService[PerformanceReport]):
    """
    Derived performance metrics per wallet.

    Usage:
        service = TraderPerformanceService(PolymarketPositionSource())
        summary = await service.get_performance("0xabc...")
    """

    def __init__(
        self,
        source: PositionSource,
        cache: Optional[TTLCache[str, PerformanceReport]] = None,
        *,
        single_flight: bool = True,
    ):
        if cache is None:
            cache = TTLCache(PERFORMANCE_CACHE_TTL_SECONDS, name="performance", max_size=settings.CACHE_MAX_SIZE)
        super().__init__(cache, single_flight=single_flight)
        self.source = source

    async def get_performance(self, address: str) -> PerformanceSummary:
        """
        Performance summary for a wallet.

        Raises:
            InvalidAddressError: Malformed address (no upstream call is made)
            UpstreamError: Either position fetch failed
            ComputeError: A metric came out non-finite
        """
        report = await self.get_performance_report(address)
        return report.performance

    async def get_performance_report(self, address: str) -> PerformanceReport:
        """Performance summary with its address and computation time, as cached."""
        key = validate_address(address)
        return await self._get_or_load(key, lambda: self._compute(key))

    async def _compute(self, address: str) -> PerformanceReport:
        closed, opened = await fetch_positions(self.source, address)
        now = datetime.now(timezone.utc)
        performance = calculate_performance(closed, opened, now)

        logger.info(
            f"Computed performance for {address}: "
            f"{performance.closed_count} closed / {performance.open_count} open, "
            f"pnl={performance.total_pnl:.2f}, win_rate={performance.win_rate:.2%}"
        )
        return PerformanceReport(address=address, performance=performance, last_updated=now)


class TraderStatsService(CachedTraderService[TraderStatsReport]):
    """Raw trader statistics per wallet (single upstream call, no derivation)."""

    def __init__(
        self,
        source: TraderStatsSource,
        cache: Optional[TTLCache[str, TraderStatsReport]] = None,
        *,
        single_flight: bool = True,
    ):
        if cache is None:
            cache = TTLCache(TRADER_STATS_CACHE_TTL_SECONDS, name="trader_stats", max_size=settings.CACHE_MAX_SIZE)
        super().__init__(cache, single_flight=single_flight)
        self.source = source

    async def get_trader_stats(self, address: str) -> TraderStatsReport:
        key = validate_address(address)
        return await self._get_or_load(key, lambda: self._load(key))

    async def _load(self, address: str) -> TraderStatsReport:
        stats = await _call_upstream("trader stats", address, self.source.fetch_trader_stats)
        return TraderStatsReport(address=address, stats=stats, last_updated=datetime.now(timezone.utc))


class TraderPnLHistoryService(CachedTraderService[PnLHistoryReport]):
    """Cumulative P&L series per wallet and reporting window."""

    def __init__(
        self,
        source: PositionSource,
        cache: Optional[TTLCache[str, PnLHistoryReport]] = None,
        *,
        single_flight: bool = True,
    ):
        if cache is None:
            cache = TTLCache(PNL_HISTORY_CACHE_TTL_SECONDS, name="pnl_history", max_size=settings.CACHE_MAX_SIZE)
        super().__init__(cache, single_flight=single_flight)
        self.source = source

    async def get_pnl_history(self, address: str, time_range: TimeRange = TimeRange.MAX) -> PnLHistoryReport:
        normalized = validate_address(address)
        time_range = TimeRange(time_range)
        key = f"{normalized}-{time_range.value}"
        return await self._get_or_load(key, lambda: self._compute(normalized, time_range))

    async def _compute(self, address: str, time_range: TimeRange) -> PnLHistoryReport:
        closed, opened = await fetch_positions(self.source, address)
        now = datetime.now(timezone.utc)
        history = build_pnl_history(closed, opened, now)
        data = filter_pnl_history(history, time_range, now)
        return PnLHistoryReport(address=address, range=time_range, data=data, last_updated=now)
