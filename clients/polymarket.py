"""
Polymarket Data API Client

Wallet-level reads from https://data-api.polymarket.com:
- /closed-positions and /positions (paginated, normalized to Position models)
- /v1/leaderboard, /value and /traded (raw trader statistics)

Every transport error, non-2xx status or malformed payload surfaces as a
PolymarketAPIError. Retries are left to callers.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httpx

from config.settings import settings
from config.system_constants import (
    CLOSED_POSITIONS_MAX_OFFSET,
    CLOSED_POSITIONS_PAGE_SIZE,
    DATA_API_MAX_CONCURRENCY,
    DATA_API_MAX_REQUESTS,
    DATA_API_WINDOW_SECONDS,
    MILLISECOND_TIMESTAMP_THRESHOLD,
    OPEN_POSITIONS_MAX_OFFSET,
    OPEN_POSITIONS_PAGE_SIZE,
)
from models.positions import Position, PositionList, Side, TraderStats
from utils.wallet import normalize_wallet


logger = logging.getLogger(__name__)

T = TypeVar("T")


class PolymarketError(Exception):
    """Base Polymarket exception."""


class PolymarketAPIError(PolymarketError):
    """Raised when the Data API fails or returns an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _to_float(value: Any, default: float = 0.0) -> float:
    """Float conversion where missing or blank values become default."""
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return default
    return float(text)


def _to_str(value: Any) -> str:
    return str(value) if value is not None else ""


def _parse_payload(endpoint: str, parse: Callable[[], T]) -> T:
    """Run a payload parser, reporting bad shapes as PolymarketAPIError."""
    try:
        return parse()
    except (TypeError, ValueError, AttributeError) as e:
        raise PolymarketAPIError(f"Data API {endpoint} returned a malformed item: {e}") from e


def _closed_timestamp(raw: Dict[str, Any]) -> int:
    """Close time in unix seconds; millisecond values are scaled down."""
    ts = _to_float(raw.get("timestamp"))
    if ts > MILLISECOND_TIMESTAMP_THRESHOLD:
        ts = ts / 1000
    return int(ts)


def parse_closed_position(raw: Dict[str, Any]) -> Position:
    """
    Normalize a /closed-positions item.

    The API reports realized P&L, average entry price and total tokens bought.
    The effective average exit price is derived from those so that
    Position.pnl reproduces the reported realized P&L, including positions
    sold before resolution.
    """
    total_bought = _to_float(raw.get("totalBought"))
    avg_price = _to_float(raw.get("avgPrice"))
    realized_pnl = _to_float(raw.get("realizedPnl"))

    if total_bought > 0:
        exit_price = avg_price + realized_pnl / total_bought
    else:
        exit_price = _to_float(raw.get("curPrice"))

    ts = _closed_timestamp(raw)
    return Position(
        market_id=_to_str(raw.get("conditionId")),
        outcome=_to_str(raw.get("outcome")),
        side=Side.LONG,
        size=total_bought,
        entry_price=avg_price,
        mark_price=exit_price,
        is_closed=True,
        closed_at=ts or None,
        asset=_to_str(raw.get("asset")),
        title=_to_str(raw.get("title")),
    )


def parse_open_position(raw: Dict[str, Any]) -> Position:
    """Normalize a /positions item; outcome tokens are always held long."""
    return Position(
        market_id=_to_str(raw.get("conditionId")),
        outcome=_to_str(raw.get("outcome")),
        side=Side.LONG,
        size=_to_float(raw.get("size")),
        entry_price=_to_float(raw.get("avgPrice")),
        mark_price=_to_float(raw.get("curPrice")),
        is_closed=False,
        asset=_to_str(raw.get("asset")),
        title=_to_str(raw.get("title")),
    )


class PolymarketDataAPI:
    """
    Rate-limited Polymarket Data API wrapper.

    Official API limits (requests per 10 seconds):
    - Non-trades endpoints: 200 req/10s

    A sliding window keeps request starts under that limit and a semaphore
    caps requests in flight.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Polymarket Data API client.

        Args:
            base_url: API root (defaults to settings.POLYMARKET_DATA_URL)
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.base_url = (base_url or settings.POLYMARKET_DATA_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.DATA_API_TIMEOUT_SECONDS
        self._transport = transport

        self._semaphore = asyncio.Semaphore(DATA_API_MAX_CONCURRENCY)
        self._request_times: List[float] = []
        self._rate_lock = asyncio.Lock()

    async def _wait_for_slot(self) -> None:
        """Sliding-window rate limiting: record this request, waiting if the window is full."""
        async with self._rate_lock:
            loop = asyncio.get_running_loop()
            now = loop.time()
            self._request_times[:] = [t for t in self._request_times if now - t < DATA_API_WINDOW_SECONDS]

            if len(self._request_times) >= DATA_API_MAX_REQUESTS:
                oldest_time = min(self._request_times)
                wait_time = DATA_API_WINDOW_SECONDS - (now - oldest_time) + 0.1  # Small buffer
                if wait_time > 0:
                    logger.debug(f"Data API rate limit reached, waiting {wait_time:.2f}s")
                    await asyncio.sleep(wait_time)
                    now = loop.time()
                    self._request_times[:] = [
                        t for t in self._request_times if now - t < DATA_API_WINDOW_SECONDS
                    ]

            self._request_times.append(now)

    async def _rate_limited_request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET an endpoint and decode its JSON body."""
        url = f"{self.base_url}{endpoint}"

        async with self._semaphore:
            await self._wait_for_slot()
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    response = await client.get(url, params=params or {})
                    response.raise_for_status()
                    return response.json()
            except httpx.HTTPStatusError as e:
                body = e.response.text[:200]
                raise PolymarketAPIError(
                    f"Data API {endpoint} returned {e.response.status_code}: {body}",
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                raise PolymarketAPIError(f"Data API {endpoint} request failed: {e}") from e
            except ValueError as e:
                raise PolymarketAPIError(f"Data API {endpoint} returned invalid JSON") from e

    async def get_closed_positions(
        self,
        user: str,
        limit: int = CLOSED_POSITIONS_PAGE_SIZE,
        offset: int = 0,
        sort_by: str = "TIMESTAMP",
        sort_direction: str = "ASC",
        **kwargs
    ) -> List[Dict[str, Any]]:
        """
        Fetch one page of closed positions for a wallet.

        Args:
            user: Wallet address (0x-prefixed) [REQUIRED]
            limit: Results per page (1-50)
            offset: Pagination offset (0-100,000)
            sort_by: REALIZEDPNL, TITLE, PRICE, AVGPRICE, TIMESTAMP
            sort_direction: ASC or DESC

        Returns:
            List of raw closed position objects
        """
        params = {
            "user": user,
            "limit": min(limit, CLOSED_POSITIONS_PAGE_SIZE),
            "offset": offset,
            "sortBy": sort_by,
            "sortDirection": sort_direction,
        }
        params.update(kwargs)
        return self._expect_list("/closed-positions", await self._rate_limited_request("/closed-positions", params))

    async def get_positions(
        self,
        user: str,
        limit: int = OPEN_POSITIONS_PAGE_SIZE,
        offset: int = 0,
        size_threshold: float = 0,
        **kwargs
    ) -> List[Dict[str, Any]]:
        """
        Fetch one page of current open positions for a wallet.

        Args:
            user: Wallet address (0x-prefixed) [REQUIRED]
            limit: Results per page (0-500)
            offset: Pagination offset (0-10,000)
            size_threshold: Minimum position size to include

        Returns:
            List of raw open position objects
        """
        params = {
            "user": user,
            "limit": min(limit, OPEN_POSITIONS_PAGE_SIZE),
            "offset": offset,
            "sizeThreshold": size_threshold,
        }
        params.update(kwargs)
        return self._expect_list("/positions", await self._rate_limited_request("/positions", params))

    async def get_leaderboard(
        self,
        user: Optional[str] = None,
        time_period: str = "ALL",
        order_by: str = "VOL",
        limit: int = 1,
        **kwargs
    ) -> List[Dict[str, Any]]:
        """
        Fetch leaderboard entries (optionally for a single user).

        Args:
            user: Wallet address filter
            time_period: DAY, WEEK, MONTH or ALL
            order_by: PNL or VOL
            limit: Max entries

        Returns:
            List of leaderboard entries (vol, pnl, userName, profileImage, xUsername)
        """
        params: Dict[str, Any] = {"timePeriod": time_period, "orderBy": order_by, "limit": limit}
        if user:
            params["user"] = user
        params.update(kwargs)
        return self._expect_list("/v1/leaderboard", await self._rate_limited_request("/v1/leaderboard", params))

    async def get_portfolio_value(self, user: str) -> float:
        """
        Get total portfolio value for a wallet.

        Returns:
            Total value in USDC (0.0 when the API has no entry)
        """
        data = self._expect_list("/value", await self._rate_limited_request("/value", {"user": user}))
        if not data:
            return 0.0
        return _parse_payload("/value", lambda: _to_float(data[0].get("value")))

    async def get_markets_traded(self, user: str) -> int:
        """Get the number of distinct markets a wallet has traded."""
        data = await self._rate_limited_request("/traded", {"user": user})
        if not isinstance(data, dict):
            raise PolymarketAPIError("Data API /traded returned a non-object payload")
        return _parse_payload("/traded", lambda: int(_to_float(data.get("traded"))))

    @staticmethod
    def _expect_list(endpoint: str, data: Any) -> List[Dict[str, Any]]:
        if not isinstance(data, list):
            raise PolymarketAPIError(f"Data API {endpoint} returned a non-list payload")
        return data


class PolymarketPositionSource:
    """
    Wallet position and statistics source backed by the Data API.

    Walks every page of /closed-positions and /positions and returns
    normalized Position lists.
    """

    def __init__(self, api: Optional[PolymarketDataAPI] = None):
        self.api = api or PolymarketDataAPI()

    async def fetch_closed_positions(self, address: str) -> PositionList:
        """All closed positions for a wallet, oldest first."""
        user = normalize_wallet(address)
        positions: PositionList = []
        page_size = CLOSED_POSITIONS_PAGE_SIZE

        for offset in range(0, CLOSED_POSITIONS_MAX_OFFSET + 1, page_size):
            page = await self.api.get_closed_positions(user, limit=page_size, offset=offset)
            positions.extend(_parse_payload("/closed-positions", lambda: [parse_closed_position(p) for p in page]))
            if len(page) < page_size:
                break

        logger.debug(f"Fetched {len(positions)} closed positions for {user}")
        return positions

    async def fetch_open_positions(self, address: str) -> PositionList:
        """All open positions for a wallet."""
        user = normalize_wallet(address)
        positions: PositionList = []
        page_size = OPEN_POSITIONS_PAGE_SIZE

        for offset in range(0, OPEN_POSITIONS_MAX_OFFSET + 1, page_size):
            page = await self.api.get_positions(user, limit=page_size, offset=offset)
            positions.extend(_parse_payload("/positions", lambda: [parse_open_position(p) for p in page]))
            if len(page) < page_size:
                break

        logger.debug(f"Fetched {len(positions)} open positions for {user}")
        return positions

    async def fetch_trader_stats(self, address: str) -> TraderStats:
        """Volume, P&L and profile from the leaderboard plus portfolio value and markets traded."""
        user = normalize_wallet(address)
        leaderboard, portfolio_value, markets_traded = await asyncio.gather(
            self.api.get_leaderboard(user=user, time_period="ALL", order_by="VOL", limit=1),
            self.api.get_portfolio_value(user),
            self.api.get_markets_traded(user),
        )

        entry = leaderboard[0] if leaderboard else {}

        def build() -> TraderStats:
            return TraderStats(
                trading_volume=_to_float(entry.get("vol")),
                portfolio_value=portfolio_value,
                markets_traded=markets_traded,
                total_pnl=_to_float(entry.get("pnl")),
                user_name=entry.get("userName") or None,
                profile_image=entry.get("profileImage") or None,
                x_username=entry.get("xUsername") or None,
            )

        return _parse_payload("/v1/leaderboard", build)
