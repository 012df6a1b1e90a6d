"""Shared fixtures: fake position sources and position builders."""

import asyncio
from typing import List, Optional

import pytest

from models.positions import Position, Side, TraderStats

WALLET = "0x" + "ab" * 20
WALLET_MIXED_CASE = "0x" + "AB" * 20


def closed_position(
    entry_price: float,
    exit_price: float,
    size: float = 100.0,
    closed_at: Optional[int] = None,
    side: Side = Side.LONG,
    market_id: str = "0xmarket",
) -> Position:
    return Position(
        market_id=market_id,
        outcome="Yes",
        side=side,
        size=size,
        entry_price=entry_price,
        mark_price=exit_price,
        is_closed=True,
        closed_at=closed_at,
    )


def open_position(
    entry_price: float,
    mark_price: float,
    size: float = 100.0,
    side: Side = Side.LONG,
    market_id: str = "0xmarket",
) -> Position:
    return Position(
        market_id=market_id,
        outcome="Yes",
        side=side,
        size=size,
        entry_price=entry_price,
        mark_price=mark_price,
        is_closed=False,
    )


class FakePositionSource:
    """In-memory position source that counts upstream calls."""

    def __init__(
        self,
        closed: Optional[List[Position]] = None,
        opened: Optional[List[Position]] = None,
        stats: Optional[TraderStats] = None,
        delay: float = 0.0,
    ):
        self.closed = closed or []
        self.opened = opened or []
        self.stats = stats or TraderStats(trading_volume=1000.0, portfolio_value=250.0, markets_traded=12)
        self.delay = delay
        self.closed_calls = 0
        self.open_calls = 0
        self.stats_calls = 0
        self.closed_cancelled = False
        self.open_cancelled = False
        self.addresses: List[str] = []

    async def fetch_closed_positions(self, address: str) -> List[Position]:
        self.closed_calls += 1
        self.addresses.append(address)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.closed_cancelled = True
                raise
        return list(self.closed)

    async def fetch_open_positions(self, address: str) -> List[Position]:
        self.open_calls += 1
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.open_cancelled = True
                raise
        return list(self.opened)

    async def fetch_trader_stats(self, address: str) -> TraderStats:
        self.stats_calls += 1
        self.addresses.append(address)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.stats


class FailingOpenLegSource(FakePositionSource):
    """Open leg fails fast while the closed leg is still sleeping."""

    def __init__(self, closed_delay: float = 5.0):
        super().__init__()
        self.closed_delay = closed_delay
        self.closed_cancelled = False

    async def fetch_closed_positions(self, address: str) -> List[Position]:
        self.closed_calls += 1
        try:
            await asyncio.sleep(self.closed_delay)
        except asyncio.CancelledError:
            self.closed_cancelled = True
            raise
        return []

    async def fetch_open_positions(self, address: str) -> List[Position]:
        self.open_calls += 1
        raise ConnectionError("positions endpoint unreachable")

    async def fetch_trader_stats(self, address: str) -> TraderStats:
        self.stats_calls += 1
        raise ConnectionError("leaderboard endpoint unreachable")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scenario_a_source() -> FakePositionSource:
    """Two closed winners (+10, +5), one closed loser (-3), one open at +2."""
    return FakePositionSource(
        closed=[
            closed_position(0.40, 0.50),
            closed_position(0.50, 0.55),
            closed_position(0.60, 0.57),
        ],
        opened=[open_position(0.30, 0.32)],
    )
