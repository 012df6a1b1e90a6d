from .polymarket import (
    PolymarketAPIError,
    PolymarketDataAPI,
    PolymarketError,
    PolymarketPositionSource,
)

__all__ = [
    "PolymarketAPIError",
    "PolymarketDataAPI",
    "PolymarketError",
    "PolymarketPositionSource",
]
