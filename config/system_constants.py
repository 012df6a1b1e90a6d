"""
Trader Performance API Constants
Cache lifetimes and upstream paging limits, fixed at deploy time
"""

# ============================================================================
# CACHE TTLS
# ============================================================================

PERFORMANCE_CACHE_TTL_SECONDS = 120  # Derived performance summaries
TRADER_STATS_CACHE_TTL_SECONDS = 120  # Leaderboard / value / traded stats
PNL_HISTORY_CACHE_TTL_SECONDS = 300  # Cumulative P&L series


# ============================================================================
# POLYMARKET DATA API
# ============================================================================

# /closed-positions: max 50 per page, offset capped at 100k
CLOSED_POSITIONS_PAGE_SIZE = 50
CLOSED_POSITIONS_MAX_OFFSET = 100_000

# /positions: max 500 per page, offset capped at 10k
OPEN_POSITIONS_PAGE_SIZE = 500
OPEN_POSITIONS_MAX_OFFSET = 10_000

# Non-trades endpoints allow 200 requests per 10 seconds
DATA_API_MAX_REQUESTS = 200
DATA_API_WINDOW_SECONDS = 10.0
DATA_API_MAX_CONCURRENCY = 20

# Timestamps above this are milliseconds
MILLISECOND_TIMESTAMP_THRESHOLD = 1e12


# ============================================================================
# WALLETS
# ============================================================================

WALLET_ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
