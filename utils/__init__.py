"""Utility modules for the Trader Performance API."""
from .cache import CacheStats, TTLCache
from .single_flight import SingleFlight
from .wallet import is_valid_wallet, normalize_wallet
from .rich_logging import setup_logging, log_cache_summary

__all__ = [
    'CacheStats',
    'TTLCache',
    'SingleFlight',
    'is_valid_wallet',
    'normalize_wallet',
    'setup_logging',
    'log_cache_summary',
]
