"""
Wallet address helpers.

Addresses are 0x-prefixed 40-hex-character strings compared case-insensitively;
the lowercase form is used as the lookup and cache key everywhere.
"""
import re
from typing import Any

from config.system_constants import WALLET_ADDRESS_PATTERN

_WALLET_RE = re.compile(WALLET_ADDRESS_PATTERN)


def is_valid_wallet(address: Any) -> bool:
    """Return True when address is a well-formed 0x wallet string."""
    return isinstance(address, str) and bool(_WALLET_RE.fullmatch(address))


def normalize_wallet(address: str) -> str:
    """Lowercase a valid wallet; anything else is returned unchanged."""
    if not is_valid_wallet(address):
        return address
    return address.lower()
