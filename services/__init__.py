"""Trader services and their error taxonomy."""
from .errors import ComputeError, InvalidAddressError, TraderServiceError, UpstreamError

__all__ = [
    "ComputeError",
    "InvalidAddressError",
    "TraderServiceError",
    "UpstreamError",
]
