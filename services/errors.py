"""
Trader service exceptions

Raised by the services layer and translated to HTTP errors at the API boundary.
"""


class TraderServiceError(Exception):
    """Base trader service exception."""


class InvalidAddressError(TraderServiceError):
    """Wallet identifier does not match the 0x + 40 hex pattern."""

    def __init__(self, address: object):
        super().__init__(f"Invalid wallet address: {address!r}")
        self.address = address


class UpstreamError(TraderServiceError):
    """A position or stats provider call failed or returned a malformed payload."""


class ComputeError(TraderServiceError):
    """A derived metric came out non-finite."""
