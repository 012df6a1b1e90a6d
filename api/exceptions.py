"""
Custom API Exceptions
"""
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import HTTPException

from services.errors import ComputeError, InvalidAddressError, UpstreamError


class APIException(HTTPException):
    """Base API exception"""
    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code


class InvalidWalletAddressError(APIException):
    """Malformed wallet address"""
    def __init__(self, wallet_address: object):
        super().__init__(
            status_code=400,
            detail="Invalid wallet address",
            error_code="INVALID_ADDRESS"
        )
        self.wallet_address = wallet_address


class InvalidRequestError(APIException):
    """Malformed query or path parameters"""
    def __init__(self, reason: str):
        super().__init__(
            status_code=400,
            detail=f"Invalid request: {reason}",
            error_code="INVALID_REQUEST"
        )


class UpstreamServiceError(APIException):
    """Upstream data provider failure"""
    def __init__(self, reason: str):
        super().__init__(
            status_code=500,
            detail=f"Upstream data provider failed: {reason}",
            error_code="UPSTREAM_ERROR"
        )


class MetricsComputationError(APIException):
    """Derived metrics could not be computed"""
    def __init__(self, reason: str):
        super().__init__(
            status_code=500,
            detail=f"Failed to compute metrics: {reason}",
            error_code="COMPUTE_ERROR"
        )


@contextmanager
def service_errors_as_http(wallet_address: str) -> Iterator[None]:
    """Translate trader service exceptions raised inside the block into API exceptions"""
    try:
        yield
    except InvalidAddressError as e:
        raise InvalidWalletAddressError(wallet_address) from e
    except UpstreamError as e:
        raise UpstreamServiceError(str(e)) from e
    except ComputeError as e:
        raise MetricsComputationError(str(e)) from e
