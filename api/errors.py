"""
API Error Handling

Standardized error handling for the API.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from api.models.responses import ErrorResponse, ErrorDetail
from core.schemas.errors import (
    AirdropException,
    ErrorCodes,
    IntegrityMismatchException,
    MalformedInputException,
    RemoteFetchException,
    StructuralViolationException,
    TreeDataFormatException,
)


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class InvalidRequestError(APIError):
    """Invalid request parameters."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="INVALID_REQUEST",
            message=message,
            status_code=400,
            details=details,
        )


class InvalidAddressError(APIError):
    """Address is not a 0x-prefixed 20-byte hex string."""

    def __init__(self, address: str):
        super().__init__(
            code=ErrorCodes.INVALID_ADDRESS,
            message="Invalid address",
            status_code=400,
            details={"address": address},
        )


class NotEligibleError(APIError):
    """Address is not a recipient of the served tree."""

    def __init__(self, address: str):
        super().__init__(
            code=ErrorCodes.NOT_ELIGIBLE,
            message="Address not eligible",
            status_code=404,
            details={"address": address},
        )


class AlreadyClaimedError(APIError):
    """Recipient has already claimed."""

    def __init__(self, address: str, index: int):
        super().__init__(
            code=ErrorCodes.ALREADY_CLAIMED,
            message="Allocation already claimed",
            status_code=409,
            details={"address": address, "index": str(index)},
        )


class TreeNotLoadedError(APIError):
    """No tree is being served."""

    def __init__(self, message: str = "No merkle tree loaded"):
        super().__init__(
            code=ErrorCodes.TREE_NOT_LOADED,
            message=message,
            status_code=503,
        )


class InternalError(APIError):
    """Internal server error."""

    def __init__(self, message: str = "Internal server error", details: dict[str, Any] | None = None):
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
            details=details,
        )


def status_for_exception(exc: AirdropException) -> int:
    """HTTP status for an engine exception."""
    if isinstance(exc, (MalformedInputException, StructuralViolationException)):
        return 400
    if isinstance(exc, IntegrityMismatchException):
        return 409
    if isinstance(exc, (RemoteFetchException, TreeDataFormatException)):
        return 502
    return 500


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def airdrop_error_handler(request: Request, exc: AirdropException) -> JSONResponse:
    """Handle engine exceptions that escaped a route."""
    return JSONResponse(
        status_code=status_for_exception(exc),
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(code=exc.code, message=exc.message, details=exc.details),
        ).model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(),
    )
