import logging

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger("tokenswap.errors")


class SwapError(Exception):
    """Base class for domain errors raised by the conversion core."""


class InvalidNumber(SwapError, ValueError):
    """A value could not be parsed into a finite decimal."""


class ValidationFailed(SwapError):
    """User input on one side of the form failed validation.

    Non-fatal: the engine records it per side and suppresses the derived output.
    """

    def __init__(self, side: str, message: str):
        super().__init__(message)
        self.side = side
        self.message = message


class FeedUnavailable(SwapError):
    """The price feed could not be fetched or decoded."""


class TransactionFailed(SwapError):
    """A simulated swap submission failed. Terminal for that attempt."""


class UnknownToken(SwapError, KeyError):
    def __init__(self, symbol: str):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self) -> str:
        return f"token '{self.symbol}' is not in the catalog"


class UnknownSession(SwapError, KeyError):
    def __init__(self, session_id: str):
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"session '{self.session_id}' not found"


class ConfirmationNotReady(SwapError):
    """Confirm was requested while the form cannot be submitted."""


def not_found_handler(request: Request, exc):  # type: ignore
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "not_found" if exc.status_code == 404 else "http_error",
            "detail": exc.detail
            if exc.status_code != 404 or exc.detail != "Not Found"
            else f"No route for {request.method} {request.url.path}",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def lookup_error_handler(request: Request, exc: SwapError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "detail": str(exc)},
    )


def not_ready_handler(request: Request, exc: ConfirmationNotReady):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "not_ready", "detail": str(exc)},
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
