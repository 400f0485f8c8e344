"""Map analysis exceptions to JSON error responses."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from src.parsers.exceptions import (
    FallbackFailedError,
    InvalidIdentifierError,
    NotAMintError,
    NotFoundError,
    TransportError,
)


def _error(status_code: int, error: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


async def _invalid_identifier(_request: Request, exc: InvalidIdentifierError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, f"Invalid {exc.kind}", value=exc.value)


async def _not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


async def _not_a_mint(_request: Request, exc: NotAMintError) -> JSONResponse:
    return _error(
        status.HTTP_400_BAD_REQUEST,
        "Account is not a SPL mint",
        program=exc.program,
        type=exc.account_type,
    )


async def _fallback_failed(request: Request, exc: FallbackFailedError) -> JSONResponse:
    logger.warning(f"[API] {request.url.path}: {exc}")
    return _error(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Holder data temporarily unavailable",
        message=str(exc),
        retryable=True,
    )


async def _transport(request: Request, exc: TransportError) -> JSONResponse:
    logger.error(f"[API] {request.url.path} upstream failure: {exc}")
    return _error(status.HTTP_502_BAD_GATEWAY, "Upstream request failed", message=str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidIdentifierError, _invalid_identifier)  # type: ignore[arg-type]
    app.add_exception_handler(NotFoundError, _not_found)  # type: ignore[arg-type]
    app.add_exception_handler(NotAMintError, _not_a_mint)  # type: ignore[arg-type]
    app.add_exception_handler(FallbackFailedError, _fallback_failed)  # type: ignore[arg-type]
    app.add_exception_handler(TransportError, _transport)  # type: ignore[arg-type]
