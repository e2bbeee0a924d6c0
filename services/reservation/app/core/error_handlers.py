"""Exception handlers that turn failures into ``{"detail", "code"}`` payloads."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Mapping, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.exceptions import ReservationError

logger = logging.getLogger(__name__)


def _as_message(detail: Any) -> str:
    if detail is None:
        return "An error occurred"
    if isinstance(detail, str):
        return detail
    if isinstance(detail, Mapping):
        nested = detail.get("detail")
        if isinstance(nested, str):
            return nested
        return "; ".join(f"{key}: {value}" for key, value in detail.items())
    if isinstance(detail, Iterable) and not isinstance(detail, (bytes, bytearray)):
        return "; ".join(_as_message(item) for item in detail)
    return str(detail)


def _error_response(
    status_code: int,
    detail: str,
    code: str,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "code": code},
        headers=dict(headers) if headers else None,
    )


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid input")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ReservationError)
    async def reservation_error_handler(
        request: Request, exc: ReservationError
    ) -> JSONResponse:  # type: ignore[override]
        logger.info(
            "%s %s rejected with %s: %s",
            request.method,
            request.url.path,
            exc.code,
            exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:  # type: ignore[override]
        code = "UNAUTHORIZED" if exc.status_code == 401 else "HTTP_ERROR"
        return _error_response(exc.status_code, _as_message(exc.detail), code, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:  # type: ignore[override]
        return _error_response(422, _validation_message(exc), "VALIDATION_ERROR")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:  # type: ignore[override]
        logger.exception(
            "Unhandled exception while processing %s %s", request.method, request.url
        )
        return _error_response(500, "Internal server error", "INTERNAL_ERROR")


__all__ = ["register_exception_handlers"]
