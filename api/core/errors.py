"""
Error taxonomy shared by every feature, plus the FastAPI handlers that turn
these errors into JSON bodies.

Every error body is an object with an `error` field. Server-side errors
(5xx) also carry a `details` string.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(RuntimeError):
    status_code = 500

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(AppError):
    status_code = 400


class PayloadTooLargeError(ValidationError):
    status_code = 413


class NotFoundError(AppError):
    status_code = 404


# Pinata failures are explicit and separable from storage failures.
class UpstreamError(AppError):
    status_code = 500


class StorageError(AppError):
    status_code = 500


def error_body(exc: AppError) -> dict[str, Any]:
    body: dict[str, Any] = {"error": exc.message}
    if exc.status_code >= 500:
        body["details"] = exc.details or exc.message
    return body


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed method=%s path=%s error=%s details=%s",
            request.method,
            request.url.path,
            exc.message,
            exc.details,
        )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", ""))}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": details})


async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
