"""
Custom HTTP exceptions and global exception handlers for CarbonMeter.
All application-level errors are defined here for consistency.
Every error body carries a human-readable ``error`` string.
"""
from __future__ import annotations

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


# ── Custom exception classes ──────────────────────────────────────────────────

class CarbonMeterException(Exception):
    """Base exception for all CarbonMeter domain errors."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.error_code = error_code or "CARBONMETER_ERROR"
        super().__init__(detail)


class NotFoundException(CarbonMeterException):
    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        detail = f"{resource} not found"
        if resource_id:
            detail = f"{resource} with id '{resource_id}' not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND",
        )


class UnauthorizedException(CarbonMeterException):
    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
        )


class InvalidSessionException(CarbonMeterException):
    def __init__(self, detail: str = "Invalid or expired session") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="INVALID_SESSION",
        )


class BadRequestException(CarbonMeterException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="BAD_REQUEST",
        )


class ValidationException(CarbonMeterException):
    """Input failed a domain rule. ``errors`` lists the offending fields."""

    def __init__(self, errors: list[dict[str, str]]) -> None:
        self.errors = errors
        fields = ", ".join(e["field"] for e in errors)
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Validation failed: {fields}",
            error_code="VALIDATION_ERROR",
        )

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationException":
        return cls([{"field": field, "message": message}])


# ── Exception handlers ────────────────────────────────────────────────────────

def _error_response(
    status_code: int,
    detail: str,
    error_code: str,
    **extra: object,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": detail,
            "code": error_code,
            **extra,
        },
    )


async def carbonmeter_exception_handler(
    request: Request, exc: CarbonMeterException
) -> JSONResponse:
    if isinstance(exc, ValidationException):
        return _error_response(
            exc.status_code, exc.detail, exc.error_code, errors=exc.errors
        )
    return _error_response(exc.status_code, exc.detail, exc.error_code)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        # Drop the "body"/"query" prefix so fields read like the payload keys
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        errors.append({"field": field, "message": error["msg"]})
    detail = errors[0]["message"] if len(errors) == 1 else "Request validation failed"
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        detail,
        "VALIDATION_ERROR",
        errors=errors,
    )


async def rate_limit_exception_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    retry_after = math.ceil(exc.limit.limit.get_expiry())
    logger.warning(
        "Rate limit exceeded: client=%s path=%s limit=%s",
        request.client.host if request.client else "unknown",
        request.url.path,
        exc.detail,
    )
    response = _error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many requests. Please try again later.",
        "RATE_LIMITED",
        retryAfter=retry_after,
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return _error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI application."""
    app.add_exception_handler(CarbonMeterException, carbonmeter_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
