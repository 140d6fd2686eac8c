"""Domain errors raised by services.

Each error is an ``HTTPException`` whose detail is the ``{code, message,
retriable}`` dict that ``http_error_handler`` turns into the error envelope,
so services can raise them directly and routers never translate.
"""
import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class DomainError(HTTPException):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"
    retriable = False

    def __init__(self, message: str, **extra):
        detail = {"code": self.code, "message": message, "retriable": self.retriable}
        detail.update(extra)
        super().__init__(status_code=self.status_code, detail=detail)
        self.message = message


class ValidationError(DomainError):
    """Client-correctable input problem (missing field, bound violated)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        if errors:
            super().__init__(message, errors=errors)
        else:
            super().__init__(message)
        self.errors = errors or {}


class NotFoundError(DomainError):
    """Referenced entity does not exist or is not visible to the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ConflictError(DomainError):
    """Operation conflicts with current state (already submitted, stale version)."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


# Statuses a client may retry unchanged when the error carries no explicit flag
RETRIABLE_STATUSES = frozenset({408, 425, 429})


def is_retriable(status_code: int) -> bool:
    return status_code in RETRIABLE_STATUSES or status_code >= 500


def request_id_of(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def error_response(request: Request, status_code: int, code: str, message: str,
                   retriable: bool, errors: Optional[Dict[str, List[str]]] = None) -> JSONResponse:
    """
    Error envelope returned for every failed request:
    ``{code, message, retriable, request_id[, errors]}``.
    """
    request_id = request_id_of(request)
    body = {"code": code, "message": message, "retriable": retriable, "request_id": request_id}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body, headers={"X-Request-Id": request_id})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, dict) else {"message": str(exc.detail)}
    retriable = detail.get("retriable")
    response = error_response(
        request,
        exc.status_code,
        code=str(detail.get("code") or f"http_{exc.status_code}"),
        message=str(detail.get("message") or "Request failed"),
        retriable=is_retriable(exc.status_code) if retriable is None else bool(retriable),
        errors=detail.get("errors"),
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields: Dict[str, List[str]] = {}
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        fields.setdefault(location or "body", []).append(error.get("msg", "Invalid value"))
    return error_response(request, status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error",
                          "Request validation failed", retriable=False, errors=fields)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return error_response(request, status.HTTP_429_TOO_MANY_REQUESTS, "rate_limited",
                          "Too many requests", retriable=True)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error",
                          "Unexpected server error", retriable=True)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
