"""
JSON error envelopes for failures outside GraphQL execution.

Resolver errors are reported by GraphQL itself, in the ``errors`` list
with ``extensions.code``.  Everything that fails before or around
execution (a bad bearer token, an unknown route, a crash) is answered
here with the same codes in a fixed envelope::

    {"error": {"code": "INVALID_TOKEN", "message": "...", "status": 401,
               "request_id": null, "timestamp": 1718901234.56, "details": null}}
"""
from __future__ import annotations

import logging
import time
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from contactgraph.errors import ContactGraphError, ErrorKind

log = logging.getLogger("contactgraph.api.errors")

_KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.INVALID_TOKEN: 401,
    ErrorKind.VALIDATION_ERROR: 422,
}


class ErrorBody(BaseModel):
    code: str
    message: str
    status: int
    request_id: str | None = None
    timestamp: float
    details: Any | None = None


class ErrorEnvelope(BaseModel):
    error: ErrorBody


def status_code_name(status: int) -> str:
    """``404`` -> ``NOT_FOUND``; unknown codes become ``HTTP_<n>``."""
    try:
        return HTTPStatus(status).name
    except ValueError:
        return f"HTTP_{status}"


def error_response(
    request: Request,
    status: int,
    message: str,
    *,
    code: str | None = None,
    details: Any = None,
) -> JSONResponse:
    body = ErrorEnvelope(error=ErrorBody(
        code=code or status_code_name(status),
        message=message,
        status=status,
        request_id=getattr(request.state, "request_id", None)
        or request.headers.get("x-request-id"),
        timestamp=time.time(),
        details=details,
    ))
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(body.model_dump(), status_code=status, headers=headers)


async def _on_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(request, exc.status_code, str(exc.detail))


async def _on_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ())),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return error_response(
        request, 422, "Request validation failed",
        code=ErrorKind.VALIDATION_ERROR.value, details=details,
    )


async def _on_contactgraph_error(request: Request, exc: ContactGraphError) -> JSONResponse:
    status = _KIND_STATUS.get(exc.kind, 400)
    log.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    details = {k: v for k, v in exc.extensions.items() if k != "code"} or None
    return error_response(request, status, exc.message, code=exc.kind.value, details=details)


async def _on_unhandled(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return error_response(request, 500, "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    """Register the envelope handlers on *app*."""
    app.add_exception_handler(StarletteHTTPException, _on_http_exception)
    app.add_exception_handler(RequestValidationError, _on_request_validation)
    app.add_exception_handler(ContactGraphError, _on_contactgraph_error)
    app.add_exception_handler(Exception, _on_unhandled)
