"""
rgpd_compliance.api.error_handlers

Render domain errors as JSON responses.

Responsibilities:
- Map `DomainError` subclasses to their HTTP status and a stable error body.
- Echo the request id so clients can correlate with server logs.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rgpd_compliance.errors import DomainError
from rgpd_compliance.observability.logging import get_logger

log = get_logger(__name__)


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def error_body(*, request: Request, code: str, message: str, details: Any | None = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"error": error, "request_id": _request_id(request)}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        log.info("domain_error", code=exc.code, status_code=exc.status_code, message=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(
                request=request, code=exc.code, message=exc.message, details=exc.details
            ),
        )
