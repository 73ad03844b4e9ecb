"""
rgpd_compliance.errors

Domain error types raised by the service layer.

Responsibilities:
- Carry an HTTP status and a stable error code with each business failure.
- Keep services free of FastAPI imports; the API layer renders these errors.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    status_code: int = 400
    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(DomainError):
    status_code = 404
    code = "NOT_FOUND"


class PermissionDeniedError(DomainError):
    status_code = 403
    code = "PERMISSION_DENIED"


class ValidationFailedError(DomainError):
    status_code = 422
    code = "VALIDATION_FAILED"


class ConflictError(DomainError):
    status_code = 409
    code = "CONFLICT"


# --- Module Notes -----------------------------------------------------------
# Rendering lives in `api.error_handlers`; auth failures keep using HTTPException
# (401/403) from `auth.deps` because they happen before any service runs.
