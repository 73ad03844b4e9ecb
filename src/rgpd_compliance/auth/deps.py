"""
rgpd_compliance.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a typed `Principal`.
- Enforce platform roles via `require_roles`.
- Enforce company-scoped `module.level` permissions via `require_permission`.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN, HTTP_404_NOT_FOUND

from rgpd_compliance.api.deps import db_session, settings_dep
from rgpd_compliance.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from rgpd_compliance.auth.models import CompanyContext, Principal
from rgpd_compliance.db.repositories.companies import AccessRepo, CompanyRepo
from rgpd_compliance.rules import permissions as perms
from rgpd_compliance.settings import Settings

_bearer = HTTPBearer(auto_error=False)


async def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    try:
        payload = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e

    subject = str(payload.get("sub", ""))
    roles_raw = payload.get("roles", [])
    if not subject:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token subject")
    if not isinstance(roles_raw, list):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token roles")

    email = payload.get("email")
    structlog.contextvars.bind_contextvars(subject=subject)
    return Principal(
        subject=subject,
        roles=frozenset(str(r) for r in roles_raw),
        email=str(email) if email else None,
    )


def require_roles(*required: str):
    required_set = frozenset(required)

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        # Platform admin bypasses role checks.
        if principal.is_admin:
            return principal
        if not required_set.issubset(principal.roles):
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
        return principal

    return _dep


async def company_context(
    company_id: int,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> CompanyContext:
    """
    Resolve the caller's access to the `company_id` path parameter.
    Non-members get 404 so company ids cannot be probed.
    """

    company = await CompanyRepo(session).get(company_id)
    if company is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Company not found")

    access = await AccessRepo(session).get_for_subject(company_id, principal.subject)
    if access is not None:
        return CompanyContext(
            principal=principal,
            company=company,
            access=access,
            permissions=frozenset(access.permissions or []),
        )
    if principal.is_admin:
        return CompanyContext(
            principal=principal, company=company, access=None, permissions=frozenset({perms.ALL})
        )
    raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Company not found")


def require_permission(module: str, level: str):
    # Fail at import time on a typo in a router.
    needed = perms.permission(module, level)

    async def _dep(ctx: CompanyContext = Depends(company_context)) -> CompanyContext:
        if ctx.principal.is_admin or ctx.can(module, level):
            return ctx
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail=f"Missing permission: {needed}")

    return _dep


# --- Module Notes -----------------------------------------------------------
# `require_permission` runs before the endpoint body, so a denied write never reaches the
# service layer and nothing is persisted.
