"""
rgpd_compliance.api.routers.audit

Company audit trail endpoint (`admin.read`).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.api.deps import db_session
from rgpd_compliance.auth.deps import require_permission
from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.services.audit import AuditService

router = APIRouter(prefix="/api/audit", tags=["audit"])


@router.get("/{company_id}")
async def list_audit_events(
    limit: int = Query(default=200, ge=1, le=1000),
    ctx: CompanyContext = Depends(require_permission("admin", "read")),
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    # Newest first (see AuditRepo).
    events = await AuditService(session=session).list_events(ctx, limit=limit)
    return [
        {
            "id": e.id,
            "event_type": e.event_type,
            "actor": e.actor,
            "entity_type": e.entity_type,
            "entity_id": e.entity_id,
            "details": e.details,
            "created_at": e.created_at.isoformat(),
        }
        for e in events
    ]
