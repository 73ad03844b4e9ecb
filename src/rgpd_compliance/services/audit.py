"""
rgpd_compliance.services.audit

Read access to the audit trail.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.models import AuditEvent
from rgpd_compliance.db.repositories.audit import AuditRepo


class AuditService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._audit = AuditRepo(session)

    async def list_events(self, ctx: CompanyContext, *, limit: int = 200) -> list[AuditEvent]:
        return await self._audit.list_for_company(ctx.company_id, limit=limit)
