"""
rgpd_compliance.db.repositories.audit

Repository for `AuditEvent` entities.

Responsibilities:
- Append audit events (user and admin actions).
- Query the audit trail of a company for transparency.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.db.models import AuditEvent


class AuditRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        company_id: int | None,
        actor: str,
        event_type: str,
        entity_type: str | None = None,
        entity_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditEvent:
        # Audit events are append-only (no update/delete).
        ev = AuditEvent(
            company_id=company_id,
            actor=actor,
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
        )
        self._session.add(ev)
        await self._session.flush()
        return ev

    async def list_for_company(self, company_id: int, *, limit: int = 200) -> list[AuditEvent]:
        # Newest first; id breaks ties between events written in the same instant.
        stmt = (
            select(AuditEvent)
            .where(AuditEvent.company_id == company_id)
            .order_by(desc(AuditEvent.created_at), desc(AuditEvent.id))
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())
