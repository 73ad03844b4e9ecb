"""
rgpd_compliance.services.requests

Data subject requests service.

Responsibilities:
- Register requests with their one-month answer deadline.
- Track their handling (status, identity check) and stamp `completed_at` on closure.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.models import DataSubjectRequest, RequestStatus
from rgpd_compliance.db.repositories.audit import AuditRepo
from rgpd_compliance.db.repositories.requests import RequestRepo
from rgpd_compliance.errors import NotFoundError
from rgpd_compliance.observability.logging import get_logger
from rgpd_compliance.rules import requests as request_rules

log = get_logger(__name__)


class RequestService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._requests = RequestRepo(session)
        self._audit = AuditRepo(session)

    async def list_requests(self, ctx: CompanyContext) -> list[DataSubjectRequest]:
        return await self._requests.list_for_company(ctx.company_id)

    async def get(self, ctx: CompanyContext, request_id: int) -> DataSubjectRequest:
        req = await self._requests.get(ctx.company_id, request_id)
        if req is None:
            raise NotFoundError("Data subject request not found")
        return req

    async def create(
        self, ctx: CompanyContext, fields: dict[str, Any], *, now: datetime | None = None
    ) -> DataSubjectRequest:
        received = now or datetime.utcnow()
        req = await self._requests.create(
            company_id=ctx.company_id,
            fields={
                **fields,
                "status": RequestStatus.new,
                "due_date": request_rules.add_one_month(received),
                "created_at": received,
            },
        )
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="REQUEST_CREATED",
            entity_type="data_subject_request",
            entity_id=req.id,
            details={"request_type": req.request_type.value},
        )
        await self._session.commit()
        log.info(
            "request_created",
            company_id=ctx.company_id,
            request_id=req.id,
            request_type=req.request_type.value,
        )
        return req

    async def update(
        self, ctx: CompanyContext, request_id: int, fields: dict[str, Any]
    ) -> DataSubjectRequest:
        req = await self.get(ctx, request_id)

        status = fields.get("status")
        if status is not None and status != req.status:
            fields["completed_at"] = datetime.utcnow() if status is RequestStatus.closed else None
        await self._requests.update(req, fields)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="REQUEST_UPDATED",
            entity_type="data_subject_request",
            entity_id=req.id,
            details={"fields": sorted(fields), "status": req.status.value},
        )
        await self._session.commit()
        log.info("request_updated", company_id=ctx.company_id, request_id=req.id)
        return req
