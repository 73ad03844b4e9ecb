"""
rgpd_compliance.db.repositories.requests

Repository for `DataSubjectRequest` entities (access, erasure, ... requests).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.db.models import DataSubjectRequest


class RequestRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, company_id: int, fields: dict[str, Any]) -> DataSubjectRequest:
        req = DataSubjectRequest(company_id=company_id, **fields)
        self._session.add(req)
        await self._session.flush()
        return req

    async def get(self, company_id: int, request_id: int) -> DataSubjectRequest | None:
        req = await self._session.get(DataSubjectRequest, request_id)
        if req is None or req.company_id != company_id:
            return None
        return req

    async def list_for_company(self, company_id: int) -> list[DataSubjectRequest]:
        stmt = (
            select(DataSubjectRequest)
            .where(DataSubjectRequest.company_id == company_id)
            .order_by(DataSubjectRequest.created_at.desc(), DataSubjectRequest.id.desc())
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, req: DataSubjectRequest, fields: dict[str, Any]) -> DataSubjectRequest:
        for name, value in fields.items():
            setattr(req, name, value)
        await self._session.flush()
        return req
