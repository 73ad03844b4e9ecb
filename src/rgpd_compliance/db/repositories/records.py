"""
rgpd_compliance.db.repositories.records

Repository for `ProcessingRecord` entities (the Art. 30 registry).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.db.models import ProcessingRecord


class RecordRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, company_id: int, fields: dict[str, Any]) -> ProcessingRecord:
        record = ProcessingRecord(company_id=company_id, **fields)
        self._session.add(record)
        await self._session.flush()
        return record

    async def get(self, company_id: int, record_id: int) -> ProcessingRecord | None:
        record = await self._session.get(ProcessingRecord, record_id)
        # Records of another company are invisible, not forbidden.
        if record is None or record.company_id != company_id:
            return None
        return record

    async def list_for_company(self, company_id: int) -> list[ProcessingRecord]:
        stmt = (
            select(ProcessingRecord)
            .where(ProcessingRecord.company_id == company_id)
            .order_by(ProcessingRecord.created_at, ProcessingRecord.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, record: ProcessingRecord, fields: dict[str, Any]) -> ProcessingRecord:
        for name, value in fields.items():
            setattr(record, name, value)
        await self._session.flush()
        return record

    async def delete(self, record: ProcessingRecord) -> None:
        await self._session.delete(record)
        await self._session.flush()
