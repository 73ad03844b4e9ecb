"""
rgpd_compliance.db.repositories.breaches

Repository for `DataBreach` entities.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.db.models import DataBreach


class BreachRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, company_id: int, fields: dict[str, Any]) -> DataBreach:
        breach = DataBreach(company_id=company_id, **fields)
        self._session.add(breach)
        await self._session.flush()
        return breach

    async def get(self, company_id: int, breach_id: int) -> DataBreach | None:
        breach = await self._session.get(DataBreach, breach_id)
        if breach is None or breach.company_id != company_id:
            return None
        return breach

    async def list_for_company(self, company_id: int) -> list[DataBreach]:
        stmt = (
            select(DataBreach)
            .where(DataBreach.company_id == company_id)
            .order_by(DataBreach.created_at.desc(), DataBreach.id.desc())
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, breach: DataBreach, fields: dict[str, Any]) -> DataBreach:
        for name, value in fields.items():
            setattr(breach, name, value)
        await self._session.flush()
        return breach
