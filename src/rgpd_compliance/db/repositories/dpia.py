"""
rgpd_compliance.db.repositories.dpia

Repositories for DPIA evaluations (screening) and DPIA assessments (full analysis).

Responsibilities:
- Upsert one `DpiaEvaluation` per processing record.
- CRUD for `DpiaAssessment` rows.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.db.models import DpiaAssessment, DpiaEvaluation


class DpiaEvaluationRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for_record(self, record_id: int) -> DpiaEvaluation | None:
        stmt = select(DpiaEvaluation).where(DpiaEvaluation.record_id == record_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def upsert(
        self, *, company_id: int, record_id: int, fields: dict[str, Any]
    ) -> tuple[DpiaEvaluation, bool]:
        """
        Insert or update the evaluation of `record_id`.
        Returns the row and whether it was created.
        """

        existing = await self.get_for_record(record_id)
        if existing is not None:
            for name, value in fields.items():
                setattr(existing, name, value)
            await self._session.flush()
            return existing, False

        ev = DpiaEvaluation(company_id=company_id, record_id=record_id, **fields)
        self._session.add(ev)
        await self._session.flush()
        return ev, True

    async def get(self, company_id: int, evaluation_id: int) -> DpiaEvaluation | None:
        ev = await self._session.get(DpiaEvaluation, evaluation_id)
        if ev is None or ev.company_id != company_id:
            return None
        return ev

    async def list_for_company(self, company_id: int) -> list[DpiaEvaluation]:
        stmt = (
            select(DpiaEvaluation)
            .where(DpiaEvaluation.company_id == company_id)
            .order_by(DpiaEvaluation.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def delete(self, ev: DpiaEvaluation) -> None:
        await self._session.delete(ev)
        await self._session.flush()


class DpiaAssessmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, company_id: int, fields: dict[str, Any]) -> DpiaAssessment:
        assessment = DpiaAssessment(company_id=company_id, **fields)
        self._session.add(assessment)
        await self._session.flush()
        return assessment

    async def get(self, company_id: int, assessment_id: int) -> DpiaAssessment | None:
        assessment = await self._session.get(DpiaAssessment, assessment_id)
        if assessment is None or assessment.company_id != company_id:
            return None
        return assessment

    async def list_for_company(self, company_id: int) -> list[DpiaAssessment]:
        stmt = (
            select(DpiaAssessment)
            .where(DpiaAssessment.company_id == company_id)
            .order_by(DpiaAssessment.created_at.desc(), DpiaAssessment.id.desc())
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, assessment: DpiaAssessment, fields: dict[str, Any]) -> DpiaAssessment:
        for name, value in fields.items():
            setattr(assessment, name, value)
        await self._session.flush()
        return assessment

    async def delete(self, assessment: DpiaAssessment) -> None:
        await self._session.delete(assessment)
        await self._session.flush()
