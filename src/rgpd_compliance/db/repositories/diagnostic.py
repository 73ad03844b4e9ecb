"""
rgpd_compliance.db.repositories.diagnostic

Repositories for the diagnostic questionnaire and the resulting action plan.

Responsibilities:
- Read/maintain `DiagnosticQuestion` rows (admin-owned, soft-deleted).
- Upsert one `DiagnosticResponse` per (company, question).
- Create and update `ComplianceAction` rows.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.db.models import ComplianceAction, DiagnosticQuestion, DiagnosticResponse


class QuestionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, fields: dict[str, Any]) -> DiagnosticQuestion:
        q = DiagnosticQuestion(**fields)
        self._session.add(q)
        await self._session.flush()
        return q

    async def get(self, question_id: int) -> DiagnosticQuestion | None:
        return await self._session.get(DiagnosticQuestion, question_id)

    async def list_active(self) -> list[DiagnosticQuestion]:
        stmt = (
            select(DiagnosticQuestion)
            .where(DiagnosticQuestion.is_active.is_(True))
            .order_by(DiagnosticQuestion.order, DiagnosticQuestion.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, q: DiagnosticQuestion, fields: dict[str, Any]) -> DiagnosticQuestion:
        for name, value in fields.items():
            setattr(q, name, value)
        await self._session.flush()
        return q


class ResponseRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, *, company_id: int, question_id: int, response: str) -> DiagnosticResponse:
        stmt = select(DiagnosticResponse).where(
            DiagnosticResponse.company_id == company_id,
            DiagnosticResponse.question_id == question_id,
        )
        existing = (await self._session.execute(stmt)).scalar_one_or_none()
        if existing is not None:
            existing.response = response
            await self._session.flush()
            return existing

        row = DiagnosticResponse(company_id=company_id, question_id=question_id, response=response)
        self._session.add(row)
        await self._session.flush()
        return row

    async def list_for_company(self, company_id: int) -> list[DiagnosticResponse]:
        stmt = (
            select(DiagnosticResponse)
            .where(DiagnosticResponse.company_id == company_id)
            .order_by(DiagnosticResponse.question_id)
        )
        return list((await self._session.execute(stmt)).scalars().all())


class ActionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, company_id: int, fields: dict[str, Any]) -> ComplianceAction:
        action = ComplianceAction(company_id=company_id, **fields)
        self._session.add(action)
        await self._session.flush()
        return action

    async def get(self, company_id: int, action_id: int) -> ComplianceAction | None:
        action = await self._session.get(ComplianceAction, action_id)
        if action is None or action.company_id != company_id:
            return None
        return action

    async def list_for_company(self, company_id: int) -> list[ComplianceAction]:
        stmt = (
            select(ComplianceAction)
            .where(ComplianceAction.company_id == company_id)
            .order_by(ComplianceAction.created_at, ComplianceAction.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, action: ComplianceAction, fields: dict[str, Any]) -> ComplianceAction:
        for name, value in fields.items():
            setattr(action, name, value)
        await self._session.flush()
        return action
