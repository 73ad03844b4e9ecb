"""
rgpd_compliance.db.repositories.admin

Repositories for admin-owned content: AI prompts and reference documents.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.db.models import AiPrompt, ReferenceDocument


class PromptRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, fields: dict[str, Any]) -> AiPrompt:
        prompt = AiPrompt(**fields)
        self._session.add(prompt)
        await self._session.flush()
        return prompt

    async def get(self, prompt_id: int) -> AiPrompt | None:
        return await self._session.get(AiPrompt, prompt_id)

    async def list_all(self, *, category: str | None = None) -> list[AiPrompt]:
        stmt = select(AiPrompt).order_by(AiPrompt.category, AiPrompt.name, AiPrompt.id)
        if category is not None:
            stmt = stmt.where(AiPrompt.category == category)
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, prompt: AiPrompt, fields: dict[str, Any]) -> AiPrompt:
        for name, value in fields.items():
            setattr(prompt, name, value)
        await self._session.flush()
        return prompt


class DocumentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, fields: dict[str, Any]) -> ReferenceDocument:
        doc = ReferenceDocument(**fields)
        self._session.add(doc)
        await self._session.flush()
        return doc

    async def get(self, document_id: int) -> ReferenceDocument | None:
        return await self._session.get(ReferenceDocument, document_id)

    async def get_by_sha256(self, sha256: str) -> ReferenceDocument | None:
        stmt = select(ReferenceDocument).where(ReferenceDocument.sha256 == sha256)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self, *, include_inactive: bool = False) -> list[ReferenceDocument]:
        stmt = select(ReferenceDocument).order_by(
            ReferenceDocument.created_at.desc(), ReferenceDocument.id.desc()
        )
        if not include_inactive:
            stmt = stmt.where(ReferenceDocument.is_active.is_(True))
        return list((await self._session.execute(stmt)).scalars().all())

    async def delete(self, doc: ReferenceDocument) -> None:
        await self._session.delete(doc)
        await self._session.flush()
