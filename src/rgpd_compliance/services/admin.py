"""
rgpd_compliance.services.admin

Platform administration service.

Responsibilities:
- Manage AI prompts (versioned on text change).
- Manage diagnostic questions (delete deactivates).
- Ingest reference PDF documents: validate, extract text with PyPDF2, store metadata.
"""

from __future__ import annotations

import hashlib
import io
from typing import Any

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.auth.models import Principal
from rgpd_compliance.db.models import AiPrompt, DiagnosticQuestion, ReferenceDocument
from rgpd_compliance.db.repositories.admin import DocumentRepo, PromptRepo
from rgpd_compliance.db.repositories.audit import AuditRepo
from rgpd_compliance.db.repositories.diagnostic import QuestionRepo
from rgpd_compliance.errors import ConflictError, NotFoundError, ValidationFailedError
from rgpd_compliance.observability.logging import get_logger

log = get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"
_PDF_MAGIC = b"%PDF-"


def _page_text(page) -> str:
    try:
        return page.extract_text() or ""
    except KeyError:
        # Pages without a content stream carry no text.
        return ""


def extract_pdf_text(data: bytes) -> tuple[str, int]:
    """
    Return `(text, page_count)`; pages are separated by a blank line.
    """

    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [_page_text(page) for page in reader.pages]
    except (PdfReadError, ValueError) as e:
        raise ValidationFailedError(f"Unreadable PDF: {e}") from e
    return "\n\n".join(p.strip() for p in pages if p.strip()), len(pages)


class AdminService:
    def __init__(self, *, session: AsyncSession, max_upload_bytes: int) -> None:
        self._session = session
        self._max_upload_bytes = max_upload_bytes
        self._prompts = PromptRepo(session)
        self._questions = QuestionRepo(session)
        self._documents = DocumentRepo(session)
        self._audit = AuditRepo(session)

    # -- prompts -----------------------------------------------------------

    async def list_prompts(self, *, category: str | None = None) -> list[AiPrompt]:
        return await self._prompts.list_all(category=category)

    async def create_prompt(self, principal: Principal, fields: dict[str, Any]) -> AiPrompt:
        prompt = await self._prompts.create(fields)
        await self._audit.add(
            company_id=None,
            actor=principal.subject,
            event_type="PROMPT_CREATED",
            entity_type="ai_prompt",
            entity_id=prompt.id,
            details={"name": prompt.name, "category": prompt.category},
        )
        await self._session.commit()
        log.info("prompt_created", prompt_id=prompt.id)
        return prompt

    async def update_prompt(
        self, principal: Principal, prompt_id: int, fields: dict[str, Any]
    ) -> AiPrompt:
        prompt = await self._prompts.get(prompt_id)
        if prompt is None:
            raise NotFoundError("Prompt not found")
        if "prompt" in fields and fields["prompt"] != prompt.prompt:
            fields["version"] = prompt.version + 1
        await self._prompts.update(prompt, fields)
        await self._audit.add(
            company_id=None,
            actor=principal.subject,
            event_type="PROMPT_UPDATED",
            entity_type="ai_prompt",
            entity_id=prompt.id,
            details={"fields": sorted(fields), "version": prompt.version},
        )
        await self._session.commit()
        return prompt

    # -- diagnostic questions ----------------------------------------------

    async def create_question(self, principal: Principal, fields: dict[str, Any]) -> DiagnosticQuestion:
        question = await self._questions.create(fields)
        await self._audit.add(
            company_id=None,
            actor=principal.subject,
            event_type="QUESTION_CREATED",
            entity_type="diagnostic_question",
            entity_id=question.id,
        )
        await self._session.commit()
        return question

    async def update_question(
        self, principal: Principal, question_id: int, fields: dict[str, Any]
    ) -> DiagnosticQuestion:
        question = await self._questions.get(question_id)
        if question is None:
            raise NotFoundError("Question not found")
        await self._questions.update(question, fields)
        await self._audit.add(
            company_id=None,
            actor=principal.subject,
            event_type="QUESTION_UPDATED",
            entity_type="diagnostic_question",
            entity_id=question.id,
            details={"fields": sorted(fields)},
        )
        await self._session.commit()
        return question

    async def deactivate_question(self, principal: Principal, question_id: int) -> None:
        # Answers reference questions, so questions are never hard-deleted.
        await self.update_question(principal, question_id, {"is_active": False})

    # -- reference documents -----------------------------------------------

    async def list_documents(self) -> list[ReferenceDocument]:
        return await self._documents.list_all()

    async def upload_document(
        self,
        principal: Principal,
        *,
        filename: str,
        content_type: str | None,
        data: bytes,
        name: str | None = None,
        category: str = "general",
        tags: list[str] | None = None,
    ) -> ReferenceDocument:
        if not data:
            raise ValidationFailedError("Empty upload")
        if len(data) > self._max_upload_bytes:
            raise ValidationFailedError(
                f"File too large ({len(data)} bytes, max {self._max_upload_bytes})"
            )
        if not data.startswith(_PDF_MAGIC):
            raise ValidationFailedError("Only PDF documents are accepted")

        digest = hashlib.sha256(data).hexdigest()
        if await self._documents.get_by_sha256(digest) is not None:
            raise ConflictError("This document has already been uploaded")

        text, page_count = extract_pdf_text(data)
        doc = await self._documents.create(
            {
                "name": name or filename.rsplit(".", 1)[0],
                "filename": filename,
                "file_size": len(data),
                "mime_type": content_type or PDF_MIME_TYPE,
                "sha256": digest,
                "content": text,
                "page_count": page_count,
                "category": category,
                "tags": list(tags or []),
                "uploaded_by": principal.subject,
            }
        )
        await self._audit.add(
            company_id=None,
            actor=principal.subject,
            event_type="DOCUMENT_UPLOADED",
            entity_type="reference_document",
            entity_id=doc.id,
            details={"filename": filename, "pages": page_count, "chars": len(text)},
        )
        await self._session.commit()
        log.info("document_uploaded", document_id=doc.id, pages=page_count, size=len(data))
        return doc

    async def delete_document(self, principal: Principal, document_id: int) -> None:
        doc = await self._documents.get(document_id)
        if doc is None:
            raise NotFoundError("Document not found")
        await self._documents.delete(doc)
        await self._audit.add(
            company_id=None,
            actor=principal.subject,
            event_type="DOCUMENT_DELETED",
            entity_type="reference_document",
            entity_id=document_id,
            details={"filename": doc.filename},
        )
        await self._session.commit()
