"""
rgpd_compliance.api.routers.admin

Platform administration endpoints (token role `admin`).

Responsibilities:
- Manage AI prompts.
- Manage diagnostic questions (delete deactivates).
- Upload, list and delete reference PDF documents.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from rgpd_compliance.api.deps import db_session, settings_dep
from rgpd_compliance.api.routers.diagnostic import QuestionResponse
from rgpd_compliance.auth.deps import require_roles
from rgpd_compliance.auth.models import PLATFORM_ADMIN_ROLE, Principal
from rgpd_compliance.services.admin import AdminService
from rgpd_compliance.settings import Settings

router = APIRouter(prefix="/api/admin", tags=["admin"])

_require_admin = require_roles(PLATFORM_ADMIN_ROLE)

_RISK_LEVEL_PATTERN = "^(faible|moyen|elevé|élevé|critique)$"


class PromptCreate(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    description: str | None = None
    category: str = Field(min_length=1, max_length=64)
    prompt: str = Field(min_length=1)
    is_active: bool = True


class PromptUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    description: str | None = None
    category: str | None = Field(default=None, min_length=1, max_length=64)
    prompt: str | None = Field(default=None, min_length=1)
    is_active: bool | None = None


class PromptResponse(PromptCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    version: int
    created_at: datetime


class QuestionCreate(BaseModel):
    question: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=128)
    order: int = Field(ge=0)
    is_active: bool = True
    action_plan_yes: str | None = None
    risk_level_yes: str | None = Field(default=None, pattern=_RISK_LEVEL_PATTERN)
    action_plan_no: str | None = None
    risk_level_no: str | None = Field(default=None, pattern=_RISK_LEVEL_PATTERN)


class QuestionUpdate(BaseModel):
    question: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, min_length=1, max_length=128)
    order: int | None = Field(default=None, ge=0)
    is_active: bool | None = None
    action_plan_yes: str | None = None
    risk_level_yes: str | None = Field(default=None, pattern=_RISK_LEVEL_PATTERN)
    action_plan_no: str | None = None
    risk_level_no: str | None = Field(default=None, pattern=_RISK_LEVEL_PATTERN)


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    filename: str
    file_size: int
    mime_type: str
    sha256: str
    page_count: int
    category: str
    tags: list[str]
    is_active: bool
    uploaded_by: str
    created_at: datetime
    # Extracted text is returned truncated in listings.
    excerpt: str = ""


def _service(session: AsyncSession, settings: Settings) -> AdminService:
    return AdminService(session=session, max_upload_bytes=settings.max_upload_bytes)


def _document(doc) -> DocumentResponse:
    out = DocumentResponse.model_validate(doc)
    out.excerpt = (doc.content or "")[:500]
    return out


# -- prompts ---------------------------------------------------------------


@router.get("/prompts", response_model=list[PromptResponse])
async def list_prompts(
    category: str | None = None,
    principal: Principal = Depends(_require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> list[PromptResponse]:
    rows = await _service(session, settings).list_prompts(category=category)
    return [PromptResponse.model_validate(p) for p in rows]


@router.post("/prompts", response_model=PromptResponse, status_code=HTTP_201_CREATED)
async def create_prompt(
    body: PromptCreate,
    principal: Principal = Depends(_require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> PromptResponse:
    prompt = await _service(session, settings).create_prompt(principal, body.model_dump())
    return PromptResponse.model_validate(prompt)


@router.put("/prompts/{prompt_id}", response_model=PromptResponse)
async def update_prompt(
    prompt_id: int,
    body: PromptUpdate,
    principal: Principal = Depends(_require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> PromptResponse:
    fields = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k == "description"
    }
    prompt = await _service(session, settings).update_prompt(principal, prompt_id, fields)
    return PromptResponse.model_validate(prompt)


# -- diagnostic questions --------------------------------------------------


@router.post("/questions", response_model=QuestionResponse, status_code=HTTP_201_CREATED)
async def create_question(
    body: QuestionCreate,
    principal: Principal = Depends(_require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> QuestionResponse:
    question = await _service(session, settings).create_question(principal, body.model_dump())
    return QuestionResponse.model_validate(question)


@router.put("/questions/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: int,
    body: QuestionUpdate,
    principal: Principal = Depends(_require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> QuestionResponse:
    fields = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k not in ("question", "category", "order", "is_active")
    }
    question = await _service(session, settings).update_question(principal, question_id, fields)
    return QuestionResponse.model_validate(question)


@router.delete("/questions/{question_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: int,
    principal: Principal = Depends(_require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> None:
    await _service(session, settings).deactivate_question(principal, question_id)


# -- reference documents ---------------------------------------------------


@router.get("/documents", response_model=list[DocumentResponse])
async def list_documents(
    principal: Principal = Depends(_require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> list[DocumentResponse]:
    rows = await _service(session, settings).list_documents()
    return [_document(d) for d in rows]


@router.post("/documents", response_model=DocumentResponse, status_code=HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    name: str | None = Form(default=None),
    category: str = Form(default="general"),
    tags: str = Form(default=""),
    principal: Principal = Depends(_require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> DocumentResponse:
    data = await file.read()
    doc = await _service(session, settings).upload_document(
        principal,
        filename=file.filename or "document.pdf",
        content_type=file.content_type,
        data=data,
        name=name,
        category=category,
        tags=[t.strip() for t in tags.split(",") if t.strip()],
    )
    return _document(doc)


@router.delete("/documents/{document_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: int,
    principal: Principal = Depends(_require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> None:
    await _service(session, settings).delete_document(principal, document_id)


# --- Module Notes -----------------------------------------------------------
# Tags arrive as one comma-separated form field.
