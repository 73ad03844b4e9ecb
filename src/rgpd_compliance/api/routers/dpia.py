"""
rgpd_compliance.api.routers.dpia

Full DPIA assessment endpoints (`dpia.*`).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from rgpd_compliance.api.deps import db_session
from rgpd_compliance.auth.deps import require_permission
from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.models import AssessmentStatus
from rgpd_compliance.services.dpia import DpiaService

router = APIRouter(prefix="/api/dpia", tags=["dpia"])


class AssessmentCreate(BaseModel):
    processing_record_id: int
    status: AssessmentStatus = AssessmentStatus.draft
    context: dict[str, Any] = Field(default_factory=dict)
    principles: dict[str, Any] = Field(default_factory=dict)
    risks: dict[str, Any] = Field(default_factory=dict)
    action_plan: list[dict[str, Any]] = Field(default_factory=list)
    dpo_advice: str | None = None
    controller_validation: str | None = None


class AssessmentUpdate(BaseModel):
    processing_record_id: int | None = None
    status: AssessmentStatus | None = None
    context: dict[str, Any] | None = None
    principles: dict[str, Any] | None = None
    risks: dict[str, Any] | None = None
    action_plan: list[dict[str, Any]] | None = None
    dpo_advice: str | None = None
    controller_validation: str | None = None


class AssessmentResponse(AssessmentCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    created_at: datetime
    updated_at: datetime


@router.get("/{company_id}", response_model=list[AssessmentResponse])
async def list_assessments(
    ctx: CompanyContext = Depends(require_permission("dpia", "read")),
    session: AsyncSession = Depends(db_session),
) -> list[AssessmentResponse]:
    rows = await DpiaService(session=session).list_assessments(ctx)
    return [AssessmentResponse.model_validate(a) for a in rows]


@router.post("/{company_id}", response_model=AssessmentResponse, status_code=HTTP_201_CREATED)
async def create_assessment(
    body: AssessmentCreate,
    ctx: CompanyContext = Depends(require_permission("dpia", "write")),
    session: AsyncSession = Depends(db_session),
) -> AssessmentResponse:
    assessment = await DpiaService(session=session).create_assessment(ctx, body.model_dump())
    return AssessmentResponse.model_validate(assessment)


@router.get("/{company_id}/{assessment_id}", response_model=AssessmentResponse)
async def get_assessment(
    assessment_id: int,
    ctx: CompanyContext = Depends(require_permission("dpia", "read")),
    session: AsyncSession = Depends(db_session),
) -> AssessmentResponse:
    assessment = await DpiaService(session=session).get_assessment(ctx, assessment_id)
    return AssessmentResponse.model_validate(assessment)


@router.put("/{company_id}/{assessment_id}", response_model=AssessmentResponse)
async def update_assessment(
    assessment_id: int,
    body: AssessmentUpdate,
    ctx: CompanyContext = Depends(require_permission("dpia", "write")),
    session: AsyncSession = Depends(db_session),
) -> AssessmentResponse:
    # Only the two free-text validation fields may be cleared with null.
    fields = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k in ("dpo_advice", "controller_validation")
    }
    assessment = await DpiaService(session=session).update_assessment(ctx, assessment_id, fields)
    return AssessmentResponse.model_validate(assessment)


@router.delete("/{company_id}/{assessment_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_assessment(
    assessment_id: int,
    ctx: CompanyContext = Depends(require_permission("dpia", "write")),
    session: AsyncSession = Depends(db_session),
) -> None:
    await DpiaService(session=session).delete_assessment(ctx, assessment_id)
