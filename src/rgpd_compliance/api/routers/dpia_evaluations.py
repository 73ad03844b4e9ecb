"""
rgpd_compliance.api.routers.dpia_evaluations

Preliminary DPIA evaluation endpoints (`dpia.*`).

Responsibilities:
- Publish the nine criteria and the CNIL mandatory-treatment list.
- Preview an evaluation without persisting it (`dpia.read`).
- Save an evaluation, one per record (`dpia.write`).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_200_OK, HTTP_201_CREATED, HTTP_204_NO_CONTENT

from rgpd_compliance.api.deps import db_session
from rgpd_compliance.auth.deps import get_principal, require_permission
from rgpd_compliance.auth.models import CompanyContext, Principal
from rgpd_compliance.rules import dpia as dpia_rules
from rgpd_compliance.services.dpia import DpiaService

router = APIRouter(prefix="/api/dpia-evaluations", tags=["dpia"])


class EvaluationRequest(BaseModel):
    record_id: int
    # criterion id -> yes/no/uncertain (oui/non/incertain and booleans accepted)
    answers: dict[str, Any] = Field(default_factory=dict)
    large_scale_estimate: str | None = Field(default=None, max_length=256)


class PreviewResponse(BaseModel):
    record_id: int
    score: float
    tier: str
    recommendation: str
    justification: str
    requires_dpia: bool
    cnil_list_match: str | None
    answers: dict[str, str]


class EvaluationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    record_id: int
    score: float
    tier: str
    recommendation: str
    justification: str
    criteria_answers: dict[str, str]
    cnil_list_match: str | None
    large_scale_estimate: str | None
    requires_dpia: bool
    evaluated_by: str
    created_at: datetime
    updated_at: datetime


@router.get("/criteria")
async def list_criteria(principal: Principal = Depends(get_principal)) -> dict[str, Any]:
    return {
        "criteria": [
            {"id": c.id, "question": c.question, "examples": c.examples}
            for c in dpia_rules.CRITERIA
        ],
        "answers": [a.value for a in dpia_rules.Answer],
        "cnil_mandatory_treatments": list(dpia_rules.CNIL_MANDATORY_TREATMENTS),
    }


@router.get("/{company_id}", response_model=list[EvaluationResponse])
async def list_evaluations(
    ctx: CompanyContext = Depends(require_permission("dpia", "read")),
    session: AsyncSession = Depends(db_session),
) -> list[EvaluationResponse]:
    rows = await DpiaService(session=session).list_evaluations(ctx)
    return [EvaluationResponse.model_validate(e) for e in rows]


@router.post("/{company_id}/preview", response_model=PreviewResponse)
async def preview_evaluation(
    body: EvaluationRequest,
    ctx: CompanyContext = Depends(require_permission("dpia", "read")),
    session: AsyncSession = Depends(db_session),
) -> PreviewResponse:
    result = await DpiaService(session=session).preview(
        ctx, record_id=body.record_id, answers=body.answers
    )
    return PreviewResponse(
        record_id=body.record_id,
        score=result.score,
        tier=result.tier.value,
        recommendation=result.recommendation,
        justification=result.justification,
        requires_dpia=result.requires_dpia,
        cnil_list_match=result.cnil_match,
        answers=result.answers_as_dict(),
    )


@router.post("/{company_id}", response_model=EvaluationResponse, status_code=HTTP_201_CREATED)
async def save_evaluation(
    body: EvaluationRequest,
    response: Response,
    ctx: CompanyContext = Depends(require_permission("dpia", "write")),
    session: AsyncSession = Depends(db_session),
) -> EvaluationResponse:
    evaluation, created = await DpiaService(session=session).save(
        ctx,
        record_id=body.record_id,
        answers=body.answers,
        large_scale_estimate=body.large_scale_estimate,
    )
    if not created:
        response.status_code = HTTP_200_OK
    return EvaluationResponse.model_validate(evaluation)


@router.delete("/{company_id}/{evaluation_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_evaluation(
    evaluation_id: int,
    ctx: CompanyContext = Depends(require_permission("dpia", "write")),
    session: AsyncSession = Depends(db_session),
) -> None:
    await DpiaService(session=session).delete_evaluation(ctx, evaluation_id)


# --- Module Notes -----------------------------------------------------------
# A save answers 201 when the record's evaluation is created and 200 when it is updated.
