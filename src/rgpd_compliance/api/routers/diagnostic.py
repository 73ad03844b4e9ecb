"""
rgpd_compliance.api.routers.diagnostic

Diagnostic questionnaire and action plan endpoints.

Responsibilities:
- List the active questions.
- Store a company's answers (`diagnostic.write`) and analyze them into actions.
- List and update action plan items (`actions.*`).
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.api.deps import db_session
from rgpd_compliance.auth.deps import get_principal, require_permission
from rgpd_compliance.auth.models import CompanyContext, Principal
from rgpd_compliance.db.models import ActionStatus
from rgpd_compliance.services.diagnostic import DiagnosticService

router = APIRouter(prefix="/api", tags=["diagnostic"])


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    category: str
    order: int
    is_active: bool
    action_plan_yes: str | None
    risk_level_yes: str | None
    action_plan_no: str | None
    risk_level_no: str | None


class AnswerIn(BaseModel):
    question_id: int
    response: str = Field(min_length=1, max_length=32)


class ResponsesRequest(BaseModel):
    responses: list[AnswerIn] = Field(min_length=1)


class ResponseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    question_id: int
    response: str
    created_at: datetime


class ActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    title: str
    description: str
    category: str
    priority: str
    status: ActionStatus
    due_date: datetime | None
    completed_at: datetime | None
    created_at: datetime


class ActionUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=256)
    description: str | None = None
    priority: str | None = Field(default=None, pattern="^(critical|high|medium|low)$")
    status: ActionStatus | None = None
    due_date: datetime | None = None


class PlannedActionOut(BaseModel):
    title: str
    description: str
    category: str
    priority: str
    risk_level: str


class AnalysisResponse(BaseModel):
    actions: list[PlannedActionOut]
    overall_risk_score: int
    risk_distribution: dict[str, int]
    total_actions: int
    summary: str
    created_action_ids: list[int]


@router.get("/diagnostic/questions", response_model=list[QuestionResponse])
async def list_questions(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[QuestionResponse]:
    rows = await DiagnosticService(session=session).list_questions()
    return [QuestionResponse.model_validate(q) for q in rows]


@router.get("/diagnostic/{company_id}/responses", response_model=list[ResponseOut])
async def list_responses(
    ctx: CompanyContext = Depends(require_permission("diagnostic", "read")),
    session: AsyncSession = Depends(db_session),
) -> list[ResponseOut]:
    rows = await DiagnosticService(session=session).list_responses(ctx)
    return [ResponseOut.model_validate(r) for r in rows]


@router.post("/diagnostic/{company_id}/responses", response_model=list[ResponseOut])
async def save_responses(
    body: ResponsesRequest,
    ctx: CompanyContext = Depends(require_permission("diagnostic", "write")),
    session: AsyncSession = Depends(db_session),
) -> list[ResponseOut]:
    rows = await DiagnosticService(session=session).save_responses(
        ctx, [(a.question_id, a.response) for a in body.responses]
    )
    return [ResponseOut.model_validate(r) for r in rows]


@router.post("/diagnostic/{company_id}/analyze", response_model=AnalysisResponse)
async def analyze(
    ctx: CompanyContext = Depends(require_permission("diagnostic", "write")),
    session: AsyncSession = Depends(db_session),
) -> AnalysisResponse:
    analysis, created = await DiagnosticService(session=session).analyze(ctx)
    return AnalysisResponse(
        actions=[
            PlannedActionOut(
                title=a.title,
                description=a.description,
                category=a.category,
                priority=a.priority,
                risk_level=a.risk_level,
            )
            for a in analysis.actions
        ],
        overall_risk_score=analysis.overall_risk_score,
        risk_distribution=analysis.risk_distribution,
        total_actions=len(analysis.actions),
        summary=analysis.summary,
        created_action_ids=[a.id for a in created],
    )


@router.get("/actions/{company_id}", response_model=list[ActionResponse])
async def list_actions(
    ctx: CompanyContext = Depends(require_permission("actions", "read")),
    session: AsyncSession = Depends(db_session),
) -> list[ActionResponse]:
    rows = await DiagnosticService(session=session).list_actions(ctx)
    return [ActionResponse.model_validate(a) for a in rows]


@router.put("/actions/{company_id}/{action_id}", response_model=ActionResponse)
async def update_action(
    action_id: int,
    body: ActionUpdate,
    ctx: CompanyContext = Depends(require_permission("actions", "write")),
    session: AsyncSession = Depends(db_session),
) -> ActionResponse:
    fields = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k == "due_date"
    }
    action = await DiagnosticService(session=session).update_action(ctx, action_id, fields)
    return ActionResponse.model_validate(action)
