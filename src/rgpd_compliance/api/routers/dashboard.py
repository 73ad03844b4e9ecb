"""
rgpd_compliance.api.routers.dashboard

Compliance dashboard endpoint (`diagnostic.read`).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.api.deps import db_session
from rgpd_compliance.auth.deps import require_permission
from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.services.dashboard import DashboardService

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


class CategoryScoreOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    score: int
    total: int
    answered: int


class ComplianceOut(BaseModel):
    score: int
    category_scores: dict[str, CategoryScoreOut]
    diagnostic_progress: int


class ActionCounts(BaseModel):
    total: int
    completed: int
    in_progress: int
    urgent: int


class RequestCounts(BaseModel):
    pending: int
    overdue: int


class SpecificRiskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    question_id: int
    question: str
    response: str
    risk_level: str


class RiskAreaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    score: int
    severity: str
    specific_risks: list[SpecificRiskOut]


class RiskMapping(BaseModel):
    risk_areas: list[RiskAreaOut]
    total_categories: int
    completed_categories: int


class PriorityActionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    category: str
    priority: str
    status: str


class DashboardResponse(BaseModel):
    compliance: ComplianceOut
    actions: ActionCounts
    requests: RequestCounts
    risk_mapping: RiskMapping
    priority_actions: list[PriorityActionOut]


@router.get("/{company_id}", response_model=DashboardResponse)
async def get_dashboard(
    ctx: CompanyContext = Depends(require_permission("diagnostic", "read")),
    session: AsyncSession = Depends(db_session),
) -> DashboardResponse:
    d = await DashboardService(session=session).build(ctx)
    return DashboardResponse(
        compliance=ComplianceOut(
            score=d.compliance_score,
            category_scores={
                name: CategoryScoreOut.model_validate(c) for name, c in d.category_scores.items()
            },
            diagnostic_progress=d.diagnostic_progress,
        ),
        actions=ActionCounts(
            total=d.actions_total,
            completed=d.actions_completed,
            in_progress=d.actions_in_progress,
            urgent=d.actions_urgent,
        ),
        requests=RequestCounts(pending=d.requests_pending, overdue=d.requests_overdue),
        risk_mapping=RiskMapping(
            risk_areas=[RiskAreaOut.model_validate(a) for a in d.risk_areas],
            total_categories=d.total_categories,
            completed_categories=d.completed_categories,
        ),
        priority_actions=[PriorityActionOut.model_validate(a) for a in d.priority_actions],
    )
