"""
rgpd_compliance.api.routers.breaches

Data breach endpoints (`breaches.*`).

Responsibilities:
- Record breaches and update their follow-up (status, notification dates).
- Analyze a breach: risk level, CNIL notification and data-subject information.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from rgpd_compliance.api.deps import db_session
from rgpd_compliance.auth.deps import require_permission
from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.models import BreachStatus
from rgpd_compliance.rules.breach import BreachAnalysis
from rgpd_compliance.services.breaches import BreachService

router = APIRouter(prefix="/api/breaches", tags=["breaches"])


class BreachCreate(BaseModel):
    description: str = Field(min_length=1)
    incident_date: datetime
    discovery_date: datetime | None = None
    data_categories: list[str] = Field(default_factory=list)
    affected_persons: int | None = Field(default=None, ge=0)
    circumstances: str | None = None
    consequences: str | None = None
    measures: str | None = None
    comprehensive_data: dict[str, Any] = Field(default_factory=dict)


class BreachUpdate(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    incident_date: datetime | None = None
    discovery_date: datetime | None = None
    data_categories: list[str] | None = None
    affected_persons: int | None = Field(default=None, ge=0)
    circumstances: str | None = None
    consequences: str | None = None
    measures: str | None = None
    comprehensive_data: dict[str, Any] | None = None
    status: BreachStatus | None = None
    notification_date: datetime | None = None
    data_subject_notification_date: datetime | None = None


class BreachResponse(BreachCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    status: BreachStatus
    risk_level: str | None
    notification_required: bool | None
    data_subject_notification_required: bool | None
    notification_justification: str | None
    recommendations: list[str]
    notification_date: datetime | None
    data_subject_notification_date: datetime | None
    created_at: datetime


class AnalysisResponse(BaseModel):
    risk_level: str
    risk_points: int
    notification_required: bool
    data_subject_notification_required: bool
    justification: str
    recommendations: list[str]


class BreachAnalysisResponse(BaseModel):
    breach: BreachResponse
    analysis: AnalysisResponse


def _analysis(a: BreachAnalysis) -> AnalysisResponse:
    return AnalysisResponse(
        risk_level=a.risk_level.value,
        risk_points=a.risk_points,
        notification_required=a.notification_required,
        data_subject_notification_required=a.data_subject_notification_required,
        justification=a.justification,
        recommendations=list(a.recommendations),
    )


_NOT_NULL = frozenset({"description", "incident_date", "data_categories", "comprehensive_data", "status"})


@router.get("/{company_id}", response_model=list[BreachResponse])
async def list_breaches(
    ctx: CompanyContext = Depends(require_permission("breaches", "read")),
    session: AsyncSession = Depends(db_session),
) -> list[BreachResponse]:
    rows = await BreachService(session=session).list_breaches(ctx)
    return [BreachResponse.model_validate(b) for b in rows]


@router.post("/{company_id}", response_model=BreachResponse, status_code=HTTP_201_CREATED)
async def create_breach(
    body: BreachCreate,
    ctx: CompanyContext = Depends(require_permission("breaches", "write")),
    session: AsyncSession = Depends(db_session),
) -> BreachResponse:
    breach = await BreachService(session=session).create(
        ctx, {**body.model_dump(), "status": BreachStatus.draft}
    )
    return BreachResponse.model_validate(breach)


@router.post(
    "/{company_id}/analyze",
    response_model=BreachAnalysisResponse,
    status_code=HTTP_201_CREATED,
)
async def create_and_analyze_breach(
    body: BreachCreate,
    ctx: CompanyContext = Depends(require_permission("breaches", "write")),
    session: AsyncSession = Depends(db_session),
) -> BreachAnalysisResponse:
    breach, analysis = await BreachService(session=session).create_and_analyze(
        ctx, {**body.model_dump(), "status": BreachStatus.draft}
    )
    return BreachAnalysisResponse(
        breach=BreachResponse.model_validate(breach), analysis=_analysis(analysis)
    )


@router.put("/{company_id}/{breach_id}", response_model=BreachResponse)
async def update_breach(
    breach_id: int,
    body: BreachUpdate,
    ctx: CompanyContext = Depends(require_permission("breaches", "write")),
    session: AsyncSession = Depends(db_session),
) -> BreachResponse:
    fields = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k not in _NOT_NULL
    }
    breach = await BreachService(session=session).update(ctx, breach_id, fields)
    return BreachResponse.model_validate(breach)


@router.post("/{company_id}/{breach_id}/analyze", response_model=BreachAnalysisResponse)
async def analyze_breach(
    breach_id: int,
    ctx: CompanyContext = Depends(require_permission("breaches", "write")),
    session: AsyncSession = Depends(db_session),
) -> BreachAnalysisResponse:
    breach, analysis = await BreachService(session=session).analyze(ctx, breach_id)
    return BreachAnalysisResponse(
        breach=BreachResponse.model_validate(breach), analysis=_analysis(analysis)
    )
