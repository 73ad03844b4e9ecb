"""
rgpd_compliance.api.routers.requests

Data subject request endpoints (`requests.*`).

Responsibilities:
- List a company's requests, newest first.
- Register a request; the one-month deadline is computed server-side.
- Update its handling (status, identity verification, description).
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from rgpd_compliance.api.deps import db_session
from rgpd_compliance.auth.deps import require_permission
from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.models import RequestStatus, RequestType
from rgpd_compliance.services.requests import RequestService

router = APIRouter(prefix="/api/requests", tags=["requests"])


class RequestCreate(BaseModel):
    requester_id: str = Field(min_length=1, max_length=256)
    requester_email: str = Field(min_length=3, max_length=256)
    request_type: RequestType
    description: str | None = None
    identity_verified: bool = False


class RequestUpdate(BaseModel):
    status: RequestStatus | None = None
    description: str | None = None
    identity_verified: bool | None = None


class RequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    requester_id: str
    requester_email: str
    request_type: RequestType
    status: RequestStatus
    description: str | None
    identity_verified: bool
    due_date: datetime
    completed_at: datetime | None
    created_at: datetime


@router.get("/{company_id}", response_model=list[RequestResponse])
async def list_requests(
    ctx: CompanyContext = Depends(require_permission("requests", "read")),
    session: AsyncSession = Depends(db_session),
) -> list[RequestResponse]:
    rows = await RequestService(session=session).list_requests(ctx)
    return [RequestResponse.model_validate(r) for r in rows]


@router.post("/{company_id}", response_model=RequestResponse, status_code=HTTP_201_CREATED)
async def create_request(
    body: RequestCreate,
    ctx: CompanyContext = Depends(require_permission("requests", "write")),
    session: AsyncSession = Depends(db_session),
) -> RequestResponse:
    req = await RequestService(session=session).create(ctx, body.model_dump())
    return RequestResponse.model_validate(req)


@router.put("/{company_id}/{request_id}", response_model=RequestResponse)
async def update_request(
    request_id: int,
    body: RequestUpdate,
    ctx: CompanyContext = Depends(require_permission("requests", "write")),
    session: AsyncSession = Depends(db_session),
) -> RequestResponse:
    fields = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k == "description"
    }
    req = await RequestService(session=session).update(ctx, request_id, fields)
    return RequestResponse.model_validate(req)
