"""
rgpd_compliance.api.routers.companies

Company, collaborator and invitation endpoints.

Responsibilities:
- Create companies and list those the caller belongs to.
- Manage collaborators and their `module.level` permissions (`admin.*`).
- Issue, list, revoke and accept invitations.
- Expose the permission catalogue (modules, levels, templates).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from rgpd_compliance.api.deps import db_session, settings_dep
from rgpd_compliance.auth.deps import company_context, get_principal, require_permission
from rgpd_compliance.auth.models import CompanyContext, Principal
from rgpd_compliance.db.models import AccessRole, InvitationStatus
from rgpd_compliance.rules import permissions as perms
from rgpd_compliance.rules.permissions import Template
from rgpd_compliance.services.companies import CompanyService
from rgpd_compliance.settings import Settings

router = APIRouter(prefix="/api", tags=["companies"])


class CompanyCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    sector: str | None = Field(default=None, max_length=128)
    size: str | None = Field(default=None, max_length=32)
    address: str | None = None
    phone: str | None = Field(default=None, max_length=64)
    email: str | None = Field(default=None, max_length=256)


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sector: str | None
    size: str | None
    address: str | None
    phone: str | None
    email: str | None
    owner: str
    created_at: datetime


class MembershipResponse(BaseModel):
    company: CompanyResponse
    role: str
    permissions: list[str]


class CollaboratorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    subject: str
    email: str | None
    role: AccessRole
    permissions: list[str]
    invited_by: str | None
    created_at: datetime


class CollaboratorUpdateRequest(BaseModel):
    role: AccessRole | None = None
    permissions: list[str] | None = None
    template: Template | None = None


class InvitationCreateRequest(BaseModel):
    email: str = Field(min_length=3, max_length=256)
    role: AccessRole = AccessRole.collaborator
    permissions: list[str] | None = None
    template: Template | None = None


class InvitationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    email: str
    role: AccessRole
    permissions: list[str]
    token: str
    status: InvitationStatus
    invited_by: str
    expires_at: datetime
    created_at: datetime


def _service(session: AsyncSession, settings: Settings) -> CompanyService:
    return CompanyService(session=session, invitation_ttl_days=settings.invitation_ttl_days)


@router.get("/permissions")
async def permission_catalogue(principal: Principal = Depends(get_principal)) -> dict[str, Any]:
    return perms.catalogue()


@router.post("/companies", response_model=CompanyResponse, status_code=HTTP_201_CREATED)
async def create_company(
    body: CompanyCreateRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> CompanyResponse:
    company = await _service(session, settings).create_company(
        principal=principal, fields=body.model_dump()
    )
    return CompanyResponse.model_validate(company)


@router.get("/companies", response_model=list[MembershipResponse])
async def list_companies(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> list[MembershipResponse]:
    rows = await _service(session, settings).list_for_principal(principal)
    return [
        MembershipResponse(
            company=CompanyResponse.model_validate(company),
            role=access.role.value,
            permissions=list(access.permissions),
        )
        for company, access in rows
    ]


@router.get("/companies/{company_id}", response_model=MembershipResponse)
async def get_company(
    ctx: CompanyContext = Depends(company_context),
) -> MembershipResponse:
    return MembershipResponse(
        company=CompanyResponse.model_validate(ctx.company),
        role=ctx.access.role.value if ctx.access is not None else "platform-admin",
        permissions=sorted(ctx.permissions),
    )


@router.get("/companies/{company_id}/collaborators", response_model=list[CollaboratorResponse])
async def list_collaborators(
    ctx: CompanyContext = Depends(require_permission("admin", "read")),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> list[CollaboratorResponse]:
    rows = await _service(session, settings).list_collaborators(ctx)
    return [CollaboratorResponse.model_validate(a) for a in rows]


@router.put(
    "/companies/{company_id}/collaborators/{access_id}", response_model=CollaboratorResponse
)
async def update_collaborator(
    access_id: int,
    body: CollaboratorUpdateRequest,
    ctx: CompanyContext = Depends(require_permission("admin", "write")),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> CollaboratorResponse:
    access = await _service(session, settings).update_collaborator(
        ctx,
        access_id,
        role=body.role,
        permissions=body.permissions,
        template=body.template,
    )
    return CollaboratorResponse.model_validate(access)


@router.delete(
    "/companies/{company_id}/collaborators/{access_id}", status_code=HTTP_204_NO_CONTENT
)
async def remove_collaborator(
    access_id: int,
    ctx: CompanyContext = Depends(require_permission("admin", "write")),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> None:
    await _service(session, settings).remove_collaborator(ctx, access_id)


@router.get("/companies/{company_id}/invitations", response_model=list[InvitationResponse])
async def list_invitations(
    ctx: CompanyContext = Depends(require_permission("admin", "read")),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> list[InvitationResponse]:
    rows = await _service(session, settings).list_invitations(ctx)
    return [InvitationResponse.model_validate(i) for i in rows]


@router.post(
    "/companies/{company_id}/invitations",
    response_model=InvitationResponse,
    status_code=HTTP_201_CREATED,
)
async def create_invitation(
    body: InvitationCreateRequest,
    ctx: CompanyContext = Depends(require_permission("admin", "write")),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> InvitationResponse:
    inv = await _service(session, settings).invite(
        ctx,
        email=body.email,
        role=body.role,
        permissions=body.permissions,
        template=body.template,
    )
    return InvitationResponse.model_validate(inv)


@router.delete(
    "/companies/{company_id}/invitations/{invitation_id}", status_code=HTTP_204_NO_CONTENT
)
async def revoke_invitation(
    invitation_id: int,
    ctx: CompanyContext = Depends(require_permission("admin", "write")),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> None:
    await _service(session, settings).revoke_invitation(ctx, invitation_id)


@router.post("/invitations/{token}/accept", response_model=CollaboratorResponse)
async def accept_invitation(
    token: str,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> CollaboratorResponse:
    access = await _service(session, settings).accept_invitation(principal=principal, token=token)
    return CollaboratorResponse.model_validate(access)

