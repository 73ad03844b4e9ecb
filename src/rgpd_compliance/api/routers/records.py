"""
rgpd_compliance.api.routers.records

Processing records registry endpoints (`records.*`).

Responsibilities:
- CRUD for the company's processing records.
- CSV export of the registry as a file attachment.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from rgpd_compliance.api.deps import db_session
from rgpd_compliance.auth.deps import require_permission
from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.models import RecordType
from rgpd_compliance.services.records import RecordService

router = APIRouter(prefix="/api/records", tags=["records"])


class RecordFields(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    purpose: str = Field(min_length=1)
    legal_basis: str = Field(min_length=1, max_length=256)
    data_categories: list[str] = Field(default_factory=list)
    recipients: list[str] = Field(default_factory=list)
    retention: str | None = Field(default=None, max_length=256)
    security_measures: list[str] = Field(default_factory=list)
    transfers_outside_eu: bool = False
    type: RecordType = RecordType.controller
    joint_controller_info: str | None = None
    data_controller_name: str | None = None
    data_controller_address: str | None = None
    data_controller_phone: str | None = None
    data_controller_email: str | None = None
    has_dpo: bool = False
    dpo_name: str | None = None
    dpo_phone: str | None = None
    dpo_email: str | None = None


class RecordUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    purpose: str | None = Field(default=None, min_length=1)
    legal_basis: str | None = Field(default=None, min_length=1, max_length=256)
    data_categories: list[str] | None = None
    recipients: list[str] | None = None
    retention: str | None = None
    security_measures: list[str] | None = None
    transfers_outside_eu: bool | None = None
    type: RecordType | None = None
    joint_controller_info: str | None = None
    data_controller_name: str | None = None
    data_controller_address: str | None = None
    data_controller_phone: str | None = None
    data_controller_email: str | None = None
    has_dpo: bool | None = None
    dpo_name: str | None = None
    dpo_phone: str | None = None
    dpo_email: str | None = None


# Columns that cannot be cleared by sending null in an update.
_NOT_NULL = frozenset(
    {
        "name",
        "purpose",
        "legal_basis",
        "data_categories",
        "recipients",
        "security_measures",
        "transfers_outside_eu",
        "type",
        "has_dpo",
    }
)


class RecordResponse(RecordFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    dpia_required: bool | None
    dpia_justification: str | None
    created_at: datetime


@router.get("/{company_id}", response_model=list[RecordResponse])
async def list_records(
    ctx: CompanyContext = Depends(require_permission("records", "read")),
    session: AsyncSession = Depends(db_session),
) -> list[RecordResponse]:
    records = await RecordService(session=session).list_records(ctx)
    return [RecordResponse.model_validate(r) for r in records]


@router.post("/{company_id}", response_model=RecordResponse, status_code=HTTP_201_CREATED)
async def create_record(
    body: RecordFields,
    ctx: CompanyContext = Depends(require_permission("records", "write")),
    session: AsyncSession = Depends(db_session),
) -> RecordResponse:
    record = await RecordService(session=session).create(ctx, body.model_dump())
    return RecordResponse.model_validate(record)


@router.get("/{company_id}/export")
async def export_records(
    ctx: CompanyContext = Depends(require_permission("records", "read")),
    session: AsyncSession = Depends(db_session),
) -> Response:
    filename, content = await RecordService(session=session).export_csv(ctx)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.put("/{company_id}/{record_id}", response_model=RecordResponse)
async def update_record(
    record_id: int,
    body: RecordUpdate,
    ctx: CompanyContext = Depends(require_permission("records", "write")),
    session: AsyncSession = Depends(db_session),
) -> RecordResponse:
    fields = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k not in _NOT_NULL
    }
    record = await RecordService(session=session).update(ctx, record_id, fields)
    return RecordResponse.model_validate(record)


@router.delete("/{company_id}/{record_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_record(
    record_id: int,
    ctx: CompanyContext = Depends(require_permission("records", "write")),
    session: AsyncSession = Depends(db_session),
) -> None:
    await RecordService(session=session).delete(ctx, record_id)


# --- Module Notes -----------------------------------------------------------
# `dpia_required` is read-only here; it follows the saved DPIA evaluation.
