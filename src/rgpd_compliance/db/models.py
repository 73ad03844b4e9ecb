"""
rgpd_compliance.db.models

Persistence schema for the compliance service.

Responsibilities:
- Define ORM models for the company-scoped compliance entities:
  - Company, CompanyAccess (collaborators), Invitation
  - ProcessingRecord (Art. 30 registry), DpiaEvaluation, DpiaAssessment
  - DataBreach, DataSubjectRequest, DiagnosticQuestion/Response, ComplianceAction
- Define admin-owned entities: AiPrompt, ReferenceDocument.
- Define the append-only AuditEvent trail.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rgpd_compliance.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC timestamps throughout.
    return datetime.utcnow()


class AccessRole(enum.StrEnum):
    owner = "owner"
    admin = "admin"
    manager = "manager"
    collaborator = "collaborator"


class AccessStatus(enum.StrEnum):
    active = "active"
    revoked = "revoked"


class InvitationStatus(enum.StrEnum):
    pending = "pending"
    accepted = "accepted"
    revoked = "revoked"
    expired = "expired"


class RecordType(enum.StrEnum):
    controller = "controller"
    joint_controller = "joint-controller"
    processor = "processor"


class AssessmentStatus(enum.StrEnum):
    draft = "draft"
    in_progress = "inprogress"
    completed = "completed"
    validated = "validated"


class BreachStatus(enum.StrEnum):
    draft = "draft"
    analyzed = "analyzed"
    reported = "reported"


class ActionStatus(enum.StrEnum):
    todo = "todo"
    in_progress = "inprogress"
    completed = "completed"


class RequestType(enum.StrEnum):
    access = "access"
    rectification = "rectification"
    erasure = "erasure"
    portability = "portability"
    objection = "objection"


class RequestStatus(enum.StrEnum):
    new = "new"
    in_progress = "inprogress"
    verification = "verification"
    closed = "closed"


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    sector: Mapped[str | None] = mapped_column(String(128), nullable=True)
    size: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    email: Mapped[str | None] = mapped_column(String(256), nullable=True)
    owner: Mapped[str] = mapped_column(String(256), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    accesses: Mapped[list[CompanyAccess]] = relationship(
        back_populates="company", cascade="all, delete-orphan"
    )


class CompanyAccess(Base):
    __tablename__ = "company_access"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(256), nullable=True)

    role: Mapped[AccessRole] = mapped_column(Enum(AccessRole), nullable=False)
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[AccessStatus] = mapped_column(
        Enum(AccessStatus), nullable=False, default=AccessStatus.active
    )
    invited_by: Mapped[str | None] = mapped_column(String(256), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    company: Mapped[Company] = relationship(back_populates="accesses")

    __table_args__ = (UniqueConstraint("company_id", "subject", name="uq_access_company_subject"),)


class Invitation(Base):
    __tablename__ = "invitations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    role: Mapped[AccessRole] = mapped_column(Enum(AccessRole), nullable=False)
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    status: Mapped[InvitationStatus] = mapped_column(
        Enum(InvitationStatus), nullable=False, default=InvitationStatus.pending
    )
    invited_by: Mapped[str] = mapped_column(String(256), nullable=False)

    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)


class ProcessingRecord(Base):
    __tablename__ = "processing_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    legal_basis: Mapped[str] = mapped_column(String(256), nullable=False)
    data_categories: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    recipients: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    retention: Mapped[str | None] = mapped_column(String(256), nullable=True)
    security_measures: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    transfers_outside_eu: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    type: Mapped[RecordType] = mapped_column(
        Enum(RecordType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RecordType.controller,
    )
    joint_controller_info: Mapped[str | None] = mapped_column(Text, nullable=True)

    data_controller_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    data_controller_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    data_controller_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    data_controller_email: Mapped[str | None] = mapped_column(String(256), nullable=True)

    has_dpo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    dpo_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    dpo_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    dpo_email: Mapped[str | None] = mapped_column(String(256), nullable=True)

    # Written by the DPIA evaluation.
    dpia_required: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    dpia_justification: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)


class DpiaEvaluation(Base):
    __tablename__ = "dpia_evaluations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)
    record_id: Mapped[int] = mapped_column(
        ForeignKey("processing_records.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    score: Mapped[float] = mapped_column(Float, nullable=False)
    tier: Mapped[str] = mapped_column(String(32), nullable=False)
    recommendation: Mapped[str] = mapped_column(String(256), nullable=False)
    justification: Mapped[str] = mapped_column(Text, nullable=False)
    criteria_answers: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    cnil_list_match: Mapped[str | None] = mapped_column(String(256), nullable=True)
    large_scale_estimate: Mapped[str | None] = mapped_column(String(256), nullable=True)
    requires_dpia: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    evaluated_by: Mapped[str] = mapped_column(String(256), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class DpiaAssessment(Base):
    __tablename__ = "dpia_assessments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)
    processing_record_id: Mapped[int] = mapped_column(
        ForeignKey("processing_records.id", ondelete="CASCADE"), nullable=False, index=True
    )

    status: Mapped[AssessmentStatus] = mapped_column(
        Enum(AssessmentStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AssessmentStatus.draft,
    )
    # Free-text answers of the four-part questionnaire, keyed by question id.
    context: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    principles: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    risks: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    action_plan: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    dpo_advice: Mapped[str | None] = mapped_column(Text, nullable=True)
    controller_validation: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class DataBreach(Base):
    __tablename__ = "data_breaches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    incident_date: Mapped[datetime] = mapped_column(nullable=False)
    discovery_date: Mapped[datetime | None] = mapped_column(nullable=True)
    data_categories: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    affected_persons: Mapped[int | None] = mapped_column(Integer, nullable=True)
    circumstances: Mapped[str | None] = mapped_column(Text, nullable=True)
    consequences: Mapped[str | None] = mapped_column(Text, nullable=True)
    measures: Mapped[str | None] = mapped_column(Text, nullable=True)
    # The rest of the (large, flat) breach form, stored as submitted.
    comprehensive_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    status: Mapped[BreachStatus] = mapped_column(
        Enum(BreachStatus), nullable=False, default=BreachStatus.draft
    )
    risk_level: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notification_required: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    data_subject_notification_required: Mapped[bool | None] = mapped_column(
        Boolean, nullable=True
    )
    notification_justification: Mapped[str | None] = mapped_column(Text, nullable=True)
    recommendations: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    notification_date: Mapped[datetime | None] = mapped_column(nullable=True)
    data_subject_notification_date: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)


class DataSubjectRequest(Base):
    __tablename__ = "data_subject_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)
    requester_id: Mapped[str] = mapped_column(String(256), nullable=False)
    requester_email: Mapped[str] = mapped_column(String(256), nullable=False)
    request_type: Mapped[RequestType] = mapped_column(Enum(RequestType), nullable=False)
    status: Mapped[RequestStatus] = mapped_column(
        Enum(RequestStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RequestStatus.new,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    identity_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Art. 12.3: one month to answer.
    due_date: Mapped[datetime] = mapped_column(nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)


class DiagnosticQuestion(Base):
    __tablename__ = "diagnostic_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    action_plan_yes: Mapped[str | None] = mapped_column(Text, nullable=True)
    risk_level_yes: Mapped[str | None] = mapped_column(String(32), nullable=True)
    action_plan_no: Mapped[str | None] = mapped_column(Text, nullable=True)
    risk_level_no: Mapped[str | None] = mapped_column(String(32), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)


class DiagnosticResponse(Base):
    __tablename__ = "diagnostic_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)
    question_id: Mapped[int] = mapped_column(ForeignKey("diagnostic_questions.id"), nullable=False)
    response: Mapped[str] = mapped_column(String(32), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("company_id", "question_id", name="uq_response_company_question"),
    )


class ComplianceAction(Base):
    __tablename__ = "compliance_actions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    priority: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[ActionStatus] = mapped_column(
        Enum(ActionStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ActionStatus.todo,
    )
    due_date: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class AiPrompt(Base):
    __tablename__ = "ai_prompts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)


class ReferenceDocument(Base):
    __tablename__ = "reference_documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    filename: Mapped[str] = mapped_column(String(512), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(128), nullable=False)
    sha256: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    # Extracted text; the binary itself is not kept.
    content: Mapped[str] = mapped_column(Text, nullable=False)
    page_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="general")
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    uploaded_by: Mapped[str] = mapped_column(String(256), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    actor: Mapped[str] = mapped_column(String(256), nullable=False)
    event_type: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    entity_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    entity_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)

    __table_args__ = (Index("ix_audit_company_created", "company_id", "created_at"),)


# --- Module Notes -----------------------------------------------------------
# List-valued fields (categories, recipients, permissions) are JSON columns; repositories
# always assign new lists rather than mutating in place so changes are flushed.
