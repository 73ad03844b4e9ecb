"""
rgpd_compliance.services.dpia

DPIA service: preliminary evaluations and full assessments.

Responsibilities:
- Preview an evaluation (scoring only, nothing persisted).
- Save an evaluation (upsert per record) and mirror the verdict on the record.
- CRUD for DPIA assessments attached to processing records.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.models import DpiaAssessment, DpiaEvaluation, ProcessingRecord
from rgpd_compliance.db.repositories.audit import AuditRepo
from rgpd_compliance.db.repositories.dpia import DpiaAssessmentRepo, DpiaEvaluationRepo
from rgpd_compliance.db.repositories.records import RecordRepo
from rgpd_compliance.errors import NotFoundError, ValidationFailedError
from rgpd_compliance.observability.logging import get_logger
from rgpd_compliance.rules import dpia as dpia_rules

log = get_logger(__name__)


class DpiaService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._records = RecordRepo(session)
        self._evaluations = DpiaEvaluationRepo(session)
        self._assessments = DpiaAssessmentRepo(session)
        self._audit = AuditRepo(session)

    async def _record(self, ctx: CompanyContext, record_id: int) -> ProcessingRecord:
        record = await self._records.get(ctx.company_id, record_id)
        if record is None:
            raise NotFoundError("Processing record not found")
        return record

    # -- evaluations -------------------------------------------------------

    async def preview(
        self, ctx: CompanyContext, *, record_id: int, answers: Mapping[str, Any]
    ) -> dpia_rules.DpiaResult:
        record = await self._record(ctx, record_id)
        return _evaluate(record, answers)

    async def save(
        self,
        ctx: CompanyContext,
        *,
        record_id: int,
        answers: Mapping[str, Any],
        large_scale_estimate: str | None = None,
    ) -> tuple[DpiaEvaluation, bool]:
        record = await self._record(ctx, record_id)
        result = _evaluate(record, answers)

        evaluation, created = await self._evaluations.upsert(
            company_id=ctx.company_id,
            record_id=record.id,
            fields={
                "score": result.score,
                "tier": result.tier.value,
                "recommendation": result.recommendation,
                "justification": result.justification,
                "criteria_answers": result.answers_as_dict(),
                "cnil_list_match": result.cnil_match,
                "large_scale_estimate": large_scale_estimate,
                "requires_dpia": result.requires_dpia,
                "evaluated_by": ctx.principal.subject,
            },
        )
        record.dpia_required = result.requires_dpia
        record.dpia_justification = result.justification

        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="DPIA_EVALUATION_SAVED",
            entity_type="dpia_evaluation",
            entity_id=evaluation.id,
            details={
                "record_id": record.id,
                "score": result.score,
                "tier": result.tier.value,
                "created": created,
            },
        )
        await self._session.commit()
        log.info(
            "dpia_evaluation_saved",
            company_id=ctx.company_id,
            record_id=record.id,
            tier=result.tier.value,
            created=created,
        )
        return evaluation, created

    async def list_evaluations(self, ctx: CompanyContext) -> list[DpiaEvaluation]:
        return await self._evaluations.list_for_company(ctx.company_id)

    async def delete_evaluation(self, ctx: CompanyContext, evaluation_id: int) -> None:
        evaluation = await self._evaluations.get(ctx.company_id, evaluation_id)
        if evaluation is None:
            raise NotFoundError("DPIA evaluation not found")
        record = await self._records.get(ctx.company_id, evaluation.record_id)
        if record is not None:
            record.dpia_required = None
            record.dpia_justification = None
        await self._evaluations.delete(evaluation)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="DPIA_EVALUATION_DELETED",
            entity_type="dpia_evaluation",
            entity_id=evaluation_id,
        )
        await self._session.commit()

    # -- assessments -------------------------------------------------------

    async def list_assessments(self, ctx: CompanyContext) -> list[DpiaAssessment]:
        return await self._assessments.list_for_company(ctx.company_id)

    async def get_assessment(self, ctx: CompanyContext, assessment_id: int) -> DpiaAssessment:
        assessment = await self._assessments.get(ctx.company_id, assessment_id)
        if assessment is None:
            raise NotFoundError("DPIA assessment not found")
        return assessment

    async def create_assessment(self, ctx: CompanyContext, fields: dict[str, Any]) -> DpiaAssessment:
        await self._record(ctx, fields["processing_record_id"])
        assessment = await self._assessments.create(company_id=ctx.company_id, fields=fields)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="DPIA_ASSESSMENT_CREATED",
            entity_type="dpia_assessment",
            entity_id=assessment.id,
            details={"record_id": assessment.processing_record_id},
        )
        await self._session.commit()
        log.info("dpia_assessment_created", company_id=ctx.company_id, assessment_id=assessment.id)
        return assessment

    async def update_assessment(
        self, ctx: CompanyContext, assessment_id: int, fields: dict[str, Any]
    ) -> DpiaAssessment:
        assessment = await self.get_assessment(ctx, assessment_id)
        if "processing_record_id" in fields:
            await self._record(ctx, fields["processing_record_id"])
        await self._assessments.update(assessment, fields)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="DPIA_ASSESSMENT_UPDATED",
            entity_type="dpia_assessment",
            entity_id=assessment.id,
            details={"fields": sorted(fields), "status": assessment.status.value},
        )
        await self._session.commit()
        return assessment

    async def delete_assessment(self, ctx: CompanyContext, assessment_id: int) -> None:
        assessment = await self.get_assessment(ctx, assessment_id)
        await self._assessments.delete(assessment)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="DPIA_ASSESSMENT_DELETED",
            entity_type="dpia_assessment",
            entity_id=assessment_id,
        )
        await self._session.commit()


def _evaluate(record: ProcessingRecord, answers: Mapping[str, Any]) -> dpia_rules.DpiaResult:
    try:
        return dpia_rules.evaluate(
            answers,
            name=record.name,
            purpose=record.purpose,
            data_categories=record.data_categories,
        )
    except ValueError as e:
        raise ValidationFailedError(str(e)) from e
