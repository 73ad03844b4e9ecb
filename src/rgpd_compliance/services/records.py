"""
rgpd_compliance.services.records

Processing records registry service.

Responsibilities:
- Create, update and delete processing records of a company.
- Produce the CSV export of the registry.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.models import ProcessingRecord
from rgpd_compliance.db.repositories.audit import AuditRepo
from rgpd_compliance.db.repositories.dpia import DpiaEvaluationRepo
from rgpd_compliance.db.repositories.records import RecordRepo
from rgpd_compliance.errors import NotFoundError
from rgpd_compliance.exports import csv_export
from rgpd_compliance.observability.logging import get_logger
from rgpd_compliance.rules import dpia as dpia_rules

log = get_logger(__name__)

# Record fields the CNIL list match reads.
_DPIA_INPUT_FIELDS = frozenset({"name", "purpose", "data_categories"})


class RecordService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._records = RecordRepo(session)
        self._evaluations = DpiaEvaluationRepo(session)
        self._audit = AuditRepo(session)

    async def list_records(self, ctx: CompanyContext) -> list[ProcessingRecord]:
        return await self._records.list_for_company(ctx.company_id)

    async def get(self, ctx: CompanyContext, record_id: int) -> ProcessingRecord:
        record = await self._records.get(ctx.company_id, record_id)
        if record is None:
            raise NotFoundError("Processing record not found")
        return record

    async def create(self, ctx: CompanyContext, fields: dict[str, Any]) -> ProcessingRecord:
        record = await self._records.create(company_id=ctx.company_id, fields=fields)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="RECORD_CREATED",
            entity_type="processing_record",
            entity_id=record.id,
            details={"name": record.name},
        )
        await self._session.commit()
        log.info("record_created", company_id=ctx.company_id, record_id=record.id)
        return record

    async def update(
        self, ctx: CompanyContext, record_id: int, fields: dict[str, Any]
    ) -> ProcessingRecord:
        record = await self.get(ctx, record_id)
        await self._records.update(record, fields)
        if _DPIA_INPUT_FIELDS & fields.keys():
            await self._refresh_dpia(record)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="RECORD_UPDATED",
            entity_type="processing_record",
            entity_id=record.id,
            details={"fields": sorted(fields)},
        )
        await self._session.commit()
        log.info("record_updated", company_id=ctx.company_id, record_id=record.id)
        return record

    async def _refresh_dpia(self, record: ProcessingRecord) -> None:
        """
        Re-score the stored evaluation against the record's current text.
        """

        evaluation = await self._evaluations.get_for_record(record.id)
        if evaluation is None:
            return
        result = dpia_rules.evaluate(
            evaluation.criteria_answers or {},
            name=record.name,
            purpose=record.purpose,
            data_categories=record.data_categories,
        )
        evaluation.score = result.score
        evaluation.tier = result.tier.value
        evaluation.recommendation = result.recommendation
        evaluation.justification = result.justification
        evaluation.cnil_list_match = result.cnil_match
        evaluation.requires_dpia = result.requires_dpia
        record.dpia_required = result.requires_dpia
        record.dpia_justification = result.justification
        log.info(
            "dpia_evaluation_refreshed",
            company_id=record.company_id,
            record_id=record.id,
            tier=result.tier.value,
        )

    async def delete(self, ctx: CompanyContext, record_id: int) -> None:
        record = await self.get(ctx, record_id)
        await self._records.delete(record)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="RECORD_DELETED",
            entity_type="processing_record",
            entity_id=record_id,
            details={"name": record.name},
        )
        await self._session.commit()
        log.info("record_deleted", company_id=ctx.company_id, record_id=record_id)

    async def export_csv(self, ctx: CompanyContext, *, today: date | None = None) -> tuple[str, str]:
        """
        Returns `(filename, csv_text)` for the company's registry.
        """

        records = await self._records.list_for_company(ctx.company_id)
        content = csv_export.export_records(records)
        log.info("records_exported", company_id=ctx.company_id, count=len(records))
        return csv_export.export_filename(today or date.today()), content
