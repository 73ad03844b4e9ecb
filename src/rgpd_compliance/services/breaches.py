"""
rgpd_compliance.services.breaches

Data breach service.

Responsibilities:
- Record breaches and keep their follow-up fields current.
- Run the rule-based risk analysis and store its verdict on the breach.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.models import BreachStatus, DataBreach
from rgpd_compliance.db.repositories.audit import AuditRepo
from rgpd_compliance.db.repositories.breaches import BreachRepo
from rgpd_compliance.errors import NotFoundError
from rgpd_compliance.observability.logging import get_logger
from rgpd_compliance.rules import breach as breach_rules

log = get_logger(__name__)

# Keys of the comprehensive form that state the data was unreadable to a third party.
_ENCRYPTION_KEYS = ("data_encrypted", "encrypted", "encryption")
_YES_VALUES = frozenset({"oui", "yes", "true", "1"})


def _is_yes(value: Any) -> bool:
    # Only an explicit yes counts; "non", "false" or "0" are posted as-is by the form.
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _YES_VALUES


def facts_from_breach(breach: DataBreach) -> breach_rules.BreachFacts:
    extra = breach.comprehensive_data or {}
    return breach_rules.BreachFacts(
        data_categories=tuple(breach.data_categories or ()),
        affected_persons=breach.affected_persons,
        description=breach.description or "",
        consequences=breach.consequences,
        measures=breach.measures,
        data_encrypted=any(_is_yes(extra.get(k)) for k in _ENCRYPTION_KEYS),
    )


class BreachService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._breaches = BreachRepo(session)
        self._audit = AuditRepo(session)

    async def list_breaches(self, ctx: CompanyContext) -> list[DataBreach]:
        return await self._breaches.list_for_company(ctx.company_id)

    async def get(self, ctx: CompanyContext, breach_id: int) -> DataBreach:
        breach = await self._breaches.get(ctx.company_id, breach_id)
        if breach is None:
            raise NotFoundError("Data breach not found")
        return breach

    async def create(self, ctx: CompanyContext, fields: dict[str, Any]) -> DataBreach:
        breach = await self._breaches.create(company_id=ctx.company_id, fields=fields)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="BREACH_CREATED",
            entity_type="data_breach",
            entity_id=breach.id,
        )
        await self._session.commit()
        log.info("breach_created", company_id=ctx.company_id, breach_id=breach.id)
        return breach

    async def update(self, ctx: CompanyContext, breach_id: int, fields: dict[str, Any]) -> DataBreach:
        breach = await self.get(ctx, breach_id)
        await self._breaches.update(breach, fields)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="BREACH_UPDATED",
            entity_type="data_breach",
            entity_id=breach.id,
            details={"fields": sorted(fields), "status": breach.status.value},
        )
        await self._session.commit()
        return breach

    async def analyze(
        self, ctx: CompanyContext, breach_id: int
    ) -> tuple[DataBreach, breach_rules.BreachAnalysis]:
        breach = await self.get(ctx, breach_id)
        analysis = await self._apply_analysis(ctx, breach)
        await self._session.commit()
        return breach, analysis

    async def create_and_analyze(
        self, ctx: CompanyContext, fields: dict[str, Any]
    ) -> tuple[DataBreach, breach_rules.BreachAnalysis]:
        breach = await self._breaches.create(company_id=ctx.company_id, fields=fields)
        analysis = await self._apply_analysis(ctx, breach)
        await self._session.commit()
        return breach, analysis

    async def _apply_analysis(
        self, ctx: CompanyContext, breach: DataBreach
    ) -> breach_rules.BreachAnalysis:
        analysis = breach_rules.analyze(facts_from_breach(breach))
        await self._breaches.update(
            breach,
            {
                "risk_level": analysis.risk_level.value,
                "notification_required": analysis.notification_required,
                "data_subject_notification_required": analysis.data_subject_notification_required,
                "notification_justification": analysis.justification,
                "recommendations": list(analysis.recommendations),
                # A reported breach stays reported when re-analyzed.
                "status": (
                    breach.status
                    if breach.status is BreachStatus.reported
                    else BreachStatus.analyzed
                ),
            },
        )
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="BREACH_ANALYZED",
            entity_type="data_breach",
            entity_id=breach.id,
            details={
                "risk_level": analysis.risk_level.value,
                "notification_required": analysis.notification_required,
            },
        )
        log.info(
            "breach_analyzed",
            company_id=ctx.company_id,
            breach_id=breach.id,
            risk_level=analysis.risk_level.value,
        )
        return analysis
