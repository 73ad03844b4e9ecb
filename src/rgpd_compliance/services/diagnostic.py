"""
rgpd_compliance.services.diagnostic

Diagnostic questionnaire and action plan service.

Responsibilities:
- Store a company's answers (one per question, last answer wins).
- Analyze the answers into compliance actions and persist them (`todo`).
- Update action plan items (status, priority, due date).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.models import (
    ActionStatus,
    ComplianceAction,
    DiagnosticQuestion,
    DiagnosticResponse,
)
from rgpd_compliance.db.repositories.audit import AuditRepo
from rgpd_compliance.db.repositories.diagnostic import ActionRepo, QuestionRepo, ResponseRepo
from rgpd_compliance.errors import NotFoundError, ValidationFailedError
from rgpd_compliance.observability.logging import get_logger
from rgpd_compliance.rules import diagnostic as diagnostic_rules

log = get_logger(__name__)

_RESPONSE_ALIASES = {"oui": "oui", "yes": "oui", "non": "non", "no": "non"}


def normalize_response(raw: str) -> str:
    try:
        return _RESPONSE_ALIASES[raw.strip().lower()]
    except KeyError:
        raise ValidationFailedError(f"invalid diagnostic response: {raw!r}") from None


def question_rule(q: DiagnosticQuestion) -> diagnostic_rules.QuestionRule:
    return diagnostic_rules.QuestionRule(
        id=q.id,
        question=q.question,
        category=q.category,
        action_plan_yes=q.action_plan_yes,
        risk_level_yes=q.risk_level_yes,
        action_plan_no=q.action_plan_no,
        risk_level_no=q.risk_level_no,
    )


class DiagnosticService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._questions = QuestionRepo(session)
        self._responses = ResponseRepo(session)
        self._actions = ActionRepo(session)
        self._audit = AuditRepo(session)

    async def list_questions(self) -> list[DiagnosticQuestion]:
        return await self._questions.list_active()

    async def list_responses(self, ctx: CompanyContext) -> list[DiagnosticResponse]:
        return await self._responses.list_for_company(ctx.company_id)

    async def save_responses(
        self, ctx: CompanyContext, answers: Iterable[tuple[int, str]]
    ) -> list[DiagnosticResponse]:
        active = {q.id for q in await self._questions.list_active()}
        saved: list[DiagnosticResponse] = []
        for question_id, raw in answers:
            if question_id not in active:
                raise ValidationFailedError(f"unknown diagnostic question: {question_id}")
            saved.append(
                await self._responses.upsert(
                    company_id=ctx.company_id,
                    question_id=question_id,
                    response=normalize_response(raw),
                )
            )
        await self._session.commit()
        log.info("diagnostic_responses_saved", company_id=ctx.company_id, count=len(saved))
        return saved

    async def analyze(
        self, ctx: CompanyContext
    ) -> tuple[diagnostic_rules.DiagnosticAnalysis, list[ComplianceAction]]:
        questions = [question_rule(q) for q in await self._questions.list_active()]
        responses = await self._responses.list_for_company(ctx.company_id)
        analysis = diagnostic_rules.analyze(
            questions,
            [diagnostic_rules.Answer(question_id=r.question_id, response=r.response) for r in responses],
        )

        created: list[ComplianceAction] = []
        for planned in analysis.actions:
            created.append(
                await self._actions.create(
                    company_id=ctx.company_id,
                    fields={
                        "title": planned.title,
                        "description": planned.description,
                        "category": planned.category,
                        "priority": planned.priority,
                        "status": ActionStatus.todo,
                    },
                )
            )
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="DIAGNOSTIC_ANALYZED",
            details={
                "actions": len(created),
                "overall_risk_score": analysis.overall_risk_score,
            },
        )
        await self._session.commit()
        log.info(
            "diagnostic_analyzed",
            company_id=ctx.company_id,
            actions=len(created),
            score=analysis.overall_risk_score,
        )
        return analysis, created

    # -- action plan -------------------------------------------------------

    async def list_actions(self, ctx: CompanyContext) -> list[ComplianceAction]:
        return await self._actions.list_for_company(ctx.company_id)

    async def update_action(
        self, ctx: CompanyContext, action_id: int, fields: dict[str, Any]
    ) -> ComplianceAction:
        action = await self._actions.get(ctx.company_id, action_id)
        if action is None:
            raise NotFoundError("Compliance action not found")

        status = fields.get("status")
        if status is not None and status != action.status:
            fields["completed_at"] = datetime.utcnow() if status is ActionStatus.completed else None
        await self._actions.update(action, fields)
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="ACTION_UPDATED",
            entity_type="compliance_action",
            entity_id=action.id,
            details={"fields": sorted(fields), "status": action.status.value},
        )
        await self._session.commit()
        return action
