"""
rgpd_compliance.services.dashboard

Loads a company's diagnostic answers, action plan and requests and hands them
to `rules.dashboard`.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.auth.models import CompanyContext
from rgpd_compliance.db.repositories.diagnostic import ActionRepo, QuestionRepo, ResponseRepo
from rgpd_compliance.db.repositories.requests import RequestRepo
from rgpd_compliance.rules import dashboard as dashboard_rules
from rgpd_compliance.rules import diagnostic as diagnostic_rules
from rgpd_compliance.services.diagnostic import question_rule


class DashboardService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._questions = QuestionRepo(session)
        self._responses = ResponseRepo(session)
        self._actions = ActionRepo(session)
        self._requests = RequestRepo(session)

    async def build(
        self, ctx: CompanyContext, *, now: datetime | None = None
    ) -> dashboard_rules.Dashboard:
        questions = await self._questions.list_active()
        responses = await self._responses.list_for_company(ctx.company_id)
        actions = await self._actions.list_for_company(ctx.company_id)
        requests = await self._requests.list_for_company(ctx.company_id)

        return dashboard_rules.build(
            questions=[question_rule(q) for q in questions],
            answers=[
                diagnostic_rules.Answer(question_id=r.question_id, response=r.response)
                for r in responses
            ],
            actions=[
                dashboard_rules.ActionItem(
                    id=a.id,
                    title=a.title,
                    category=a.category,
                    priority=a.priority,
                    status=a.status.value,
                )
                for a in actions
            ],
            requests=[
                dashboard_rules.RequestItem(status=r.status.value, due_date=r.due_date)
                for r in requests
            ],
            now=now or datetime.utcnow(),
        )
