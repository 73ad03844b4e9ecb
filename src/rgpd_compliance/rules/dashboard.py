"""
rgpd_compliance.rules.dashboard

Compliance dashboard figures computed from a company's current state.

Responsibilities:
- Score the diagnostic per category and overall (share of "oui" answers, 0-100).
- Map risk areas: per answered category, the highest risk level met.
- Count action plan items and open/overdue data subject requests.
- Pick the open actions to work on first.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from rgpd_compliance.rules import requests as request_rules
from rgpd_compliance.rules.diagnostic import Answer, QuestionRule, is_yes, normalize_risk_level

PRIORITY_ACTIONS_LIMIT = 5

_SEVERITY_RANK = {"faible": 1, "moyen": 2, "elevé": 3, "critique": 4}
_PRIORITY_RANK = {"critical": 4, "high": 3, "medium": 2, "low": 1}

_COMPLETED = "completed"
_IN_PROGRESS = "inprogress"
_URGENT_PRIORITY = "critical"


@dataclass(frozen=True, slots=True)
class ActionItem:
    id: int
    title: str
    category: str
    priority: str
    status: str


@dataclass(frozen=True, slots=True)
class RequestItem:
    status: str
    due_date: datetime


@dataclass(frozen=True, slots=True)
class CategoryScore:
    score: int
    total: int
    answered: int


@dataclass(frozen=True, slots=True)
class SpecificRisk:
    question_id: int
    question: str
    response: str
    risk_level: str


@dataclass(frozen=True, slots=True)
class RiskArea:
    category: str
    score: int
    severity: str
    specific_risks: list[SpecificRisk] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Dashboard:
    compliance_score: int
    category_scores: dict[str, CategoryScore]
    diagnostic_progress: int
    actions_total: int
    actions_completed: int
    actions_in_progress: int
    actions_urgent: int
    requests_pending: int
    requests_overdue: int
    risk_areas: list[RiskArea]
    total_categories: int
    completed_categories: int
    priority_actions: list[ActionItem]


def percent(part: int, whole: int) -> int:
    """Rounded percentage, 0 when there is nothing to measure."""

    if whole <= 0:
        return 0
    return int(part * 100 / whole + 0.5)


def _categories(questions: Sequence[QuestionRule]) -> list[str]:
    seen: list[str] = []
    for q in questions:
        if q.category not in seen:
            seen.append(q.category)
    return seen


def _risk_area(
    category: str, score: int, answered: list[tuple[QuestionRule, Answer]]
) -> RiskArea | None:
    risks: list[SpecificRisk] = []
    for question, answer in answered:
        raw = question.risk_level_yes if is_yes(answer.response) else question.risk_level_no
        if not raw:
            continue
        risks.append(
            SpecificRisk(
                question_id=question.id,
                question=question.question,
                response=answer.response,
                risk_level=normalize_risk_level(raw),
            )
        )
    if not risks:
        return None
    severity = max((r.risk_level for r in risks), key=lambda lvl: _SEVERITY_RANK.get(lvl, 1))
    return RiskArea(category=category, score=score, severity=severity, specific_risks=risks)


def build(
    *,
    questions: Iterable[QuestionRule],
    answers: Iterable[Answer],
    actions: Iterable[ActionItem],
    requests: Iterable[RequestItem],
    now: datetime,
) -> Dashboard:
    question_list = list(questions)
    by_id = {q.id: q for q in question_list}
    # Answers to questions that are no longer active are left out.
    answered = [(by_id[a.question_id], a) for a in answers if a.question_id in by_id]

    category_scores: dict[str, CategoryScore] = {}
    risk_areas: list[RiskArea] = []
    for category in _categories(question_list):
        in_category = [(q, a) for q, a in answered if q.category == category]
        yes = sum(1 for _, a in in_category if is_yes(a.response))
        score = percent(yes, len(in_category))
        category_scores[category] = CategoryScore(
            score=score,
            total=sum(1 for q in question_list if q.category == category),
            answered=len(in_category),
        )
        area = _risk_area(category, score, in_category)
        if area is not None:
            risk_areas.append(area)

    total_yes = sum(1 for _, a in answered if is_yes(a.response))
    action_list = list(actions)
    request_list = list(requests)
    open_actions = [a for a in action_list if a.status != _COMPLETED]
    priority_actions = sorted(
        open_actions, key=lambda a: _PRIORITY_RANK.get(a.priority, 0), reverse=True
    )[:PRIORITY_ACTIONS_LIMIT]

    return Dashboard(
        compliance_score=percent(total_yes, len(answered)),
        category_scores=category_scores,
        diagnostic_progress=percent(len(answered), max(len(question_list), 1)),
        actions_total=len(action_list),
        actions_completed=sum(1 for a in action_list if a.status == _COMPLETED),
        actions_in_progress=sum(1 for a in action_list if a.status == _IN_PROGRESS),
        actions_urgent=sum(1 for a in open_actions if a.priority == _URGENT_PRIORITY),
        requests_pending=sum(1 for r in request_list if request_rules.is_open(r.status)),
        requests_overdue=sum(
            1 for r in request_list if request_rules.is_overdue(r.status, r.due_date, now)
        ),
        risk_areas=risk_areas,
        total_categories=len(category_scores),
        completed_categories=sum(
            1 for c in category_scores.values() if c.total > 0 and c.answered == c.total
        ),
        priority_actions=priority_actions,
    )
