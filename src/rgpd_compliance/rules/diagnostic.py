"""
rgpd_compliance.rules.diagnostic

Diagnostic questionnaire analysis.

Responsibilities:
- Turn answered questions into compliance actions using each question's
  configured yes/no action plan and risk level.
- Aggregate a capped overall risk score and a risk distribution.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

MAX_SCORE = 100

RISK_LEVELS: tuple[str, ...] = ("faible", "moyen", "elevé", "critique")

_RISK_WEIGHTS = {"critique": 25, "elevé": 15, "moyen": 10}
_DEFAULT_WEIGHT = 5

_PRIORITIES = {"critique": "critical", "elevé": "high", "moyen": "medium"}
_DEFAULT_PRIORITY = "low"

_TITLE_PREFIX_LEN = 50


@dataclass(frozen=True, slots=True)
class QuestionRule:
    id: int
    question: str
    category: str
    action_plan_yes: str | None = None
    risk_level_yes: str | None = None
    action_plan_no: str | None = None
    risk_level_no: str | None = None


@dataclass(frozen=True, slots=True)
class Answer:
    question_id: int
    response: str


@dataclass(frozen=True, slots=True)
class PlannedAction:
    title: str
    description: str
    category: str
    priority: str
    risk_level: str


@dataclass(frozen=True, slots=True)
class DiagnosticAnalysis:
    actions: list[PlannedAction]
    overall_risk_score: int
    risk_distribution: dict[str, int] = field(default_factory=dict)

    @property
    def summary(self) -> str:
        return (
            f"Diagnostic terminé. {len(self.actions)} actions identifiées basées sur vos réponses."
        )


def normalize_risk_level(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    # "élevé" and "elevé" are both seen in question configurations.
    if value in ("élevé", "eleve", "élevée"):
        value = "elevé"
    return value if value in RISK_LEVELS else "faible"


def is_yes(response: str) -> bool:
    return response.strip().lower() in ("oui", "yes")


def analyze(questions: Iterable[QuestionRule], answers: Iterable[Answer]) -> DiagnosticAnalysis:
    by_id = {q.id: q for q in questions}
    actions: list[PlannedAction] = []
    distribution = {level: 0 for level in RISK_LEVELS}
    total = 0

    for answer in answers:
        question = by_id.get(answer.question_id)
        if question is None:
            continue
        if is_yes(answer.response):
            plan, risk = question.action_plan_yes, question.risk_level_yes
        else:
            plan, risk = question.action_plan_no, question.risk_level_no
        if not plan or not plan.strip():
            continue

        level = normalize_risk_level(risk)
        total += _RISK_WEIGHTS.get(level, _DEFAULT_WEIGHT)
        distribution[level] += 1
        actions.append(
            PlannedAction(
                title=f"Action pour: {question.question[:_TITLE_PREFIX_LEN]}...",
                description=plan,
                category=question.category,
                priority=_PRIORITIES.get(level, _DEFAULT_PRIORITY),
                risk_level=level,
            )
        )

    return DiagnosticAnalysis(
        actions=actions,
        overall_risk_score=min(MAX_SCORE, total),
        risk_distribution=distribution,
    )
