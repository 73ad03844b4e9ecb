from __future__ import annotations

from datetime import datetime

from rgpd_compliance.rules import dashboard
from rgpd_compliance.rules.dashboard import ActionItem, RequestItem
from rgpd_compliance.rules.diagnostic import Answer, QuestionRule

NOW = datetime(2024, 6, 15, 12, 0)


def _q(
    qid: int, category: str, *, risk_no: str | None = None, risk_yes: str | None = None
) -> QuestionRule:
    return QuestionRule(
        id=qid,
        question=f"Question {qid}",
        category=category,
        action_plan_no="Corriger" if risk_no else None,
        risk_level_no=risk_no,
        action_plan_yes="Maintenir" if risk_yes else None,
        risk_level_yes=risk_yes,
    )


QUESTIONS = [
    _q(1, "Gouvernance", risk_no="critique"),
    _q(2, "Gouvernance", risk_no="moyen"),
    _q(3, "Gouvernance", risk_no="moyen"),
    _q(4, "Sécurité", risk_no="élevé", risk_yes="faible"),
    _q(5, "Formation"),
]


def _build(answers=(), actions=(), requests=()) -> dashboard.Dashboard:
    return dashboard.build(
        questions=QUESTIONS, answers=answers, actions=actions, requests=requests, now=NOW
    )


def test_empty_company_scores_zero() -> None:
    d = _build()
    assert d.compliance_score == 0
    assert d.diagnostic_progress == 0
    assert list(d.category_scores) == ["Gouvernance", "Sécurité", "Formation"]
    assert d.category_scores["Gouvernance"].total == 3
    assert d.category_scores["Gouvernance"].answered == 0
    assert d.risk_areas == []
    assert d.total_categories == 3
    assert d.completed_categories == 0


def test_category_and_overall_scores_are_share_of_yes() -> None:
    d = _build(
        answers=[
            Answer(question_id=1, response="oui"),
            Answer(question_id=2, response="non"),
            Answer(question_id=3, response="oui"),
            Answer(question_id=4, response="oui"),
        ]
    )
    gouvernance = d.category_scores["Gouvernance"]
    assert (gouvernance.score, gouvernance.total, gouvernance.answered) == (67, 3, 3)
    assert d.category_scores["Sécurité"].score == 100
    assert d.category_scores["Formation"].score == 0
    assert d.compliance_score == 75
    assert d.diagnostic_progress == 80
    assert d.completed_categories == 2


def test_risk_area_takes_highest_level_met() -> None:
    d = _build(
        answers=[
            Answer(question_id=1, response="non"),
            Answer(question_id=2, response="non"),
            Answer(question_id=4, response="oui"),
        ]
    )
    areas = {a.category: a for a in d.risk_areas}
    assert areas["Gouvernance"].severity == "critique"
    assert [r.question_id for r in areas["Gouvernance"].specific_risks] == [1, 2]
    assert areas["Sécurité"].severity == "faible"
    assert "Formation" not in areas


def test_answers_to_inactive_questions_are_ignored() -> None:
    d = _build(answers=[Answer(question_id=99, response="oui")])
    assert d.compliance_score == 0
    assert d.diagnostic_progress == 0


def test_action_counts_and_priority_order() -> None:
    actions = [
        ActionItem(id=1, title="a", category="c", priority="low", status="todo"),
        ActionItem(id=2, title="b", category="c", priority="critical", status="todo"),
        ActionItem(id=3, title="c", category="c", priority="critical", status="completed"),
        ActionItem(id=4, title="d", category="c", priority="high", status="inprogress"),
        ActionItem(id=5, title="e", category="c", priority="medium", status="todo"),
        ActionItem(id=6, title="f", category="c", priority="medium", status="todo"),
        ActionItem(id=7, title="g", category="c", priority="low", status="todo"),
    ]
    d = _build(actions=actions)
    assert (d.actions_total, d.actions_completed, d.actions_in_progress, d.actions_urgent) == (
        7,
        1,
        1,
        1,
    )
    assert [a.id for a in d.priority_actions] == [2, 4, 5, 6, 1]


def test_open_and_overdue_requests() -> None:
    requests = [
        RequestItem(status="new", due_date=datetime(2024, 6, 1)),
        RequestItem(status="verification", due_date=datetime(2024, 7, 1)),
        RequestItem(status="closed", due_date=datetime(2024, 5, 1)),
    ]
    d = _build(requests=requests)
    assert d.requests_pending == 2
    assert d.requests_overdue == 1


def test_percent_rounds_half_up() -> None:
    assert dashboard.percent(1, 8) == 13
    assert dashboard.percent(0, 0) == 0
