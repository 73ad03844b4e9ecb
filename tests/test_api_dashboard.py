"""
tests.test_api_dashboard

Compliance dashboard built from diagnostic answers, actions and requests.
"""

from __future__ import annotations

import pytest

QUESTIONS = [
    {
        "question": "Avez-vous désigné un DPO ou un référent RGPD ?",
        "category": "Gouvernance",
        "order": 1,
        "action_plan_no": "Désigner un référent RGPD",
        "risk_level_no": "critique",
    },
    {
        "question": "Tenez-vous un registre des traitements ?",
        "category": "Gouvernance",
        "order": 2,
        "action_plan_no": "Constituer le registre",
        "risk_level_no": "elevé",
    },
    {
        "question": "Les postes de travail sont-ils chiffrés ?",
        "category": "Sécurité",
        "order": 3,
        "action_plan_no": "Chiffrer les disques",
        "risk_level_no": "moyen",
    },
]


async def _seed(client, admin, owner, company_id) -> None:
    ids = []
    for q in QUESTIONS:
        r = await client.post("/api/admin/questions", json=q, headers=admin)
        assert r.status_code == 201, r.text
        ids.append(r.json()["id"])
    r = await client.post(
        f"/api/diagnostic/{company_id}/responses",
        json={
            "responses": [
                {"question_id": ids[0], "response": "non"},
                {"question_id": ids[1], "response": "oui"},
            ]
        },
        headers=owner,
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_empty_dashboard(client, owner, company_id) -> None:
    r = await client.get(f"/api/dashboard/{company_id}", headers=owner)
    assert r.status_code == 200
    body = r.json()
    assert body["compliance"] == {"score": 0, "category_scores": {}, "diagnostic_progress": 0}
    assert body["actions"] == {"total": 0, "completed": 0, "in_progress": 0, "urgent": 0}
    assert body["requests"] == {"pending": 0, "overdue": 0}
    assert body["priority_actions"] == []


@pytest.mark.asyncio
async def test_dashboard_reflects_answers_actions_and_requests(
    client, admin, owner, company_id
) -> None:
    await _seed(client, admin, owner, company_id)
    r = await client.post(f"/api/diagnostic/{company_id}/analyze", headers=owner)
    assert r.json()["total_actions"] == 1
    r = await client.post(
        f"/api/requests/{company_id}",
        json={
            "requester_id": "c-1",
            "requester_email": "c1@example.fr",
            "request_type": "erasure",
        },
        headers=owner,
    )
    assert r.status_code == 201

    r = await client.get(f"/api/dashboard/{company_id}", headers=owner)
    assert r.status_code == 200
    body = r.json()

    compliance = body["compliance"]
    assert compliance["score"] == 50
    assert compliance["diagnostic_progress"] == 67
    assert compliance["category_scores"]["Gouvernance"] == {"score": 50, "total": 2, "answered": 2}
    assert compliance["category_scores"]["Sécurité"] == {"score": 0, "total": 1, "answered": 0}

    assert body["actions"] == {"total": 1, "completed": 0, "in_progress": 0, "urgent": 1}
    assert body["requests"] == {"pending": 1, "overdue": 0}

    mapping = body["risk_mapping"]
    assert mapping["total_categories"] == 2
    assert mapping["completed_categories"] == 1
    [area] = mapping["risk_areas"]
    assert area["category"] == "Gouvernance"
    assert area["severity"] == "critique"

    [top] = body["priority_actions"]
    assert top["priority"] == "critical"
    assert top["status"] == "todo"


@pytest.mark.asyncio
async def test_dashboard_requires_diagnostic_read(client, company_id, add_collaborator) -> None:
    actions_only = await add_collaborator(company_id, "marc", permissions=["actions.read"])
    r = await client.get(f"/api/dashboard/{company_id}", headers=actions_only)
    assert r.status_code == 403

    reader = await add_collaborator(company_id, "ines", permissions=["diagnostic.read"])
    r = await client.get(f"/api/dashboard/{company_id}", headers=reader)
    assert r.status_code == 200
