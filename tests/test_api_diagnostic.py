"""
tests.test_api_diagnostic

Diagnostic questionnaire, analysis into actions, and the action plan.
"""

from __future__ import annotations

import pytest


async def _seed_questions(client, admin) -> list[int]:
    questions = [
        {
            "question": "Disposez-vous d'un registre des activités de traitement à jour ?",
            "category": "Gouvernance",
            "order": 1,
            "action_plan_no": "Constituer le registre des traitements",
            "risk_level_no": "critique",
        },
        {
            "question": "Vos collaborateurs sont-ils sensibilisés au RGPD ?",
            "category": "Formation",
            "order": 2,
            "action_plan_no": "Organiser une session de sensibilisation",
            "risk_level_no": "moyen",
            "action_plan_yes": "Planifier un rappel annuel",
            "risk_level_yes": "faible",
        },
    ]
    ids = []
    for q in questions:
        r = await client.post("/api/admin/questions", json=q, headers=admin)
        assert r.status_code == 201, r.text
        ids.append(r.json()["id"])
    return ids


@pytest.mark.asyncio
async def test_questions_listed_in_order_and_soft_deleted(client, admin, owner) -> None:
    q1, q2 = await _seed_questions(client, admin)
    r = await client.get("/api/diagnostic/questions", headers=owner)
    assert [q["id"] for q in r.json()] == [q1, q2]

    r = await client.delete(f"/api/admin/questions/{q2}", headers=admin)
    assert r.status_code == 204
    r = await client.get("/api/diagnostic/questions", headers=owner)
    assert [q["id"] for q in r.json()] == [q1]


@pytest.mark.asyncio
async def test_responses_upsert_and_analyze(client, admin, owner, company_id) -> None:
    q1, q2 = await _seed_questions(client, admin)

    r = await client.post(
        f"/api/diagnostic/{company_id}/responses",
        json={"responses": [{"question_id": q1, "response": "non"}, {"question_id": q2, "response": "non"}]},
        headers=owner,
    )
    assert r.status_code == 200
    # Last answer wins.
    r = await client.post(
        f"/api/diagnostic/{company_id}/responses",
        json={"responses": [{"question_id": q2, "response": "Oui"}]},
        headers=owner,
    )
    assert r.json()[0]["response"] == "oui"

    r = await client.get(f"/api/diagnostic/{company_id}/responses", headers=owner)
    assert {x["question_id"]: x["response"] for x in r.json()} == {q1: "non", q2: "oui"}

    r = await client.post(f"/api/diagnostic/{company_id}/analyze", headers=owner)
    assert r.status_code == 200
    analysis = r.json()
    assert analysis["total_actions"] == 2
    assert analysis["overall_risk_score"] == 25 + 5
    assert analysis["risk_distribution"]["critique"] == 1
    assert analysis["risk_distribution"]["faible"] == 1
    assert [a["priority"] for a in analysis["actions"]] == ["critical", "low"]
    assert analysis["summary"].startswith("Diagnostic terminé. 2 actions")

    r = await client.get(f"/api/actions/{company_id}", headers=owner)
    actions = r.json()
    assert [a["id"] for a in actions] == analysis["created_action_ids"]
    assert all(a["status"] == "todo" for a in actions)


@pytest.mark.asyncio
async def test_invalid_responses_rejected(client, admin, owner, company_id) -> None:
    [q1, _] = await _seed_questions(client, admin)
    r = await client.post(
        f"/api/diagnostic/{company_id}/responses",
        json={"responses": [{"question_id": q1, "response": "peut-être"}]},
        headers=owner,
    )
    assert r.status_code == 422
    r = await client.post(
        f"/api/diagnostic/{company_id}/responses",
        json={"responses": [{"question_id": 9999, "response": "oui"}]},
        headers=owner,
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_complete_action_sets_completed_at(client, admin, owner, company_id) -> None:
    [q1, _] = await _seed_questions(client, admin)
    await client.post(
        f"/api/diagnostic/{company_id}/responses",
        json={"responses": [{"question_id": q1, "response": "non"}]},
        headers=owner,
    )
    r = await client.post(f"/api/diagnostic/{company_id}/analyze", headers=owner)
    [action_id] = r.json()["created_action_ids"]

    r = await client.put(
        f"/api/actions/{company_id}/{action_id}",
        json={"status": "completed", "due_date": "2024-12-31T00:00:00"},
        headers=owner,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "completed"
    assert body["completed_at"] is not None
    assert body["due_date"].startswith("2024-12-31")

    r = await client.put(
        f"/api/actions/{company_id}/{action_id}", json={"status": "inprogress"}, headers=owner
    )
    assert r.json()["completed_at"] is None


@pytest.mark.asyncio
async def test_action_plan_permissions(client, company_id, add_collaborator) -> None:
    reader = await add_collaborator(company_id, "actions-reader", permissions=["actions.read"])
    r = await client.get(f"/api/actions/{company_id}", headers=reader)
    assert r.status_code == 200
    r = await client.post(f"/api/diagnostic/{company_id}/analyze", headers=reader)
    assert r.status_code == 403
