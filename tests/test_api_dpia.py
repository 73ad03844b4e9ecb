"""
tests.test_api_dpia

DPIA evaluations (preview/save/upsert) and DPIA assessments.
"""

from __future__ import annotations

import pytest

YES_TWICE = {"scoring": "yes", "large_scale": "yes"}


@pytest.mark.asyncio
async def test_criteria_catalogue(client, owner) -> None:
    r = await client.get("/api/dpia-evaluations/criteria", headers=owner)
    assert r.status_code == 200
    body = r.json()
    assert len(body["criteria"]) == 9
    assert body["answers"] == ["yes", "no", "uncertain"]
    assert len(body["cnil_mandatory_treatments"]) == 22


@pytest.mark.asyncio
async def test_preview_does_not_persist(client, owner, company_id, record_id) -> None:
    r = await client.post(
        f"/api/dpia-evaluations/{company_id}/preview",
        json={"record_id": record_id, "answers": YES_TWICE},
        headers=owner,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["score"] == 2
    assert body["tier"] == "mandatory"
    assert body["requires_dpia"] is True

    r = await client.get(f"/api/dpia-evaluations/{company_id}", headers=owner)
    assert r.json() == []


@pytest.mark.asyncio
async def test_save_is_an_upsert_and_updates_record(client, owner, company_id, record_id) -> None:
    r = await client.post(
        f"/api/dpia-evaluations/{company_id}",
        json={"record_id": record_id, "answers": YES_TWICE},
        headers=owner,
    )
    assert r.status_code == 201
    first = r.json()
    assert first["tier"] == "mandatory"
    assert first["criteria_answers"]["scoring"] == "yes"
    assert first["criteria_answers"]["obstacle_to_right"] == "no"

    r = await client.post(
        f"/api/dpia-evaluations/{company_id}",
        json={"record_id": record_id, "answers": {"scoring": "incertain"}},
        headers=owner,
    )
    assert r.status_code == 200
    second = r.json()
    assert second["id"] == first["id"]
    assert second["score"] == 0.5
    assert second["tier"] == "not_required"

    r = await client.get(f"/api/dpia-evaluations/{company_id}", headers=owner)
    assert len(r.json()) == 1

    r = await client.get(f"/api/records/{company_id}", headers=owner)
    [record] = r.json()
    assert record["dpia_required"] is False
    assert record["dpia_justification"] == second["justification"]


@pytest.mark.asyncio
async def test_save_without_dpia_write_is_forbidden_and_not_persisted(
    client, owner, company_id, record_id, add_collaborator
) -> None:
    reader = await add_collaborator(company_id, "dpia-reader", permissions=["dpia.read"])

    r = await client.post(
        f"/api/dpia-evaluations/{company_id}",
        json={"record_id": record_id, "answers": YES_TWICE},
        headers=reader,
    )
    assert r.status_code == 403

    # Preview only needs read.
    r = await client.post(
        f"/api/dpia-evaluations/{company_id}/preview",
        json={"record_id": record_id, "answers": YES_TWICE},
        headers=reader,
    )
    assert r.status_code == 200

    r = await client.get(f"/api/dpia-evaluations/{company_id}", headers=owner)
    assert r.json() == []
    r = await client.get(f"/api/records/{company_id}", headers=owner)
    assert r.json()[0]["dpia_required"] is None


@pytest.mark.asyncio
async def test_renaming_record_rescores_saved_evaluation(client, owner, company_id, record_id) -> None:
    r = await client.post(
        f"/api/dpia-evaluations/{company_id}",
        json={"record_id": record_id, "answers": {"scoring": "no"}},
        headers=owner,
    )
    assert r.json()["requires_dpia"] is False

    r = await client.put(
        f"/api/records/{company_id}/{record_id}",
        json={"name": "Reconnaissance biométrie des salariés"},
        headers=owner,
    )
    assert r.status_code == 200
    assert r.json()["dpia_required"] is True

    r = await client.get(f"/api/dpia-evaluations/{company_id}", headers=owner)
    [evaluation] = r.json()
    assert evaluation["tier"] == "mandatory"
    assert evaluation["cnil_list_match"] == "Biométrie pour identifier de manière unique une personne"

    r = await client.get(f"/api/records/{company_id}/export", headers=owner)
    assert '"Oui"' in r.text.splitlines()[1]


@pytest.mark.asyncio
async def test_write_only_permission_cannot_read(client, company_id, add_collaborator) -> None:
    writer = await add_collaborator(company_id, "dpia-writer", permissions=["dpia.write"])
    r = await client.get(f"/api/dpia-evaluations/{company_id}", headers=writer)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_cnil_list_forces_mandatory(client, owner, company_id, record_payload) -> None:
    r = await client.post(
        f"/api/records/{company_id}",
        json={**record_payload, "name": "Pointage par biométrie"},
        headers=owner,
    )
    rid = r.json()["id"]
    r = await client.post(
        f"/api/dpia-evaluations/{company_id}",
        json={"record_id": rid, "answers": {}},
        headers=owner,
    )
    assert r.status_code == 201
    body = r.json()
    assert body["cnil_list_match"] == "Biométrie pour identifier de manière unique une personne"
    assert body["recommendation"] == "AIPD obligatoire (Liste CNIL)"
    assert body["requires_dpia"] is True


@pytest.mark.asyncio
async def test_invalid_answers_rejected(client, owner, company_id, record_id) -> None:
    r = await client.post(
        f"/api/dpia-evaluations/{company_id}/preview",
        json={"record_id": record_id, "answers": {"scoring": "maybe"}},
        headers=owner,
    )
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_FAILED"

    r = await client.post(
        f"/api/dpia-evaluations/{company_id}/preview",
        json={"record_id": 424242, "answers": {}},
        headers=owner,
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_evaluation_clears_record_flag(client, owner, company_id, record_id) -> None:
    r = await client.post(
        f"/api/dpia-evaluations/{company_id}",
        json={"record_id": record_id, "answers": YES_TWICE},
        headers=owner,
    )
    ev_id = r.json()["id"]
    r = await client.delete(f"/api/dpia-evaluations/{company_id}/{ev_id}", headers=owner)
    assert r.status_code == 204
    r = await client.get(f"/api/records/{company_id}", headers=owner)
    assert r.json()[0]["dpia_required"] is None


@pytest.mark.asyncio
async def test_assessment_crud(client, owner, company_id, record_id) -> None:
    r = await client.post(
        f"/api/dpia/{company_id}",
        json={
            "processing_record_id": record_id,
            "context": {"description": "Paie mensuelle"},
        },
        headers=owner,
    )
    assert r.status_code == 201
    assessment = r.json()
    assert assessment["status"] == "draft"

    r = await client.put(
        f"/api/dpia/{company_id}/{assessment['id']}",
        json={"status": "inprogress", "risks": {"illegitimate_access": "faible"}},
        headers=owner,
    )
    assert r.status_code == 200
    assert r.json()["status"] == "inprogress"
    assert r.json()["context"] == {"description": "Paie mensuelle"}

    r = await client.get(f"/api/dpia/{company_id}/{assessment['id']}", headers=owner)
    assert r.json()["risks"] == {"illegitimate_access": "faible"}

    r = await client.get(f"/api/dpia/{company_id}", headers=owner)
    assert len(r.json()) == 1

    r = await client.delete(f"/api/dpia/{company_id}/{assessment['id']}", headers=owner)
    assert r.status_code == 204
    r = await client.get(f"/api/dpia/{company_id}/{assessment['id']}", headers=owner)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_assessment_requires_record_of_same_company(client, owner, company_id) -> None:
    r = await client.post(
        f"/api/dpia/{company_id}", json={"processing_record_id": 999}, headers=owner
    )
    assert r.status_code == 404
