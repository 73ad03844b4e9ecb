"""
tests.test_api_breaches

Data breach recording and rule-based analysis.
"""

from __future__ import annotations

import pytest

HEALTH_BREACH = {
    "description": "Vol d'un ordinateur portable contenant des dossiers patients",
    "incident_date": "2024-05-02T09:00:00",
    "discovery_date": "2024-05-03T14:30:00",
    "data_categories": ["Données de santé", "Identité"],
    "affected_persons": 5000,
    "measures": "Effacement à distance déclenché",
}


@pytest.mark.asyncio
async def test_create_and_analyze_health_breach(client, owner, company_id) -> None:
    r = await client.post(f"/api/breaches/{company_id}/analyze", json=HEALTH_BREACH, headers=owner)
    assert r.status_code == 201
    body = r.json()
    assert body["analysis"]["notification_required"] is True
    assert body["analysis"]["data_subject_notification_required"] is True
    assert body["analysis"]["risk_level"] == "élevé"
    breach = body["breach"]
    assert breach["status"] == "analyzed"
    assert breach["notification_required"] is True
    assert breach["notification_justification"] == body["analysis"]["justification"]
    assert breach["recommendations"] == body["analysis"]["recommendations"]


@pytest.mark.asyncio
async def test_analyze_existing_breach_with_encryption(client, owner, company_id) -> None:
    r = await client.post(
        f"/api/breaches/{company_id}",
        json={
            "description": "Envoi d'un email au mauvais destinataire",
            "incident_date": "2024-06-10T08:00:00",
            "data_categories": ["Nom", "Email"],
            "affected_persons": 3,
            "measures": "Demande de suppression au destinataire",
            "comprehensive_data": {"data_encrypted": True},
        },
        headers=owner,
    )
    assert r.status_code == 201
    breach = r.json()
    assert breach["status"] == "draft"
    assert breach["notification_required"] is None

    r = await client.post(f"/api/breaches/{company_id}/{breach['id']}/analyze", headers=owner)
    assert r.status_code == 200
    body = r.json()
    assert body["analysis"]["risk_level"] == "faible"
    assert body["analysis"]["notification_required"] is False
    assert body["breach"]["status"] == "analyzed"


@pytest.mark.asyncio
async def test_update_breach_follow_up(client, owner, company_id) -> None:
    r = await client.post(f"/api/breaches/{company_id}/analyze", json=HEALTH_BREACH, headers=owner)
    breach_id = r.json()["breach"]["id"]

    r = await client.put(
        f"/api/breaches/{company_id}/{breach_id}",
        json={"status": "reported", "notification_date": "2024-05-04T10:00:00"},
        headers=owner,
    )
    assert r.status_code == 200
    assert r.json()["status"] == "reported"
    assert r.json()["notification_date"].startswith("2024-05-04T10:00:00")

    # Re-analysis keeps the reported status.
    r = await client.post(f"/api/breaches/{company_id}/{breach_id}/analyze", headers=owner)
    assert r.json()["breach"]["status"] == "reported"

    r = await client.get(f"/api/breaches/{company_id}", headers=owner)
    assert [b["id"] for b in r.json()] == [breach_id]


@pytest.mark.asyncio
async def test_breaches_require_permission(client, company_id, add_collaborator) -> None:
    reader = await add_collaborator(company_id, "breach-reader", permissions=["breaches.read"])
    r = await client.get(f"/api/breaches/{company_id}", headers=reader)
    assert r.status_code == 200
    r = await client.post(f"/api/breaches/{company_id}/analyze", json=HEALTH_BREACH, headers=reader)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_unknown_breach_is_404(client, owner, company_id) -> None:
    r = await client.post(f"/api/breaches/{company_id}/12345/analyze", headers=owner)
    assert r.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("flag", ["false", "non", "0", ""])
async def test_negative_encryption_flag_keeps_notification(client, owner, company_id, flag) -> None:
    payload = {
        "description": "Export de fichier clients envoyé à un prestataire non autorisé",
        "incident_date": "2024-07-01T10:00:00",
        "data_categories": ["Nom", "Adresse"],
        "affected_persons": 150,
        "measures": "Suppression confirmée par le prestataire",
        "comprehensive_data": {"data_encrypted": flag},
    }
    r = await client.post(f"/api/breaches/{company_id}/analyze", json=payload, headers=owner)
    assert r.status_code == 201
    analysis = r.json()["analysis"]
    assert analysis["risk_level"] == "moyen"
    assert analysis["notification_required"] is True
