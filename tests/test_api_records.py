"""
tests.test_api_records

Processing records registry: CRUD and CSV export.
"""

from __future__ import annotations

import csv
import io
from datetime import date

import pytest


@pytest.mark.asyncio
async def test_create_and_list(client, owner, company_id, record_id) -> None:
    r = await client.get(f"/api/records/{company_id}", headers=owner)
    assert r.status_code == 200
    [record] = r.json()
    assert record["id"] == record_id
    assert record["company_id"] == company_id
    assert record["data_categories"] == ["Identité", "Coordonnées bancaires"]
    assert record["type"] == "controller"
    assert record["dpia_required"] is None


@pytest.mark.asyncio
async def test_validation_error_is_422(client, owner, company_id) -> None:
    r = await client.post(f"/api/records/{company_id}", json={"name": "x"}, headers=owner)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_update_partial_fields(client, owner, company_id, record_id) -> None:
    r = await client.put(
        f"/api/records/{company_id}/{record_id}",
        json={"retention": "10 ans", "type": "joint-controller", "name": None},
        headers=owner,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["retention"] == "10 ans"
    assert body["type"] == "joint-controller"
    # null on a required column is ignored.
    assert body["name"] == "Gestion de la paie"


@pytest.mark.asyncio
async def test_delete_and_missing_record(client, owner, company_id, record_id) -> None:
    r = await client.delete(f"/api/records/{company_id}/{record_id}", headers=owner)
    assert r.status_code == 204
    r = await client.delete(f"/api/records/{company_id}/{record_id}", headers=owner)
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_record_of_other_company_is_hidden(client, owner, company_id, record_id) -> None:
    r = await client.post("/api/companies", json={"name": "Autre SARL"}, headers=owner)
    other_id = r.json()["id"]
    r = await client.put(
        f"/api/records/{other_id}/{record_id}", json={"retention": "1 an"}, headers=owner
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_csv_export(client, owner, company_id, record_payload) -> None:
    for name in ("Paie", "Recrutement", "Clients"):
        r = await client.post(
            f"/api/records/{company_id}", json={**record_payload, "name": name}, headers=owner
        )
        assert r.status_code == 201

    r = await client.get(f"/api/records/{company_id}/export", headers=owner)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert (
        f'filename="registre-traitements-{date.today().isoformat()}.csv"'
        in r.headers["content-disposition"]
    )

    lines = r.text.splitlines()
    assert len(lines) == 4
    rows = list(csv.reader(io.StringIO(r.text)))
    assert [row[0] for row in rows[1:]] == ["Paie", "Recrutement", "Clients"]
    assert rows[1][5] == "Service RH; Expert-comptable"
    assert all(line.startswith('"') for line in lines)
