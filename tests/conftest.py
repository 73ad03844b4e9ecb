"""
tests.conftest

Shared fixtures: an app bound to a throwaway SQLite file, an HTTP client, and token helpers.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from rgpd_compliance.api.app import create_app
from rgpd_compliance.settings import Settings

Headers = dict[str, str]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(env="test", database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run the lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def auth_headers(client: httpx.AsyncClient) -> Callable[..., Awaitable[Headers]]:
    async def _mint(subject: str, *, roles: list[str] | None = None, email: str | None = None) -> Headers:
        r = await client.post(
            "/api/dev/token",
            json={"subject": subject, "roles": roles or [], "email": email},
        )
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _mint


@pytest_asyncio.fixture
async def owner(auth_headers) -> Headers:
    return await auth_headers("owner-1", email="owner@example.fr")


@pytest_asyncio.fixture
async def admin(auth_headers) -> Headers:
    return await auth_headers("platform-admin", roles=["admin"])


@pytest_asyncio.fixture
async def company_id(client: httpx.AsyncClient, owner: Headers) -> int:
    r = await client.post(
        "/api/companies", json={"name": "Boulangerie Dupont", "sector": "commerce"}, headers=owner
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


@pytest.fixture
def add_collaborator(client: httpx.AsyncClient, owner: Headers, auth_headers):
    """
    Invite `subject` with the given permissions (or template) and accept as them.
    Returns the collaborator's auth headers.
    """

    async def _add(
        company_id: int,
        subject: str,
        *,
        permissions: list[str] | None = None,
        template: str | None = None,
    ) -> Headers:
        body: dict[str, object] = {"email": f"{subject}@example.fr"}
        if permissions is not None:
            body["permissions"] = permissions
        if template is not None:
            body["template"] = template
        r = await client.post(f"/api/companies/{company_id}/invitations", json=body, headers=owner)
        assert r.status_code == 201, r.text
        headers = await auth_headers(subject)
        r = await client.post(f"/api/invitations/{r.json()['token']}/accept", headers=headers)
        assert r.status_code == 200, r.text
        return headers

    return _add


RECORD = {
    "name": "Gestion de la paie",
    "purpose": "Calcul et versement des salaires",
    "legal_basis": "Obligation légale",
    "data_categories": ["Identité", "Coordonnées bancaires"],
    "recipients": ["Service RH", "Expert-comptable"],
    "retention": "5 ans",
    "security_measures": ["Chiffrement", "Contrôle d'accès"],
    "transfers_outside_eu": False,
    "type": "controller",
    "data_controller_name": "Jean Dupont",
    "data_controller_email": "jean@dupont.fr",
}


@pytest.fixture
def record_payload() -> dict[str, object]:
    return dict(RECORD)


@pytest_asyncio.fixture
async def record_id(client: httpx.AsyncClient, owner: Headers, company_id: int, record_payload) -> int:
    r = await client.post(f"/api/records/{company_id}", json=record_payload, headers=owner)
    assert r.status_code == 201, r.text
    return r.json()["id"]
