"""
rgpd_compliance.db.repositories.companies

Repositories for companies and their collaborators.

Responsibilities:
- Create and fetch `Company` rows.
- Manage `CompanyAccess` rows (who can act on a company, with which permissions).
- Manage `Invitation` rows (pending access grants addressed by token).
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.db.models import (
    AccessRole,
    AccessStatus,
    Company,
    CompanyAccess,
    Invitation,
    InvitationStatus,
)


class CompanyRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, owner: str, **fields: object) -> Company:
        company = Company(owner=owner, **fields)
        self._session.add(company)
        await self._session.flush()
        return company

    async def get(self, company_id: int) -> Company | None:
        return await self._session.get(Company, company_id)

    async def list_for_subject(self, subject: str) -> list[tuple[Company, CompanyAccess]]:
        stmt = (
            select(Company, CompanyAccess)
            .join(CompanyAccess, CompanyAccess.company_id == Company.id)
            .where(CompanyAccess.subject == subject, CompanyAccess.status == AccessStatus.active)
            .order_by(Company.id)
        )
        return [(c, a) for c, a in (await self._session.execute(stmt)).all()]


class AccessRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def grant(
        self,
        *,
        company_id: int,
        subject: str,
        role: AccessRole,
        permissions: list[str],
        email: str | None = None,
        invited_by: str | None = None,
    ) -> CompanyAccess:
        # Re-granting a revoked collaborator reactivates the existing row.
        existing = await self.get_for_subject(company_id, subject, active_only=False)
        if existing is not None:
            existing.role = role
            existing.permissions = list(permissions)
            existing.status = AccessStatus.active
            existing.email = email or existing.email
            existing.invited_by = invited_by
            await self._session.flush()
            return existing

        access = CompanyAccess(
            company_id=company_id,
            subject=subject,
            email=email,
            role=role,
            permissions=list(permissions),
            status=AccessStatus.active,
            invited_by=invited_by,
        )
        self._session.add(access)
        await self._session.flush()
        return access

    async def get(self, company_id: int, access_id: int) -> CompanyAccess | None:
        access = await self._session.get(CompanyAccess, access_id)
        if access is None or access.company_id != company_id:
            return None
        return access

    async def get_for_subject(
        self, company_id: int, subject: str, *, active_only: bool = True
    ) -> CompanyAccess | None:
        stmt = select(CompanyAccess).where(
            CompanyAccess.company_id == company_id, CompanyAccess.subject == subject
        )
        if active_only:
            stmt = stmt.where(CompanyAccess.status == AccessStatus.active)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_company(self, company_id: int) -> list[CompanyAccess]:
        stmt = (
            select(CompanyAccess)
            .where(
                CompanyAccess.company_id == company_id,
                CompanyAccess.status == AccessStatus.active,
            )
            .order_by(CompanyAccess.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())


class InvitationRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, **fields: object) -> Invitation:
        inv = Invitation(status=InvitationStatus.pending, **fields)
        self._session.add(inv)
        await self._session.flush()
        return inv

    async def get(self, company_id: int, invitation_id: int) -> Invitation | None:
        inv = await self._session.get(Invitation, invitation_id)
        if inv is None or inv.company_id != company_id:
            return None
        return inv

    async def get_by_token(self, token: str) -> Invitation | None:
        stmt = select(Invitation).where(Invitation.token == token)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_company(self, company_id: int) -> list[Invitation]:
        stmt = (
            select(Invitation)
            .where(Invitation.company_id == company_id)
            .order_by(Invitation.created_at.desc(), Invitation.id.desc())
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def find_pending(self, company_id: int, email: str) -> Invitation | None:
        stmt = select(Invitation).where(
            Invitation.company_id == company_id,
            Invitation.email == email,
            Invitation.status == InvitationStatus.pending,
        )
        return (await self._session.execute(stmt)).scalars().first()
