"""
rgpd_compliance.services.companies

Company and collaboration service.

Responsibilities:
- Create companies and make the creator their owner (`all` permissions).
- Manage collaborators: change role/permissions (explicit list or template), revoke.
- Manage invitations: create, list, revoke, accept by token.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from rgpd_compliance.auth.models import CompanyContext, Principal
from rgpd_compliance.db.models import (
    AccessRole,
    AccessStatus,
    Company,
    CompanyAccess,
    Invitation,
    InvitationStatus,
)
from rgpd_compliance.db.repositories.audit import AuditRepo
from rgpd_compliance.db.repositories.companies import AccessRepo, CompanyRepo, InvitationRepo
from rgpd_compliance.errors import ConflictError, NotFoundError, ValidationFailedError
from rgpd_compliance.observability.logging import get_logger
from rgpd_compliance.rules import permissions as perms

log = get_logger(__name__)


def resolve_permissions(
    *, permissions: list[str] | None, template: str | None
) -> list[str] | None:
    """
    A template wins over an explicit list. Returns None when neither is given.
    The owner wildcard `all` cannot be granted this way.
    """

    try:
        if template is not None:
            return perms.expand_template(template)
        if permissions is not None:
            granted = perms.validate(permissions)
        else:
            return None
    except ValueError as e:
        raise ValidationFailedError(str(e)) from e
    if perms.ALL in granted:
        raise ValidationFailedError(
            f"The '{perms.ALL}' permission is reserved for the company owner"
        )
    return granted


class CompanyService:
    def __init__(self, *, session: AsyncSession, invitation_ttl_days: int = 7) -> None:
        self._session = session
        self._invitation_ttl = timedelta(days=invitation_ttl_days)

        self._companies = CompanyRepo(session)
        self._access = AccessRepo(session)
        self._invitations = InvitationRepo(session)
        self._audit = AuditRepo(session)

    # -- companies ---------------------------------------------------------

    async def create_company(self, *, principal: Principal, fields: dict[str, Any]) -> Company:
        company = await self._companies.create(owner=principal.subject, **fields)
        await self._access.grant(
            company_id=company.id,
            subject=principal.subject,
            email=principal.email,
            role=AccessRole.owner,
            permissions=[perms.ALL],
        )
        await self._audit.add(
            company_id=company.id,
            actor=principal.subject,
            event_type="COMPANY_CREATED",
            entity_type="company",
            entity_id=company.id,
            details={"name": company.name},
        )
        await self._session.commit()
        log.info("company_created", company_id=company.id)
        return company

    async def list_for_principal(self, principal: Principal) -> list[tuple[Company, CompanyAccess]]:
        return await self._companies.list_for_subject(principal.subject)

    # -- collaborators -----------------------------------------------------

    async def list_collaborators(self, ctx: CompanyContext) -> list[CompanyAccess]:
        return await self._access.list_for_company(ctx.company_id)

    async def _get_collaborator(self, ctx: CompanyContext, access_id: int) -> CompanyAccess:
        access = await self._access.get(ctx.company_id, access_id)
        if access is None or access.status is not AccessStatus.active:
            raise NotFoundError("Collaborator not found")
        return access

    async def update_collaborator(
        self,
        ctx: CompanyContext,
        access_id: int,
        *,
        role: AccessRole | None = None,
        permissions: list[str] | None = None,
        template: str | None = None,
    ) -> CompanyAccess:
        access = await self._get_collaborator(ctx, access_id)
        if access.role is AccessRole.owner:
            raise ConflictError("The company owner's access cannot be changed")
        if role is AccessRole.owner:
            raise ValidationFailedError("Ownership cannot be granted to a collaborator")

        new_permissions = resolve_permissions(permissions=permissions, template=template)
        if new_permissions is not None:
            access.permissions = new_permissions
        if role is not None:
            access.role = role
        await self._session.flush()

        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="COLLABORATOR_UPDATED",
            entity_type="company_access",
            entity_id=access.id,
            details={"role": access.role.value, "permissions": list(access.permissions)},
        )
        await self._session.commit()
        log.info("collaborator_updated", company_id=ctx.company_id, access_id=access.id)
        return access

    async def remove_collaborator(self, ctx: CompanyContext, access_id: int) -> None:
        access = await self._get_collaborator(ctx, access_id)
        if access.role is AccessRole.owner:
            raise ConflictError("The company owner cannot be removed")
        access.status = AccessStatus.revoked
        access.permissions = []
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="COLLABORATOR_REMOVED",
            entity_type="company_access",
            entity_id=access.id,
            details={"subject": access.subject},
        )
        await self._session.commit()
        log.info("collaborator_removed", company_id=ctx.company_id, access_id=access.id)

    # -- invitations -------------------------------------------------------

    async def list_invitations(self, ctx: CompanyContext) -> list[Invitation]:
        return await self._invitations.list_for_company(ctx.company_id)

    async def invite(
        self,
        ctx: CompanyContext,
        *,
        email: str,
        role: AccessRole,
        permissions: list[str] | None = None,
        template: str | None = None,
    ) -> Invitation:
        if role is AccessRole.owner:
            raise ValidationFailedError("Ownership cannot be granted by invitation")
        email = email.strip().lower()
        if await self._invitations.find_pending(ctx.company_id, email) is not None:
            raise ConflictError(f"A pending invitation already exists for {email}")

        granted = resolve_permissions(permissions=permissions, template=template) or []
        inv = await self._invitations.create(
            company_id=ctx.company_id,
            email=email,
            role=role,
            permissions=granted,
            token=secrets.token_urlsafe(32),
            invited_by=ctx.principal.subject,
            expires_at=datetime.utcnow() + self._invitation_ttl,
        )
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="INVITATION_CREATED",
            entity_type="invitation",
            entity_id=inv.id,
            details={"email": email, "role": role.value, "permissions": granted},
        )
        await self._session.commit()
        log.info("invitation_created", company_id=ctx.company_id, invitation_id=inv.id)
        return inv

    async def revoke_invitation(self, ctx: CompanyContext, invitation_id: int) -> None:
        inv = await self._invitations.get(ctx.company_id, invitation_id)
        if inv is None:
            raise NotFoundError("Invitation not found")
        if inv.status is not InvitationStatus.pending:
            raise ConflictError(f"Invitation is already {inv.status.value}")
        inv.status = InvitationStatus.revoked
        await self._audit.add(
            company_id=ctx.company_id,
            actor=ctx.principal.subject,
            event_type="INVITATION_REVOKED",
            entity_type="invitation",
            entity_id=inv.id,
        )
        await self._session.commit()

    async def accept_invitation(self, *, principal: Principal, token: str) -> CompanyAccess:
        inv = await self._invitations.get_by_token(token)
        if inv is None:
            raise NotFoundError("Invitation not found")
        if inv.status is not InvitationStatus.pending:
            raise ConflictError(f"Invitation is already {inv.status.value}")
        if inv.expires_at <= datetime.utcnow():
            inv.status = InvitationStatus.expired
            await self._session.commit()
            raise ConflictError("Invitation has expired")

        existing = await self._access.get_for_subject(inv.company_id, principal.subject)
        if existing is not None and existing.role is AccessRole.owner:
            raise ConflictError("The company owner cannot accept an invitation to their own company")

        access = await self._access.grant(
            company_id=inv.company_id,
            subject=principal.subject,
            email=principal.email or inv.email,
            role=inv.role,
            permissions=list(inv.permissions),
            invited_by=inv.invited_by,
        )
        inv.status = InvitationStatus.accepted
        await self._audit.add(
            company_id=inv.company_id,
            actor=principal.subject,
            event_type="INVITATION_ACCEPTED",
            entity_type="invitation",
            entity_id=inv.id,
            details={"access_id": access.id},
        )
        await self._session.commit()
        log.info("invitation_accepted", company_id=inv.company_id, access_id=access.id)
        return access


# --- Module Notes -----------------------------------------------------------
# Invitations are accepted by whoever holds the token; the invited email is informative
# and is copied onto the access row when the token carries no email claim.
