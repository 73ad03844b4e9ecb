"""
rgpd_compliance.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
- Define the company-scoped access context resolved for company endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rgpd_compliance.rules import permissions as perms

if TYPE_CHECKING:
    from rgpd_compliance.db.models import Company, CompanyAccess

PLATFORM_ADMIN_ROLE = "admin"


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity.
    """

    subject: str
    roles: frozenset[str]
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return PLATFORM_ADMIN_ROLE in self.roles


@dataclass(frozen=True, slots=True)
class CompanyContext:
    principal: Principal
    company: Company
    # None when a platform admin acts on a company they are not a member of.
    access: CompanyAccess | None
    permissions: frozenset[str]

    @property
    def company_id(self) -> int:
        return self.company.id

    def can(self, module: str, level: str) -> bool:
        return perms.has_permission(self.permissions, module, level)


# --- Module Notes -----------------------------------------------------------
# Platform roles come from the token (`admin` bypasses checks); company permissions come
# from the caller's `CompanyAccess` row.
