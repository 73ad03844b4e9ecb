"""
rgpd_compliance.rules.permissions

Company-scoped permission model.

Responsibilities:
- Define the fixed module list and access levels.
- Parse/validate `<module>.<level>` permission strings.
- Evaluate membership checks (no hierarchy: `write` does not imply `read`).
- Expand permission templates into permission sets.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable

# The owner of a company holds this wildcard instead of an explicit list.
ALL = "all"

MODULES: tuple[str, ...] = (
    "diagnostic",
    "actions",
    "records",
    "breaches",
    "dpia",
    "requests",
    "policies",
    "subprocessors",
    "learning",
    "admin",
)

MODULE_LABELS: dict[str, str] = {
    "diagnostic": "Diagnostic RGPD",
    "actions": "Plan d'action",
    "records": "Registre des traitements",
    "breaches": "Violations de données",
    "dpia": "Analyses d'impact (AIPD)",
    "requests": "Demandes des personnes",
    "policies": "Politique de confidentialité",
    "subprocessors": "Sous-traitants",
    "learning": "Formation",
    "admin": "Administration",
}


class Level(enum.StrEnum):
    read = "read"
    write = "write"


class Template(enum.StrEnum):
    none = "none"
    read = "read"
    write = "write"


class InvalidPermissionError(ValueError):
    pass


def permission(module: str, level: str | Level) -> str:
    if module not in MODULES:
        raise InvalidPermissionError(f"unknown module: {module!r}")
    try:
        lvl = Level(level)
    except ValueError:
        raise InvalidPermissionError(f"unknown level: {level!r}") from None
    return f"{module}.{lvl.value}"


def parse(value: str) -> tuple[str, Level]:
    module, sep, level = value.partition(".")
    if not sep:
        raise InvalidPermissionError(f"malformed permission: {value!r}")
    permission(module, level)
    return module, Level(level)


def validate(values: Iterable[str]) -> list[str]:
    """
    Validate and de-duplicate a permission list, keeping first-seen order.
    The `all` wildcard is accepted as-is.
    """

    out: list[str] = []
    for raw in values:
        value = str(raw).strip()
        if value != ALL:
            parse(value)
        if value not in out:
            out.append(value)
    return out


def has_permission(granted: Iterable[str] | None, module: str, level: str | Level) -> bool:
    if not granted:
        return False
    granted_set = set(granted)
    if ALL in granted_set:
        return True
    return permission(module, level) in granted_set


def module_access(granted: Iterable[str] | None, module: str) -> tuple[bool, bool]:
    granted_list = list(granted or [])
    return (
        has_permission(granted_list, module, Level.read),
        has_permission(granted_list, module, Level.write),
    )


def expand_template(template: str | Template) -> list[str]:
    tpl = Template(template)
    if tpl is Template.none:
        return []
    if tpl is Template.read:
        return [permission(m, Level.read) for m in MODULES]
    out: list[str] = []
    for m in MODULES:
        out.append(permission(m, Level.read))
        out.append(permission(m, Level.write))
    return out


def catalogue() -> dict[str, object]:
    return {
        "modules": [{"id": m, "label": MODULE_LABELS[m]} for m in MODULES],
        "levels": [lvl.value for lvl in Level],
        "templates": {tpl.value: expand_template(tpl) for tpl in Template},
    }
