from __future__ import annotations

import pytest

from rgpd_compliance.rules import permissions as perms


def test_read_template_is_one_read_per_module() -> None:
    granted = perms.expand_template("read")
    assert granted == [f"{m}.read" for m in perms.MODULES]
    assert len(granted) == len(perms.MODULES)


def test_write_template_has_read_and_write_per_module() -> None:
    granted = perms.expand_template("write")
    assert len(granted) == 2 * len(perms.MODULES)
    for m in perms.MODULES:
        assert f"{m}.read" in granted
        assert f"{m}.write" in granted


def test_none_template_is_empty() -> None:
    assert perms.expand_template("none") == []


def test_write_does_not_imply_read() -> None:
    granted = ["dpia.write"]
    assert perms.has_permission(granted, "dpia", "write")
    assert not perms.has_permission(granted, "dpia", "read")
    assert perms.module_access(granted, "dpia") == (False, True)


def test_all_wildcard_grants_everything() -> None:
    assert perms.has_permission(["all"], "admin", "write")
    assert perms.module_access(["all"], "records") == (True, True)


def test_empty_grants_nothing() -> None:
    assert not perms.has_permission([], "records", "read")
    assert not perms.has_permission(None, "records", "read")


@pytest.mark.parametrize("bad", ["records", "records.delete", "payroll.read", ".read", ""])
def test_parse_rejects_malformed(bad: str) -> None:
    with pytest.raises(perms.InvalidPermissionError):
        perms.parse(bad)


def test_validate_dedupes_and_keeps_order() -> None:
    assert perms.validate(["records.read", "dpia.write", "records.read", "all"]) == [
        "records.read",
        "dpia.write",
        "all",
    ]


def test_unknown_template_rejected() -> None:
    with pytest.raises(ValueError):
        perms.expand_template("admin")


def test_catalogue_lists_modules_and_templates() -> None:
    cat = perms.catalogue()
    assert [m["id"] for m in cat["modules"]] == list(perms.MODULES)
    assert cat["levels"] == ["read", "write"]
    assert set(cat["templates"]) == {"none", "read", "write"}
