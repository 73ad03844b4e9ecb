from __future__ import annotations

import pytest

from rgpd_compliance.db.models import DataBreach
from rgpd_compliance.rules import breach
from rgpd_compliance.rules.breach import BreachFacts, RiskLevel
from rgpd_compliance.services.breaches import facts_from_breach


def test_health_data_at_scale_requires_notification() -> None:
    result = breach.analyze(
        BreachFacts(
            data_categories=("Données de santé",),
            affected_persons=5000,
            measures="Serveur isolé",
        )
    )
    assert result.risk_points == 4
    assert result.risk_level is RiskLevel.high
    assert result.notification_required is True
    assert result.data_subject_notification_required is True


def test_small_encrypted_breach_is_low_risk() -> None:
    result = breach.analyze(
        BreachFacts(
            data_categories=("Nom", "Email"),
            affected_persons=12,
            measures="Mots de passe réinitialisés",
            data_encrypted=True,
        )
    )
    assert result.risk_points == 0
    assert result.risk_level is RiskLevel.low
    assert result.notification_required is False
    assert result.data_subject_notification_required is False
    assert "33.5" in result.justification


def test_missing_measures_adds_a_point() -> None:
    result = breach.analyze(BreachFacts(data_categories=("Nom",), affected_persons=150))
    assert result.risk_points == 2
    assert result.risk_level is RiskLevel.medium
    assert result.notification_required is True
    assert result.data_subject_notification_required is False
    assert any("confinement" in r for r in result.recommendations)


def test_worst_case_is_critical() -> None:
    result = breach.analyze(
        BreachFacts(data_categories=("Coordonnées bancaires",), affected_persons=20000)
    )
    assert result.risk_points == 5
    assert result.risk_level is RiskLevel.critical


def test_sensitive_keyword_found_in_description() -> None:
    assert breach.sensitive_categories([], "Vol d'un dossier médical") == ["médical"]


def test_level_thresholds() -> None:
    assert [breach.risk_level_for_points(p) for p in range(6)] == [
        RiskLevel.low,
        RiskLevel.medium,
        RiskLevel.medium,
        RiskLevel.high,
        RiskLevel.high,
        RiskLevel.critical,
    ]


@pytest.mark.parametrize(
    ("flags", "expected"),
    [
        ({"data_encrypted": True}, True),
        ({"data_encrypted": "oui"}, True),
        ({"encrypted": "Yes"}, True),
        ({"encryption": "1"}, True),
        ({"data_encrypted": "non"}, False),
        ({"data_encrypted": "false"}, False),
        ({"data_encrypted": "0"}, False),
        ({"data_encrypted": False}, False),
        ({}, False),
    ],
)
def test_encryption_flag_from_form(flags, expected) -> None:
    row = DataBreach(description="Perte d'une clé USB", comprehensive_data=flags)
    assert facts_from_breach(row).data_encrypted is expected
