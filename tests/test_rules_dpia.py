from __future__ import annotations

import pytest

from rgpd_compliance.rules import dpia
from rgpd_compliance.rules.dpia import Answer, Tier


def _answers(**overrides: str) -> dict[str, str]:
    base = {cid: "no" for cid in dpia.CRITERIA_IDS}
    base.update(overrides)
    return base


def test_nine_criteria_in_fixed_order() -> None:
    assert dpia.CRITERIA_IDS == (
        "scoring",
        "automated_decision",
        "systematic_monitoring",
        "sensitive_data",
        "large_scale",
        "data_combination",
        "vulnerable_persons",
        "innovative_technology",
        "obstacle_to_right",
    )
    assert len(dpia.CNIL_MANDATORY_TREATMENTS) == 22


def test_two_yes_is_mandatory() -> None:
    result = dpia.evaluate(_answers(scoring="yes", large_scale="yes"))
    assert result.score == 2
    assert result.tier is Tier.mandatory
    assert result.requires_dpia is True
    assert result.recommendation == "AIPD fortement recommandée / obligatoire"


@pytest.mark.parametrize(
    ("overrides", "score", "tier"),
    [
        ({}, 0.0, Tier.not_required),
        ({"scoring": "uncertain"}, 0.5, Tier.not_required),
        ({"scoring": "yes"}, 1.0, Tier.vigilance),
        ({"scoring": "uncertain", "large_scale": "uncertain"}, 1.0, Tier.vigilance),
        ({"scoring": "yes", "large_scale": "uncertain"}, 1.5, Tier.vigilance),
        ({"scoring": "yes", "large_scale": "uncertain", "data_combination": "uncertain"}, 2.0, Tier.mandatory),
    ],
)
def test_score_and_tier(overrides: dict[str, str], score: float, tier: Tier) -> None:
    result = dpia.evaluate(_answers(**overrides))
    assert result.score == score
    assert result.tier is tier
    assert result.requires_dpia is (tier is Tier.mandatory)


def test_french_and_boolean_aliases() -> None:
    result = dpia.evaluate({"scoring": "Oui", "sensitive_data": True, "large_scale": "incertain"})
    assert result.answers["scoring"] is Answer.yes
    assert result.answers["sensitive_data"] is Answer.yes
    assert result.answers["large_scale"] is Answer.uncertain
    # Unanswered criteria count as "no".
    assert result.answers["obstacle_to_right"] is Answer.no
    assert result.score == 2.5


def test_invalid_answer_and_unknown_criterion_rejected() -> None:
    with pytest.raises(ValueError):
        dpia.evaluate({"scoring": "peut-être"})
    with pytest.raises(ValueError):
        dpia.evaluate({"not_a_criterion": "yes"})


def test_biometrie_matches_cnil_list_regardless_of_score() -> None:
    result = dpia.evaluate(
        _answers(),
        name="Contrôle d'accès par biométrie",
        purpose="Accès aux locaux",
        data_categories=["Empreintes"],
    )
    assert result.cnil_match == "Biométrie pour identifier de manière unique une personne"
    assert result.tier is Tier.mandatory
    assert result.recommendation == dpia.CNIL_LIST_LABEL
    assert result.requires_dpia is True
    assert result.score == 0


def test_cnil_rules_checked_in_order() -> None:
    # Both health and children keywords: health comes first.
    match = dpia.match_cnil_list(
        name="Suivi médical", purpose="Cantine des enfants", data_categories=None
    )
    assert match == "Données relatives à la santé"
    assert (
        dpia.match_cnil_list(name="Flotte", purpose="Géolocalisation des véhicules", data_categories=[])
        == "Données de localisation à grande échelle"
    )
    assert dpia.match_cnil_list(name="Paie", purpose="Salaires", data_categories=["Identité"]) is None


def test_cnil_match_is_case_insensitive() -> None:
    assert dpia.match_cnil_list(name="DOSSIERS MINEURS", purpose="", data_categories=[]) == (
        "Données d'enfants à grande échelle"
    )
