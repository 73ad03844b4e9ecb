"""
rgpd_compliance.rules.dpia

Preliminary DPIA (AIPD) evaluation: the one authoritative scoring table.

Responsibilities:
- Define the nine CNIL/EDPB risk criteria and their question texts.
- Normalize answers (yes / no / uncertain, French aliases, booleans).
- Compute the score (yes = 1, uncertain = 0.5) and the recommendation tier.
- Match a processing record against the CNIL mandatory-treatment keywords.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

MANDATORY_THRESHOLD = 2.0
VIGILANCE_THRESHOLD = 1.0
UNCERTAIN_WEIGHT = 0.5


class Answer(enum.StrEnum):
    yes = "yes"
    no = "no"
    uncertain = "uncertain"


class Tier(enum.StrEnum):
    mandatory = "mandatory"
    vigilance = "vigilance"
    not_required = "not_required"


@dataclass(frozen=True, slots=True)
class Criterion:
    id: str
    question: str
    examples: str


CRITERIA: tuple[Criterion, ...] = (
    Criterion(
        id="scoring",
        question=(
            "Le traitement implique-t-il une évaluation ou une notation de personnes sur la "
            "base de leurs données, y compris le profilage ?"
        ),
        examples=(
            "Exemples : score de crédit, évaluation de la performance d'un employé, profilage "
            "marketing pour prédire les préférences, diagnostic médical automatisé"
        ),
    ),
    Criterion(
        id="automated_decision",
        question=(
            "Le traitement conduit-il à une prise de décision entièrement automatisée (sans "
            "intervention humaine) ayant un effet juridique ou vous affectant de manière "
            "significative ?"
        ),
        examples=(
            "Exemples : refus automatisé d'un crédit en ligne, décision d'éligibilité à une "
            "prestation sociale, tri automatique de CV menant à un rejet sans examen humain"
        ),
    ),
    Criterion(
        id="systematic_monitoring",
        question="Le traitement implique-t-il une surveillance systématique et continue de personnes ?",
        examples=(
            "Exemples : vidéosurveillance d'un lieu public ou d'employés, surveillance de "
            "l'activité réseau, géolocalisation continue de véhicules"
        ),
    ),
    Criterion(
        id="sensitive_data",
        question=(
            'Le traitement porte-t-il sur des données dites "sensibles" (santé, opinions '
            "politiques/religieuses, orientation sexuelle) ou d'autres données à caractère "
            "hautement personnel ?"
        ),
        examples=(
            "Exemples : dossiers médicaux, données biométriques, données de localisation "
            "précises, données financières détaillées"
        ),
    ),
    Criterion(
        id="large_scale",
        question=(
            'Les données sont-elles traitées à "grande échelle" ? (Pensez en volume de '
            "données, nombre de personnes, zone géographique, durée)"
        ),
        examples=(
            "Exemples : données des utilisateurs d'un réseau social national, données des "
            "patients d'une chaîne d'hôpitaux, données de géolocalisation collectées par une "
            "application populaire"
        ),
    ),
    Criterion(
        id="data_combination",
        question=(
            "Le traitement consiste-t-il à croiser ou combiner des ensembles de données "
            "provenant de différentes sources ou collectées pour différents objectifs ?"
        ),
        examples=(
            "Exemples : croiser les données de navigation d'un site web avec des informations "
            "d'achat en magasin ; enrichir une base de données clients avec des données "
            "achetées à des courtiers en données"
        ),
    ),
    Criterion(
        id="vulnerable_persons",
        question=(
            'Le traitement concerne-t-il des personnes considérées comme "vulnérables", qui '
            "ont des difficultés à consentir ou à s'opposer au traitement ?"
        ),
        examples=(
            "Exemples : enfants, patients, personnes âgées, employés (en raison du lien de "
            "subordination), demandeurs d'asile"
        ),
    ),
    Criterion(
        id="innovative_technology",
        question=(
            "Le traitement fait-il appel à une technologie innovante ou à un usage nouveau "
            "d'une technologie existante, pouvant créer de nouveaux types de risques ?"
        ),
        examples=(
            "Exemples : utilisation de l'Intelligence Artificielle pour l'analyse de "
            "personnalité, objets connectés (IoT), reconnaissance faciale, neuro-technologies"
        ),
    ),
    Criterion(
        id="obstacle_to_right",
        question=(
            "Le traitement peut-il avoir pour conséquence d'empêcher une personne d'exercer "
            "un droit ou de bénéficier d'un service ou d'un contrat ?"
        ),
        examples=(
            "Exemples : utiliser un score de crédit pour refuser un prêt ou un logement, "
            "utiliser un profil de risque pour refuser une assurance"
        ),
    ),
)

CRITERIA_IDS: tuple[str, ...] = tuple(c.id for c in CRITERIA)

# Displayed alongside the questionnaire; matching uses CNIL_KEYWORD_RULES below.
CNIL_MANDATORY_TREATMENTS: tuple[str, ...] = (
    "Traitements d'évaluation, y compris de profilage, et de prédiction relatifs aux aspects "
    "concernant les performances au travail, la situation économique, la santé, les "
    "préférences ou centres d'intérêt personnels, la fiabilité ou le comportement, la "
    "localisation ou les déplacements de la personne concernée",
    "Traitements ayant pour effet d'exclure des personnes du bénéfice d'un droit, d'un service "
    "ou d'un contrat en l'absence de motif légitime",
    "Traitements portant sur des données sensibles ou des données à caractère hautement "
    "personnel (données de santé, biométriques, de géolocalisation, etc.)",
    "Traitements de données personnelles à grande échelle",
    "Traitements de croisement, combinaison ou appariement de données",
    "Traitements de données concernant des personnes vulnérables (mineurs, personnes âgées, "
    "patients, etc.)",
    "Traitements impliquant l'utilisation de nouvelles technologies ou d'usages nouveaux de "
    "technologies existantes",
    "Traitements qui empêchent les personnes d'exercer un droit ou de bénéficier d'un service "
    "ou d'un contrat",
    "Traitements de données de santé mis en œuvre par les établissements de santé ou les "
    "établissements médico-sociaux pour la prise en charge des personnes",
    "Traitements portant sur des données génétiques de personnes dites « vulnérables » "
    "(patients, employés, enfants, etc.)",
    "Traitements établissant des profils de personnes physiques à des fins de gestion des "
    "ressources humaines",
    "Traitements ayant pour finalité de surveiller de manière constante l'activité des "
    "employés concernés",
    "Traitements ayant pour finalité la gestion des alertes et des signalements en matière "
    "sociale et sanitaire",
    "Traitements ayant pour finalité la gestion des alertes et des signalements en matière "
    "professionnelle",
    "Traitements des données de santé nécessaires à la constitution d'un entrepôt de données "
    "ou d'un registre",
    "Traitements impliquant le profilage des personnes pouvant aboutir à leur exclusion du "
    "bénéfice d'un contrat ou à la suspension voire à la rupture de celui-ci",
    "Traitements mutualisés de manquements contractuels constatés, susceptibles d'aboutir à "
    "une décision d'exclusion ou de suspension du bénéfice d'un contrat",
    "Traitements de profilage faisant appel à des données provenant de sources externes",
    "Traitements de données biométriques aux fins de reconnaissance des personnes parmi "
    "lesquelles figurent des personnes dites « vulnérables » (élèves, personnes âgées, "
    "patients, demandeurs d'asile, etc.)",
    "Instruction des demandes et gestion des logements sociaux",
    "Traitements ayant pour finalité l'accompagnement social ou médico-social des personnes",
    "Traitements de données de localisation à large échelle",
)

# Order matters: the first matching rule wins.
CNIL_KEYWORD_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("biométr", "reconnaissance"), "Biométrie pour identifier de manière unique une personne"),
    (("santé", "médical"), "Données relatives à la santé"),
    (("enfant", "mineur"), "Données d'enfants à grande échelle"),
    (("géolocalisation", "localisation"), "Données de localisation à grande échelle"),
)

CNIL_LIST_LABEL = "AIPD obligatoire (Liste CNIL)"

_TIER_LABELS: dict[Tier, str] = {
    Tier.mandatory: "AIPD fortement recommandée / obligatoire",
    Tier.vigilance: "Vigilance requise",
    Tier.not_required: "AIPD non requise à première vue",
}

_ANSWER_ALIASES: dict[str, Answer] = {
    "yes": Answer.yes,
    "oui": Answer.yes,
    "true": Answer.yes,
    "no": Answer.no,
    "non": Answer.no,
    "false": Answer.no,
    "": Answer.no,
    "uncertain": Answer.uncertain,
    "incertain": Answer.uncertain,
    "unknown": Answer.uncertain,
}


@dataclass(frozen=True, slots=True)
class DpiaResult:
    score: float
    tier: Tier
    recommendation: str
    justification: str
    requires_dpia: bool
    cnil_match: str | None
    answers: dict[str, Answer] = field(default_factory=dict)

    def answers_as_dict(self) -> dict[str, str]:
        return {k: v.value for k, v in self.answers.items()}


def normalize_answer(raw: Any) -> Answer:
    """Map a raw answer (enum, bool, French/English string, None) onto an `Answer`."""

    if isinstance(raw, Answer):
        return raw
    if raw is None:
        return Answer.no
    if isinstance(raw, bool):
        return Answer.yes if raw else Answer.no
    try:
        return _ANSWER_ALIASES[str(raw).strip().lower()]
    except KeyError:
        raise ValueError(f"invalid DPIA answer: {raw!r}") from None


def normalize_answers(raw: Mapping[str, Any]) -> dict[str, Answer]:
    unknown = set(raw) - set(CRITERIA_IDS)
    if unknown:
        raise ValueError(f"unknown DPIA criteria: {', '.join(sorted(unknown))}")
    return {cid: normalize_answer(raw.get(cid)) for cid in CRITERIA_IDS}


def compute_score(answers: Mapping[str, Answer]) -> float:
    yes_count = sum(1 for a in answers.values() if a is Answer.yes)
    uncertain_count = sum(1 for a in answers.values() if a is Answer.uncertain)
    return yes_count + uncertain_count * UNCERTAIN_WEIGHT


def tier_for_score(score: float) -> Tier:
    if score >= MANDATORY_THRESHOLD:
        return Tier.mandatory
    if score >= VIGILANCE_THRESHOLD:
        return Tier.vigilance
    return Tier.not_required


def match_cnil_list(
    *, name: str | None, purpose: str | None, data_categories: Iterable[str] | None
) -> str | None:
    """
    Substring match of the record's text against the CNIL keyword rules.
    Returns the matched treatment category, or None.
    """

    haystack = " ".join([name or "", purpose or "", *(data_categories or [])]).lower()
    for keywords, category in CNIL_KEYWORD_RULES:
        if any(kw in haystack for kw in keywords):
            return category
    return None


def evaluate(
    raw_answers: Mapping[str, Any],
    *,
    name: str | None = None,
    purpose: str | None = None,
    data_categories: Iterable[str] | None = None,
) -> DpiaResult:
    answers = normalize_answers(raw_answers)
    score = compute_score(answers)
    cnil_match = match_cnil_list(name=name, purpose=purpose, data_categories=data_categories)

    if cnil_match is not None:
        # A CNIL list hit forces the mandatory tier whatever the score.
        return DpiaResult(
            score=score,
            tier=Tier.mandatory,
            recommendation=CNIL_LIST_LABEL,
            justification=(
                "Ce traitement figure dans la liste des types d'opérations de traitement pour "
                f'lesquelles une AIPD est requise : "{cnil_match}". Une AIPD est donc '
                "obligatoire selon l'article 35.4 du RGPD."
            ),
            requires_dpia=True,
            cnil_match=cnil_match,
            answers=answers,
        )

    tier = tier_for_score(score)
    return DpiaResult(
        score=score,
        tier=tier,
        recommendation=_TIER_LABELS[tier],
        justification=_justification(tier, score),
        requires_dpia=tier is Tier.mandatory,
        cnil_match=None,
        answers=answers,
    )


def _justification(tier: Tier, score: float) -> str:
    total = len(CRITERIA)
    if tier is Tier.mandatory:
        return (
            "Notre analyse préliminaire indique que ce traitement est susceptible d'engendrer "
            "un risque élevé. La réalisation d'une AIPD est nécessaire avec un score de "
            f'{score:.1f}/{total} (réponses "Oui" = 1 point, "Incertain" = 0.5 point).'
        )
    if tier is Tier.vigilance:
        return (
            "Une AIPD n'est pas strictement obligatoire sur la seule base de ces critères "
            f"(score: {score:.1f}/{total}), mais la présence de facteurs de risque justifie "
            "une analyse plus approfondie pour confirmer l'absence de risque élevé."
        )
    return (
        f"Aucun critère de risque majeur identifié (score: {score:.1f}/{total}). Il est tout "
        "de même nécessaire de documenter cette analyse et de rester vigilant à toute "
        "évolution du traitement."
    )


# --- Module Notes -----------------------------------------------------------
# Both the preview and the save endpoints go through `evaluate`; the processing record's
# `dpia_required` flag is written from `DpiaResult.requires_dpia` on save.
