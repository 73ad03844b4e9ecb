"""
rgpd_compliance.rules.breach

Rule-based analysis of a personal data breach (Art. 33/34 GDPR).

Responsibilities:
- Score the breach from its data categories, scale, encryption and containment.
- Derive the risk level, the CNIL (72h) notification decision and whether the
  data subjects must be informed.
- Produce a justification and recommended follow-up actions.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field

SENSITIVE_KEYWORDS: tuple[str, ...] = (
    "santé",
    "médical",
    "biométr",
    "génétique",
    "bancaire",
    "financ",
    "judiciaire",
    "pénal",
    "mot de passe",
    "identifiant",
    "sécurité sociale",
    "religi",
    "politique",
    "syndical",
    "orientation sexuelle",
)

LARGE_SCALE_PERSONS = 1000
MEDIUM_SCALE_PERSONS = 100


class RiskLevel(enum.StrEnum):
    low = "faible"
    medium = "moyen"
    high = "élevé"
    critical = "critique"


@dataclass(frozen=True, slots=True)
class BreachFacts:
    data_categories: tuple[str, ...] = ()
    affected_persons: int | None = None
    description: str = ""
    consequences: str | None = None
    measures: str | None = None
    data_encrypted: bool = False


@dataclass(frozen=True, slots=True)
class BreachAnalysis:
    risk_points: int
    risk_level: RiskLevel
    notification_required: bool
    data_subject_notification_required: bool
    justification: str
    recommendations: list[str] = field(default_factory=list)


def sensitive_categories(categories: Iterable[str], description: str = "") -> list[str]:
    text_items = [c for c in categories if c]
    found = [c for c in text_items if any(kw in c.lower() for kw in SENSITIVE_KEYWORDS)]
    if not found and description:
        lowered = description.lower()
        found = [kw for kw in SENSITIVE_KEYWORDS if kw in lowered]
    return found


def risk_level_for_points(points: int) -> RiskLevel:
    if points <= 0:
        return RiskLevel.low
    if points <= 2:
        return RiskLevel.medium
    if points <= 4:
        return RiskLevel.high
    return RiskLevel.critical


def analyze(facts: BreachFacts) -> BreachAnalysis:
    points = 0
    reasons: list[str] = []

    sensitive = sensitive_categories(facts.data_categories, facts.description)
    if sensitive:
        points += 2
        reasons.append(f"données sensibles concernées ({', '.join(sensitive)})")

    persons = facts.affected_persons or 0
    if persons >= LARGE_SCALE_PERSONS:
        points += 2
        reasons.append(f"{persons} personnes concernées (grande échelle)")
    elif persons >= MEDIUM_SCALE_PERSONS:
        points += 1
        reasons.append(f"{persons} personnes concernées")

    if not (facts.measures or "").strip():
        points += 1
        reasons.append("aucune mesure de confinement documentée")

    if facts.data_encrypted:
        points = max(0, points - 2)
        reasons.append("données chiffrées (risque réduit)")

    level = risk_level_for_points(points)
    notify_authority = level is not RiskLevel.low
    notify_subjects = level in (RiskLevel.high, RiskLevel.critical)

    return BreachAnalysis(
        risk_points=points,
        risk_level=level,
        notification_required=notify_authority,
        data_subject_notification_required=notify_subjects,
        justification=_justification(level, reasons),
        recommendations=_recommendations(level, facts),
    )


def _justification(level: RiskLevel, reasons: list[str]) -> str:
    base = f"Niveau de risque estimé : {level.value}."
    if reasons:
        base += " Facteurs retenus : " + "; ".join(reasons) + "."
    if level is RiskLevel.low:
        return (
            base + " La violation ne semble pas susceptible d'engendrer un risque pour les "
            "droits et libertés des personnes : elle doit être documentée dans le registre "
            "interne (article 33.5 du RGPD) sans notification à la CNIL."
        )
    if level is RiskLevel.medium:
        return (
            base + " Une notification à la CNIL est requise dans les 72 heures (article 33 du "
            "RGPD). L'information des personnes concernées n'est pas obligatoire."
        )
    return (
        base + " Une notification à la CNIL est requise dans les 72 heures (article 33) et "
        "les personnes concernées doivent être informées dans les meilleurs délais "
        "(article 34 du RGPD)."
    )


def _recommendations(level: RiskLevel, facts: BreachFacts) -> list[str]:
    recs = ["Documenter la violation dans le registre interne des violations"]
    if not (facts.measures or "").strip():
        recs.append("Mettre en place et documenter des mesures de confinement immédiates")
    if level is not RiskLevel.low:
        recs.append("Notifier la CNIL dans un délai de 72 heures après la découverte")
    if level in (RiskLevel.high, RiskLevel.critical):
        recs.append("Informer les personnes concernées en termes clairs et simples")
    if not facts.data_encrypted:
        recs.append("Évaluer le chiffrement des données concernées pour limiter l'impact futur")
    if level is RiskLevel.critical:
        recs.append("Mobiliser la cellule de crise et le DPO sans délai")
    return recs
