"""Restraint rules: forbidden field actions and pest diagnosis.

Both tables are ordered and matched case-insensitively on keywords that
start a word (a keyword may run into a longer word: "till" matches
"tilling"). The first rule with a matching keyword wins, so ``rototill`` is
listed ahead of the broader tilling rule.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from .events import PEST_DETECTED, EventChannel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForbiddenAction:
    name: str
    keywords: tuple[str, ...]
    alternatives: tuple[str, ...]
    citation: str


@dataclass(frozen=True)
class PestDiagnosis:
    pest: str
    keywords: tuple[str, ...]
    likely_cause: str
    directive: str
    actions: tuple[str, ...]


FORBIDDEN_ACTIONS: tuple[ForbiddenAction, ...] = (
    ForbiddenAction(
        name="Rototilling",
        keywords=("rototill", "roto-till", "roto till", "rotovate"),
        alternatives=("Broadfork", "Occultation (Tarping)", "Sheet Mulching"),
        citation="The soil is a living city. Would you rototill a city?",
    ),
    ForbiddenAction(
        name="Tilling/Plowing",
        keywords=("till", "tilling", "plow", "plowing", "plough"),
        alternatives=("No-till seeding", "Chop and drop", "Cover cropping"),
        citation="To plow is to wound. To till is to kill.",
    ),
    ForbiddenAction(
        name="Chemical Application",
        keywords=("pesticide", "herbicide", "fungicide", "insecticide", "-cide"),
        alternatives=("Companion planting", "Beneficial insects", "Neem oil (if needed)"),
        citation="The chemical path leads to dependency, not freedom.",
    ),
    ForbiddenAction(
        name="Synthetic Fertilizer",
        keywords=("synthetic fertilizer", "miracle-gro", "miracle gro", "chemical fertilizer"),
        alternatives=("Compost tea", "Worm castings", "Cover crops"),
        citation="Feed the soil, not the plant.",
    ),
)

PEST_DIAGNOSES: tuple[PestDiagnosis, ...] = (
    PestDiagnosis(
        pest="Aphids",
        keywords=("aphid", "aphids", "greenfly", "blackfly"),
        likely_cause="High Nitrogen Input",
        directive="Stop Feeding. Spray Water. Wait.",
        actions=("Stop nitrogen applications", "Spray with water only", "Wait 7 days before reassessing"),
    ),
    PestDiagnosis(
        pest="Whiteflies",
        keywords=("whitefly", "whiteflies", "white fly"),
        likely_cause="Nitrogen Imbalance / Stressed Plants",
        directive="Check watering. Reduce feeding. Introduce lacewings.",
        actions=("Check soil moisture", "Stop fertilizing", "Consider beneficial insects"),
    ),
    PestDiagnosis(
        pest="Powdery Mildew",
        keywords=("powdery mildew", "white powder", "mildew"),
        likely_cause="Poor Air Circulation / Overwatering",
        directive="Increase spacing. Reduce watering. Wait.",
        actions=("Thin plants for airflow", "Water at soil level only", "Remove affected leaves"),
    ),
    PestDiagnosis(
        pest="Slugs",
        keywords=("slug", "slugs", "snail", "snails"),
        likely_cause="Excess Moisture / Lack of Predators",
        directive="Reduce watering. Encourage ground beetles. Wait.",
        actions=("Let soil surface dry", "Add habitat for predators", "Copper barriers if severe"),
    ),
)

UNRECOGNIZED = PestDiagnosis(
    pest="Unrecognized",
    keywords=(),
    likely_cause="Unknown",
    directive="Observe for 7 days before intervening. Most issues resolve naturally.",
    actions=("Wait and observe", "Check soil moisture", "Review nitrogen inputs"),
)


@dataclass(frozen=True)
class ActionVerdict:
    allowed: bool
    rule: Optional[ForbiddenAction] = None
    matched_keyword: Optional[str] = None


@dataclass(frozen=True)
class PestVerdict:
    diagnosis: PestDiagnosis
    matched_keyword: Optional[str] = None

    @property
    def recognized(self) -> bool:
        return self.diagnosis is not UNRECOGNIZED


def _first_keyword(text: str, keywords: Sequence[str]) -> Optional[str]:
    for kw in keywords:
        # Word keywords must start a word so "till" skips "until" and "still".
        lead = r"(?<![a-z])" if kw[:1].isalpha() else ""
        if re.search(lead + re.escape(kw), text):
            return kw
    return None


def classify_action(text: str, rules: Sequence[ForbiddenAction] = FORBIDDEN_ACTIONS) -> ActionVerdict:
    lowered = (text or "").lower()
    for rule in rules:
        kw = _first_keyword(lowered, rule.keywords)
        if kw is not None:
            logger.info("intervention_action_blocked", extra={"rule": rule.name, "keyword": kw})
            return ActionVerdict(False, rule, kw)
    return ActionVerdict(True)


def diagnose_pest(
    text: str,
    channel: Optional[EventChannel] = None,
    diagnoses: Sequence[PestDiagnosis] = PEST_DIAGNOSES,
) -> PestVerdict:
    """Match ``text`` against the pest table and signal ``pest-detected`` on a hit."""

    lowered = (text or "").lower()
    for diagnosis in diagnoses:
        kw = _first_keyword(lowered, diagnosis.keywords)
        if kw is None:
            continue
        if channel is not None:
            channel.signal(PEST_DETECTED, {"pest": diagnosis.pest, "report": text})
        return PestVerdict(diagnosis, kw)
    return PestVerdict(UNRECOGNIZED)
