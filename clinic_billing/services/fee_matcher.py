# clinic_billing/services/fee_matcher.py
from __future__ import annotations

import logging
from typing import Iterable, Mapping, NamedTuple, Optional, Sequence

from clinic_billing.config import get_specific_markers
from clinic_billing.model import BillableLine, FeeRule

logger = logging.getLogger(__name__)

SCORE_DOCTOR_AND_TREATMENT = 100
SCORE_DOCTOR = 50
SCORE_TREATMENT = 40
SCORE_CATEGORY = 30
SCORE_DEFAULT = 10
SCORE_SPECIFIC_BONUS = 5


class FeeMatch(NamedTuple):
    rule: Optional[FeeRule]
    score: int
    match_type: str


NO_MATCH = FeeMatch(None, 0, "none")


def line_category(line: BillableLine,
                  categories: Optional[Mapping[str, str]] = None) -> Optional[str]:
    if line.category:
        return line.category
    if categories:
        return categories.get(line.name)
    return None


def _has_marker(description: Optional[str], markers: Iterable[str]) -> bool:
    if not description:
        return False
    text = description.lower()
    return any(m in text for m in markers)


def score_rule(doctor_id: Optional[str], line: BillableLine, rule: FeeRule,
               category: Optional[str] = None,
               markers: Optional[Sequence[str]] = None) -> Optional[FeeMatch]:
    """
    Score one rule against one line. Returns None when the rule is not a
    candidate for this doctor/line at all.
    """
    if markers is None:
        markers = get_specific_markers()

    doctor_ids = rule.doctor_ids or []
    treatment_types = rule.treatment_types or []

    applies_to_doctor = not doctor_ids or doctor_id in doctor_ids
    if not applies_to_doctor and not rule.is_default:
        return None

    applies_to_treatment = not treatment_types or line.name in treatment_types
    category_matches = bool(rule.category) and category == rule.category

    if not (applies_to_treatment or category_matches or rule.is_default):
        return None

    doctor_specific = doctor_id is not None and doctor_id in doctor_ids
    treatment_specific = line.name in treatment_types

    if doctor_specific and treatment_specific:
        score, match_type = SCORE_DOCTOR_AND_TREATMENT, "doctor + treatment"
    elif doctor_specific:
        score, match_type = SCORE_DOCTOR, "doctor"
    elif treatment_specific:
        score, match_type = SCORE_TREATMENT, "treatment"
    elif category_matches:
        score, match_type = SCORE_CATEGORY, "category"
    elif rule.is_default:
        score, match_type = SCORE_DEFAULT, "default"
    else:
        score, match_type = 0, "general"

    if _has_marker(rule.description, markers):
        score += SCORE_SPECIFIC_BONUS

    return FeeMatch(rule, score, match_type)


def find_best_fee_rule(doctor_id: Optional[str], line: BillableLine,
                       catalog: Sequence[FeeRule],
                       categories: Optional[Mapping[str, str]] = None,
                       markers: Optional[Sequence[str]] = None) -> FeeMatch:
    """
    Highest scoring rule for a line; ties keep the earliest rule in catalog order.

    A candidate has to score above zero to be picked, so an unmarked category
    rule with no treatment list stays on lines of its own category.
    """
    if markers is None:
        markers = get_specific_markers()
    category = line_category(line, categories)

    best = NO_MATCH
    for rule in catalog:
        match = score_rule(doctor_id, line, rule, category=category, markers=markers)
        if match is not None and match.score > best.score:
            best = match

    if best.rule is None:
        logger.debug("No fee rule for line %s (%s), doctor %s", line.id, line.name, doctor_id)
        return NO_MATCH

    logger.debug("Line %s matched rule %s (%s, score %d)",
                 line.id, best.rule.id, best.match_type, best.score)
    return best


def best_rule(doctor_id: Optional[str], line: BillableLine,
              catalog: Sequence[FeeRule],
              categories: Optional[Mapping[str, str]] = None) -> Optional[FeeRule]:
    return find_best_fee_rule(doctor_id, line, catalog, categories).rule
