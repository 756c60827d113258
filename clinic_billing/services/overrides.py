# clinic_billing/services/overrides.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Mapping, NamedTuple, Optional

from clinic_billing.model import FeeRule
from clinic_billing.services.billing_math import D, ZERO, HUNDRED, fmt_pct

logger = logging.getLogger(__name__)

NO_RULE_DESCRIPTION = "no applicable rule"


class ResolvedPercentage(NamedTuple):
    percentage: Decimal
    description: str
    is_manual_override: bool


def set_override(overrides: Mapping[str, Decimal], line_id: str, percentage) -> Dict[str, Decimal]:
    """New override map with ``line_id`` set; out-of-range values leave it unchanged."""
    result = dict(overrides)
    try:
        value = Decimal(str(percentage))
    except ArithmeticError:
        value = None
    if value is None or not value.is_finite() or value < ZERO or value > HUNDRED:
        logger.warning("Rejected manual fee override %r for line %s", percentage, line_id)
        return result
    result[line_id] = value
    return result


def clear_override(overrides: Mapping[str, Decimal], line_id: str) -> Dict[str, Decimal]:
    result = dict(overrides)
    result.pop(line_id, None)
    return result


def apply_override_input(overrides: Mapping[str, Decimal], line_id: str,
                         raw: Optional[str]) -> Dict[str, Decimal]:
    """
    Operator typed ``raw`` into the override field of a line.

    Empty input clears the override. Anything that is not a number in
    [0, 100] is ignored and the previous value is kept.
    """
    if raw is None or not str(raw).strip():
        return clear_override(overrides, line_id)
    return set_override(overrides, line_id, str(raw).strip().replace(",", "."))


def build_overrides(raw_inputs: Mapping[str, Optional[str]]) -> Dict[str, Decimal]:
    overrides: Dict[str, Decimal] = {}
    for line_id, raw in raw_inputs.items():
        overrides = apply_override_input(overrides, line_id, raw)
    return overrides


def describe_rule(rule: FeeRule) -> str:
    pct = fmt_pct(rule.fee_percentage)
    if rule.is_default:
        return f"default rule: {pct}%"

    parts = []
    if rule.doctor_names:
        parts.append(f"doctor: {', '.join(rule.doctor_names)}")
    elif rule.doctor_ids:
        parts.append(f"doctor: {', '.join(rule.doctor_ids)}")
    if rule.treatment_types:
        parts.append(f"treatment: {', '.join(rule.treatment_types)}")
    if rule.category:
        parts.append(f"category: {rule.category}")
    if not parts:
        parts.append("all treatments")

    text = f"{' + '.join(parts)}: {pct}%"
    if rule.description:
        text += f" ({rule.description})"
    return text


def resolve_percentage(line_id: str, matched_rule: Optional[FeeRule],
                       overrides: Mapping[str, Decimal]) -> ResolvedPercentage:
    if line_id in overrides:
        pct = D(overrides[line_id])
        return ResolvedPercentage(pct, f"manual override: {fmt_pct(pct)}%", True)

    if matched_rule is not None:
        return ResolvedPercentage(D(matched_rule.fee_percentage), describe_rule(matched_rule), False)

    return ResolvedPercentage(ZERO, NO_RULE_DESCRIPTION, False)
