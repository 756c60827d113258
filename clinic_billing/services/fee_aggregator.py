# clinic_billing/services/fee_aggregator.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Mapping, Optional, Sequence, Tuple

from clinic_billing.model import (BillableLine, FeeRule, MultiFeeResult, PaymentState,
                                  TreatmentFeeDetail, VisitTotals)
from clinic_billing.services.billing_math import ZERO, HUNDRED, money2, money_float
from clinic_billing.services.fee_matcher import find_best_fee_rule
from clinic_billing.services.overrides import resolve_percentage
from clinic_billing.services.payment_base import fee_bases

logger = logging.getLogger(__name__)


def aggregate(lines: Sequence[BillableLine], doctor_id: Optional[str],
              catalog: Sequence[FeeRule],
              overrides: Optional[Mapping[str, Decimal]] = None,
              payment: Optional[PaymentState] = None,
              categories: Optional[Mapping[str, str]] = None,
              ) -> Tuple[List[TreatmentFeeDetail], VisitTotals]:
    """
    Doctor fee per line plus visit totals.

    Recomputes everything from the inputs on every call. Missing rules,
    overrides or payment data degrade to a zero fee; nothing here raises.
    """
    overrides = overrides or {}
    payment = payment or PaymentState()

    if not doctor_id or not lines:
        return [], VisitTotals()

    final_prices = [line.final_price for line in lines]
    bases = fee_bases(final_prices, payment)

    details: List[TreatmentFeeDetail] = []
    total_final = ZERO
    total_fee = ZERO

    for line, final_price, base in zip(lines, final_prices, bases):
        match = find_best_fee_rule(doctor_id, line, catalog, categories)
        resolved = resolve_percentage(line.id, match.rule, overrides)

        calculated_fee = money2(base * resolved.percentage / HUNDRED)

        details.append(TreatmentFeeDetail(
            line_id=line.id,
            line_name=line.name,
            unit_price=money_float(line.unit_price),
            final_price=money_float(final_price),
            resolved_fee_percentage=float(resolved.percentage),
            fee_base=money_float(base),
            calculated_fee=float(calculated_fee),
            rule_id=None if resolved.is_manual_override or match.rule is None else match.rule.id,
            match_score=0 if resolved.is_manual_override else match.score,
            rule_description=resolved.description,
            is_manual_override=resolved.is_manual_override,
        ))

        total_final += final_price
        total_fee += calculated_fee

    average = total_fee / total_final * HUNDRED if total_final > ZERO else ZERO

    totals = VisitTotals(
        total_final_price=money_float(total_final),
        total_fee=money_float(total_fee),
        average_fee_percentage=money_float(average),
    )
    return details, totals


def calculate_multi_fee(lines: Sequence[BillableLine], doctor_id: Optional[str],
                        catalog: Sequence[FeeRule],
                        overrides: Optional[Mapping[str, Decimal]] = None,
                        payment: Optional[PaymentState] = None,
                        categories: Optional[Mapping[str, str]] = None) -> MultiFeeResult:
    overrides = overrides or {}
    details, totals = aggregate(lines, doctor_id, catalog, overrides, payment, categories)

    has_conflicts = any(d.rule_id is None and not d.is_manual_override for d in details)
    if has_conflicts:
        logger.info("Doctor %s: %d line(s) without an applicable fee rule", doctor_id,
                    sum(1 for d in details if d.rule_id is None and not d.is_manual_override))

    return MultiFeeResult(
        details=details,
        totals=totals,
        has_conflicts=has_conflicts,
        has_manual_overrides=len(overrides) > 0,
    )
