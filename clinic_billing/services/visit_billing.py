# clinic_billing/services/visit_billing.py
from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional, Sequence

from fastapi import HTTPException

from clinic_billing.config import get_default_admin_fee
from clinic_billing.model import (BillableLine, FeeRule, MedicationLine, PaymentState,
                                  PaymentStatus, VisitBilling, VisitBillingInput, VisitSummary)
from clinic_billing.services.billing_math import D, ZERO, fmt_rupiah, money_float
from clinic_billing.services.fee_aggregator import calculate_multi_fee
from clinic_billing.services.overrides import build_overrides


def medication_total(medications: Sequence[MedicationLine]) -> Decimal:
    return sum((D(m.unit_price) * D(m.quantity) for m in medications), ZERO)


def summarize_visit(lines: Sequence[BillableLine], admin_fee, medication_cost,
                    payment: PaymentState) -> VisitSummary:
    subtotal = sum((line.subtotal for line in lines), ZERO)
    total_discount = sum((line.discount_amount for line in lines), ZERO)
    total_nominal = subtotal - total_discount
    admin_fee = max(ZERO, D(admin_fee))
    medication_cost = max(ZERO, D(medication_cost))
    total_tindakan = total_nominal + admin_fee + medication_cost

    dp_amount = D(payment.dp_amount) if payment.status == PaymentStatus.dp else ZERO
    # can go negative when the caller skipped validate_payment
    outstanding = total_tindakan - dp_amount if payment.status == PaymentStatus.dp else ZERO

    return VisitSummary(
        subtotal=money_float(subtotal),
        total_discount=money_float(total_discount),
        total_nominal=money_float(total_nominal),
        admin_fee=money_float(admin_fee),
        medication_cost=money_float(medication_cost),
        total_tindakan=money_float(total_tindakan),
        payment_status=payment.status,
        dp_amount=money_float(dp_amount),
        outstanding_amount=money_float(outstanding),
    )


def validate_payment(payment: PaymentState, total_tindakan) -> None:
    if payment.status != PaymentStatus.dp:
        return
    dp_amount = D(payment.dp_amount)
    if dp_amount <= ZERO:
        raise HTTPException(status_code=400, detail="DP amount is required for a down payment")
    if dp_amount >= D(total_tindakan):
        raise HTTPException(
            status_code=400,
            detail=f"DP amount must be less than the total ({fmt_rupiah(total_tindakan)})")


def bill_visit(visit: VisitBillingInput, fee_rules: Sequence[FeeRule],
               categories: Optional[Mapping[str, str]] = None) -> VisitBilling:
    if visit.admin_fee_override is not None:
        admin_fee = visit.admin_fee_override
    else:
        admin_fee = get_default_admin_fee()

    if visit.medication_cost is not None:
        medication_cost = visit.medication_cost
    else:
        medication_cost = medication_total(visit.medications)

    summary = summarize_visit(visit.lines, admin_fee, medication_cost, visit.payment)
    validate_payment(visit.payment, summary.total_tindakan)

    overrides = build_overrides(visit.manual_overrides)
    fees = calculate_multi_fee(visit.lines, visit.doctor_id, list(fee_rules),
                               overrides, visit.payment, categories)
    fees.totals.outstanding_amount = summary.outstanding_amount

    return VisitBilling(summary=summary, fees=fees)
