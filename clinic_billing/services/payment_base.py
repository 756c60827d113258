# clinic_billing/services/payment_base.py
from __future__ import annotations

from decimal import Decimal
from typing import List, Sequence

from clinic_billing.model import BillableLine, PaymentState, PaymentStatus
from clinic_billing.services.billing_math import D, ZERO


def dp_shares(final_prices: Sequence[Decimal], dp_amount) -> List[Decimal]:
    """
    Split a down payment across lines in proportion to their final price.
    All shares are zero when the lines are worth nothing.
    """
    total = sum((D(p) for p in final_prices), ZERO)
    if total <= ZERO:
        return [ZERO for _ in final_prices]
    dp = D(dp_amount)
    return [D(p) / total * dp for p in final_prices]


def fee_bases(final_prices: Sequence[Decimal], payment: PaymentState) -> List[Decimal]:
    if payment.status != PaymentStatus.dp:
        return [D(p) for p in final_prices]
    shares = dp_shares(final_prices, payment.dp_amount)
    return [max(ZERO, D(p) - share) for p, share in zip(final_prices, shares)]


def fee_base(line: BillableLine, all_lines: Sequence[BillableLine],
             payment: PaymentState) -> Decimal:
    """Part of ``line`` the fee percentage is applied to. ``line`` must be one of ``all_lines``."""
    position = next((i for i, other in enumerate(all_lines) if other is line), None)
    if position is None:
        position = list(all_lines).index(line)
    return fee_bases([other.final_price for other in all_lines], payment)[position]
