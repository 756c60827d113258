# clinic_billing/services/discount.py
from __future__ import annotations

from decimal import Decimal
from typing import Dict

from clinic_billing.services.billing_math import D, ZERO, HUNDRED, clamp

PERCENTAGE = "percentage"
NOMINAL = "nominal"


def resolve_line_discount(unit_price, quantity, discount_value,
                          discount_type) -> Dict[str, Decimal]:
    """
    Discounted price of one line.

    Never raises: a percentage is clamped to [0, 100] and a nominal discount
    to [0, subtotal], so ``0 <= discount_amount <= subtotal`` always holds.
    """
    unit_price = max(ZERO, D(unit_price))
    quantity = max(ZERO, D(quantity))
    value = max(ZERO, D(discount_value))

    subtotal = unit_price * quantity

    if str(discount_type).lower() == NOMINAL:
        discount_amount = min(value, subtotal)
    else:
        discount_amount = subtotal * clamp(value, ZERO, HUNDRED) / HUNDRED

    final_price = max(ZERO, subtotal - discount_amount)

    return {
        "subtotal": subtotal,
        "discount_amount": discount_amount,
        "final_price": final_price,
    }
