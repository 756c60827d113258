# clinic_billing/services/billing_math.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def D(x) -> Decimal:
    try:
        return Decimal(str(x or 0))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal("0")


def money2(x) -> Decimal:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def money_float(x) -> float:
    return float(money2(x))


def clamp(x: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(x, high))


def fmt_pct(x) -> str:
    """40 -> '40', 12.50 -> '12.5'."""
    d = D(x).normalize()
    return format(d, "f")


def fmt_rupiah(x) -> str:
    return "Rp " + f"{money2(x):,.0f}".replace(",", ".")
