# factories.py
from clinic_billing.model import BillableLine, FeeRule, PaymentState


def make_line(line_id="L1", name="Scaling", price=200000, quantity=1,
              discount=0, discount_type="percentage", category=None):
    return BillableLine(
        id=line_id,
        name=name,
        unit_price=price,
        quantity=quantity,
        discount_value=discount,
        discount_type=discount_type,
        category=category,
    )


def make_rule(rule_id, pct, doctor_ids=None, treatment_types=None, category=None,
              is_default=False, description=None, doctor_names=None):
    return FeeRule(
        id=rule_id,
        doctor_ids=doctor_ids,
        doctor_names=doctor_names,
        treatment_types=treatment_types,
        category=category,
        fee_percentage=pct,
        is_default=is_default,
        description=description,
    )


LUNAS = PaymentState(status="lunas")


def dp(amount):
    return PaymentState(status="dp", dp_amount=amount)
