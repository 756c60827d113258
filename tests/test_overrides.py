from decimal import Decimal

import pytest

from clinic_billing.services.overrides import (apply_override_input, build_overrides, clear_override,
                                               describe_rule, resolve_percentage, set_override)
from factories import make_rule


@pytest.mark.parametrize("value", [0, 12.5, 50, 100])
def test_override_always_wins(value):
    rule = make_rule("r1", 40, doctor_ids=["doc-1"], treatment_types=["Scaling"])
    overrides = set_override({}, "L1", value)
    resolved = resolve_percentage("L1", rule, overrides)
    assert resolved.percentage == Decimal(str(value))
    assert resolved.is_manual_override is True
    assert resolved.description.startswith("manual override: ")


def test_override_description():
    resolved = resolve_percentage("L1", None, {"L1": Decimal("25")})
    assert resolved.description == "manual override: 25%"


def test_set_override_does_not_mutate_input():
    original = {"L1": Decimal("10")}
    updated = set_override(original, "L2", 20)
    assert original == {"L1": Decimal("10")}
    assert updated == {"L1": Decimal("10"), "L2": Decimal("20")}


@pytest.mark.parametrize("value", [-1, 100.5, "abc", None, "NaN"])
def test_out_of_range_override_is_ignored(value):
    overrides = {"L1": Decimal("30")}
    assert set_override(overrides, "L1", value) == {"L1": Decimal("30")}


def test_clear_override():
    overrides = {"L1": Decimal("30"), "L2": Decimal("5")}
    assert clear_override(overrides, "L1") == {"L2": Decimal("5")}
    assert clear_override(overrides, "missing") == overrides


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_empty_input_clears(raw):
    assert apply_override_input({"L1": Decimal("30")}, "L1", raw) == {}


def test_raw_input_accepts_decimal_comma():
    assert apply_override_input({}, "L1", "12,5") == {"L1": Decimal("12.5")}


def test_raw_input_out_of_range_keeps_previous():
    assert apply_override_input({"L1": Decimal("30")}, "L1", "150") == {"L1": Decimal("30")}


def test_build_overrides_skips_invalid_entries():
    overrides = build_overrides({"L1": "0", "L2": "200", "L3": None, "L4": "15"})
    assert overrides == {"L1": Decimal("0"), "L4": Decimal("15")}


def test_rule_percentage_without_override():
    rule = make_rule("r1", 40, doctor_names=["drg. Sari"], treatment_types=["Scaling"],
                     description="fee spesifik")
    resolved = resolve_percentage("L1", rule, {})
    assert resolved.percentage == Decimal("40")
    assert resolved.is_manual_override is False
    assert resolved.description == "doctor: drg. Sari + treatment: Scaling: 40% (fee spesifik)"


def test_default_rule_description():
    assert describe_rule(make_rule("d", 10, is_default=True)) == "default rule: 10%"


def test_category_rule_description():
    assert describe_rule(make_rule("c", 22.5, category="Ortodonti")) == "category: Ortodonti: 22.5%"


def test_no_rule_no_override():
    resolved = resolve_percentage("L1", None, {"L2": Decimal("50")})
    assert resolved.percentage == 0
    assert resolved.description == "no applicable rule"
    assert resolved.is_manual_override is False
