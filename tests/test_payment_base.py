from decimal import Decimal

import pytest

from clinic_billing.services.payment_base import dp_shares, fee_base, fee_bases
from factories import LUNAS, dp, make_line


def test_lunas_fee_base_is_final_price():
    line = make_line(price=100000, discount=20)
    assert fee_base(line, [line], LUNAS) == Decimal("80000")


def test_single_line_dp():
    line = make_line(price=200000)
    assert fee_base(line, [line], dp(150000)) == Decimal("50000")


def test_dp_split_proportionally():
    first = make_line("L1", price=300000)
    second = make_line("L2", name="Tambal Gigi", price=100000)
    lines = [first, second]
    assert dp_shares([first.final_price, second.final_price], 100000) == [Decimal("75000"), Decimal("25000")]
    assert fee_base(first, lines, dp(100000)) == Decimal("225000")
    assert fee_base(second, lines, dp(100000)) == Decimal("75000")


@pytest.mark.parametrize("prices,dp_amount", [
    ([100000, 100000, 100000], 100000),
    ([123456, 7890, 55555.5], 99999),
    ([1], 0.5),
])
def test_dp_shares_sum_to_dp_amount(prices, dp_amount):
    shares = dp_shares([Decimal(str(p)) for p in prices], dp_amount)
    assert abs(sum(shares) - Decimal(str(dp_amount))) < Decimal("0.000001")


def test_dp_shares_zero_total():
    assert dp_shares([Decimal("0"), Decimal("0")], 50000) == [0, 0]


def test_fee_base_never_negative():
    assert fee_bases([Decimal("100")], dp(500)) == [Decimal("0")]


def test_zero_value_lines_under_dp():
    line = make_line(price=0)
    assert fee_base(line, [line], dp(1000)) == 0


def test_fee_base_matches_fee_bases_for_every_line():
    lines = [make_line("L1", price=123456), make_line("L2", price=7890, discount=15),
             make_line("L3", price=55555, quantity=3)]
    payment = dp(99999)
    expected = fee_bases([line.final_price for line in lines], payment)
    assert [fee_base(line, lines, payment) for line in lines] == expected


def test_fee_base_line_must_belong_to_visit():
    with pytest.raises(ValueError):
        fee_base(make_line("L9", price=500), [make_line("L1", price=100)], dp(50))
