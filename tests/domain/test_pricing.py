"""Tests for reseller pricing."""

from decimal import Decimal

import pytest

from loja.domain.pricing import RESELLER_DISCOUNT_RATE, reseller_price


def test_discount_rate() -> None:
    """Resellers get fifteen percent off."""
    assert RESELLER_DISCOUNT_RATE == 0.15


@pytest.mark.parametrize(
    "value,expected",
    [
        (Decimal("100.00"), Decimal("85")),
        (Decimal("200.00"), Decimal("170")),
        (Decimal("20.00"), Decimal("17")),
        (Decimal("10.00"), Decimal("8.5")),
        (Decimal("0"), Decimal("0")),
    ],
)
def test_reseller_price(value: Decimal, expected: Decimal) -> None:
    """Discounted values for prices with exact float products."""
    assert reseller_price(value) == expected


def test_result_is_decimal() -> None:
    """The discounted value stays a Decimal."""
    assert isinstance(reseller_price(Decimal("39.90")), Decimal)


def test_close_to_exact_discount() -> None:
    """Float residue stays far below a cent."""
    value = Decimal("39.90")
    assert abs(reseller_price(value) - value * Decimal("0.85")) < Decimal("0.000001")
