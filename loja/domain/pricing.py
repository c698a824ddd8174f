"""Reseller pricing."""

from decimal import Decimal

RESELLER_DISCOUNT_RATE = 0.15


def reseller_price(value: Decimal) -> Decimal:
    """Apply the flat reseller discount to a catalog value.

    The discount is computed in floating point and converted back to
    Decimal, so results may carry binary rounding residue beyond the
    catalog's two decimal places.

    Args:
        value: Catalog value.

    Returns:
        Discounted value.
    """
    discount = Decimal(repr(float(value) * RESELLER_DISCOUNT_RATE))
    return value - discount
