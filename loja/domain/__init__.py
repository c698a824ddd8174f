"""Domain layer - error kinds, domain exceptions and pricing rules."""

from loja.domain.exceptions import (
    DomainError,
    ImageIngestionError,
    ImageStorageError,
    InvalidImageEncodingError,
    ProductErrorKind,
)
from loja.domain.pricing import RESELLER_DISCOUNT_RATE, reseller_price

__all__ = [
    # Exceptions
    "DomainError",
    "ImageIngestionError",
    "ImageStorageError",
    "InvalidImageEncodingError",
    "ProductErrorKind",
    # Pricing
    "RESELLER_DISCOUNT_RATE",
    "reseller_price",
]
