"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure.
"""

from loja.application.product_service import (
    ListProductsResult,
    ProductResult,
    ProductService,
    ResellerFeedResult,
)

__all__ = [
    "ListProductsResult",
    "ProductResult",
    "ProductService",
    "ResellerFeedResult",
]
