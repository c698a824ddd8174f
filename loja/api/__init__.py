"""API layer module.

Contains FastAPI routers, middleware and request/response schemas.
"""

from loja.api.health import router as health_router
from loja.api.products import router as products_router

__all__ = [
    "health_router",
    "products_router",
]
