"""Product Catalog.

Persistence of categories and products, and storage of product images.
"""

from loja.catalog.images import ImageIngestor
from loja.catalog.models import Category, Product
from loja.catalog.repository import CatalogRepository

__all__ = [
    # Models
    "Category",
    "Product",
    # Repository
    "CatalogRepository",
    # Images
    "ImageIngestor",
]
