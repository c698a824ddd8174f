#!/usr/bin/env python3
"""Seed product catalog script.

Creates the database tables and seeds categories, optionally with sample
products.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --category Bebidas --category Padaria
    python scripts/seed_catalog.py --with-products 25
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from loja.catalog.models import Category, Product
from loja.catalog.repository import CatalogRepository
from loja.infrastructure.config import settings
from loja.infrastructure.database import async_session_factory, create_schema

DEFAULT_CATEGORIES = ["Eletrônicos", "Livros", "Casa", "Alimentos"]


async def seed(category_names: list[str], product_count: int) -> dict:
    """Seed categories and sample products.

    Args:
        category_names: Names of categories to create.
        product_count: Number of sample products spread over the categories.

    Returns:
        Seeding result with counts.
    """
    async with async_session_factory() as session:
        repo = CatalogRepository(session)

        categories = [
            await repo.add_category(Category(name=name)) for name in category_names
        ]

        for i in range(product_count):
            category = categories[i % len(categories)]
            await repo.add_product(
                Product(
                    name=f"Produto {i + 1}",
                    description=f"Produto de exemplo {i + 1} em {category.name}",
                    value=Decimal(10 + i) + Decimal("0.90"),
                    image=f"{settings.public_base_url}{settings.image_url_path}/placeholder.jpg",
                    category=category,
                )
            )

        await session.commit()

        return {
            "categories_created": len(categories),
            "category_ids": [c.id for c in categories],
            "products_created": product_count,
        }


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed categories and sample products",
    )
    parser.add_argument(
        "--category",
        action="append",
        dest="categories",
        help="Category name to create (repeatable; default: a small built-in set)",
    )
    parser.add_argument(
        "--with-products",
        type=int,
        default=0,
        metavar="N",
        help="Also create N sample products",
    )

    args = parser.parse_args()
    categories = args.categories or DEFAULT_CATEGORIES

    print("Creating database tables...")
    await create_schema()

    result = await seed(categories, args.with_products)

    print(f"Categories created: {result['categories_created']} (ids {result['category_ids']})")
    print(f"Products created: {result['products_created']}")


if __name__ == "__main__":
    asyncio.run(main())
