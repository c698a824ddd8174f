"""Catalog repository for database operations.

Provides lookup, persistence and paged listing of products and their
categories.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from loja.catalog.models import Category, Product


class CatalogRepository:
    """Repository for Category and Product database operations.

    Lookups return ``None`` when a row does not exist. Database failures
    propagate as ``sqlalchemy.exc.SQLAlchemyError``.

    Example usage:
        async with async_session_factory() as session:
            repo = CatalogRepository(session)
            products, total = await repo.list_products(offset=0, limit=10)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def get_category(self, category_id: int) -> Category | None:
        """Get category by ID.

        Args:
            category_id: Category ID.

        Returns:
            Category if found, None otherwise.
        """
        return await self.session.get(Category, category_id)

    async def add_category(self, category: Category) -> Category:
        """Save a new category.

        Args:
            category: Category to save.

        Returns:
            Saved category with its ID assigned.
        """
        self.session.add(category)
        await self.session.flush()
        return category

    async def list_categories(self) -> list[Category]:
        """List all categories ordered by ID."""
        result = await self.session.execute(select(Category).order_by(Category.id))
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def get_product(self, product_id: int) -> Product | None:
        """Get product by ID.

        The category is not loaded.

        Args:
            product_id: Product ID.

        Returns:
            Product if found, None otherwise.
        """
        return await self.session.get(Product, product_id)

    async def add_product(self, product: Product) -> Product:
        """Save a new product.

        Args:
            product: Product to save.

        Returns:
            Saved product with its ID assigned.
        """
        self.session.add(product)
        await self.session.flush()
        return product

    async def update_product(self, product: Product) -> Product:
        """Flush changes made to a loaded product.

        Args:
            product: Product previously returned by this repository.

        Returns:
            The same product.
        """
        await self.session.flush()
        return product

    async def delete_product(self, product: Product) -> None:
        """Delete a product.

        Args:
            product: Product previously returned by this repository.
        """
        await self.session.delete(product)
        await self.session.flush()

    async def count_products(self) -> int:
        """Count all products."""
        result = await self.session.execute(select(func.count(Product.id)))
        return result.scalar_one()

    async def list_products(self, offset: int, limit: int) -> tuple[list[Product], int]:
        """List a slice of products with their categories.

        Args:
            offset: Number of products to skip.
            limit: Maximum number of products to return.

        Returns:
            Products in the slice and the total product count.
        """
        total = await self.count_products()

        query = (
            select(Product)
            .options(selectinload(Product.category))
            .order_by(Product.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def list_products_with_category(self) -> list[Product]:
        """List every product with its category."""
        query = select(Product).options(selectinload(Product.category)).order_by(Product.id)
        result = await self.session.execute(query)
        return list(result.scalars().all())
