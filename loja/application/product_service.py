"""Product application service.

Orchestrates product management:
- Creating products with an uploaded image
- Paged product listing
- Full replacement updates and deletion
- The discounted reseller feed
"""

from dataclasses import dataclass, field
from decimal import Decimal

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from loja.catalog.images import ImageIngestor
from loja.catalog.models import Category, Product
from loja.catalog.repository import CatalogRepository
from loja.domain.exceptions import (
    ImageIngestionError,
    InvalidImageEncodingError,
    ProductErrorKind,
)
from loja.domain.pricing import reseller_price

logger = structlog.get_logger()

CATEGORY_NOT_FOUND_MESSAGE = "Category not found"
PRODUCT_NOT_FOUND_MESSAGE = "Product not found"
SERVER_ERROR_MESSAGE = "Server error"


# ============================================================================
# Product Data Transfer Objects
# ============================================================================


@dataclass
class CategoryDTO:
    """Category data transfer object."""

    id: int
    name: str

    @classmethod
    def from_model(cls, category: Category) -> "CategoryDTO":
        """Build from a Category row."""
        return cls(id=category.id, name=category.name)


@dataclass
class ProductDTO:
    """Product data transfer object."""

    id: int
    name: str
    description: str
    value: Decimal
    image: str
    category: CategoryDTO

    @classmethod
    def from_model(cls, product: Product, category: Category) -> "ProductDTO":
        """Build from a Product row and its category."""
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            value=product.value,
            image=product.image,
            category=CategoryDTO.from_model(category),
        )


@dataclass
class ResellerItemDTO:
    """Reseller feed entry; ``value`` holds the discounted price."""

    name: str
    description: str
    value: Decimal
    image: str
    category: CategoryDTO


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class ProductResult:
    """Result of creating, updating or deleting a product."""

    product: ProductDTO | None = None
    success: bool = True
    error: str | None = None
    error_kind: ProductErrorKind | None = None


@dataclass
class ListProductsResult:
    """Result of listing products.

    ``count`` is the number of products across all pages.
    """

    products: list[ProductDTO] = field(default_factory=list)
    count: int = 0
    page: int = 0
    page_size: int = 10
    success: bool = True
    error: str | None = None
    error_kind: ProductErrorKind | None = None


@dataclass
class ResellerFeedResult:
    """Result of building the reseller feed."""

    items: list[ResellerItemDTO] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    error_kind: ProductErrorKind | None = None


def _not_found(kind: ProductErrorKind) -> ProductResult:
    message = (
        CATEGORY_NOT_FOUND_MESSAGE
        if kind == ProductErrorKind.CATEGORY_NOT_FOUND
        else PRODUCT_NOT_FOUND_MESSAGE
    )
    return ProductResult(success=False, error=message, error_kind=kind)


# ============================================================================
# Product Service
# ============================================================================


class ProductService:
    """Application service for product management.

    Business outcomes (missing product or category) and failures of the
    database or image storage are returned as results with an
    ``error_kind``; no exception escapes the public operations for
    those cases.
    """

    def __init__(
        self,
        session: AsyncSession,
        image_ingestor: ImageIngestor,
        repository: CatalogRepository | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            session: Async SQLAlchemy session owning the unit of work.
            image_ingestor: Image storage for product uploads.
            repository: Catalog repository; built from the session if omitted.
            request_id: Request ID for correlation.
        """
        self.session = session
        self.image_ingestor = image_ingestor
        self.repository = repository or CatalogRepository(session)
        self.request_id = request_id

    async def create_product(
        self,
        category_id: int,
        name: str,
        description: str,
        value: Decimal,
        base64_image: str,
    ) -> ProductResult:
        """Create a product and store its image.

        The image is written before the product row is inserted; if the
        insert fails the image file stays behind.

        Args:
            category_id: Owning category ID.
            name: Product name.
            description: Product description.
            value: Catalog price.
            base64_image: Base64 image, optionally as a data URI.

        Returns:
            ProductResult with the created product.
        """
        try:
            category = await self.repository.get_category(category_id)
            if category is None:
                logger.info(
                    "Category not found",
                    category_id=category_id,
                    request_id=self.request_id,
                )
                return _not_found(ProductErrorKind.CATEGORY_NOT_FOUND)

            try:
                image_url = await self.image_ingestor.ingest(base64_image)
            except ImageIngestionError as e:
                log = (
                    logger.warning
                    if isinstance(e, InvalidImageEncodingError)
                    else logger.error
                )
                log(
                    "Failed to ingest product image",
                    error=e.message,
                    request_id=self.request_id,
                )
                return ProductResult(
                    success=False,
                    error=SERVER_ERROR_MESSAGE,
                    error_kind=ProductErrorKind.IMAGE_DECODE_FAILED,
                )

            product = Product(
                name=name,
                description=description,
                value=value,
                image=image_url,
                category=category,
            )
            await self.repository.add_product(product)
            await self.session.commit()

            logger.info(
                "Product created",
                product_id=product.id,
                category_id=category.id,
                image=image_url,
                request_id=self.request_id,
            )

            return ProductResult(product=ProductDTO.from_model(product, category))

        except SQLAlchemyError:
            return await self._fault("create_product")

    async def list_products(self, page: int = 0, page_size: int = 10) -> ListProductsResult:
        """List one page of products.

        Args:
            page: Zero-based page number.
            page_size: Products per page.

        Returns:
            ListProductsResult with the page and the total product count.
        """
        try:
            products, total = await self.repository.list_products(
                offset=page * page_size,
                limit=page_size,
            )
        except SQLAlchemyError:
            fault = await self._fault("list_products")
            return ListProductsResult(
                page=page,
                page_size=page_size,
                success=False,
                error=fault.error,
                error_kind=fault.error_kind,
            )

        return ListProductsResult(
            products=[ProductDTO.from_model(p, p.category) for p in products],
            count=total,
            page=page,
            page_size=page_size,
        )

    async def update_product(
        self,
        product_id: int,
        category_id: int,
        name: str,
        description: str,
        value: Decimal,
        image: str,
    ) -> ProductResult:
        """Replace every editable field of a product.

        Args:
            product_id: Product to update.
            category_id: New owning category ID.
            name: New name.
            description: New description.
            value: New catalog price.
            image: New image URL, stored as given.

        Returns:
            ProductResult with the updated product.
        """
        try:
            product = await self.repository.get_product(product_id)
            if product is None:
                logger.info(
                    "Product not found",
                    product_id=product_id,
                    request_id=self.request_id,
                )
                return _not_found(ProductErrorKind.PRODUCT_NOT_FOUND)

            category = await self.repository.get_category(category_id)
            if category is None:
                logger.info(
                    "Category not found",
                    category_id=category_id,
                    product_id=product_id,
                    request_id=self.request_id,
                )
                return _not_found(ProductErrorKind.CATEGORY_NOT_FOUND)

            product.name = name
            product.description = description
            product.value = value
            product.image = image
            product.category_id = category.id

            await self.repository.update_product(product)
            await self.session.commit()

            logger.info(
                "Product updated",
                product_id=product.id,
                category_id=category.id,
                request_id=self.request_id,
            )

            return ProductResult(product=ProductDTO.from_model(product, category))

        except SQLAlchemyError:
            return await self._fault("update_product")

    async def delete_product(self, product_id: int) -> ProductResult:
        """Delete a product permanently.

        The stored image file is kept.

        Args:
            product_id: Product to delete.

        Returns:
            ProductResult without a product.
        """
        try:
            product = await self.repository.get_product(product_id)
            if product is None:
                logger.info(
                    "Product not found",
                    product_id=product_id,
                    request_id=self.request_id,
                )
                return _not_found(ProductErrorKind.PRODUCT_NOT_FOUND)

            await self.repository.delete_product(product)
            await self.session.commit()

            logger.info(
                "Product deleted",
                product_id=product_id,
                request_id=self.request_id,
            )

            return ProductResult()

        except SQLAlchemyError:
            return await self._fault("delete_product")

    async def reseller_feed(self) -> ResellerFeedResult:
        """Build the reseller feed with discounted prices.

        Returns:
            ResellerFeedResult with one entry per product.
        """
        try:
            products = await self.repository.list_products_with_category()
        except SQLAlchemyError:
            fault = await self._fault("reseller_feed")
            return ResellerFeedResult(
                success=False,
                error=fault.error,
                error_kind=fault.error_kind,
            )

        items = [
            ResellerItemDTO(
                name=p.name,
                description=p.description,
                value=reseller_price(p.value),
                image=p.image,
                category=CategoryDTO.from_model(p.category),
            )
            for p in products
        ]

        logger.debug(
            "Reseller feed built",
            item_count=len(items),
            request_id=self.request_id,
        )

        return ResellerFeedResult(items=items)

    async def _fault(self, operation: str) -> ProductResult:
        """Log the active database error and roll back the session."""
        logger.exception(
            "Catalog store failure",
            operation=operation,
            request_id=self.request_id,
        )
        await self.session.rollback()
        return ProductResult(
            success=False,
            error=SERVER_ERROR_MESSAGE,
            error_kind=ProductErrorKind.INFRASTRUCTURE_FAULT,
        )
