"""Product API endpoints.

Provides product management for administrators, paged listing for
customers and administrators, and the discounted reseller feed.
"""

from pathlib import Path
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from loja.api.auth import RESELLER_CAPABILITY, Role, require_capabilities
from loja.api.schemas import (
    CategorySchema,
    ErrorResponse,
    ProductCreateRequest,
    ProductListResponse,
    ProductSchema,
    ProductUpdateRequest,
    ResellerProductSchema,
)
from loja.application.product_service import (
    CategoryDTO,
    ProductDTO,
    ProductService,
    ResellerItemDTO,
)
from loja.catalog.images import ImageIngestor
from loja.domain.exceptions import ProductErrorKind
from loja.infrastructure.config import settings
from loja.infrastructure.database import get_session

router = APIRouter(prefix="/product", tags=["Products"])

ERROR_STATUS = {
    ProductErrorKind.CATEGORY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ProductErrorKind.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ProductErrorKind.IMAGE_DECODE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ProductErrorKind.INFRASTRUCTURE_FAULT: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

require_admin = require_capabilities(Role.ADMIN)
require_shopper = require_capabilities(Role.CUSTOMER, Role.ADMIN)
require_reseller = require_capabilities(RESELLER_CAPABILITY)


# ============================================================================
# Dependencies
# ============================================================================


def get_image_ingestor() -> ImageIngestor:
    """Get image ingestor configured from settings."""
    return ImageIngestor(
        storage_dir=Path(settings.image_storage_dir),
        base_url=settings.public_base_url,
        url_path=settings.image_url_path,
    )


def get_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
    image_ingestor: Annotated[ImageIngestor, Depends(get_image_ingestor)],
) -> ProductService:
    """Get product service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return ProductService(
        session=session,
        image_ingestor=image_ingestor,
        request_id=request_id,
    )


# ============================================================================
# Converters
# ============================================================================


def raise_for_error(error_kind: ProductErrorKind | None, message: str | None) -> NoReturn:
    """Map a failed service result to an HTTP error.

    Args:
        error_kind: Error kind from the service result.
        message: Error message from the service result.

    Raises:
        HTTPException: Always, with the status for the error kind.
    """
    kind = error_kind or ProductErrorKind.INFRASTRUCTURE_FAULT
    raise HTTPException(
        status_code=ERROR_STATUS[kind],
        detail={
            "error_code": kind.value,
            "message": message or "Server error",
        },
    )


def category_to_response(category: CategoryDTO) -> CategorySchema:
    """Convert category DTO to response schema."""
    return CategorySchema(id=category.id, name=category.name)


def product_to_response(product: ProductDTO) -> ProductSchema:
    """Convert product DTO to response schema."""
    return ProductSchema(
        id=product.id,
        name=product.name,
        description=product.description,
        value=product.value,
        image=product.image,
        category=category_to_response(product.category),
    )


def reseller_item_to_response(item: ResellerItemDTO) -> ResellerProductSchema:
    """Convert reseller feed entry to response schema."""
    return ResellerProductSchema(
        name=item.name,
        description=item.description,
        value=item.value,
        image=item.image,
        category=category_to_response(item.category),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "",
    response_class=Response,
    dependencies=[Depends(require_admin)],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Create product",
    description="Create a product in an existing category and store its base64 image.",
)
async def create_product(
    body: ProductCreateRequest,
    service: Annotated[ProductService, Depends(get_service)],
) -> Response:
    """Create a product.

    Args:
        body: Product fields and base64 image.
        service: Product service.

    Returns:
        Empty 200 response.

    Raises:
        HTTPException: If the category does not exist or storage fails.
    """
    result = await service.create_product(
        category_id=body.category_id,
        name=body.name,
        description=body.description,
        value=body.value,
        base64_image=body.base64_image,
    )

    if not result.success:
        raise_for_error(result.error_kind, result.error)

    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "",
    response_model=ProductListResponse,
    dependencies=[Depends(require_shopper)],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="List products",
    description="List one page of products with their categories.",
)
async def list_products(
    service: Annotated[ProductService, Depends(get_service)],
    page: Annotated[int, Query(ge=0, description="Zero-based page number")] = 0,
    page_size: Annotated[
        int, Query(alias="pageSize", ge=0, description="Products per page")
    ] = 10,
) -> ProductListResponse:
    """List products.

    Args:
        service: Product service.
        page: Zero-based page number.
        page_size: Products per page.

    Returns:
        The page together with the total product count.
    """
    result = await service.list_products(page=page, page_size=page_size)

    if not result.success:
        raise_for_error(result.error_kind, result.error)

    return ProductListResponse(
        count=result.count,
        page=result.page,
        page_size=result.page_size,
        products=[product_to_response(p) for p in result.products],
    )


@router.get(
    "/revendedor",
    response_model=list[ResellerProductSchema],
    dependencies=[Depends(require_reseller)],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Reseller feed",
    description="List every product at the reseller price.",
)
async def reseller_feed(
    service: Annotated[ProductService, Depends(get_service)],
) -> list[ResellerProductSchema]:
    """Get the reseller feed.

    Args:
        service: Product service.

    Returns:
        All products with discounted values.
    """
    result = await service.reseller_feed()

    if not result.success:
        raise_for_error(result.error_kind, result.error)

    return [reseller_item_to_response(item) for item in result.items]


@router.put(
    "/{product_id}",
    response_class=Response,
    dependencies=[Depends(require_admin)],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Update product",
    description="Replace every editable field of a product.",
)
async def update_product(
    product_id: int,
    body: ProductUpdateRequest,
    service: Annotated[ProductService, Depends(get_service)],
) -> Response:
    """Update a product.

    Args:
        product_id: Product identifier.
        body: Replacement fields.
        service: Product service.

    Returns:
        Empty 200 response.

    Raises:
        HTTPException: If the product or category does not exist.
    """
    result = await service.update_product(
        product_id=product_id,
        category_id=body.category_id,
        name=body.name,
        description=body.description,
        value=body.value,
        image=body.image,
    )

    if not result.success:
        raise_for_error(result.error_kind, result.error)

    return Response(status_code=status.HTTP_200_OK)


@router.delete(
    "/{product_id}",
    response_class=Response,
    dependencies=[Depends(require_admin)],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Delete product",
    description="Delete a product permanently.",
)
async def delete_product(
    product_id: int,
    service: Annotated[ProductService, Depends(get_service)],
) -> Response:
    """Delete a product.

    Args:
        product_id: Product identifier.
        service: Product service.

    Returns:
        Empty 200 response.

    Raises:
        HTTPException: If the product does not exist.
    """
    result = await service.delete_product(product_id)

    if not result.success:
        raise_for_error(result.error_kind, result.error)

    return Response(status_code=status.HTTP_200_OK)
