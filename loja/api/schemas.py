"""API schemas for the Loja API.

Pydantic models for request/response validation and serialization.
Field names are exposed in camelCase on the wire.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases that also accepts field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class CategorySchema(CamelModel):
    """Category representation."""

    id: int = Field(..., description="Category identifier")
    name: str = Field(..., description="Category name")


class ProductSchema(CamelModel):
    """Product representation."""

    id: int = Field(..., description="Product identifier")
    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Product description")
    value: float = Field(..., description="Catalog price")
    image: str = Field(..., description="Public URL of the product image")
    category: CategorySchema = Field(..., description="Owning category")


class ProductCreateRequest(CamelModel):
    """Request to create a product."""

    category_id: int = Field(..., description="Owning category identifier")
    name: str = Field(..., min_length=1, max_length=120, description="Product name")
    description: str = Field(default="", description="Product description")
    value: Decimal = Field(..., ge=0, description="Catalog price")
    base64_image: str = Field(
        ...,
        description="Base64 image, optionally prefixed with 'data:image/<type>;base64,'",
    )


class ProductUpdateRequest(CamelModel):
    """Request to replace a product's fields."""

    category_id: int = Field(..., description="Owning category identifier")
    name: str = Field(..., min_length=1, max_length=120, description="Product name")
    description: str = Field(default="", description="Product description")
    value: Decimal = Field(..., ge=0, description="Catalog price")
    image: str = Field(..., description="Image URL, stored as given")


class ProductListResponse(CamelModel):
    """One page of products."""

    count: int = Field(..., description="Total number of products across all pages")
    page: int = Field(..., description="Zero-based page number")
    page_size: int = Field(..., description="Products per page")
    products: list[ProductSchema] = Field(..., description="Products on this page")


class ResellerProductSchema(CamelModel):
    """Reseller feed entry."""

    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Product description")
    value: float = Field(..., description="Discounted reseller price")
    image: str = Field(..., description="Public URL of the product image")
    category: CategorySchema = Field(..., description="Owning category")
