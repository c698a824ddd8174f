"""Domain exceptions and error kinds.

Domain-level errors raised by catalog components, and the enumeration of
error kinds returned by application services.
"""

from enum import Enum
from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ProductErrorKind(str, Enum):
    """Failure outcomes of product operations."""

    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    IMAGE_DECODE_FAILED = "IMAGE_DECODE_FAILED"
    INFRASTRUCTURE_FAULT = "INFRASTRUCTURE_FAULT"


# ============================================================================
# Image Errors
# ============================================================================


class ImageIngestionError(DomainError):
    """Base class for image ingestion errors."""

    pass


class InvalidImageEncodingError(ImageIngestionError):
    """Raised when an image payload is not valid base64."""

    def __init__(self, reason: str) -> None:
        """Initialize invalid image encoding error.

        Args:
            reason: Decoder error message.
        """
        super().__init__(
            f"Image payload is not valid base64: {reason}",
            details={"reason": reason},
        )


class ImageStorageError(ImageIngestionError):
    """Raised when decoded image bytes cannot be written."""

    def __init__(self, filename: str, reason: str) -> None:
        """Initialize image storage error.

        Args:
            filename: Target asset filename.
            reason: Underlying I/O error message.
        """
        super().__init__(
            f"Could not store image {filename}: {reason}",
            details={"filename": filename, "reason": reason},
        )
