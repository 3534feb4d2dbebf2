"""Domain exceptions.

All domain-level errors that represent business rule violations.
Each error carries a machine-readable code and the HTTP status it
surfaces as, so the API layer and the batch orchestrator can report
it without a second lookup table.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code: str = "DOMAIN_ERROR"
    status_code: int = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for per-item batch error entries."""
        return {
            "code": self.error_code,
            "message": self.message,
            "status": self.status_code,
            "details": self.details,
        }


# ============================================================================
# Authorization Errors
# ============================================================================


class UnauthorizedError(DomainError):
    """Raised when the caller is not authenticated."""

    error_code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, action: str) -> None:
        """Initialize unauthorized error.

        Args:
            action: The operation that was attempted.
        """
        super().__init__(
            f"Sorry, you are not allowed to {action}.",
            details={"action": action},
        )


class ForbiddenError(UnauthorizedError):
    """Raised when an authenticated caller lacks the required capability."""

    error_code = "FORBIDDEN"
    status_code = 403


# ============================================================================
# Lookup Errors
# ============================================================================


class NotFoundError(DomainError):
    """Base class for unresolvable ids."""

    error_code = "NOT_FOUND"
    status_code = 404


class ProductNotFoundError(NotFoundError):
    """Raised when a parent id does not resolve to a variable product."""

    error_code = "INVALID_PRODUCT_ID"

    def __init__(self, product_id: int) -> None:
        """Initialize product not found error.

        Args:
            product_id: The requested parent id.
        """
        super().__init__(
            f"Invalid product ID: {product_id}",
            details={"product_id": product_id},
        )


class VariationNotFoundError(NotFoundError):
    """Raised when a variation id is missing or belongs to another parent."""

    error_code = "INVALID_VARIATION_ID"

    def __init__(self, variation_id: int, product_id: int) -> None:
        """Initialize variation not found error.

        Args:
            variation_id: The requested variation id.
            product_id: The parent id from the request path.
        """
        super().__init__(
            f"Invalid variation ID {variation_id} for product {product_id}",
            details={"variation_id": variation_id, "product_id": product_id},
        )


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(DomainError):
    """Base class for rejected payloads."""

    error_code = "VALIDATION_ERROR"
    status_code = 400


class InvalidPayloadError(ValidationError):
    """Raised when a payload does not match the variation schema."""

    error_code = "INVALID_PARAM"

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        """Initialize invalid payload error.

        Args:
            message: Summary of the problem.
            errors: Field-level errors.
        """
        super().__init__(message, details={"errors": errors or []})


class DuplicateSkuError(ValidationError):
    """Raised when a SKU is already used by another product or variation."""

    error_code = "DUPLICATE_SKU"

    def __init__(self, sku: str, owner_id: int) -> None:
        """Initialize duplicate SKU error.

        Args:
            sku: The conflicting SKU.
            owner_id: Id of the record already holding it.
        """
        super().__init__(
            f"Invalid or duplicated SKU: {sku}",
            details={"sku": sku, "resource_id": owner_id},
        )


class InvalidAttributeError(ValidationError):
    """Raised when an attribute selection is not a taxonomy of the parent."""

    error_code = "INVALID_ATTRIBUTE"

    def __init__(self, name: str, product_id: int) -> None:
        """Initialize invalid attribute error.

        Args:
            name: The attribute name or slug that was submitted.
            product_id: Parent product id.
        """
        super().__init__(
            f"Attribute '{name}' is not a variation attribute of product {product_id}",
            details={"attribute": name, "product_id": product_id},
        )


class InvalidPriceError(ValidationError):
    """Raised when a price is not a non-negative decimal."""

    error_code = "INVALID_PRICE"

    def __init__(self, field: str, value: Any) -> None:
        """Initialize invalid price error.

        Args:
            field: Price field name.
            value: Submitted value.
        """
        super().__init__(
            f"Invalid value for {field}: {value!r}",
            details={"field": field, "value": str(value)},
        )


class InvalidImageError(ValidationError):
    """Raised when an image source is not an absolute http(s) URL."""

    error_code = "INVALID_IMAGE"

    def __init__(self, src: str) -> None:
        """Initialize invalid image error.

        Args:
            src: Submitted image source.
        """
        super().__init__(
            f"Invalid image source: {src!r}",
            details={"src": src},
        )


# ============================================================================
# Operation Errors
# ============================================================================


class TrashNotSupportedError(DomainError):
    """Raised when a non-forced delete is requested."""

    error_code = "TRASH_NOT_SUPPORTED"
    status_code = 501

    def __init__(self, variation_id: int) -> None:
        """Initialize trash not supported error.

        Args:
            variation_id: Variation that was targeted.
        """
        super().__init__(
            "Variations do not support trashing. Set 'force' to true to delete.",
            details={"variation_id": variation_id},
        )


class BatchTooLargeError(DomainError):
    """Raised when a batch carries more items than allowed."""

    error_code = "BATCH_TOO_LARGE"
    status_code = 413

    def __init__(self, count: int, limit: int) -> None:
        """Initialize batch too large error.

        Args:
            count: Number of items submitted.
            limit: Configured maximum.
        """
        super().__init__(
            f"Unable to accept more than {limit} items for this request.",
            details={"count": count, "limit": limit},
        )
