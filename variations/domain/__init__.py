"""Domain layer.

Typed catalog records, value objects, the stock policy resolver and the
domain error hierarchy.
"""

from variations.domain.base import Entity, ValueObject, utcnow
from variations.domain.entities import Product, Variation
from variations.domain.exceptions import (
    BatchTooLargeError,
    DomainError,
    DuplicateSkuError,
    ForbiddenError,
    InvalidAttributeError,
    InvalidImageError,
    InvalidPayloadError,
    InvalidPriceError,
    NotFoundError,
    ProductNotFoundError,
    TrashNotSupportedError,
    UnauthorizedError,
    ValidationError,
    VariationNotFoundError,
)
from variations.domain.stock_policy import (
    StockSnapshot,
    apply_stock_policy,
    resolve_manage_stock,
    stock_snapshot,
)
from variations.domain.value_objects import (
    AttributeSelection,
    BackorderPolicy,
    Dimensions,
    Download,
    Image,
    ManageStock,
    MetaData,
    ProductAttribute,
    ProductType,
    StockStatus,
    TaxStatus,
    VariationStatus,
    format_price,
    parse_price,
    validate_image_src,
)

__all__ = [
    # Base
    "Entity",
    "ValueObject",
    "utcnow",
    # Entities
    "Product",
    "Variation",
    # Value objects
    "AttributeSelection",
    "BackorderPolicy",
    "Dimensions",
    "Download",
    "Image",
    "ManageStock",
    "MetaData",
    "ProductAttribute",
    "ProductType",
    "StockStatus",
    "TaxStatus",
    "VariationStatus",
    "format_price",
    "parse_price",
    "validate_image_src",
    # Stock policy
    "StockSnapshot",
    "apply_stock_policy",
    "resolve_manage_stock",
    "stock_snapshot",
    # Exceptions
    "BatchTooLargeError",
    "DomainError",
    "DuplicateSkuError",
    "ForbiddenError",
    "InvalidAttributeError",
    "InvalidImageError",
    "InvalidPayloadError",
    "InvalidPriceError",
    "NotFoundError",
    "ProductNotFoundError",
    "TrashNotSupportedError",
    "UnauthorizedError",
    "ValidationError",
    "VariationNotFoundError",
]
