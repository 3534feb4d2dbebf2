"""API schemas for the variations API.

Pydantic models for request/response validation and serialization.
Request bodies reuse the application's ``VariationInput``.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from variations.domain.value_objects import (
    BackorderPolicy,
    StockStatus,
    TaxStatus,
    VariationStatus,
)


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
    details: list[ErrorDetail] | dict[str, Any] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Variation Schemas
# ============================================================================


class DimensionsSchema(BaseModel):
    """Package dimensions."""

    length: str = Field(default="", description="Length")
    width: str = Field(default="", description="Width")
    height: str = Field(default="", description="Height")


class DownloadSchema(BaseModel):
    """Downloadable file."""

    id: str = Field(..., description="File ID")
    name: str = Field(..., description="File name")
    file: str = Field(..., description="File URL")


class ImageSchema(BaseModel):
    """Variation image."""

    id: int = Field(..., description="Image ID")
    src: str = Field(..., description="Image URL")
    name: str = Field(default="", description="Image name")
    alt: str = Field(default="", description="Image alternative text")
    position: int = Field(default=0, description="Image position")


class AttributeSchema(BaseModel):
    """Selected attribute option."""

    id: int = Field(..., description="Attribute ID")
    name: str = Field(..., description="Attribute name")
    option: str = Field(..., description="Selected attribute term name")


class MetaDataSchema(BaseModel):
    """Metadata entry."""

    id: int = Field(..., description="Meta ID")
    key: str = Field(..., description="Meta key")
    value: Any = Field(default=None, description="Meta value")


class VariationResponse(BaseModel):
    """Full variation representation."""

    id: int = Field(..., description="Unique identifier for the variation")
    date_created: datetime = Field(..., description="Creation date, site timezone")
    date_created_gmt: datetime = Field(..., description="Creation date, GMT")
    date_modified: datetime = Field(..., description="Last modification date, site timezone")
    date_modified_gmt: datetime = Field(..., description="Last modification date, GMT")
    description: str = Field(default="", description="Variation description")
    permalink: str = Field(..., description="Variation URL")
    sku: str = Field(default="", description="Unique stock keeping unit")
    price: str = Field(default="", description="Current price")
    regular_price: str = Field(default="", description="Regular price")
    sale_price: str = Field(default="", description="Sale price")
    date_on_sale_from: datetime | None = Field(default=None, description="Sale start, site timezone")
    date_on_sale_from_gmt: datetime | None = Field(default=None, description="Sale start, GMT")
    date_on_sale_to: datetime | None = Field(default=None, description="Sale end, site timezone")
    date_on_sale_to_gmt: datetime | None = Field(default=None, description="Sale end, GMT")
    on_sale: bool = Field(..., description="Whether the variation is on sale")
    status: VariationStatus = Field(..., description="Variation status")
    purchasable: bool = Field(..., description="Whether the variation can be bought")
    virtual: bool = Field(default=False, description="Whether the variation is virtual")
    downloadable: bool = Field(default=False, description="Whether the variation is downloadable")
    downloads: list[DownloadSchema] = Field(default_factory=list, description="Downloadable files")
    download_limit: int = Field(default=-1, description="Download limit, -1 for unlimited")
    download_expiry: int = Field(default=-1, description="Days until download expiry, -1 for never")
    tax_status: TaxStatus = Field(..., description="Tax status")
    tax_class: str = Field(default="", description="Tax class")
    manage_stock: bool | Literal["parent"] = Field(
        ..., description="Stock management: own (true/false) or 'parent'"
    )
    stock_quantity: int | None = Field(default=None, description="Governing stock quantity")
    stock_status: StockStatus = Field(..., description="Stock status")
    backorders: BackorderPolicy = Field(..., description="Backorder policy")
    backorders_allowed: bool = Field(..., description="Whether backorders are allowed")
    backordered: bool = Field(..., description="Whether the variation is on backorder")
    low_stock_amount: int | None = Field(default=None, description="Low stock threshold")
    weight: str = Field(default="", description="Variation weight")
    dimensions: DimensionsSchema = Field(..., description="Variation dimensions")
    shipping_class: str = Field(default="", description="Shipping class slug")
    shipping_class_id: int = Field(default=0, description="Shipping class ID")
    image: ImageSchema | None = Field(default=None, description="Variation image")
    attributes: list[AttributeSchema] = Field(default_factory=list, description="Attribute selections")
    menu_order: int = Field(default=0, description="Sort order among siblings")
    meta_data: list[MetaDataSchema] = Field(default_factory=list, description="Metadata")


class DeleteVariationResponse(BaseModel):
    """Result of a forced delete."""

    previous: VariationResponse = Field(..., description="Variation before deletion")


class SchemaResponse(BaseModel):
    """Resource description returned by OPTIONS."""

    namespace: str = Field(..., description="Route namespace")
    methods: list[str] = Field(..., description="Allowed methods")
    schema_: dict[str, Any] = Field(..., alias="schema", description="JSON schema")

    model_config = {"populate_by_name": True}


# ============================================================================
# Batch Schemas
# ============================================================================


class BatchItemErrorBody(BaseModel):
    """Error attached to a failed batch item."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    status: int = Field(..., description="HTTP status the error maps to")
    details: dict[str, Any] = Field(default_factory=dict, description="Error context")


class BatchItemErrorSchema(BaseModel):
    """Failed batch item."""

    id: int | None = Field(default=None, description="Item id, when known")
    error: BatchItemErrorBody


class BatchDeleteItemSchema(BaseModel):
    """Successfully deleted batch item."""

    previous: VariationResponse


class BatchResponse(BaseModel):
    """Per-item results of a batch, grouped like the request."""

    create: list[VariationResponse | BatchItemErrorSchema] | None = None
    update: list[VariationResponse | BatchItemErrorSchema] | None = None
    delete: list[BatchDeleteItemSchema | BatchItemErrorSchema] | None = None
