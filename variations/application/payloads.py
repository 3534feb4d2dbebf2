"""Variation input payloads.

One pydantic model serves create, partial update and batch items. Every
field is optional; ``model_fields_set`` tells which ones the client sent,
which is what gives updates their patch semantics. Unknown and read-only
fields (``price``, ``on_sale``, ...) are ignored.
"""

from datetime import datetime
from typing import Any

import pydantic
from pydantic import BaseModel, Field, field_validator

from variations.domain.exceptions import InvalidPayloadError
from variations.domain.value_objects import (
    BackorderPolicy,
    StockStatus,
    TaxStatus,
    VariationStatus,
)


def _number_to_str(value: Any) -> Any:
    """Accept numeric JSON values for string-typed decimal fields."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ImageInput(BaseModel):
    """Submitted variation image."""

    id: int | None = Field(default=None, description="Existing attachment ID")
    src: str | None = Field(default=None, description="Image URL")
    name: str | None = Field(default=None, description="Image name")
    alt: str | None = Field(default=None, description="Alternative text")
    position: int = Field(default=0, description="Image position")


class AttributeInput(BaseModel):
    """Submitted attribute selection."""

    id: int | None = Field(default=None, description="Attribute taxonomy ID")
    name: str | None = Field(default=None, description="Attribute name or slug")
    option: str = Field(default="", description="Selected option")


class DownloadInput(BaseModel):
    """Submitted downloadable file."""

    id: str | None = Field(default=None, description="File ID")
    name: str = Field(default="", description="File name")
    file: str = Field(..., description="File URL")


class DimensionsInput(BaseModel):
    """Submitted dimensions; omitted sides keep their value."""

    length: str | None = None
    width: str | None = None
    height: str | None = None

    @field_validator("length", "width", "height", mode="before")
    @classmethod
    def coerce_numbers(cls, value: Any) -> Any:
        return _number_to_str(value)


class MetaDataInput(BaseModel):
    """Submitted metadata entry; a null value removes the key."""

    id: int | None = None
    key: str
    value: Any = None


class VariationInput(BaseModel):
    """Writable variation fields."""

    model_config = {"extra": "ignore"}

    id: int | None = Field(default=None, description="Variation ID (batch update only)")
    description: str | None = None
    sku: str | None = None
    regular_price: str | None = None
    sale_price: str | None = None
    date_on_sale_from: datetime | None = None
    date_on_sale_to: datetime | None = None
    status: VariationStatus | None = None
    virtual: bool | None = None
    downloadable: bool | None = None
    downloads: list[DownloadInput] | None = None
    download_limit: int | None = None
    download_expiry: int | None = None
    tax_status: TaxStatus | None = None
    tax_class: str | None = None
    manage_stock: bool | None = None
    stock_quantity: int | None = None
    stock_status: StockStatus | None = None
    backorders: BackorderPolicy | None = None
    low_stock_amount: int | None = None
    weight: str | None = None
    dimensions: DimensionsInput | None = None
    shipping_class: str | None = None
    image: ImageInput | None = None
    attributes: list[AttributeInput] | None = None
    menu_order: int | None = None
    meta_data: list[MetaDataInput] | None = None

    @field_validator("regular_price", "sale_price", "weight", mode="before")
    @classmethod
    def coerce_numbers(cls, value: Any) -> Any:
        return _number_to_str(value)

    def submitted(self) -> set[str]:
        """Names of writable fields present in the payload."""
        return self.model_fields_set - {"id"}


def validation_errors(exc: pydantic.ValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors into field/message pairs."""
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]) or None,
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


def parse_variation_input(data: Any) -> VariationInput:
    """Validate a raw payload: a request body or one batch item.

    A missing body is an empty payload.

    Raises:
        InvalidPayloadError: If the payload does not match the schema.
    """
    if isinstance(data, VariationInput):
        return data
    if data is None:
        data = {}
    try:
        return VariationInput.model_validate(data)
    except pydantic.ValidationError as e:
        raise InvalidPayloadError(
            "Invalid variation payload", errors=validation_errors(e)
        ) from e


class BatchPayload(BaseModel):
    """Batch request body.

    Items stay untyped here; each one is validated on its own so that a
    malformed item fails alone.
    """

    create: list[Any] | None = None
    update: list[Any] | None = None
    delete: list[Any] | None = None


def parse_batch_payload(data: Any) -> BatchPayload:
    """Validate the shape of a batch body.

    Raises:
        InvalidPayloadError: If the body or one of its groups is not a list.
    """
    if data is None:
        data = {}
    try:
        return BatchPayload.model_validate(data)
    except pydantic.ValidationError as e:
        raise InvalidPayloadError(
            "Invalid batch payload", errors=validation_errors(e)
        ) from e
