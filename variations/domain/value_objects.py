"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from variations.domain.base import ValueObject
from variations.domain.exceptions import InvalidImageError, InvalidPriceError


# ============================================================================
# Enumerations
# ============================================================================


class ProductType(str, Enum):
    """Catalog product types relevant to variations."""

    SIMPLE = "simple"
    VARIABLE = "variable"


class VariationStatus(str, Enum):
    """Publication status of a variation."""

    PUBLISH = "publish"
    PRIVATE = "private"
    DRAFT = "draft"
    PENDING = "pending"


class StockStatus(str, Enum):
    """Stock availability."""

    IN_STOCK = "instock"
    OUT_OF_STOCK = "outofstock"
    ON_BACKORDER = "onbackorder"


class BackorderPolicy(str, Enum):
    """Whether orders are accepted once stock is exhausted."""

    NO = "no"
    NOTIFY = "notify"
    YES = "yes"

    @property
    def allowed(self) -> bool:
        """Whether backorders are accepted at all."""
        return self is not BackorderPolicy.NO


class TaxStatus(str, Enum):
    """Tax treatment of a variation."""

    TAXABLE = "taxable"
    SHIPPING = "shipping"
    NONE = "none"


class ManageStock(Enum):
    """Effective stock management of a variation.

    YES and NO are the variation managing (or not managing) its own
    stock; PARENT means the parent product's stock governs.
    """

    YES = "yes"
    NO = "no"
    PARENT = "parent"

    @property
    def is_managed(self) -> bool:
        """Whether any stock quantity governs this variation."""
        return self is not ManageStock.NO

    def to_json(self) -> bool | str:
        """Wire representation: true, false or the literal "parent"."""
        if self is ManageStock.PARENT:
            return "parent"
        return self is ManageStock.YES


# ============================================================================
# Attributes
# ============================================================================


@dataclass(frozen=True)
class ProductAttribute(ValueObject):
    """Attribute taxonomy declared on a parent product.

    Attributes:
        id: Global taxonomy id, 0 for product-local attributes.
        name: Display label (e.g. "size").
        slug: Taxonomy slug (e.g. "pa_size").
        options: Known option values.
        variation: Whether variations may select this attribute.
    """

    id: int
    name: str
    slug: str
    options: tuple[str, ...] = ()
    variation: bool = True

    def matches(self, attribute_id: int | None, name: str | None) -> bool:
        """Check whether a submitted id or name refers to this taxonomy.

        Names match case-insensitively against the label, the slug, or
        the slug without its "pa_" prefix.
        """
        if attribute_id:
            return self.id == attribute_id
        if not name:
            return False
        wanted = name.strip().lower()
        return wanted in {
            self.name.lower(),
            self.slug.lower(),
            self.slug.lower().removeprefix("pa_"),
        }


@dataclass(frozen=True)
class AttributeSelection(ValueObject):
    """A variation's chosen option for one parent attribute."""

    id: int
    name: str
    option: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"id": self.id, "name": self.name, "option": self.option}


# ============================================================================
# Media & Shipping
# ============================================================================


@dataclass(frozen=True)
class Image(ValueObject):
    """Variation image."""

    id: int
    src: str
    name: str = ""
    alt: str = ""
    position: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "src": self.src,
            "name": self.name,
            "alt": self.alt,
            "position": self.position,
        }


def validate_image_src(src: str) -> str:
    """Ensure an image source is an absolute http(s) URL.

    Raises:
        InvalidImageError: If the source cannot be fetched over http(s).
    """
    parsed = urlparse(src.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidImageError(src)
    return src.strip()


@dataclass(frozen=True)
class Dimensions(ValueObject):
    """Package dimensions as entered by the merchant."""

    length: str = ""
    width: str = ""
    height: str = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {"length": self.length, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Download(ValueObject):
    """Downloadable file attached to a variation."""

    id: str
    name: str
    file: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {"id": self.id, "name": self.name, "file": self.file}


@dataclass(frozen=True)
class MetaData(ValueObject):
    """Free-form key/value metadata entry."""

    id: int
    key: str
    value: Any = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"id": self.id, "key": self.key, "value": self.value}


# ============================================================================
# Prices
# ============================================================================

# Largest accepted magnitude (10**12) and finest accepted precision.
MAX_PRICE_EXPONENT = 12
MAX_PRICE_DECIMALS = 8


def parse_price(field_name: str, value: Any) -> Decimal | None:
    """Parse a submitted price.

    Empty strings and None clear the price.

    Args:
        field_name: Field being parsed, used in the error.
        value: Submitted value (string or number).

    Returns:
        Decimal price, or None when cleared.

    Raises:
        InvalidPriceError: If the value is not a finite, non-negative decimal
            below 10**12 with at most eight decimal places.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidPriceError(field_name, value)
    text = str(value).strip()
    if text == "":
        return None
    try:
        price = Decimal(text)
    except InvalidOperation:
        raise InvalidPriceError(field_name, value) from None
    if not price.is_finite() or price < 0:
        raise InvalidPriceError(field_name, value)
    if (
        price.adjusted() >= MAX_PRICE_EXPONENT
        or price.as_tuple().exponent < -MAX_PRICE_DECIMALS
    ):
        raise InvalidPriceError(field_name, value)
    return price


def format_price(price: Decimal | None) -> str:
    """Render a price the way it was entered; empty string when unset."""
    if price is None:
        return ""
    return format(price, "f")
