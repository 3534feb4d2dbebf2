"""Domain entities.

Products and their variations as explicit typed records. Products are
owned by catalog management; this service only reads them and keeps
their ordered child list in sync with the variations it writes.
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from variations.domain.base import Entity, utcnow
from variations.domain.value_objects import (
    AttributeSelection,
    BackorderPolicy,
    Dimensions,
    Download,
    Image,
    MetaData,
    ProductAttribute,
    ProductType,
    StockStatus,
    TaxStatus,
    VariationStatus,
)


# ============================================================================
# Product
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Product(Entity):
    """Parent catalog product.

    Attributes:
        name: Product title.
        type: Simple or variable.
        sku: Stock keeping unit, empty when unset.
        manage_stock: Whether stock is tracked at product level.
        stock_quantity: Product-level quantity, used by variations that
            defer stock management to their parent.
        attributes: Declared attribute taxonomies.
        children: Ordered ids of child variations.
    """

    name: str
    type: ProductType = ProductType.SIMPLE
    sku: str = ""
    manage_stock: bool = False
    stock_quantity: int | None = None
    attributes: list[ProductAttribute] = field(default_factory=list)
    children: list[int] = field(default_factory=list)

    @property
    def is_variable(self) -> bool:
        """Whether this product can have variations."""
        return self.type is ProductType.VARIABLE

    def find_attribute(
        self, attribute_id: int | None, name: str | None
    ) -> ProductAttribute | None:
        """Find a variation attribute by taxonomy id or name.

        Args:
            attribute_id: Taxonomy id, 0 or None to match by name.
            name: Attribute label or slug.

        Returns:
            Matching attribute, or None.
        """
        for attribute in self.attributes:
            if attribute.variation and attribute.matches(attribute_id, name):
                return attribute
        return None

    def set_manage_stock(self, manage_stock: bool, quantity: int | None = None) -> None:
        """Toggle product-level stock management."""
        self.manage_stock = manage_stock
        self.stock_quantity = quantity if manage_stock else None
        self._touch()


# ============================================================================
# Variation
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Variation(Entity):
    """A purchasable variant of a variable product.

    ``manage_stock`` stores what the client asked for. The effective value,
    which may defer to the parent, comes from the stock policy resolver.
    """

    parent_id: int
    sku: str = ""
    description: str = ""
    status: VariationStatus = VariationStatus.PUBLISH
    regular_price: Decimal | None = None
    sale_price: Decimal | None = None
    date_on_sale_from: datetime | None = None
    date_on_sale_to: datetime | None = None
    virtual: bool = False
    downloadable: bool = False
    downloads: list[Download] = field(default_factory=list)
    download_limit: int = -1
    download_expiry: int = -1
    tax_status: TaxStatus = TaxStatus.TAXABLE
    tax_class: str = ""
    manage_stock: bool = False
    stock_quantity: int | None = None
    stock_status: StockStatus = StockStatus.IN_STOCK
    backorders: BackorderPolicy = BackorderPolicy.NO
    low_stock_amount: int | None = None
    weight: str = ""
    dimensions: Dimensions = field(default_factory=Dimensions)
    shipping_class: str = ""
    shipping_class_id: int = 0
    image: Image | None = None
    attributes: list[AttributeSelection] = field(default_factory=list)
    menu_order: int = 0
    meta_data: list[MetaData] = field(default_factory=list)

    def is_on_sale(self, now: datetime | None = None) -> bool:
        """Whether the sale price currently applies.

        A sale needs a sale price below the regular price (when one is set)
        and ``now`` inside the optional sale window.
        """
        if self.sale_price is None:
            return False
        if self.regular_price is not None and self.sale_price >= self.regular_price:
            return False
        now = now or utcnow()
        if self.date_on_sale_from and now < self.date_on_sale_from:
            return False
        if self.date_on_sale_to and now > self.date_on_sale_to:
            return False
        return True

    def active_price(self, now: datetime | None = None) -> Decimal | None:
        """Price charged right now."""
        if self.is_on_sale(now):
            return self.sale_price
        return self.regular_price

    def is_purchasable(self, stock_status: StockStatus, now: datetime | None = None) -> bool:
        """Whether customers can buy this variation.

        Args:
            stock_status: Effective stock status from the stock policy.
            now: Reference time for the sale window.
        """
        return (
            self.status is VariationStatus.PUBLISH
            and self.active_price(now) is not None
            and stock_status is not StockStatus.OUT_OF_STOCK
        )

    def set_meta(self, key: str, value: Any, meta_id: int) -> None:
        """Insert or replace a metadata entry by key; None removes it."""
        kept = [m for m in self.meta_data if m.key != key]
        existing = next((m for m in self.meta_data if m.key == key), None)
        if value is not None:
            kept.append(MetaData(id=existing.id if existing else meta_id, key=key, value=value))
        self.meta_data = kept

    def copy(self) -> "Variation":
        """Detached copy used to validate a patch before committing it."""
        return dataclasses.replace(
            self,
            downloads=list(self.downloads),
            attributes=list(self.attributes),
            meta_data=list(self.meta_data),
        )
