"""Variation application service.

Orchestrates single-variation operations:
- Authorizing the caller before anything else
- Resolving parent and variation ids
- Validating payloads and applying partial updates
- Applying the stock policy before persisting
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlparse
from uuid import uuid4

import structlog

from variations.application.auth import AuthorizationGate, Capability, Identity
from variations.application.payloads import ImageInput, VariationInput, parse_variation_input
from variations.catalog.repository import CatalogStore, get_catalog_store
from variations.domain.entities import Product, Variation
from variations.domain.exceptions import (
    DuplicateSkuError,
    InvalidAttributeError,
    InvalidImageError,
    ProductNotFoundError,
    TrashNotSupportedError,
    VariationNotFoundError,
)
from variations.domain.stock_policy import StockSnapshot, apply_stock_policy, stock_snapshot
from variations.domain.value_objects import (
    AttributeSelection,
    Dimensions,
    Download,
    Image,
    StockStatus,
    parse_price,
    validate_image_src,
)
from variations.infrastructure.config import settings

logger = structlog.get_logger()


# Fields copied verbatim from the payload when present and not null.
SCALAR_FIELDS = (
    "description",
    "status",
    "virtual",
    "downloadable",
    "download_limit",
    "download_expiry",
    "tax_status",
    "tax_class",
    "manage_stock",
    "stock_status",
    "backorders",
    "weight",
    "shipping_class",
    "menu_order",
)

# Fields where an explicit null clears the stored value.
NULLABLE_FIELDS = (
    "stock_quantity",
    "low_stock_amount",
)


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class VariationView:
    """A variation together with the state its representation derives from."""

    variation: Variation
    parent: Product
    stock: StockSnapshot

    @property
    def id(self) -> int:
        """Variation id."""
        return self.variation.id


@dataclass
class VariationFilter:
    """Optional list filters."""

    sku: str | None = None
    stock_status: StockStatus | None = None
    on_sale: bool | None = None

    def matches(self, view: VariationView) -> bool:
        """Check a variation against every filter that is set."""
        if self.sku is not None and view.variation.sku != self.sku:
            return False
        if self.stock_status is not None and view.stock.stock_status is not self.stock_status:
            return False
        if self.on_sale is not None and view.variation.is_on_sale() != self.on_sale:
            return False
        return True


@dataclass
class VariationPage:
    """One page of a parent's variations."""

    items: list[VariationView] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 10

    @property
    def total_pages(self) -> int:
        """Number of pages at the current page size."""
        return math.ceil(self.total / self.per_page) if self.per_page else 0


# ============================================================================
# Variation Service
# ============================================================================


class VariationService:
    """Application service for a product's variations.

    Every operation takes the caller's identity explicitly and consults the
    authorization gate before resolving ids, so unauthenticated callers get
    Unauthorized regardless of whether the target exists.
    """

    def __init__(
        self,
        store: CatalogStore | None = None,
        gate: AuthorizationGate | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            store: Catalog store.
            gate: Authorization gate.
            request_id: Request ID for correlation.
        """
        self.store = store or get_catalog_store()
        self.gate = gate or AuthorizationGate()
        self.request_id = request_id

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list_variations(
        self,
        identity: Identity,
        product_id: int,
        page: int = 1,
        per_page: int | None = None,
        filters: VariationFilter | None = None,
    ) -> VariationPage:
        """List a product's variations, menu order first.

        Raises:
            UnauthorizedError: If the caller may not read products.
            ProductNotFoundError: If the parent is not a variable product.
        """
        self.gate.require(identity, Capability.READ_PRODUCTS, "list variations")
        parent = self.get_parent(product_id)

        per_page = per_page or settings.default_per_page
        views = [self.view(v, parent) for v in self.store.list_variations(parent.id)]
        if filters is not None:
            views = [v for v in views if filters.matches(v)]

        start = (page - 1) * per_page
        return VariationPage(
            items=views[start : start + per_page],
            total=len(views),
            page=page,
            per_page=per_page,
        )

    async def get_variation(
        self, identity: Identity, product_id: int, variation_id: int
    ) -> VariationView:
        """Get one variation of a product.

        Raises:
            UnauthorizedError: If the caller may not read products.
            VariationNotFoundError: If the id is unknown or has another parent.
        """
        self.gate.require(identity, Capability.READ_PRODUCTS, "view this variation")
        variation = self.get_owned_variation(product_id, variation_id)
        return self.view(variation, self.store.get_product(variation.parent_id))

    async def create_variation(
        self, identity: Identity, product_id: int, payload: VariationInput | Any
    ) -> VariationView:
        """Create a variation under a variable product.

        ``payload`` may be a raw request body; it is validated only after
        the caller is authorized and the parent resolved.

        Raises:
            UnauthorizedError: If the caller may not edit products.
            ProductNotFoundError: If the parent is not a variable product.
            ValidationError: If the payload is rejected; nothing is stored.
        """
        self.gate.require(identity, Capability.EDIT_PRODUCTS, "create variations")
        parent = self.get_parent(product_id)
        payload = parse_variation_input(payload)

        variation = Variation(parent_id=parent.id)
        self.apply_changes(variation, parent, payload)
        self.store.add_variation(variation)

        logger.info(
            "Variation created",
            variation_id=variation.id,
            product_id=parent.id,
            sku=variation.sku,
            request_id=self.request_id,
        )
        return self.view(variation, parent)

    async def update_variation(
        self,
        identity: Identity,
        product_id: int,
        variation_id: int,
        payload: VariationInput | Any,
    ) -> VariationView:
        """Apply a partial update; omitted fields keep their value.

        ``payload`` may be a raw request body, validated like in create.

        Raises:
            UnauthorizedError: If the caller may not edit products.
            VariationNotFoundError: If the id is unknown or has another parent.
            ValidationError: If the payload is rejected; nothing is stored.
        """
        self.gate.require(identity, Capability.EDIT_PRODUCTS, "edit this variation")
        current = self.get_owned_variation(product_id, variation_id)
        payload = parse_variation_input(payload)
        parent = self.store.get_product(current.parent_id)

        updated = current.copy()
        self.apply_changes(updated, parent, payload)
        self.store.save_variation(updated)

        logger.info(
            "Variation updated",
            variation_id=updated.id,
            product_id=parent.id,
            fields=sorted(payload.submitted()),
            request_id=self.request_id,
        )
        return self.view(updated, parent)

    async def delete_variation(
        self,
        identity: Identity,
        product_id: int,
        variation_id: int,
        force: bool = False,
    ) -> VariationView:
        """Permanently delete a variation.

        Returns:
            The variation as it was before deletion.

        Raises:
            UnauthorizedError: If the caller may not delete products.
            VariationNotFoundError: If the id is unknown or has another parent.
            TrashNotSupportedError: If ``force`` is not set.
        """
        self.gate.require(identity, Capability.DELETE_PRODUCTS, "delete this variation")
        variation = self.get_owned_variation(product_id, variation_id)
        if not force:
            raise TrashNotSupportedError(variation_id)

        parent = self.store.get_product(variation.parent_id)
        previous = self.view(variation, parent)
        self.store.delete_variation(variation.id)

        logger.info(
            "Variation deleted",
            variation_id=variation_id,
            product_id=parent.id,
            request_id=self.request_id,
        )
        return previous

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_parent(self, product_id: int) -> Product:
        """Resolve a parent id to a variable product.

        Raises:
            ProductNotFoundError: If missing or not variable.
        """
        parent = self.store.get_product(product_id)
        if parent is None or not parent.is_variable:
            raise ProductNotFoundError(product_id)
        return parent

    def get_owned_variation(self, product_id: int, variation_id: int) -> Variation:
        """Resolve a variation id that must belong to ``product_id``.

        Raises:
            VariationNotFoundError: If missing or owned by another product.
        """
        variation = self.store.get_variation(variation_id)
        if variation is None or variation.parent_id != product_id:
            raise VariationNotFoundError(variation_id, product_id)
        return variation

    def view(self, variation: Variation, parent: Product) -> VariationView:
        """Snapshot a variation for its representation."""
        return VariationView(
            variation=variation,
            parent=parent,
            stock=stock_snapshot(variation, parent),
        )

    # ------------------------------------------------------------------
    # Validation & patching
    # ------------------------------------------------------------------

    def apply_changes(
        self, variation: Variation, parent: Product, payload: VariationInput
    ) -> None:
        """Write the submitted fields onto ``variation``.

        ``variation`` must not be the stored instance: a validation error
        part-way through leaves it half-written.
        """
        submitted = payload.submitted()

        if "sku" in submitted:
            variation.sku = self._check_sku(payload.sku or "", variation.id)

        for price_field in ("regular_price", "sale_price"):
            if price_field in submitted:
                setattr(
                    variation,
                    price_field,
                    parse_price(price_field, getattr(payload, price_field)),
                )

        for date_field in ("date_on_sale_from", "date_on_sale_to"):
            if date_field in submitted:
                setattr(variation, date_field, _as_utc(getattr(payload, date_field)))

        for name in SCALAR_FIELDS:
            value = getattr(payload, name)
            if name in submitted and value is not None:
                setattr(variation, name, value)

        for name in NULLABLE_FIELDS:
            if name in submitted:
                setattr(variation, name, getattr(payload, name))

        if "dimensions" in submitted and payload.dimensions is not None:
            current = variation.dimensions
            variation.dimensions = Dimensions(
                length=_pick(payload.dimensions.length, current.length),
                width=_pick(payload.dimensions.width, current.width),
                height=_pick(payload.dimensions.height, current.height),
            )

        if "downloads" in submitted and payload.downloads is not None:
            variation.downloads = [
                Download(id=d.id or uuid4().hex, name=d.name, file=d.file)
                for d in payload.downloads
            ]

        if "image" in submitted:
            variation.image = self._build_image(payload.image, variation.image)

        if "attributes" in submitted and payload.attributes is not None:
            variation.attributes = self._resolve_attributes(payload, parent)

        if "meta_data" in submitted and payload.meta_data is not None:
            for entry in payload.meta_data:
                variation.set_meta(entry.key, entry.value, entry.id or self.store.next_id())

        apply_stock_policy(variation, parent)

    def _check_sku(self, sku: str, variation_id: int) -> str:
        sku = sku.strip()
        owner = self.store.find_sku_owner(sku)
        if owner is not None and owner != variation_id:
            raise DuplicateSkuError(sku, owner)
        return sku

    def _resolve_attributes(
        self, payload: VariationInput, parent: Product
    ) -> list[AttributeSelection]:
        selections = []
        for selection in payload.attributes or []:
            attribute = parent.find_attribute(selection.id, selection.name)
            if attribute is None:
                raise InvalidAttributeError(
                    selection.name or str(selection.id), parent.id
                )
            selections.append(
                AttributeSelection(
                    id=attribute.id,
                    name=attribute.name,
                    option=selection.option.strip(),
                )
            )
        return selections

    def _build_image(self, image: ImageInput | None, current: Image | None) -> Image | None:
        if image is None:
            return None

        if not image.src:
            # Re-submitting the attached image by id keeps it.
            if current is not None and image.id == current.id:
                return Image(
                    id=current.id,
                    src=current.src,
                    name=_pick(image.name, current.name),
                    alt=_pick(image.alt, current.alt),
                    position=image.position,
                )
            raise InvalidImageError(str(image.id or ""))

        src = validate_image_src(image.src)
        if current is not None and current.src == src:
            image_id = current.id
        else:
            image_id = image.id or self.store.next_id()

        return Image(
            id=image_id,
            src=src,
            name=image.name or PurePosixPath(urlparse(src).path).stem,
            alt=image.alt or "",
            position=image.position,
        )


def _pick(value: str | None, fallback: str) -> str:
    return fallback if value is None else value


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def get_variation_service(request_id: str | None = None) -> VariationService:
    """Create a variation service bound to the shared store."""
    return VariationService(request_id=request_id)
