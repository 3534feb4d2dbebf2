"""In-memory catalog store.

Holds products and variations keyed by integer id. Products and
variations share one id sequence, like posts in a content store, so an
id never resolves to both kinds and 0 never resolves at all.
"""

import itertools

import structlog

from variations.domain.entities import Product, Variation

logger = structlog.get_logger()


class CatalogStore:
    """In-memory repository for products and their variations.

    Writes are last-write-wins per record; there is no locking or
    versioning. In production, this would be replaced with database
    persistence.

    Example usage:
        store = get_catalog_store()
        product = store.add_product(Product(name="Shirt", type=ProductType.VARIABLE))
        variation = store.add_variation(Variation(parent_id=product.id, sku="S-1"))
        store.list_variations(product.id)
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._products: dict[int, Product] = {}
        self._variations: dict[int, Variation] = {}
        self._by_sku: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Ids
    # ------------------------------------------------------------------

    def next_id(self) -> int:
        """Reserve the next id from the shared sequence.

        Also used for attachments and metadata entries.
        """
        return next(self._ids)

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def add_product(self, product: Product) -> Product:
        """Persist a new product and assign its id."""
        product.id = self.next_id()
        self._products[product.id] = product
        self._index_sku(product.sku, product.id)
        return product

    def get_product(self, product_id: int) -> Product | None:
        """Get product by ID."""
        return self._products.get(product_id)

    def save_product(self, product: Product) -> Product:
        """Persist changes to an existing product."""
        self._products[product.id] = product
        return product

    # ------------------------------------------------------------------
    # Variations
    # ------------------------------------------------------------------

    def get_variation(self, variation_id: int) -> Variation | None:
        """Get variation by ID."""
        return self._variations.get(variation_id)

    def list_variations(self, parent_id: int) -> list[Variation]:
        """List a product's variations.

        Ordered by menu_order ascending; ties put the newest first.
        """
        variations = [v for v in self._variations.values() if v.parent_id == parent_id]
        variations.sort(key=lambda v: (v.menu_order, -v.id))
        return variations

    def add_variation(self, variation: Variation) -> Variation:
        """Persist a new variation, assign its id and attach it to its parent.

        Raises:
            KeyError: If the parent product is not stored.
        """
        parent = self._products[variation.parent_id]
        variation.id = self.next_id()
        self._variations[variation.id] = variation
        self._index_sku(variation.sku, variation.id)
        parent.children.append(variation.id)

        logger.debug(
            "Variation stored",
            variation_id=variation.id,
            parent_id=variation.parent_id,
        )
        return variation

    def save_variation(self, variation: Variation) -> Variation:
        """Replace the stored state of an existing variation."""
        previous = self._variations.get(variation.id)
        if previous is not None and previous.sku != variation.sku:
            self._unindex_sku(previous.sku, variation.id)
        self._variations[variation.id] = variation
        self._index_sku(variation.sku, variation.id)
        variation._touch()
        return variation

    def delete_variation(self, variation_id: int) -> Variation | None:
        """Permanently remove a variation.

        Returns:
            The removed variation, or None if it did not exist.
        """
        variation = self._variations.pop(variation_id, None)
        if variation is None:
            return None

        self._unindex_sku(variation.sku, variation_id)
        parent = self._products.get(variation.parent_id)
        if parent is not None and variation_id in parent.children:
            parent.children.remove(variation_id)

        logger.debug(
            "Variation removed",
            variation_id=variation_id,
            parent_id=variation.parent_id,
        )
        return variation

    # ------------------------------------------------------------------
    # SKU index
    # ------------------------------------------------------------------

    def find_sku_owner(self, sku: str) -> int | None:
        """Get the id of the product or variation holding a SKU."""
        if not sku:
            return None
        return self._by_sku.get(sku)

    def _index_sku(self, sku: str, owner_id: int) -> None:
        if sku:
            self._by_sku[sku] = owner_id

    def _unindex_sku(self, sku: str, owner_id: int) -> None:
        if sku and self._by_sku.get(sku) == owner_id:
            del self._by_sku[sku]

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    @property
    def product_count(self) -> int:
        """Number of stored products."""
        return len(self._products)

    @property
    def variation_count(self) -> int:
        """Number of stored variations."""
        return len(self._variations)


# Global store instance
_catalog_store: CatalogStore | None = None


def get_catalog_store() -> CatalogStore:
    """Get catalog store singleton."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = CatalogStore()
    return _catalog_store


def reset_catalog_store() -> None:
    """Reset catalog store (for testing)."""
    global _catalog_store
    _catalog_store = CatalogStore()
