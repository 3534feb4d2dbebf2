"""Sample catalog builders.

Creates the products and variations used by local development and the
test suite. The variable product mirrors the classic "dummy variable
product": a size attribute with two variations, small and large.
"""

from decimal import Decimal

from variations.catalog.repository import CatalogStore
from variations.domain.entities import Product, Variation
from variations.domain.value_objects import (
    AttributeSelection,
    ProductAttribute,
    ProductType,
)


# ============================================================================
# Constants
# ============================================================================

SIZE_ATTRIBUTE = ProductAttribute(
    id=1,
    name="size",
    slug="pa_size",
    options=("small", "large", "huge"),
    variation=True,
)

# (option, regular price, sale price)
DUMMY_VARIATIONS = [
    ("small", Decimal("10"), None),
    ("large", Decimal("15"), Decimal("12")),
]


# ============================================================================
# Builders
# ============================================================================


def create_simple_product(store: CatalogStore, sku: str = "DUMMY SKU") -> Product:
    """Create a simple product with no variations.

    Args:
        store: Catalog store to write to.
        sku: Product SKU.

    Returns:
        The stored product.
    """
    return store.add_product(
        Product(name="Dummy Product", type=ProductType.SIMPLE, sku=sku)
    )


def create_variable_product(
    store: CatalogStore,
    sku: str = "DUMMY SKU VARIABLE",
    manage_stock: bool = False,
    stock_quantity: int | None = None,
) -> Product:
    """Create a variable product with small and large variations.

    Args:
        store: Catalog store to write to.
        sku: Parent SKU; variation SKUs append the upper-cased size.
        manage_stock: Whether the parent tracks stock.
        stock_quantity: Parent quantity when stock is tracked.

    Returns:
        The stored parent, with ``children`` in creation order.
    """
    product = store.add_product(
        Product(
            name="Dummy Variable Product",
            type=ProductType.VARIABLE,
            sku=sku,
            manage_stock=manage_stock,
            stock_quantity=stock_quantity if manage_stock else None,
            attributes=[SIZE_ATTRIBUTE],
        )
    )

    for option, regular_price, sale_price in DUMMY_VARIATIONS:
        store.add_variation(
            Variation(
                parent_id=product.id,
                sku=f"{sku} {option.upper()}",
                regular_price=regular_price,
                sale_price=sale_price,
                attributes=[
                    AttributeSelection(
                        id=SIZE_ATTRIBUTE.id,
                        name=SIZE_ATTRIBUTE.name,
                        option=option,
                    )
                ],
            )
        )

    return product


def seed_demo_catalog(store: CatalogStore) -> list[Product]:
    """Populate an empty store for local development.

    Returns:
        The created products.
    """
    return [
        create_variable_product(store),
        create_variable_product(
            store, sku="DUMMY SKU STOCKED", manage_stock=True, stock_quantity=25
        ),
        create_simple_product(store),
    ]
