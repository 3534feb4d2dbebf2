"""Product Catalog Store.

Provides the in-memory resource store for products and variations, plus
builders for sample catalogs.
"""

from variations.catalog.generator import (
    create_simple_product,
    create_variable_product,
    seed_demo_catalog,
)
from variations.catalog.repository import (
    CatalogStore,
    get_catalog_store,
    reset_catalog_store,
)

__all__ = [
    # Repository
    "CatalogStore",
    "get_catalog_store",
    "reset_catalog_store",
    # Generator
    "create_simple_product",
    "create_variable_product",
    "seed_demo_catalog",
]
