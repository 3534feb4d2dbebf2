"""Stock policy resolution for variations.

A variation either manages its own stock, manages none, or defers to its
parent product. A variation that asks for no stock management while its
parent manages stock is placed under the parent's control: clients see
``"parent"`` rather than the ``false`` they submitted.
"""

from dataclasses import dataclass

from variations.domain.entities import Product, Variation
from variations.domain.value_objects import ManageStock, StockStatus


@dataclass(frozen=True)
class StockSnapshot:
    """Effective stock fields of a variation at one point in time."""

    manage_stock: ManageStock
    stock_quantity: int | None
    stock_status: StockStatus

    @property
    def backordered(self) -> bool:
        """Whether the variation is currently on backorder."""
        return self.stock_status is StockStatus.ON_BACKORDER


def resolve_manage_stock(variation: Variation, parent: Product) -> ManageStock:
    """Compute the effective stock management of a variation.

    Args:
        variation: Variation with the client-requested flag.
        parent: Its parent product.

    Returns:
        YES when the variation manages its own stock, PARENT when it is
        unmanaged but the parent manages stock, NO otherwise.
    """
    if variation.manage_stock:
        return ManageStock.YES
    if parent.manage_stock:
        return ManageStock.PARENT
    return ManageStock.NO


def apply_stock_policy(variation: Variation, parent: Product) -> ManageStock:
    """Resolve stock management and clear the variation's own quantity
    when it no longer governs.

    Returns:
        The resolved ManageStock value.
    """
    resolved = resolve_manage_stock(variation, parent)
    if resolved is not ManageStock.YES:
        variation.stock_quantity = None
    return resolved


def stock_snapshot(variation: Variation, parent: Product) -> StockSnapshot:
    """Effective stock fields for a representation.

    Managed stock derives its status from the governing quantity; an
    unmanaged variation reports its stored status.
    """
    resolved = resolve_manage_stock(variation, parent)

    if resolved is ManageStock.NO:
        return StockSnapshot(
            manage_stock=resolved,
            stock_quantity=None,
            stock_status=variation.stock_status,
        )

    quantity = (
        variation.stock_quantity if resolved is ManageStock.YES else parent.stock_quantity
    )
    if quantity is None or quantity > 0:
        status = StockStatus.IN_STOCK
    elif variation.backorders.allowed:
        status = StockStatus.ON_BACKORDER
    else:
        status = StockStatus.OUT_OF_STOCK

    return StockSnapshot(manage_stock=resolved, stock_quantity=quantity, stock_status=status)
