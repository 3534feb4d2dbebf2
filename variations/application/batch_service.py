"""Batch orchestration for variations.

Applies a mixed set of updates, deletions and creations in one request.
Items are independent: each goes through the single-variation operation,
and a failing item is reported in place without undoing or stopping the
others.
"""

from dataclasses import dataclass
from typing import Any, Union

import structlog

from variations.application.auth import AuthorizationGate, Capability, Identity
from variations.application.payloads import (
    VariationInput,
    parse_batch_payload,
    parse_variation_input,
)
from variations.application.variation_service import (
    VariationService,
    VariationView,
    get_variation_service,
)
from variations.domain.exceptions import (
    BatchTooLargeError,
    DomainError,
    InvalidPayloadError,
)
from variations.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Batch Data Transfer Objects
# ============================================================================


@dataclass
class BatchOperations:
    """Requested operations, grouped by kind.

    A kind that is None was not requested and is omitted from the result.
    """

    create: list[Any] | None = None
    update: list[Any] | None = None
    delete: list[Any] | None = None

    @property
    def item_count(self) -> int:
        """Total number of items across all kinds."""
        return sum(len(items or []) for items in (self.create, self.update, self.delete))

    @classmethod
    def from_payload(cls, data: Any) -> "BatchOperations":
        """Build operations from a raw batch body.

        Raises:
            InvalidPayloadError: If the body or one of its groups is not a list.
        """
        payload = parse_batch_payload(data)
        return cls(create=payload.create, update=payload.update, delete=payload.delete)


@dataclass
class BatchItemError:
    """Failure of a single batch item."""

    id: int | None
    error: DomainError


BatchItem = Union[VariationView, BatchItemError]


@dataclass
class BatchResult:
    """Per-item outcomes, in request order within each kind."""

    create: list[BatchItem] | None = None
    update: list[BatchItem] | None = None
    delete: list[BatchItem] | None = None

    @property
    def failures(self) -> int:
        """Number of failed items."""
        return sum(
            isinstance(item, BatchItemError)
            for items in (self.create, self.update, self.delete)
            for item in items or []
        )


# ============================================================================
# Batch Service
# ============================================================================


class BatchService:
    """Applies batch requests through the variation service.

    Processing order is update, delete, create: existing ids are handled
    before new ones are introduced. There is no transaction; items that
    succeeded stay committed when a later item fails.
    """

    def __init__(
        self,
        variation_service: VariationService | None = None,
        gate: AuthorizationGate | None = None,
        batch_limit: int | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            variation_service: Single-item operations.
            gate: Authorization gate.
            batch_limit: Maximum items per request.
            request_id: Request ID for correlation.
        """
        self.variations = variation_service or get_variation_service(request_id=request_id)
        self.gate = gate or self.variations.gate
        self.batch_limit = batch_limit or settings.batch_limit
        self.request_id = request_id

    async def apply(
        self, identity: Identity, product_id: int, operations: BatchOperations | Any
    ) -> BatchResult:
        """Apply a batch to a product's variations.

        Args:
            identity: Caller identity.
            product_id: Parent product id.
            operations: Items to update, delete and create, or the raw
                request body holding them.

        Returns:
            BatchResult with one entry per submitted item.

        Raises:
            UnauthorizedError: If the caller may not edit products.
            InvalidPayloadError: If the body is not a batch object.
            BatchTooLargeError: If the batch exceeds the item limit.
            ProductNotFoundError: If the parent is not a variable product.
        """
        self.gate.require(identity, Capability.EDIT_PRODUCTS, "batch manipulate variations")

        if not isinstance(operations, BatchOperations):
            operations = BatchOperations.from_payload(operations)

        if operations.item_count > self.batch_limit:
            raise BatchTooLargeError(operations.item_count, self.batch_limit)

        self.variations.get_parent(product_id)

        result = BatchResult()

        if operations.update is not None:
            result.update = [
                await self._update_item(identity, product_id, item)
                for item in operations.update
            ]

        if operations.delete is not None:
            result.delete = [
                await self._delete_item(identity, product_id, variation_id)
                for variation_id in operations.delete
            ]

        if operations.create is not None:
            result.create = [
                await self._create_item(identity, product_id, item)
                for item in operations.create
            ]

        logger.info(
            "Batch applied",
            product_id=product_id,
            updated=len(operations.update or []),
            deleted=len(operations.delete or []),
            created=len(operations.create or []),
            failures=result.failures,
            request_id=self.request_id,
        )
        return result

    async def _update_item(
        self, identity: Identity, product_id: int, item: Any
    ) -> BatchItem:
        raw_id = item.get("id") if isinstance(item, dict) else None
        try:
            payload = _parse_item(item)
            if not payload.id:
                raise InvalidPayloadError(
                    "Update items require a variation id",
                    errors=[{"field": "id", "message": "Field required"}],
                )
            return await self.variations.update_variation(
                identity, product_id, payload.id, payload
            )
        except DomainError as e:
            return self._failed(raw_id, e, "update")

    async def _delete_item(
        self, identity: Identity, product_id: int, raw_id: Any
    ) -> BatchItem:
        try:
            variation_id = _parse_item_id(raw_id)
            return await self.variations.delete_variation(
                identity, product_id, variation_id, force=True
            )
        except DomainError as e:
            return self._failed(raw_id, e, "delete")

    async def _create_item(
        self, identity: Identity, product_id: int, item: Any
    ) -> BatchItem:
        try:
            payload = _parse_item(item)
            return await self.variations.create_variation(identity, product_id, payload)
        except DomainError as e:
            return self._failed(None, e, "create")

    def _failed(self, item_id: Any, error: DomainError, kind: str) -> BatchItemError:
        logger.warning(
            "Batch item failed",
            kind=kind,
            item_id=item_id,
            error_code=error.error_code,
            request_id=self.request_id,
        )
        return BatchItemError(
            id=item_id if _is_int(item_id) else None,
            error=error,
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_item(item: Any) -> VariationInput:
    """Validate one create or update item, which must be an object."""
    if not isinstance(item, dict):
        raise InvalidPayloadError(
            "Batch items must be objects",
            errors=[{"field": None, "message": f"Expected an object, got {type(item).__name__}"}],
        )
    return parse_variation_input(item)


def _parse_item_id(value: Any) -> int:
    """Validate one delete item, which must be a variation id."""
    if _is_int(value):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise InvalidPayloadError(
        "Delete items must be variation ids",
        errors=[{"field": None, "message": f"Invalid variation id: {value!r}"}],
    )


def get_batch_service(request_id: str | None = None) -> BatchService:
    """Create a batch service bound to the shared store."""
    return BatchService(request_id=request_id)
