"""Variation API endpoints.

Provides endpoints for a variable product's variations:
- GET /products/{product_id}/variations - list variations
- POST /products/{product_id}/variations - create a variation
- OPTIONS /products/{product_id}/variations - describe the resource
- POST /products/{product_id}/variations/batch - batch update/delete/create
- GET /products/{product_id}/variations/{id} - variation details
- PUT /products/{product_id}/variations/{id} - partial update
- DELETE /products/{product_id}/variations/{id}?force=true - delete

Domain errors raised by the services are rendered by the application's
exception handlers.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, Response, status

from variations.api.schemas import (
    AttributeSchema,
    BatchDeleteItemSchema,
    BatchItemErrorBody,
    BatchItemErrorSchema,
    BatchResponse,
    DeleteVariationResponse,
    DimensionsSchema,
    DownloadSchema,
    ErrorResponse,
    ImageSchema,
    MetaDataSchema,
    SchemaResponse,
    VariationResponse,
)
from variations.application.auth import Identity
from variations.application.batch_service import (
    BatchItem,
    BatchItemError,
    BatchService,
    get_batch_service,
)
from variations.application.variation_service import (
    VariationFilter,
    VariationService,
    VariationView,
    get_variation_service,
)
from variations.domain.value_objects import StockStatus, format_price
from variations.infrastructure.config import settings

router = APIRouter(prefix="/products/{product_id}/variations", tags=["Variations"])

NAMESPACE = "/products/(?P<product_id>[\\d]+)/variations"

# Bodies are validated by the services after authorization.
RawBody = Annotated[Any, Body(description="Variation fields as a JSON object")]

AUTH_RESPONSES = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_identity(request: Request) -> Identity:
    """Get the caller identity resolved by the identity middleware."""
    return getattr(request.state, "identity", None) or Identity.anonymous()


def get_service(request: Request) -> VariationService:
    """Get variation service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_variation_service(request_id=request_id)


def get_batch(request: Request) -> BatchService:
    """Get batch service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_batch_service(request_id=request_id)


# ============================================================================
# Converters
# ============================================================================


def variation_to_response(view: VariationView) -> VariationResponse:
    """Convert a VariationView to its API representation."""
    variation = view.variation
    stock = view.stock

    return VariationResponse(
        id=variation.id,
        date_created=variation.date_created,
        date_created_gmt=variation.date_created,
        date_modified=variation.date_modified,
        date_modified_gmt=variation.date_modified,
        description=variation.description,
        permalink=(
            f"{settings.store_url.rstrip('/')}/?product={variation.parent_id}"
            f"&variation={variation.id}"
        ),
        sku=variation.sku,
        price=format_price(variation.active_price()),
        regular_price=format_price(variation.regular_price),
        sale_price=format_price(variation.sale_price),
        date_on_sale_from=variation.date_on_sale_from,
        date_on_sale_from_gmt=variation.date_on_sale_from,
        date_on_sale_to=variation.date_on_sale_to,
        date_on_sale_to_gmt=variation.date_on_sale_to,
        on_sale=variation.is_on_sale(),
        status=variation.status,
        purchasable=variation.is_purchasable(stock.stock_status),
        virtual=variation.virtual,
        downloadable=variation.downloadable,
        downloads=[DownloadSchema(**d.to_dict()) for d in variation.downloads],
        download_limit=variation.download_limit,
        download_expiry=variation.download_expiry,
        tax_status=variation.tax_status,
        tax_class=variation.tax_class,
        manage_stock=stock.manage_stock.to_json(),
        stock_quantity=stock.stock_quantity,
        stock_status=stock.stock_status,
        backorders=variation.backorders,
        backorders_allowed=variation.backorders.allowed,
        backordered=stock.backordered,
        low_stock_amount=variation.low_stock_amount,
        weight=variation.weight,
        dimensions=DimensionsSchema(**variation.dimensions.to_dict()),
        shipping_class=variation.shipping_class,
        shipping_class_id=variation.shipping_class_id,
        image=ImageSchema(**variation.image.to_dict()) if variation.image else None,
        attributes=[AttributeSchema(**a.to_dict()) for a in variation.attributes],
        menu_order=variation.menu_order,
        meta_data=[MetaDataSchema(**m.to_dict()) for m in variation.meta_data],
    )


def batch_error_to_schema(item: BatchItemError) -> BatchItemErrorSchema:
    """Convert a failed batch item."""
    return BatchItemErrorSchema(
        id=item.id,
        error=BatchItemErrorBody(**item.error.to_dict()),
    )


def batch_item_to_schema(item: BatchItem) -> VariationResponse | BatchItemErrorSchema:
    """Convert a created or updated batch item."""
    if isinstance(item, BatchItemError):
        return batch_error_to_schema(item)
    return variation_to_response(item)


def batch_delete_to_schema(item: BatchItem) -> BatchDeleteItemSchema | BatchItemErrorSchema:
    """Convert a deleted batch item."""
    if isinstance(item, BatchItemError):
        return batch_error_to_schema(item)
    return BatchDeleteItemSchema(previous=variation_to_response(item))


# ============================================================================
# Collection Endpoints
# ============================================================================


@router.get(
    "",
    response_model=list[VariationResponse],
    responses={**AUTH_RESPONSES, 404: {"model": ErrorResponse}},
    summary="List variations",
    description="List a variable product's variations ordered by menu order.",
)
async def list_variations(
    product_id: int,
    response: Response,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[VariationService, Depends(get_service)],
    page: int = Query(default=1, ge=1, description="Page number"),
    per_page: int | None = Query(default=None, ge=1, le=100, description="Items per page"),
    sku: str | None = Query(default=None, description="Filter by exact SKU"),
    stock_status: StockStatus | None = Query(default=None, description="Filter by stock status"),
    on_sale: bool | None = Query(default=None, description="Filter by sale state"),
) -> list[VariationResponse]:
    """List variations with pagination and filtering.

    Totals are returned in the X-Total and X-Total-Pages headers.
    """
    result = await service.list_variations(
        identity,
        product_id,
        page=page,
        per_page=per_page,
        filters=VariationFilter(sku=sku, stock_status=stock_status, on_sale=on_sale),
    )

    response.headers["X-Total"] = str(result.total)
    response.headers["X-Total-Pages"] = str(result.total_pages)
    return [variation_to_response(view) for view in result.items]


@router.post(
    "",
    response_model=VariationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **AUTH_RESPONSES,
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Create variation",
    description="Create a variation of a variable product.",
)
async def create_variation(
    product_id: int,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[VariationService, Depends(get_service)],
    payload: RawBody = None,
) -> VariationResponse:
    """Create a variation.

    Args:
        product_id: Parent product id.
        payload: Variation fields.

    Returns:
        The created variation with its assigned id.
    """
    view = await service.create_variation(identity, product_id, payload)
    return variation_to_response(view)


@router.options(
    "",
    response_model=SchemaResponse,
    summary="Describe variations",
    description="JSON schema of the variation resource.",
)
async def describe_variations(product_id: int) -> SchemaResponse:
    """Describe the variation resource.

    The parent id is not checked; the schema is the same for every product.
    """
    schema = VariationResponse.model_json_schema()
    schema["title"] = "product_variation"
    return SchemaResponse(
        namespace=NAMESPACE,
        methods=["GET", "POST", "OPTIONS"],
        schema=schema,
    )


@router.api_route(
    "/batch",
    methods=["POST", "PUT", "PATCH"],
    response_model=BatchResponse,
    response_model_exclude_unset=True,
    responses={
        **AUTH_RESPONSES,
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
    },
    summary="Batch variations",
    description="Update, delete and create variations in one request.",
)
async def batch_variations(
    product_id: int,
    identity: Annotated[Identity, Depends(get_identity)],
    batch: Annotated[BatchService, Depends(get_batch)],
    body: Annotated[
        Any, Body(description="Object with optional create, update and delete lists")
    ] = None,
) -> BatchResponse:
    """Apply a batch of variation operations.

    Individual items may fail without failing the request; their
    entries carry an ``error`` object instead of a variation.
    """
    result = await batch.apply(identity, product_id, body)

    groups = {}
    if result.update is not None:
        groups["update"] = [batch_item_to_schema(item) for item in result.update]
    if result.delete is not None:
        groups["delete"] = [batch_delete_to_schema(item) for item in result.delete]
    if result.create is not None:
        groups["create"] = [batch_item_to_schema(item) for item in result.create]

    return BatchResponse(**groups)


# ============================================================================
# Item Endpoints
# ============================================================================


@router.get(
    "/{variation_id}",
    response_model=VariationResponse,
    responses={**AUTH_RESPONSES, 404: {"model": ErrorResponse}},
    summary="Get variation",
    description="Get a single variation of a product.",
)
async def get_variation(
    product_id: int,
    variation_id: int,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[VariationService, Depends(get_service)],
) -> VariationResponse:
    """Get a variation by id."""
    view = await service.get_variation(identity, product_id, variation_id)
    return variation_to_response(view)


@router.api_route(
    "/{variation_id}",
    methods=["PUT", "PATCH"],
    response_model=VariationResponse,
    responses={
        **AUTH_RESPONSES,
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Update variation",
    description="Partially update a variation; omitted fields are unchanged.",
)
async def update_variation(
    product_id: int,
    variation_id: int,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[VariationService, Depends(get_service)],
    payload: RawBody = None,
) -> VariationResponse:
    """Update a variation.

    Args:
        product_id: Parent product id.
        variation_id: Variation id.
        payload: Fields to change.

    Returns:
        The updated variation.
    """
    view = await service.update_variation(identity, product_id, variation_id, payload)
    return variation_to_response(view)


@router.delete(
    "/{variation_id}",
    response_model=DeleteVariationResponse,
    responses={
        **AUTH_RESPONSES,
        404: {"model": ErrorResponse},
        501: {"model": ErrorResponse},
    },
    summary="Delete variation",
    description="Permanently delete a variation. Requires force=true.",
)
async def delete_variation(
    product_id: int,
    variation_id: int,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[VariationService, Depends(get_service)],
    force: bool = Query(default=False, description="Must be true; variations cannot be trashed"),
) -> DeleteVariationResponse:
    """Delete a variation and return its last state."""
    previous = await service.delete_variation(identity, product_id, variation_id, force=force)
    return DeleteVariationResponse(previous=variation_to_response(previous))
