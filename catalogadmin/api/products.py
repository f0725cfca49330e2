"""Product API endpoints.

Provides endpoints for browsing, searching and editing products.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, status

from catalogadmin.api.dependencies import get_service
from catalogadmin.api.schemas import (
    BrandsResponse,
    ErrorResponse,
    ProductInput,
    ProductSchema,
    ProductsPageResponse,
)
from catalogadmin.catalog.service import CatalogService
from catalogadmin.domain.models import PaginatedResult, Product

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Converters
# ============================================================================


def product_to_response(product: Product) -> ProductSchema:
    """Convert Product to response schema."""
    return ProductSchema(**product.to_dict())


def page_to_response(page: PaginatedResult[Product]) -> ProductsPageResponse:
    """Convert a product page to response schema."""
    return ProductsPageResponse(
        items=[product_to_response(p) for p in page.items],
        next_cursor=page.next_cursor,
        has_more=page.has_more,
        total=page.total,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductsPageResponse,
    responses={
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="List products",
    description="Get one page of products, optionally searched and filtered by brand.",
)
async def list_products(
    service: Annotated[CatalogService, Depends(get_service)],
    search: Annotated[str | None, Query(description="Name, brand or barcode substring")] = None,
    brand: Annotated[str | None, Query(description="Exact brand")] = None,
    cursor: Annotated[str | None, Query(description="Token from the previous page")] = None,
    page_size: Annotated[int | None, Query(ge=1, description="Items per page")] = None,
) -> ProductsPageResponse:
    """List products.

    Args:
        service: Catalog service.
        search: Case-insensitive search term.
        brand: Brand filter.
        cursor: Pagination cursor.
        page_size: Items per page, capped by the server.

    Returns:
        One page of products.
    """
    page = await service.fetch_products_page(
        page_size=page_size,
        cursor=cursor,
        search_term=search,
        filter_brand=brand,
    )
    return page_to_response(page)


@router.get(
    "/brands",
    response_model=BrandsResponse,
    summary="List brands",
)
async def list_brands(
    service: Annotated[CatalogService, Depends(get_service)],
) -> BrandsResponse:
    """Get distinct brand names for the brand filter."""
    return BrandsResponse(brands=await service.get_brands())


@router.post(
    "/sanitize",
    response_model=ProductSchema,
    summary="Preview sanitization",
    description="Normalize a raw product record without storing it.",
)
async def sanitize_product(
    service: Annotated[CatalogService, Depends(get_service)],
    raw: Annotated[Any, Body()],
) -> ProductSchema:
    """Normalize a raw record.

    Args:
        service: Catalog service.
        raw: Any JSON value.

    Returns:
        Sanitized product.
    """
    return product_to_response(service.sanitize(raw))


@router.post(
    "",
    response_model=ProductSchema,
    status_code=status.HTTP_201_CREATED,
    responses={
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Create product",
)
async def create_product(
    payload: ProductInput,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductSchema:
    """Create a product from form data.

    Raises:
        ValidationError: If name or brand is blank.
    """
    product = await service.add_product(payload.model_dump())
    return product_to_response(product)


@router.get(
    "/{product_id}",
    response_model=ProductSchema,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(
    product_id: str,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductSchema:
    """Get a product by ID."""
    return product_to_response(await service.get_product(product_id))


@router.put(
    "/{product_id}",
    response_model=ProductSchema,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Replace product",
)
async def update_product(
    product_id: str,
    payload: ProductInput,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductSchema:
    """Replace a product with new form data."""
    product = await service.update_product(product_id, payload.model_dump())
    return product_to_response(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product",
)
async def delete_product(
    product_id: str,
    service: Annotated[CatalogService, Depends(get_service)],
) -> None:
    """Delete a product."""
    await service.delete_product(product_id)
