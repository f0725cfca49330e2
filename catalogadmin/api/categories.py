"""Category API endpoints.

Provides endpoints for the persisted two-level taxonomy and the taxonomy
derived from product fields.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from catalogadmin.api.dependencies import get_service
from catalogadmin.api.schemas import (
    CategoryListResponse,
    CategoryRequest,
    CategoryResponse,
    DerivedCategoryListResponse,
    DerivedCategorySchema,
    ErrorResponse,
)
from catalogadmin.catalog.service import CatalogService
from catalogadmin.domain.models import CategoryNode, DerivedCategory

router = APIRouter(prefix="/categories", tags=["Categories"])


# ============================================================================
# Converters
# ============================================================================


def category_to_response(node: CategoryNode) -> CategoryResponse:
    """Convert CategoryNode to response schema."""
    return CategoryResponse(
        id=node.id,
        name=node.name,
        level=node.level,
        parent_id=node.parent_id,
        created_at=node.created_at,
        updated_at=node.updated_at,
    )


def derived_to_response(categories: list[DerivedCategory]) -> DerivedCategoryListResponse:
    """Convert derived categories to response schema."""
    return DerivedCategoryListResponse(
        items=[
            DerivedCategorySchema(
                name=c.name,
                product_count=c.product_count,
                subcategories=list(c.subcategories),
            )
            for c in categories
        ]
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=CategoryListResponse,
    summary="List categories",
)
async def list_categories(
    service: Annotated[CatalogService, Depends(get_service)],
) -> CategoryListResponse:
    """Get all persisted category nodes ordered by name."""
    nodes = await service.list_categories()
    return CategoryListResponse(items=[category_to_response(n) for n in nodes])


@router.get(
    "/derived",
    response_model=DerivedCategoryListResponse,
    summary="Derive categories from products",
)
async def derived_categories(
    service: Annotated[CatalogService, Depends(get_service)],
) -> DerivedCategoryListResponse:
    """Group products by their category strings."""
    return derived_to_response(await service.derive_categories())


@router.get(
    "/overview",
    response_model=DerivedCategoryListResponse,
    summary="Category overview",
    description="Derived categories merged with persisted ones by name.",
)
async def category_overview(
    service: Annotated[CatalogService, Depends(get_service)],
) -> DerivedCategoryListResponse:
    """Get derived and persisted categories merged by name."""
    return derived_to_response(await service.category_overview())


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
    summary="Create category",
)
async def create_category(
    request: CategoryRequest,
    service: Annotated[CatalogService, Depends(get_service)],
) -> CategoryResponse:
    """Create a category or subcategory."""
    node = await service.add_category(request.name, request.level, request.parent_id)
    return category_to_response(node)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Replace category",
)
async def update_category(
    category_id: str,
    request: CategoryRequest,
    service: Annotated[CatalogService, Depends(get_service)],
) -> CategoryResponse:
    """Replace a category node, keeping its creation time."""
    node = await service.update_category(
        category_id, request.name, request.level, request.parent_id
    )
    return category_to_response(node)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete category",
    description="Deleting a category also deletes its subcategories.",
)
async def delete_category(
    category_id: str,
    service: Annotated[CatalogService, Depends(get_service)],
) -> None:
    """Delete a category node."""
    await service.delete_category(category_id)
