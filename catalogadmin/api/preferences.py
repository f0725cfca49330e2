"""Preference API endpoints.

Provides endpoints for browsing and editing dietary preferences.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from catalogadmin.api.dependencies import get_service
from catalogadmin.api.schemas import (
    ErrorResponse,
    IngredientMapRequest,
    PreferenceInput,
    PreferenceSchema,
    PreferencesPageResponse,
    PreferenceTypesResponse,
)
from catalogadmin.catalog.service import CatalogService
from catalogadmin.domain.models import Preference

router = APIRouter(prefix="/preferences", tags=["Preferences"])


def preference_to_response(preference: Preference) -> PreferenceSchema:
    """Convert Preference to response schema."""
    return PreferenceSchema(**preference.to_dict())


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=PreferencesPageResponse,
    responses={
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="List preferences",
)
async def list_preferences(
    service: Annotated[CatalogService, Depends(get_service)],
    search: Annotated[str | None, Query(description="Name or type id substring")] = None,
    type: Annotated[str | None, Query(description="Exact preference type")] = None,
    cursor: Annotated[str | None, Query(description="Token from the previous page")] = None,
    page_size: Annotated[int | None, Query(ge=1, description="Items per page")] = None,
) -> PreferencesPageResponse:
    """Get one page of preferences, optionally searched and filtered by type."""
    page = await service.fetch_preferences_page(
        page_size=page_size,
        cursor=cursor,
        search_term=search,
        filter_type=type,
    )
    return PreferencesPageResponse(
        items=[preference_to_response(p) for p in page.items],
        next_cursor=page.next_cursor,
        has_more=page.has_more,
        total=page.total,
    )


@router.get(
    "/types",
    response_model=PreferenceTypesResponse,
    summary="List preference types",
)
async def list_types(
    service: Annotated[CatalogService, Depends(get_service)],
) -> PreferenceTypesResponse:
    """Get distinct preference types for the type filter."""
    return PreferenceTypesResponse(types=await service.get_preference_types())


@router.post(
    "",
    response_model=PreferenceSchema,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
    summary="Create preference",
)
async def create_preference(
    payload: PreferenceInput,
    service: Annotated[CatalogService, Depends(get_service)],
) -> PreferenceSchema:
    """Create a preference from form data."""
    preference = await service.add_preference(payload.model_dump())
    return preference_to_response(preference)


@router.post(
    "/ingredient-map",
    response_model=PreferenceSchema,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
    summary="Create preference from ingredient map",
    description='Create a preference from an uploaded {"<typeId>": [ingredients]} object.',
)
async def create_preference_from_map(
    request: IngredientMapRequest,
    service: Annotated[CatalogService, Depends(get_service)],
) -> PreferenceSchema:
    """Create a preference from an ingredient map upload."""
    preference = await service.add_preference_from_ingredient_map(
        request.name, request.type, request.payload
    )
    return preference_to_response(preference)


@router.get(
    "/{preference_id}",
    response_model=PreferenceSchema,
    responses={404: {"model": ErrorResponse}},
    summary="Get preference",
)
async def get_preference(
    preference_id: str,
    service: Annotated[CatalogService, Depends(get_service)],
) -> PreferenceSchema:
    """Get a preference by ID."""
    return preference_to_response(await service.get_preference(preference_id))


@router.put(
    "/{preference_id}",
    response_model=PreferenceSchema,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Replace preference",
)
async def update_preference(
    preference_id: str,
    payload: PreferenceInput,
    service: Annotated[CatalogService, Depends(get_service)],
) -> PreferenceSchema:
    """Replace a preference with new form data."""
    preference = await service.update_preference(preference_id, payload.model_dump())
    return preference_to_response(preference)


@router.delete(
    "/{preference_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete preference",
)
async def delete_preference(
    preference_id: str,
    service: Annotated[CatalogService, Depends(get_service)],
) -> None:
    """Delete a preference."""
    await service.delete_preference(preference_id)
