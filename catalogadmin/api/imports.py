"""Import API endpoints.

Runs bulk and test imports from the configured source tree. Imports run
inside the request; large trees should go through
``scripts/import_products.py`` instead.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from catalogadmin.api.dependencies import get_service
from catalogadmin.api.schemas import ErrorResponse, ImportSummaryResponse, TestImportRequest
from catalogadmin.catalog.service import CatalogService

router = APIRouter(prefix="/imports", tags=["Imports"])


@router.post(
    "/all",
    response_model=ImportSummaryResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Import all products",
    description="Import every category/subcategory bucket of the source tree.",
)
async def import_all(
    service: Annotated[CatalogService, Depends(get_service)],
    dry_run: Annotated[bool, Query(description="Validate without writing")] = False,
) -> ImportSummaryResponse:
    """Run a full import.

    Args:
        service: Catalog service.
        dry_run: Validate and count without writing.

    Returns:
        Import summary with bounded error samples.
    """
    summary = await service.import_all(dry_run=dry_run)
    return ImportSummaryResponse(**summary.to_dict(service.config.import_error_sample_size))


@router.post(
    "/test",
    response_model=ImportSummaryResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Test import",
    description="Import the first records of a single bucket.",
)
async def test_import(
    request: TestImportRequest,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ImportSummaryResponse:
    """Run a test import against one bucket.

    Raises:
        ValidationError: If a category or subcategory name is not a plain
            directory name.
        SourceReadError: If the bucket's records file cannot be read.
    """
    summary = await service.test_import(
        request.category,
        request.subcategory,
        limit=request.limit,
        dry_run=request.dry_run,
    )
    return ImportSummaryResponse(**summary.to_dict(service.config.import_error_sample_size))
