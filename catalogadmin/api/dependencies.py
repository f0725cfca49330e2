"""Shared FastAPI dependencies."""

from fastapi import Request

from catalogadmin.catalog.service import CatalogService


def get_service(request: Request) -> CatalogService:
    """Get the catalog service built at startup."""
    return request.app.state.catalog
