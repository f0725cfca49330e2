"""Catalog administration core.

Sanitizes loosely structured product records, persists products,
preferences and categories through the document store, pages through
collections with opaque cursors and bulk-imports products from a
category/subcategory source tree.
"""

from catalogadmin.catalog.categories import CategoryRegistry
from catalogadmin.catalog.importer import BulkImporter, BucketResult, ImportSummary
from catalogadmin.catalog.pagination import Cursor, PageOptions, PaginationEngine
from catalogadmin.catalog.repository import (
    CategoryRepository,
    PreferenceRepository,
    ProductRepository,
)
from catalogadmin.catalog.sanitizer import flatten, sanitize, sanitize_preference
from catalogadmin.catalog.service import CatalogService
from catalogadmin.catalog.source import Bucket, SourceTree

__all__ = [
    # Sanitizer
    "flatten",
    "sanitize",
    "sanitize_preference",
    # Repositories
    "CategoryRepository",
    "PreferenceRepository",
    "ProductRepository",
    # Pagination
    "Cursor",
    "PageOptions",
    "PaginationEngine",
    # Import
    "Bucket",
    "BucketResult",
    "BulkImporter",
    "ImportSummary",
    "SourceTree",
    # Categories
    "CategoryRegistry",
    # Service
    "CatalogService",
]
