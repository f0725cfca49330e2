"""API schemas for the catalog admin API.

Pydantic models for request/response validation and serialization.
Request bodies for products and preferences are accepted as loosely typed
objects and normalized by the sanitizer, so their schemas only describe
the expected shape.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from catalogadmin.domain.models import CategoryLevel


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class CursorPage(BaseModel):
    """Base cursor-paginated response."""

    next_cursor: str | None = Field(
        default=None, description="Opaque token for the next page"
    )
    has_more: bool = Field(..., description="Whether there are more pages")
    total: int | None = Field(
        default=None, description="Matching item count, when known"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductSchema(BaseModel):
    """Canonical product."""

    id: str = Field(..., description="Document identifier")
    name: str = Field(..., description="Product name")
    brand: str = Field(..., description="Brand name")
    barcode: str = Field(..., description="Barcode or synthetic import barcode")
    image_url: str = Field(default="", description="Product image URL")
    ingredients: list[str] = Field(
        default_factory=list, description="Lower-cased ingredients"
    )
    alergen_warning: list[str] = Field(
        default_factory=list, description="Lower-cased allergen warnings"
    )
    net_weight: str = Field(default="", description="Net weight")
    nutritional_info: str = Field(default="", description="Nutrition table text")
    manufacturer: str = Field(default="", description="Manufacturer")
    origin: str = Field(default="", description="Country of origin")
    category: str = Field(default="", description="Category name")
    subcategory: str = Field(default="", description="Subcategory name")


class ProductInput(BaseModel):
    """Product form data.

    Any field may arrive as a string, number, list or object; values are
    normalized before validation.
    """

    model_config = {"extra": "allow"}

    name: Any = Field(default=None, description="Product name (required)")
    brand: Any = Field(default=None, description="Brand name (required)")
    barcode: Any = Field(
        default=None, description="Barcode, generated when blank"
    )
    ingredients: Any = Field(default=None, description="Ingredient list")


class ProductsPageResponse(CursorPage):
    """One page of products."""

    items: list[ProductSchema] = Field(..., description="Products on this page")


class BrandsResponse(BaseModel):
    """Distinct brand names."""

    brands: list[str] = Field(..., description="Sorted brand names")


# ============================================================================
# Preference Schemas
# ============================================================================


class PreferenceSchema(BaseModel):
    """Dietary preference."""

    id: str = Field(..., description="Document identifier")
    name: str = Field(..., description="Display name")
    type: str = Field(default="", description="Preference type tag")
    type_id: str = Field(..., description="Machine-safe slug")
    ingredients: list[str] = Field(
        default_factory=list, description="Flagged ingredients"
    )


class PreferenceInput(BaseModel):
    """Preference form data."""

    model_config = {"extra": "allow"}

    name: Any = Field(default=None, description="Display name (required)")
    type: Any = Field(default=None, description="Preference type tag")
    typeId: Any = Field(default=None, description="Slug, derived from name when blank")
    ingredients: Any = Field(default=None, description="Ingredient list")


class IngredientMapRequest(BaseModel):
    """Preference created from an uploaded ``{"<typeId>": [...]}`` file."""

    name: str = Field(..., description="Display name")
    type: str = Field(default="", description="Preference type tag")
    payload: dict[str, Any] = Field(
        ..., description="Object whose first key maps to an ingredient array"
    )


class PreferencesPageResponse(CursorPage):
    """One page of preferences."""

    items: list[PreferenceSchema] = Field(..., description="Preferences on this page")


class PreferenceTypesResponse(BaseModel):
    """Distinct preference types."""

    types: list[str] = Field(..., description="Sorted preference types")


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryRequest(BaseModel):
    """Request to create or replace a category node."""

    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    level: CategoryLevel = Field(
        default=CategoryLevel.CATEGORY, description="Taxonomy level"
    )
    parent_id: str | None = Field(
        default=None, description="Parent category id, required for subcategories"
    )


class CategoryResponse(BaseModel):
    """Persisted category node."""

    id: str = Field(..., description="Document identifier")
    name: str = Field(..., description="Display name")
    level: CategoryLevel = Field(..., description="Taxonomy level")
    parent_id: str | None = Field(default=None, description="Parent category id")
    created_at: datetime | None = Field(default=None, description="When created")
    updated_at: datetime | None = Field(default=None, description="When last updated")


class CategoryListResponse(BaseModel):
    """Persisted category nodes."""

    items: list[CategoryResponse] = Field(..., description="Nodes ordered by name")


class DerivedCategorySchema(BaseModel):
    """Category derived from product fields."""

    name: str = Field(..., description="Category name")
    product_count: int = Field(..., description="Products in this category")
    subcategories: list[str] = Field(
        default_factory=list, description="Subcategory names"
    )


class DerivedCategoryListResponse(BaseModel):
    """Derived categories ordered by product count."""

    items: list[DerivedCategorySchema] = Field(..., description="Derived categories")


# ============================================================================
# Import Schemas
# ============================================================================


class TestImportRequest(BaseModel):
    """Request to import the first records of one bucket."""

    __test__ = False

    category: str = Field(..., min_length=1, description="Category directory")
    subcategory: str = Field(..., min_length=1, description="Subcategory directory")
    limit: int = Field(default=5, ge=1, le=1000, description="Records to process")
    dry_run: bool = Field(default=False, description="Validate without writing")


class ImportTotals(BaseModel):
    """Aggregate import counters."""

    total_found: int
    total_succeeded: int
    total_failed: int
    success_rate: float
    dry_run: bool


class BucketResultSchema(BaseModel):
    """Counters for one bucket with a bounded error sample."""

    success: int
    failed: int
    errors: list[str] = Field(default_factory=list, description="First error messages")
    more_errors: int = Field(default=0, description="Errors omitted from the sample")


class ImportSummaryResponse(BaseModel):
    """Import run outcome."""

    summary: ImportTotals
    results: dict[str, BucketResultSchema] = Field(
        default_factory=dict, description="Per-bucket results keyed category/subcategory"
    )
    skipped_buckets: dict[str, str] = Field(
        default_factory=dict, description="Unreadable buckets with reason"
    )
