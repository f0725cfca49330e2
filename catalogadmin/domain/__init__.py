"""Domain layer - canonical records and catalog errors.

Example usage:
    from catalogadmin.domain import Product, ValidationError

    product = Product(name="Cola", brand="ACME", ingredients=["water"])
"""

from catalogadmin.domain.exceptions import (
    DomainError,
    FetchError,
    NotFoundError,
    SourceReadError,
    SourceUnavailableError,
    ValidationError,
    WriteError,
)
from catalogadmin.domain.models import (
    CategoryLevel,
    CategoryNode,
    DerivedCategory,
    PaginatedResult,
    Preference,
    Product,
)

__all__ = [
    # Models
    "CategoryLevel",
    "CategoryNode",
    "DerivedCategory",
    "PaginatedResult",
    "Preference",
    "Product",
    # Exceptions
    "DomainError",
    "FetchError",
    "NotFoundError",
    "SourceReadError",
    "SourceUnavailableError",
    "ValidationError",
    "WriteError",
]
