"""Canonical catalog records.

Plain dataclasses shared by every layer. They carry no persistence logic;
``catalogadmin.catalog.converters`` maps them to and from store documents.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class CategoryLevel(str, Enum):
    """Depth of a node in the two-level taxonomy."""

    CATEGORY = "category"
    SUBCATEGORY = "subcategory"


@dataclass
class Product:
    """Canonical food product.

    Attributes:
        id: Store-assigned document id (empty until persisted).
        name: Product name.
        brand: Brand name.
        barcode: EAN/UPC barcode, or a synthetic import barcode.
        image_url: Product image URL.
        ingredients: Lower-cased ingredient names, in label order.
        alergen_warning: Lower-cased allergen warnings.
        net_weight: Net weight as printed on the label.
        nutritional_info: Free-form nutrition table text.
        manufacturer: Manufacturer name.
        origin: Country of origin.
        category: Top-level category name.
        subcategory: Subcategory name.
    """

    name: str = ""
    brand: str = ""
    barcode: str = ""
    image_url: str = ""
    ingredients: list[str] = field(default_factory=list)
    alergen_warning: list[str] = field(default_factory=list)
    net_weight: str = ""
    nutritional_info: str = ""
    manufacturer: str = ""
    origin: str = ""
    category: str = ""
    subcategory: str = ""
    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation including the id.
        """
        return asdict(self)


@dataclass
class Preference:
    """Dietary preference or allergy tag set.

    Attributes:
        id: Store-assigned document id.
        name: Display name, e.g. "Candida".
        type: Free-form tag such as "diet" or "allergy".
        type_id: Machine-safe slug, e.g. "candida_unfriendly".
        ingredients: Ingredient names this preference flags.
    """

    name: str = ""
    type: str = ""
    type_id: str = ""
    ingredients: list[str] = field(default_factory=list)
    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class CategoryNode:
    """Persisted category or subcategory.

    Attributes:
        id: Store-assigned document id.
        name: Display name.
        level: Taxonomy level.
        parent_id: Parent category id, only for subcategories.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    name: str
    level: CategoryLevel = CategoryLevel.CATEGORY
    parent_id: str | None = None
    id: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class DerivedCategory:
    """Category view synthesized from product ``category`` fields."""

    name: str
    product_count: int = 0
    subcategories: list[str] = field(default_factory=list)


@dataclass
class PaginatedResult(Generic[T]):
    """One page of a cursor-based traversal.

    Attributes:
        items: Records on this page, in sort order.
        next_cursor: Token for the following page, None on the last page.
        has_more: Whether another page exists.
        total: Matching record count, when known.
    """

    items: list[T]
    next_cursor: str | None = None
    has_more: bool = False
    total: int | None = None
