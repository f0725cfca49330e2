"""Store record converters.

One pair of free functions per record type. ``*_to_record`` builds the
document written to the store and enforces the store's structural rules;
``*_from_record`` reads a stored document back and never fails, so
documents written before a field existed still load with defaults.

Store field names follow the document format (``typeId``, ``parentId``,
``createdAt``), record attributes follow Python naming.
"""

from datetime import datetime
from typing import Any

from catalogadmin.catalog.sanitizer import ensure_string
from catalogadmin.domain.exceptions import ValidationError
from catalogadmin.domain.models import CategoryLevel, CategoryNode, Preference, Product

PRODUCT_STRING_FIELDS = (
    "barcode",
    "brand",
    "image_url",
    "manufacturer",
    "name",
    "net_weight",
    "nutritional_info",
    "origin",
    "category",
    "subcategory",
)
PRODUCT_LIST_FIELDS = ("alergen_warning", "ingredients")


def _string_list(value: Any, lower: bool = False) -> list[Any]:
    """Coerce list elements to strings, leaving nested lists in place."""
    if not isinstance(value, (list, tuple)):
        return []
    items: list[Any] = []
    for item in value:
        if isinstance(item, (list, tuple)):
            items.append(list(item))
            continue
        text = ensure_string(item)
        items.append(text.lower() if lower else text)
    return items


def _reject_nested(record: dict[str, Any]) -> None:
    for key, value in record.items():
        if isinstance(value, list) and any(isinstance(item, list) for item in value):
            raise ValidationError(
                f"Nested arrays not allowed in store records. Field: {key}",
                field=key,
            )


def _read_string(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else ensure_string(value)


def _read_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [ensure_string(item) for item in value]


def _read_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


# ============================================================================
# Products
# ============================================================================


def product_to_record(product: Product) -> dict[str, Any]:
    """Build the stored document for a product.

    Args:
        product: Canonical product.

    Returns:
        Flat document without the id.

    Raises:
        ValidationError: If a list field holds a nested list.
    """
    record: dict[str, Any] = {
        key: ensure_string(getattr(product, key, "")) for key in PRODUCT_STRING_FIELDS
    }
    for key in PRODUCT_LIST_FIELDS:
        record[key] = _string_list(getattr(product, key, None), lower=True)

    _reject_nested(record)
    return record


def product_from_record(data: dict[str, Any], doc_id: str) -> Product:
    """Read a stored product document.

    Args:
        data: Stored fields, possibly partial.
        doc_id: Document id.

    Returns:
        Fully populated product.
    """
    if not isinstance(data, dict):
        data = {}
    return Product(
        id=doc_id,
        ingredients=_read_list(data, "ingredients"),
        alergen_warning=_read_list(data, "alergen_warning"),
        **{key: _read_string(data, key) for key in PRODUCT_STRING_FIELDS},
    )


# ============================================================================
# Preferences
# ============================================================================


def preference_to_record(preference: Preference) -> dict[str, Any]:
    """Build the stored document for a preference.

    Raises:
        ValidationError: If the name is blank or ingredients are nested.
    """
    name = ensure_string(preference.name).strip()
    if not name:
        raise ValidationError("Preference name is required", field="name")

    record: dict[str, Any] = {
        "name": name,
        "type": ensure_string(preference.type),
        "typeId": ensure_string(preference.type_id),
        "ingredients": _string_list(preference.ingredients),
    }
    _reject_nested(record)
    return record


def preference_from_record(data: dict[str, Any], doc_id: str) -> Preference:
    """Read a stored preference document."""
    if not isinstance(data, dict):
        data = {}
    return Preference(
        id=doc_id,
        name=_read_string(data, "name"),
        type=_read_string(data, "type"),
        type_id=_read_string(data, "typeId"),
        ingredients=_read_list(data, "ingredients"),
    )


# ============================================================================
# Categories
# ============================================================================


def category_to_record(node: CategoryNode) -> dict[str, Any]:
    """Build the stored document for a category node.

    Args:
        node: Category or subcategory.

    Returns:
        Flat document; ``parentId`` only present for subcategories.

    Raises:
        ValidationError: If the name is blank, the level is unknown, a
            subcategory has no parent or a category has one.
    """
    name = ensure_string(node.name).strip()
    if not name:
        raise ValidationError("Category name is required", field="name")

    try:
        level = CategoryLevel(node.level)
    except ValueError as e:
        raise ValidationError(f"Unknown category level: {node.level}", field="level") from e

    record: dict[str, Any] = {"name": name, "level": level.value}
    if level is CategoryLevel.SUBCATEGORY:
        if not node.parent_id:
            raise ValidationError(
                "Subcategory requires a parent category", field="parentId"
            )
        record["parentId"] = node.parent_id
    elif node.parent_id:
        raise ValidationError(
            "Top-level category cannot have a parent", field="parentId"
        )

    if node.created_at is not None:
        record["createdAt"] = node.created_at.isoformat()
    if node.updated_at is not None:
        record["updatedAt"] = node.updated_at.isoformat()
    return record


def category_from_record(data: dict[str, Any], doc_id: str) -> CategoryNode:
    """Read a stored category document.

    Unknown levels read as top-level categories.
    """
    if not isinstance(data, dict):
        data = {}
    try:
        level = CategoryLevel(data.get("level"))
    except ValueError:
        level = CategoryLevel.CATEGORY

    parent_id = _read_string(data, "parentId") or None
    return CategoryNode(
        id=doc_id,
        name=_read_string(data, "name"),
        level=level,
        parent_id=parent_id if level is CategoryLevel.SUBCATEGORY else None,
        created_at=_read_datetime(data.get("createdAt")),
        updated_at=_read_datetime(data.get("updatedAt")),
    )
