"""Raw record sanitizer.

Source JSON files are scraped by hand and inconsistently shaped: names under
a BOM-prefixed key, ingredient lists nested several levels deep, objects
where strings are expected. ``sanitize`` turns any such record into a
canonical ``Product`` that the store will accept.

Every function here is total: malformed input degrades to empty strings or
empty lists, nothing raises.
"""

import json
import re
from collections.abc import Mapping
from typing import Any

from catalogadmin.domain.models import Preference, Product

# Spreadsheet exports prefix the first column header with a byte-order mark.
BOM_NAME_KEY = "\ufeffname"

PRODUCT_STRING_FIELDS = (
    "brand",
    "barcode",
    "image_url",
    "net_weight",
    "nutritional_info",
    "manufacturer",
    "origin",
    "category",
    "subcategory",
)


def ensure_string(value: Any) -> str:
    """Coerce any JSON value to a string.

    Args:
        value: Raw JSON value.

    Returns:
        ``""`` for None, the value itself for strings, elements joined
        with ``", "`` for lists, compact JSON text for objects and
        ``str()`` for other scalars.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(ensure_string(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def flatten(value: Any) -> list[str]:
    """Flatten arbitrarily nested lists into one list of strings.

    Leaf order is preserved left to right. Object elements become JSON
    text and None elements are dropped. A non-list value is wrapped as a
    single element.

    Args:
        value: Raw JSON value.

    Returns:
        Flat list of strings.
    """
    if value is None or value == "" or value is False:
        return []
    if not isinstance(value, (list, tuple)):
        return [ensure_string(value)]

    flattened: list[str] = []
    for item in value:
        if isinstance(item, (list, tuple)):
            flattened.extend(flatten(item))
        elif item is not None:
            flattened.append(ensure_string(item))
    return flattened


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    """Get the first key whose value is neither missing nor empty."""
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def sanitize(raw: Any) -> Product:
    """Normalize one untrusted product record.

    Args:
        raw: Decoded JSON value, normally an object.

    Returns:
        Canonical product without an id. Barcodes are not generated here.
    """
    if not isinstance(raw, Mapping):
        raw = {}

    fields = {name: ensure_string(raw.get(name)) for name in PRODUCT_STRING_FIELDS}
    return Product(
        name=ensure_string(_first_present(raw, "name", BOM_NAME_KEY)),
        ingredients=[item.lower() for item in flatten(raw.get("ingredients"))],
        alergen_warning=[
            item.lower()
            for item in flatten(_first_present(raw, "alergen_warning", "allergen_warning"))
        ],
        **fields,
    )


# ============================================================================
# Preferences
# ============================================================================


def slugify(name: str) -> str:
    """Build a machine-safe type id from a display name.

    Args:
        name: Display name, e.g. "Candida Unfriendly".

    Returns:
        Lower-case ASCII slug, e.g. "candida_unfriendly".
    """
    slug = re.sub(r"[^a-z0-9\s]", "", name.lower())
    return re.sub(r"\s+", "_", slug.strip())


def sanitize_preference(raw: Any) -> Preference:
    """Normalize one untrusted preference record.

    Ingredient case is kept as entered. A blank type id is derived from
    the name.

    Args:
        raw: Decoded JSON value.

    Returns:
        Canonical preference without an id.
    """
    if not isinstance(raw, Mapping):
        raw = {}

    name = ensure_string(_first_present(raw, "name", BOM_NAME_KEY)).strip()
    type_id = ensure_string(_first_present(raw, "typeId", "type_id")).strip()
    return Preference(
        name=name,
        type=ensure_string(raw.get("type")).strip(),
        type_id=type_id or slugify(name),
        ingredients=[item.strip() for item in flatten(raw.get("ingredients")) if item.strip()],
    )


def preference_from_ingredient_map(
    name: str,
    type_: str,
    payload: Any,
) -> Preference | None:
    """Build a preference from a ``{"<typeId>": [ingredients]}`` object.

    Only the first key of the object is used, matching the admin form's
    JSON upload.

    Args:
        name: Display name.
        type_: Preference type tag.
        payload: Decoded JSON object.

    Returns:
        Preference, or None when the payload has no list under its first key.
    """
    if not isinstance(payload, Mapping) or not payload:
        return None

    type_id = next(iter(payload))
    ingredients = payload[type_id]
    if not isinstance(ingredients, (list, tuple)):
        return None

    return sanitize_preference(
        {"name": name, "type": type_, "typeId": type_id, "ingredients": ingredients}
    )
