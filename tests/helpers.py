"""Test helpers shared across test packages."""

import json
from pathlib import Path
from typing import Any

from catalogadmin.infrastructure.store import InMemoryDocumentStore, StoreError


def write_bucket(root: Path, category: str, subcategory: str, records: Any) -> Path:
    """Write a records file for one bucket.

    Args:
        root: Data directory.
        category: Category directory name.
        subcategory: Subcategory directory name.
        records: JSON value, or raw text written as-is.

    Returns:
        Path of the written file.
    """
    directory = root / category / subcategory
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "products.json"
    if isinstance(records, str):
        path.write_text(records, encoding="utf-8")
    else:
        path.write_text(json.dumps(records), encoding="utf-8")
    return path


class FailingStore(InMemoryDocumentStore):
    """In-memory store that rejects writes for chosen product names."""

    def __init__(self, failing_names: set[str] | None = None, fail_reads: bool = False) -> None:
        super().__init__()
        self.failing_names = failing_names or set()
        self.fail_reads = fail_reads
        self.create_calls = 0

    async def create(self, collection: str, data: dict[str, Any]) -> str:
        self.create_calls += 1
        if data.get("name") in self.failing_names:
            raise StoreError("permission denied", collection)
        return await super().create(collection, data)

    async def query(self, collection, order_by, start_after=None, limit=None):
        if self.fail_reads:
            raise StoreError("store unavailable", collection)
        return await super().query(collection, order_by, start_after, limit)

    async def count(self, collection: str) -> int:
        if self.fail_reads:
            raise StoreError("store unavailable", collection)
        return await super().count(collection)
