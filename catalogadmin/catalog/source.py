"""Import source tree.

Product records live in a two-level directory tree::

    data_dir/
        <category>/
            <subcategory>/
                products.json   # JSON array of loosely structured objects

Blocking file-system calls run in a worker thread so the event loop only
suspends on them.
"""

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from catalogadmin.domain.exceptions import (
    SourceReadError,
    SourceUnavailableError,
    ValidationError,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class Bucket:
    """A (category, subcategory) pair and its records file."""

    category: str
    subcategory: str
    path: Path

    @property
    def key(self) -> str:
        """Get the ``category/subcategory`` display key."""
        return f"{self.category}/{self.subcategory}"


class SourceTree:
    """Reader for a category/subcategory records tree.

    Example usage:
        tree = SourceTree(Path("public/data"))
        for bucket in await tree.list_buckets():
            records = await tree.read_records(bucket)
    """

    def __init__(
        self,
        root: Path,
        records_file: str = "products.json",
        ignored_entries: list[str] | None = None,
    ) -> None:
        """Initialize source tree.

        Args:
            root: Data directory.
            records_file: Records file name inside each subcategory.
            ignored_entries: Entry names skipped while listing.
        """
        self.root = Path(root)
        self.records_file = records_file
        self.ignored_entries = set(ignored_entries or [".DS_Store"])

    def _subdirectories(self, path: Path) -> list[Path]:
        return sorted(
            (
                entry for entry in path.iterdir()
                if entry.name not in self.ignored_entries and entry.is_dir()
            ),
            key=lambda entry: entry.name,
        )

    def _list_buckets(self) -> list[Bucket]:
        try:
            categories = self._subdirectories(self.root)
        except OSError as e:
            raise SourceUnavailableError(str(self.root), e.strerror or str(e)) from e

        buckets: list[Bucket] = []
        for category in categories:
            try:
                subcategories = self._subdirectories(category)
            except OSError as e:
                logger.error(
                    "Cannot list category directory, skipping",
                    category=category.name,
                    error=str(e),
                )
                continue
            for subcategory in subcategories:
                buckets.append(
                    Bucket(
                        category=category.name,
                        subcategory=subcategory.name,
                        path=subcategory / self.records_file,
                    )
                )
        return buckets

    async def list_buckets(self) -> list[Bucket]:
        """List every bucket in name order.

        Returns:
            Buckets sorted by category then subcategory.

        Raises:
            SourceUnavailableError: If the data directory itself cannot be
                listed.
        """
        return await asyncio.to_thread(self._list_buckets)

    def bucket(self, category: str, subcategory: str) -> Bucket:
        """Get the bucket for an explicit category and subcategory.

        Raises:
            ValidationError: If either name is not a single directory
                name inside the data directory.
        """
        for field_name, name in (("category", category), ("subcategory", subcategory)):
            if name in ("", ".", "..") or "\\" in name or Path(name).name != name:
                raise ValidationError(f"Invalid {field_name} name: {name!r}", field=field_name)
        return Bucket(
            category=category,
            subcategory=subcategory,
            path=self.root / category / subcategory / self.records_file,
        )

    def _read_records(self, bucket: Bucket) -> list[Any]:
        try:
            content = bucket.path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise SourceReadError(str(bucket.path), e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise SourceReadError(str(bucket.path), "not valid UTF-8") from e
        try:
            records = json.loads(content)
        except ValueError as e:
            raise SourceReadError(str(bucket.path), f"invalid JSON: {e}") from e
        if not isinstance(records, list):
            raise SourceReadError(str(bucket.path), "expected a JSON array")
        return records

    async def read_records(self, bucket: Bucket) -> list[Any]:
        """Read a bucket's raw records.

        Raises:
            SourceReadError: If the file is missing, unreadable or not a
                JSON array.
        """
        return await asyncio.to_thread(self._read_records, bucket)
