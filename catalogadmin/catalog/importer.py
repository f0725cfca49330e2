"""Bulk product import.

Walks the category/subcategory source tree, sanitizes every record and
writes accepted products one by one. Failures are recorded per bucket and
never stop the run; only an unreadable data directory aborts it.

Buckets and records are processed sequentially so error messages stay
attributable to a deterministic bucket order. Parallelizing writes would
need a bound on in-flight writes and must keep per-bucket attribution.
"""

import random
import string
import time
from dataclasses import dataclass, field
from typing import Any

import structlog

from catalogadmin.catalog.repository import ProductRepository
from catalogadmin.catalog.sanitizer import sanitize
from catalogadmin.catalog.source import Bucket, SourceTree
from catalogadmin.domain.exceptions import SourceReadError, ValidationError, WriteError
from catalogadmin.domain.models import Product

logger = structlog.get_logger()

INVALID_PRODUCT_MESSAGE = "Invalid product: missing name or brand"

_BARCODE_ALPHABET = string.ascii_lowercase + string.digits


def generate_barcode(prefix: str = "IMPORT") -> str:
    """Generate a synthetic barcode for a product without one.

    Wall-clock milliseconds plus a short random suffix. Nothing checks the
    store for collisions, so uniqueness is likely but not guaranteed.

    Args:
        prefix: Marks where the barcode came from.

    Returns:
        Barcode such as ``IMPORT_1718000000000_k3j9x0a2b``.
    """
    suffix = "".join(random.choices(_BARCODE_ALPHABET, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def is_importable(product: Product) -> bool:
    """Check the accept predicate: non-blank name and brand."""
    return bool(product.name.strip()) and bool(product.brand.strip())


# ============================================================================
# Results
# ============================================================================


@dataclass
class BucketResult:
    """Outcome counters for one bucket.

    Attributes:
        success: Records written (or accepted, in a dry run).
        failed: Records rejected or failed on write.
        errors: Every failure message, in record order.
    """

    success: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def found(self) -> int:
        """Records processed in this bucket."""
        return self.success + self.failed

    def error_sample(self, limit: int) -> list[str]:
        """Get the first ``limit`` error messages."""
        return self.errors[:limit]


@dataclass
class ImportSummary:
    """Aggregate outcome of an import run.

    Attributes:
        dry_run: Whether writes were skipped.
        buckets: Per-bucket results keyed ``category/subcategory``.
        skipped_buckets: Buckets whose source could not be read, with reason.
    """

    dry_run: bool = False
    buckets: dict[str, BucketResult] = field(default_factory=dict)
    skipped_buckets: dict[str, str] = field(default_factory=dict)

    @property
    def total_found(self) -> int:
        """Records read across all buckets."""
        return sum(result.found for result in self.buckets.values())

    @property
    def total_succeeded(self) -> int:
        """Successful records across all buckets."""
        return sum(result.success for result in self.buckets.values())

    @property
    def total_failed(self) -> int:
        """Failed records across all buckets."""
        return sum(result.failed for result in self.buckets.values())

    @property
    def success_rate(self) -> float:
        """Succeeded over found, 0.0 when nothing was found."""
        found = self.total_found
        return self.total_succeeded / found if found > 0 else 0.0

    def bucket(self, key: str) -> BucketResult:
        """Get or create the result for a bucket key."""
        if key not in self.buckets:
            self.buckets[key] = BucketResult()
        return self.buckets[key]

    def to_dict(self, error_sample_size: int = 5) -> dict[str, Any]:
        """Convert to a bounded dictionary for API and CLI output.

        Args:
            error_sample_size: Error messages kept per bucket.

        Returns:
            Summary totals and per-bucket counters with capped errors.
        """
        return {
            "summary": {
                "total_found": self.total_found,
                "total_succeeded": self.total_succeeded,
                "total_failed": self.total_failed,
                "success_rate": round(self.success_rate, 4),
                "dry_run": self.dry_run,
            },
            "results": {
                key: {
                    "success": result.success,
                    "failed": result.failed,
                    "errors": result.error_sample(error_sample_size),
                    "more_errors": max(0, len(result.errors) - error_sample_size),
                }
                for key, result in self.buckets.items()
            },
            "skipped_buckets": dict(self.skipped_buckets),
        }


# ============================================================================
# Orchestrator
# ============================================================================


class BulkImporter:
    """Imports products from a source tree into the product repository.

    Example usage:
        importer = BulkImporter(SourceTree(Path("public/data")), ProductRepository(store))
        summary = await importer.import_all(dry_run=True)
        print(summary.total_succeeded, summary.total_failed)
    """

    def __init__(
        self,
        source: SourceTree,
        products: ProductRepository,
        error_message_max_length: int = 200,
        progress_interval: int = 100,
    ) -> None:
        """Initialize importer.

        Args:
            source: Source tree to read.
            products: Repository to write to.
            error_message_max_length: Truncation length for error messages.
            progress_interval: Log progress every this many records.
        """
        self.source = source
        self.products = products
        self.error_message_max_length = error_message_max_length
        self.progress_interval = max(1, progress_interval)
        self._processed = 0

    async def import_all(self, dry_run: bool = False) -> ImportSummary:
        """Import every bucket in the source tree.

        Args:
            dry_run: Validate and count without writing.

        Returns:
            Aggregate summary.

        Raises:
            SourceUnavailableError: If the data directory cannot be listed.
        """
        logger.info(
            "Starting bulk import",
            data_dir=str(self.source.root),
            dry_run=dry_run,
        )
        self._processed = 0
        summary = ImportSummary(dry_run=dry_run)

        for bucket in await self.source.list_buckets():
            try:
                records = await self.source.read_records(bucket)
            except SourceReadError as e:
                logger.error(
                    "Skipping bucket with unreadable source",
                    bucket=bucket.key,
                    path=e.path,
                    reason=e.reason,
                )
                summary.skipped_buckets[bucket.key] = e.reason
                continue

            logger.info("Processing bucket", bucket=bucket.key, records=len(records))
            result = summary.bucket(bucket.key)
            for raw in records:
                await self._process_record(raw, bucket, result, dry_run, "IMPORT")

        self._log_summary("Bulk import completed", summary)
        return summary

    async def test_import(
        self,
        category: str,
        subcategory: str,
        limit: int = 5,
        dry_run: bool = False,
    ) -> ImportSummary:
        """Import the first ``limit`` records of a single bucket.

        Args:
            category: Category directory name.
            subcategory: Subcategory directory name.
            limit: Records to process.
            dry_run: Validate and count without writing.

        Returns:
            Summary with a single bucket.

        Raises:
            ValidationError: If a name is not a single directory name.
            SourceReadError: If the bucket's source cannot be read.
        """
        bucket = self.source.bucket(category, subcategory)
        records = await self.source.read_records(bucket)
        logger.info(
            "Starting test import",
            bucket=bucket.key,
            found=len(records),
            limit=limit,
            dry_run=dry_run,
        )

        self._processed = 0
        summary = ImportSummary(dry_run=dry_run)
        result = summary.bucket(bucket.key)
        for raw in records[:max(0, limit)]:
            await self._process_record(raw, bucket, result, dry_run, "TEST")

        self._log_summary("Test import completed", summary)
        return summary

    async def _process_record(
        self,
        raw: Any,
        bucket: Bucket,
        result: BucketResult,
        dry_run: bool,
        barcode_prefix: str,
    ) -> None:
        self._processed += 1
        if self._processed % self.progress_interval == 0:
            logger.info("Import progress", processed=self._processed)

        product = sanitize(raw)
        product.category = bucket.category
        product.subcategory = bucket.subcategory

        if not is_importable(product):
            self._record_failure(result, INVALID_PRODUCT_MESSAGE)
            return

        if not product.barcode.strip():
            product.barcode = generate_barcode(barcode_prefix)

        if dry_run:
            result.success += 1
            return

        try:
            await self.products.add(product)
        except (ValidationError, WriteError) as e:
            logger.warning(
                "Failed to import product",
                bucket=bucket.key,
                product=product.name,
                error=e.message,
            )
            self._record_failure(result, f"{product.name}: {e.message}")
            return

        result.success += 1

    def _record_failure(self, result: BucketResult, message: str) -> None:
        result.failed += 1
        if len(message) > self.error_message_max_length:
            message = message[: self.error_message_max_length - 3] + "..."
        result.errors.append(message)

    def _log_summary(self, event: str, summary: ImportSummary) -> None:
        logger.info(
            event,
            total_found=summary.total_found,
            total_succeeded=summary.total_succeeded,
            total_failed=summary.total_failed,
            success_rate=round(summary.success_rate, 4),
            skipped_buckets=len(summary.skipped_buckets),
            dry_run=summary.dry_run,
        )
