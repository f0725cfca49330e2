#!/usr/bin/env python3
"""Bulk product import script.

Imports products from a category/subcategory data directory into the
document store.

Usage:
    python scripts/import_products.py --dry-run
    python scripts/import_products.py --data-dir public/data
    python scripts/import_products.py --category Snacks --subcategory Chips --limit 5
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalogadmin.catalog.importer import ImportSummary
from catalogadmin.catalog.service import CatalogService
from catalogadmin.domain.exceptions import SourceReadError, ValidationError
from catalogadmin.infrastructure.config import settings
from catalogadmin.infrastructure.logging_config import configure_logging
from catalogadmin.infrastructure.sql_store import SqlDocumentStore
from catalogadmin.infrastructure.store import DocumentStore, InMemoryDocumentStore


async def open_store(use_memory: bool) -> DocumentStore:
    """Open the configured store, creating tables if they don't exist."""
    if use_memory or settings.store_backend == "memory":
        return InMemoryDocumentStore()
    store = SqlDocumentStore.from_url(settings.database_url)
    await store.create_schema()
    return store


def print_summary(summary: ImportSummary) -> None:
    """Print per-bucket results and totals."""
    output = summary.to_dict(settings.import_error_sample_size)

    for key, result in output["results"].items():
        print(f"{key}")
        print(f"  ✓ Imported: {result['success']}")
        print(f"  ✗ Failed: {result['failed']}")
        for error in result["errors"]:
            print(f"    - {error}")
        if result["more_errors"]:
            print(f"    ... and {result['more_errors']} more errors")
        print()

    for key, reason in output["skipped_buckets"].items():
        print(f"{key}")
        print(f"  ✗ Skipped: {reason}")
        print()

    totals = output["summary"]
    print("=" * 60)
    print(f"Found: {totals['total_found']}")
    print(f"Succeeded: {totals['total_succeeded']}")
    print(f"Failed: {totals['total_failed']}")
    print(f"Success rate: {totals['success_rate'] * 100:.1f}%")
    print("=" * 60)


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Import products from a category/subcategory data directory",
    )
    parser.add_argument(
        "--data-dir",
        default=settings.import_data_dir,
        help=f"Data directory (default: {settings.import_data_dir})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and count records without writing",
    )
    parser.add_argument(
        "--category",
        help="Test import: category directory",
    )
    parser.add_argument(
        "--subcategory",
        help="Test import: subcategory directory",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=5,
        help="Test import: records to process (default: 5)",
    )
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Use an in-memory store instead of the database",
    )

    args = parser.parse_args()
    if bool(args.category) != bool(args.subcategory):
        parser.error("--category and --subcategory must be given together")

    configure_logging(settings.log_level, json_output=settings.log_json)

    print("=" * 60)
    print("Catalog Product Import")
    print("=" * 60)
    print(f"Data directory: {args.data_dir}")
    print(f"Dry run: {args.dry_run}")
    print()

    store = await open_store(args.memory)
    service = CatalogService(store, settings, data_dir=args.data_dir)
    try:
        if args.category:
            print(f"Test importing {args.category}/{args.subcategory} (limit {args.limit})...")
            summary = await service.test_import(
                args.category,
                args.subcategory,
                limit=args.limit,
                dry_run=args.dry_run,
            )
        else:
            print("Importing all products...")
            summary = await service.import_all(dry_run=args.dry_run)
        print()
    except (SourceReadError, ValidationError) as e:
        print(f"  ✗ Error: {e.message}")
        return 1
    finally:
        await store.close()

    print_summary(summary)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
