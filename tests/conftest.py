"""Shared fixtures for catalog tests."""

from pathlib import Path

import pytest

from catalogadmin.catalog.service import CatalogService
from catalogadmin.infrastructure.config import Settings
from catalogadmin.infrastructure.store import InMemoryDocumentStore
from tests.helpers import write_bucket


@pytest.fixture
def config() -> Settings:
    """Create settings for tests."""
    return Settings(
        store_backend="memory",
        default_page_size=20,
        max_page_size=100,
        import_error_sample_size=5,
        log_json=False,
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Create an empty in-memory store."""
    return InMemoryDocumentStore()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Create an import data directory with two buckets."""
    root = tmp_path / "data"
    write_bucket(
        root,
        "Beverages",
        "Soft Drinks",
        [
            {
                "\ufeffname": "Cola",
                "brand": "ACME",
                "ingredients": ["Water", ["Sugar", "CO2"]],
            },
            {"name": "Lemonade", "brand": "Fizz", "barcode": 4006381333931},
            {"name": "", "brand": "Nobody"},
        ],
    )
    write_bucket(
        root,
        "Snacks",
        "Chips",
        [
            {"name": "Paprika Chips", "brand": "Crunch", "barcode": "5000112637922"},
        ],
    )
    (root / ".DS_Store").write_text("", encoding="utf-8")
    return root


@pytest.fixture
def service(store: InMemoryDocumentStore, config: Settings, data_dir: Path) -> CatalogService:
    """Create a catalog service over the in-memory store."""
    return CatalogService(store, config, data_dir=data_dir)
