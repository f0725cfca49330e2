"""Tests for bulk product import."""

import re
from pathlib import Path

import pytest

from catalogadmin.catalog.importer import (
    INVALID_PRODUCT_MESSAGE,
    BulkImporter,
    ImportSummary,
    generate_barcode,
)
from catalogadmin.catalog.repository import ProductRepository
from catalogadmin.catalog.source import SourceTree
from catalogadmin.domain.exceptions import (
    SourceReadError,
    SourceUnavailableError,
    ValidationError,
)
from catalogadmin.infrastructure.store import InMemoryDocumentStore
from tests.helpers import FailingStore, write_bucket


def make_importer(store: InMemoryDocumentStore, root: Path, **kwargs) -> BulkImporter:
    """Create an importer over a data directory."""
    return BulkImporter(SourceTree(root), ProductRepository(store), **kwargs)


class TestBarcodes:
    """Tests for synthetic barcodes."""

    def test_format(self) -> None:
        """Synthetic barcodes carry prefix, milliseconds and a random suffix."""
        assert re.fullmatch(r"IMPORT_\d{13}_[a-z0-9]{9}", generate_barcode())
        assert generate_barcode("TEST").startswith("TEST_")

    def test_distinct(self) -> None:
        """Consecutive barcodes differ."""
        assert len({generate_barcode() for _ in range(50)}) == 50


class TestImportAll:
    """Tests for full imports."""

    @pytest.mark.asyncio
    async def test_imports_valid_records(self, store: InMemoryDocumentStore, data_dir: Path) -> None:
        """Valid records are stored and invalid ones counted per bucket."""
        summary = await make_importer(store, data_dir).import_all()

        assert list(summary.buckets) == ["Beverages/Soft Drinks", "Snacks/Chips"]
        assert summary.total_found == 4
        assert summary.total_succeeded == 3
        assert summary.total_failed == 1
        assert summary.success_rate == pytest.approx(0.75)

        drinks = summary.buckets["Beverages/Soft Drinks"]
        assert (drinks.success, drinks.failed) == (2, 1)
        assert drinks.errors == [INVALID_PRODUCT_MESSAGE]
        assert await store.count("products") == 3

    @pytest.mark.asyncio
    async def test_stored_products_are_canonical(
        self, store: InMemoryDocumentStore, data_dir: Path
    ) -> None:
        """Stored products take their category from the directory tree."""
        await make_importer(store, data_dir).import_all()
        products = {p.name: p for p in await ProductRepository(store).find_all()}

        cola = products["Cola"]
        assert cola.brand == "ACME"
        assert cola.ingredients == ["water", "sugar", "co2"]
        assert cola.category == "Beverages"
        assert cola.subcategory == "Soft Drinks"
        assert cola.barcode.startswith("IMPORT_")

        assert products["Lemonade"].barcode == "4006381333931"
        assert products["Paprika Chips"].barcode == "5000112637922"

    @pytest.mark.asyncio
    async def test_dry_run_does_not_write(self, store: InMemoryDocumentStore, data_dir: Path) -> None:
        """A dry run counts like a real run but writes nothing."""
        summary = await make_importer(store, data_dir).import_all(dry_run=True)

        assert summary.dry_run is True
        assert summary.total_succeeded == 3
        assert summary.total_failed == 1
        assert await store.count("products") == 0

    @pytest.mark.asyncio
    async def test_write_failures_do_not_stop_import(self, data_dir: Path) -> None:
        """A rejected write fails one record and the run continues."""
        store = FailingStore(failing_names={"Lemonade"})
        summary = await make_importer(store, data_dir).import_all()

        drinks = summary.buckets["Beverages/Soft Drinks"]
        assert drinks.success == 1
        assert drinks.failed == 2
        assert "Lemonade: permission denied" in drinks.errors
        assert summary.buckets["Snacks/Chips"].success == 1
        assert summary.total_found == summary.total_succeeded + summary.total_failed
        assert await store.count("products") == 2

    @pytest.mark.asyncio
    async def test_unreadable_bucket_is_skipped(
        self, store: InMemoryDocumentStore, data_dir: Path
    ) -> None:
        """Malformed bucket files are reported and other buckets still import."""
        write_bucket(data_dir, "Bakery", "Bread", "{not json")
        write_bucket(data_dir, "Dairy", "Milk", {"name": "not a list"})

        summary = await make_importer(store, data_dir).import_all()

        assert set(summary.skipped_buckets) == {"Bakery/Bread", "Dairy/Milk"}
        assert "expected a JSON array" in summary.skipped_buckets["Dairy/Milk"]
        assert summary.total_succeeded == 3

    @pytest.mark.asyncio
    async def test_missing_records_file_is_skipped(
        self, store: InMemoryDocumentStore, data_dir: Path
    ) -> None:
        """A subcategory without a records file is skipped."""
        (data_dir / "Frozen" / "Pizza").mkdir(parents=True)

        summary = await make_importer(store, data_dir).import_all()

        assert "Frozen/Pizza" in summary.skipped_buckets
        assert "Frozen/Pizza" not in summary.buckets

    @pytest.mark.asyncio
    async def test_byte_order_mark_file(self, store: InMemoryDocumentStore, tmp_path: Path) -> None:
        """Records files saved with a byte-order mark are readable."""
        path = write_bucket(tmp_path, "Spreads", "Honey", [])
        path.write_bytes(b"\xef\xbb\xbf" + b'[{"name": "Honey", "brand": "Bee"}]')

        summary = await make_importer(store, tmp_path).import_all()

        assert summary.total_succeeded == 1

    @pytest.mark.asyncio
    async def test_missing_data_dir(self, store: InMemoryDocumentStore, tmp_path: Path) -> None:
        """An unreadable data directory aborts the run."""
        with pytest.raises(SourceUnavailableError):
            await make_importer(store, tmp_path / "missing").import_all()

    @pytest.mark.asyncio
    async def test_empty_data_dir(self, store: InMemoryDocumentStore, tmp_path: Path) -> None:
        """An empty data directory gives an empty summary."""
        summary = await make_importer(store, tmp_path).import_all()
        assert summary.total_found == 0
        assert summary.success_rate == 0.0


class TestTestImport:
    """Tests for single-bucket test imports."""

    @pytest.mark.asyncio
    async def test_limit(self, store: InMemoryDocumentStore, tmp_path: Path) -> None:
        """Only the first records are processed."""
        write_bucket(
            tmp_path,
            "Snacks",
            "Nuts",
            [{"name": f"Nut {i}", "brand": "Shell"} for i in range(10)],
        )

        summary = await make_importer(store, tmp_path).test_import("Snacks", "Nuts", limit=3)

        assert summary.total_found == 3
        names = [p.name for p in await ProductRepository(store).find_all()]
        assert names == ["Nut 0", "Nut 1", "Nut 2"]

    @pytest.mark.asyncio
    async def test_barcode_prefix(self, store: InMemoryDocumentStore, data_dir: Path) -> None:
        """Test imports mark generated barcodes."""
        await make_importer(store, data_dir).test_import("Beverages", "Soft Drinks")
        products = {p.name: p for p in await ProductRepository(store).find_all()}
        assert products["Cola"].barcode.startswith("TEST_")

    @pytest.mark.asyncio
    async def test_dry_run(self, store: InMemoryDocumentStore, data_dir: Path) -> None:
        """Dry test imports write nothing."""
        summary = await make_importer(store, data_dir).test_import(
            "Beverages", "Soft Drinks", limit=5, dry_run=True
        )
        assert summary.total_succeeded == 2
        assert await store.count("products") == 0

    @pytest.mark.asyncio
    async def test_missing_bucket(self, store: InMemoryDocumentStore, data_dir: Path) -> None:
        """A missing bucket is an error for test imports."""
        with pytest.raises(SourceReadError) as exc_info:
            await make_importer(store, data_dir).test_import("Nope", "Nothing")
        assert exc_info.value.path.endswith("products.json")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("category", "subcategory"),
        [("..", "secret"), ("Snacks", "../../secret"), ("/etc", "x"), ("A\\..", "B"), ("", "Chips")],
    )
    async def test_names_must_stay_inside_data_dir(
        self, store: InMemoryDocumentStore, tmp_path: Path, category: str, subcategory: str
    ) -> None:
        """Bucket names are single directory names under the data directory."""
        data = tmp_path / "data"
        data.mkdir()
        write_bucket(tmp_path, "secret", "x", [{"name": "Leaked", "brand": "Outside"}])

        with pytest.raises(ValidationError):
            await make_importer(store, data).test_import(category, subcategory)
        assert await store.count("products") == 0

    @pytest.mark.asyncio
    async def test_parent_directory_not_importable(
        self, store: InMemoryDocumentStore, tmp_path: Path
    ) -> None:
        """A records file beside the data directory cannot be imported."""
        data = tmp_path / "data"
        data.mkdir()
        write_bucket(tmp_path, "secret", "x", [{"name": "Leaked", "brand": "Outside"}])

        with pytest.raises(ValidationError) as exc_info:
            await make_importer(store, data).test_import("..", "secret/x")
        assert exc_info.value.field == "category"
        assert await store.count("products") == 0


class TestErrorReporting:
    """Tests for bounded error output."""

    @pytest.mark.asyncio
    async def test_long_messages_truncated(self, tmp_path: Path) -> None:
        """Error messages are cut to the configured length."""
        long_name = "X" * 500
        write_bucket(tmp_path, "A", "B", [{"name": long_name, "brand": "Y"}])
        store = FailingStore(failing_names={long_name})

        summary = await make_importer(store, tmp_path, error_message_max_length=50).import_all()

        message = summary.buckets["A/B"].errors[0]
        assert len(message) == 50
        assert message.endswith("...")

    @pytest.mark.asyncio
    async def test_error_sample(self, store: InMemoryDocumentStore, tmp_path: Path) -> None:
        """Output keeps the first errors and counts the rest."""
        write_bucket(tmp_path, "A", "B", [{"brand": "No name"}] * 8)

        summary = await make_importer(store, tmp_path).import_all()
        output = summary.to_dict(error_sample_size=5)

        assert output["summary"]["total_failed"] == 8
        assert len(output["results"]["A/B"]["errors"]) == 5
        assert output["results"]["A/B"]["more_errors"] == 3

    def test_summary_to_dict_empty(self) -> None:
        """An empty summary serializes with zero totals."""
        output = ImportSummary().to_dict()
        assert output["summary"]["total_found"] == 0
        assert output["results"] == {}
        assert output["skipped_buckets"] == {}
