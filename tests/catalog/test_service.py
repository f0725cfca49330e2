"""Tests for the catalog service facade."""

import pytest

from catalogadmin.catalog.service import CatalogService
from catalogadmin.domain.exceptions import NotFoundError, ValidationError, WriteError
from catalogadmin.domain.models import CategoryLevel
from catalogadmin.infrastructure.config import Settings
from tests.helpers import FailingStore


class TestProducts:
    """Tests for interactive product operations."""

    @pytest.mark.asyncio
    async def test_add_sanitizes_and_generates_barcode(self, service: CatalogService) -> None:
        """Form data is sanitized and a blank barcode is generated."""
        product = await service.add_product(
            {"name": "Oat Milk", "brand": "Oaty", "ingredients": "Oats, Water"}
        )

        assert product.id
        assert product.barcode.startswith("MANUAL_")
        assert product.ingredients == ["oats, water"]
        stored = await service.get_product(product.id)
        assert stored == product

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self, service: CatalogService) -> None:
        """Products without a name are rejected before writing."""
        with pytest.raises(ValidationError) as exc_info:
            await service.add_product({"name": "", "brand": "ACME"})
        assert exc_info.value.field == "name"
        assert await service.products.count() == 0

    @pytest.mark.asyncio
    async def test_blank_brand_rejected(self, service: CatalogService) -> None:
        """Products without a brand are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await service.add_product({"name": "Cola", "brand": "   "})
        assert exc_info.value.field == "brand"

    @pytest.mark.asyncio
    async def test_update_and_delete(self, service: CatalogService) -> None:
        """Products can be replaced and deleted."""
        product = await service.add_product({"name": "Cola", "brand": "ACME", "barcode": "1"})

        updated = await service.update_product(
            product.id, {"name": "Cola Light", "brand": "ACME", "barcode": "1"}
        )
        assert updated.name == "Cola Light"
        assert (await service.get_product(product.id)).name == "Cola Light"

        await service.delete_product(product.id)
        with pytest.raises(NotFoundError):
            await service.get_product(product.id)

    @pytest.mark.asyncio
    async def test_update_missing(self, service: CatalogService) -> None:
        """Replacing an unknown product is not found."""
        with pytest.raises(NotFoundError):
            await service.update_product("missing", {"name": "A", "brand": "B"})

    @pytest.mark.asyncio
    async def test_write_failure_is_fatal(self, config: Settings) -> None:
        """Interactive saves surface store rejections."""
        service = CatalogService(FailingStore(failing_names={"Cola"}), config)
        with pytest.raises(WriteError):
            await service.add_product({"name": "Cola", "brand": "ACME"})

    @pytest.mark.asyncio
    async def test_brands(self, service: CatalogService) -> None:
        """Brands are unique, sorted and non-blank."""
        for name, brand in [("A", "Zeta"), ("B", "Alpha"), ("C", "Zeta")]:
            await service.add_product({"name": name, "brand": brand})
        assert await service.get_brands() == ["Alpha", "Zeta"]

    @pytest.mark.asyncio
    async def test_default_page_size(self, service: CatalogService) -> None:
        """Pages default to the configured size."""
        for i in range(25):
            await service.add_product({"name": f"Product {i:02d}", "brand": "ACME"})

        page = await service.fetch_products_page()
        assert len(page.items) == 20
        assert page.has_more is True

        rest = await service.fetch_products_page(cursor=page.next_cursor)
        assert len(rest.items) == 5
        assert rest.has_more is False


class TestPreferences:
    """Tests for preference operations."""

    @pytest.mark.asyncio
    async def test_add_from_form(self, service: CatalogService) -> None:
        """Form data creates a preference with a derived type id."""
        preference = await service.add_preference(
            {"name": "Gluten Free", "type": "diet", "ingredients": ["Wheat", "Barley"]}
        )
        assert preference.type_id == "gluten_free"
        assert (await service.get_preference(preference.id)).ingredients == ["Wheat", "Barley"]
        assert await service.get_preference_types() == ["diet"]

    @pytest.mark.asyncio
    async def test_add_from_ingredient_map(self, service: CatalogService) -> None:
        """Ingredient map uploads use their first key as type id."""
        preference = await service.add_preference_from_ingredient_map(
            "Candida", "diet", {"candida_unfriendly": ["sugar", "yeast"]}
        )
        assert preference.type_id == "candida_unfriendly"

        with pytest.raises(ValidationError):
            await service.add_preference_from_ingredient_map("Bad", "diet", {"x": "sugar"})

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, service: CatalogService) -> None:
        """Preferences need a name."""
        with pytest.raises(ValidationError):
            await service.add_preference({"name": " ", "type": "diet"})

    @pytest.mark.asyncio
    async def test_filter_by_type(self, service: CatalogService) -> None:
        """Preference pages can be filtered by type."""
        await service.add_preference({"name": "Keto", "type": "diet"})
        await service.add_preference({"name": "Peanut", "type": "allergy"})

        page = await service.fetch_preferences_page(filter_type="allergy")
        assert [p.name for p in page.items] == ["Peanut"]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, service: CatalogService) -> None:
        """Preferences can be replaced and deleted."""
        preference = await service.add_preference({"name": "Keto", "type": "diet"})
        await service.update_preference(preference.id, {"name": "Strict Keto", "type": "diet"})
        assert (await service.get_preference(preference.id)).type_id == "strict_keto"

        await service.delete_preference(preference.id)
        with pytest.raises(NotFoundError):
            await service.delete_preference(preference.id)


class TestImportsAndCategories:
    """Tests for import and category delegation."""

    @pytest.mark.asyncio
    async def test_import_then_derive(self, service: CatalogService) -> None:
        """Imported products feed the derived taxonomy."""
        summary = await service.import_all()
        assert summary.total_succeeded == 3

        derived = {c.name: c for c in await service.derive_categories()}
        assert derived["Beverages"].product_count == 2
        assert derived["Snacks"].subcategories == ["Chips"]

        page = await service.fetch_products_page(search_term="cola")
        assert [p.name for p in page.items] == ["Cola"]

    @pytest.mark.asyncio
    async def test_test_import(self, service: CatalogService) -> None:
        """Test imports are limited to one bucket."""
        summary = await service.test_import("Snacks", "Chips", limit=5)
        assert list(summary.buckets) == ["Snacks/Chips"]
        assert summary.total_succeeded == 1

    @pytest.mark.asyncio
    async def test_category_lifecycle(self, service: CatalogService) -> None:
        """Categories can be created, replaced, listed and deleted."""
        snacks = await service.add_category("Snacks")
        chips = await service.add_category("Chips", "subcategory", snacks.id)
        assert chips.level is CategoryLevel.SUBCATEGORY

        renamed = await service.update_category(snacks.id, "Savory")
        assert renamed.name == "Savory"

        overview = {c.name: c for c in await service.category_overview()}
        assert overview["Savory"].subcategories == ["Chips"]

        await service.delete_category(snacks.id)
        assert await service.list_categories() == []
