"""Catalog service.

High-level facade that combines the repositories, pagination engines,
import orchestrator and category registry. It is the surface API handlers
and scripts call; it is built once around an explicit store client.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from catalogadmin.catalog.categories import CategoryRegistry
from catalogadmin.catalog.importer import BulkImporter, ImportSummary, generate_barcode
from catalogadmin.catalog.pagination import (
    PageOptions,
    PaginationEngine,
    preference_pagination,
    product_pagination,
)
from catalogadmin.catalog.repository import (
    CategoryRepository,
    PreferenceRepository,
    ProductRepository,
)
from catalogadmin.catalog.sanitizer import (
    preference_from_ingredient_map,
    sanitize,
    sanitize_preference,
)
from catalogadmin.catalog.source import SourceTree
from catalogadmin.domain.exceptions import NotFoundError, ValidationError
from catalogadmin.domain.models import (
    CategoryLevel,
    CategoryNode,
    DerivedCategory,
    PaginatedResult,
    Preference,
    Product,
)
from catalogadmin.infrastructure.config import Settings, settings as default_settings
from catalogadmin.infrastructure.store import DocumentStore

logger = structlog.get_logger()


class CatalogService:
    """Service for catalog operations.

    Example usage:
        service = CatalogService(InMemoryDocumentStore())

        # Import everything under the data directory
        summary = await service.import_all(dry_run=False)

        # Browse
        page = await service.fetch_products_page(search_term="cola")
        more = await service.fetch_products_page(
            search_term="cola", cursor=page.next_cursor
        )
    """

    def __init__(
        self,
        store: DocumentStore,
        config: Settings | None = None,
        data_dir: str | Path | None = None,
    ) -> None:
        """Initialize service around a store client.

        Args:
            store: Document store client.
            config: Settings, defaults to the process settings.
            data_dir: Import source directory, overrides the settings.
        """
        self.store = store
        self.config = config or default_settings

        self.products = ProductRepository(store)
        self.preferences = PreferenceRepository(store)
        self.categories = CategoryRepository(store)

        self.product_pages: PaginationEngine[Product] = product_pagination(
            self.products, max_page_size=self.config.max_page_size
        )
        self.preference_pages: PaginationEngine[Preference] = preference_pagination(
            self.preferences, max_page_size=self.config.max_page_size
        )
        self.registry = CategoryRegistry(self.categories, self.products)
        self.importer = BulkImporter(
            SourceTree(
                Path(data_dir or self.config.import_data_dir),
                records_file=self.config.import_records_file,
                ignored_entries=self.config.import_ignored_entries,
            ),
            self.products,
            error_message_max_length=self.config.import_error_message_max_length,
            progress_interval=self.config.import_progress_interval,
        )

    # ========================================================================
    # Products
    # ========================================================================

    @staticmethod
    def sanitize(raw: Any) -> Product:
        """Normalize an untrusted product record."""
        return sanitize(raw)

    async def fetch_products_page(
        self,
        page_size: int | None = None,
        cursor: str | None = None,
        search_term: str | None = None,
        filter_brand: str | None = None,
    ) -> PaginatedResult[Product]:
        """Fetch one page of products.

        Args:
            page_size: Items per page, defaults to the configured size.
            cursor: Token from the previous page.
            search_term: Substring of name, brand or barcode.
            filter_brand: Exact brand.

        Returns:
            Page of products.
        """
        return await self.product_pages.fetch_page(
            PageOptions(
                page_size=page_size or self.config.default_page_size,
                cursor=cursor,
                search_term=search_term,
                filter_value=filter_brand,
            )
        )

    async def get_product(self, product_id: str) -> Product:
        """Get a product.

        Raises:
            NotFoundError: If the id does not exist.
        """
        product = await self.products.get(product_id)
        if product is None:
            raise NotFoundError(self.products.collection, product_id)
        return product

    def _product_from_form(self, data: Mapping[str, Any]) -> Product:
        product = sanitize(data)
        if not product.name.strip():
            raise ValidationError("Product name is required", field="name")
        if not product.brand.strip():
            raise ValidationError("Brand is required", field="brand")
        if not product.barcode.strip():
            product.barcode = generate_barcode("MANUAL")
        return product

    async def add_product(self, data: Mapping[str, Any]) -> Product:
        """Create a product from form data.

        Args:
            data: Product fields as submitted.

        Returns:
            Stored product with its id.

        Raises:
            ValidationError: If name or brand is blank.
            WriteError: If the store rejects the write.
        """
        product = self._product_from_form(data)
        product.id = await self.products.add(product)
        logger.info("Product added", product_id=product.id, name=product.name)
        return product

    async def update_product(self, product_id: str, data: Mapping[str, Any]) -> Product:
        """Replace a product with new form data.

        Raises:
            ValidationError: If name or brand is blank.
            NotFoundError: If the id does not exist.
            WriteError: If the store rejects the write.
        """
        product = self._product_from_form(data)
        product.id = product_id
        await self.products.replace(product_id, product)
        logger.info("Product updated", product_id=product_id)
        return product

    async def delete_product(self, product_id: str) -> None:
        """Delete a product.

        Raises:
            NotFoundError: If the id does not exist.
        """
        await self.get_product(product_id)
        await self.products.delete(product_id)
        logger.info("Product deleted", product_id=product_id)

    async def get_brands(self) -> list[str]:
        """Get brand names for the brand filter."""
        return await self.products.get_brands()

    # ========================================================================
    # Preferences
    # ========================================================================

    async def fetch_preferences_page(
        self,
        page_size: int | None = None,
        cursor: str | None = None,
        search_term: str | None = None,
        filter_type: str | None = None,
    ) -> PaginatedResult[Preference]:
        """Fetch one page of preferences.

        Args:
            page_size: Items per page, defaults to the configured size.
            cursor: Token from the previous page.
            search_term: Substring of name or type id.
            filter_type: Exact preference type.

        Returns:
            Page of preferences.
        """
        return await self.preference_pages.fetch_page(
            PageOptions(
                page_size=page_size or self.config.default_page_size,
                cursor=cursor,
                search_term=search_term,
                filter_value=filter_type,
            )
        )

    async def get_preference(self, preference_id: str) -> Preference:
        """Get a preference.

        Raises:
            NotFoundError: If the id does not exist.
        """
        preference = await self.preferences.get(preference_id)
        if preference is None:
            raise NotFoundError(self.preferences.collection, preference_id)
        return preference

    async def add_preference(self, data: Mapping[str, Any]) -> Preference:
        """Create a preference from form data.

        Raises:
            ValidationError: If the name is blank.
            WriteError: If the store rejects the write.
        """
        preference = sanitize_preference(data)
        preference.id = await self.preferences.add(preference)
        logger.info("Preference added", preference_id=preference.id, name=preference.name)
        return preference

    async def add_preference_from_ingredient_map(
        self,
        name: str,
        type_: str,
        payload: Any,
    ) -> Preference:
        """Create a preference from a ``{"<typeId>": [ingredients]}`` upload.

        Raises:
            ValidationError: If the payload has no ingredient list or the
                name is blank.
        """
        preference = preference_from_ingredient_map(name, type_, payload)
        if preference is None:
            raise ValidationError(
                "JSON should contain an array of ingredients", field="ingredients"
            )
        preference.id = await self.preferences.add(preference)
        logger.info("Preference imported", preference_id=preference.id, type_id=preference.type_id)
        return preference

    async def update_preference(self, preference_id: str, data: Mapping[str, Any]) -> Preference:
        """Replace a preference with new form data.

        Raises:
            ValidationError: If the name is blank.
            NotFoundError: If the id does not exist.
        """
        preference = sanitize_preference(data)
        preference.id = preference_id
        await self.preferences.replace(preference_id, preference)
        logger.info("Preference updated", preference_id=preference_id)
        return preference

    async def delete_preference(self, preference_id: str) -> None:
        """Delete a preference.

        Raises:
            NotFoundError: If the id does not exist.
        """
        await self.get_preference(preference_id)
        await self.preferences.delete(preference_id)
        logger.info("Preference deleted", preference_id=preference_id)

    async def get_preference_types(self) -> list[str]:
        """Get preference types for the type filter."""
        return await self.preferences.get_types()

    # ========================================================================
    # Imports
    # ========================================================================

    async def import_all(self, dry_run: bool = False) -> ImportSummary:
        """Import every bucket of the source tree."""
        return await self.importer.import_all(dry_run=dry_run)

    async def test_import(
        self,
        category: str,
        subcategory: str,
        limit: int = 5,
        dry_run: bool = False,
    ) -> ImportSummary:
        """Import the first ``limit`` records of one bucket."""
        return await self.importer.test_import(category, subcategory, limit, dry_run)

    # ========================================================================
    # Categories
    # ========================================================================

    async def list_categories(self) -> list[CategoryNode]:
        """Get persisted category nodes."""
        return await self.registry.list_all()

    async def add_category(
        self,
        name: str,
        level: CategoryLevel | str = CategoryLevel.CATEGORY,
        parent_id: str | None = None,
    ) -> CategoryNode:
        """Create a category node."""
        category_id = await self.registry.add(name, level, parent_id)
        return await self.registry.get(category_id)

    async def update_category(
        self,
        category_id: str,
        name: str,
        level: CategoryLevel | str = CategoryLevel.CATEGORY,
        parent_id: str | None = None,
    ) -> CategoryNode:
        """Replace a category node."""
        return await self.registry.update(
            category_id,
            CategoryNode(name=name, level=level, parent_id=parent_id),
        )

    async def delete_category(self, category_id: str) -> None:
        """Delete a category node and its subcategories."""
        await self.registry.delete(category_id)

    async def derive_categories(self) -> list[DerivedCategory]:
        """Get the taxonomy derived from product fields."""
        return await self.registry.derive_from_products()

    async def category_overview(self) -> list[DerivedCategory]:
        """Get derived and persisted categories merged by name."""
        return await self.registry.overview()
