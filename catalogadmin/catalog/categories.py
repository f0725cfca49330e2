"""Category registry.

Persisted category/subcategory nodes plus a taxonomy derived live from the
``category``/``subcategory`` strings stored on products, for catalogs that
were imported before any taxonomy was defined.
"""

from datetime import datetime, timezone

import structlog

from catalogadmin.catalog.repository import CategoryRepository, ProductRepository
from catalogadmin.domain.exceptions import NotFoundError, ValidationError
from catalogadmin.domain.models import CategoryLevel, CategoryNode, DerivedCategory

logger = structlog.get_logger()

UNCATEGORIZED = "Uncategorized"
GENERAL = "General"


def _parse_level(value: CategoryLevel | str) -> CategoryLevel:
    try:
        return CategoryLevel(value)
    except ValueError as e:
        raise ValidationError(f"Unknown category level: {value}", field="level") from e


class CategoryRegistry:
    """CRUD and derived views for the two-level taxonomy.

    Example usage:
        registry = CategoryRegistry(CategoryRepository(store), ProductRepository(store))
        snacks_id = await registry.add("Snacks")
        await registry.add("Chips", CategoryLevel.SUBCATEGORY, parent_id=snacks_id)
        overview = await registry.overview()
    """

    def __init__(
        self,
        categories: CategoryRepository,
        products: ProductRepository,
    ) -> None:
        """Initialize registry.

        Args:
            categories: Repository of persisted nodes.
            products: Repository scanned for derived categories.
        """
        self.categories = categories
        self.products = products

    async def list_all(self) -> list[CategoryNode]:
        """Get all persisted nodes ordered by name."""
        return await self.categories.find_all()

    async def get(self, category_id: str) -> CategoryNode:
        """Get a persisted node.

        Raises:
            NotFoundError: If the id does not exist.
        """
        node = await self.categories.get(category_id)
        if node is None:
            raise NotFoundError(self.categories.collection, category_id)
        return node

    async def main_categories(self) -> list[CategoryNode]:
        """Get top-level nodes."""
        return [n for n in await self.list_all() if n.level is CategoryLevel.CATEGORY]

    async def subcategories(self, parent_id: str | None = None) -> list[CategoryNode]:
        """Get subcategory nodes, optionally only those under one parent."""
        return [
            n for n in await self.list_all()
            if n.level is CategoryLevel.SUBCATEGORY
            and (parent_id is None or n.parent_id == parent_id)
        ]

    async def _check_parent(self, node: CategoryNode) -> None:
        if node.level is not CategoryLevel.SUBCATEGORY or not node.parent_id:
            return
        parent = await self.categories.get(node.parent_id)
        if parent is None or parent.level is not CategoryLevel.CATEGORY:
            raise ValidationError(
                f"Parent category {node.parent_id} does not exist",
                field="parentId",
            )

    async def add(
        self,
        name: str,
        level: CategoryLevel = CategoryLevel.CATEGORY,
        parent_id: str | None = None,
    ) -> str:
        """Create a node.

        Args:
            name: Display name.
            level: Taxonomy level.
            parent_id: Parent category id, required for subcategories.

        Returns:
            New node id.

        Raises:
            ValidationError: If the node breaks a taxonomy rule.
        """
        now = datetime.now(timezone.utc)
        node = CategoryNode(
            name=name.strip(),
            level=_parse_level(level),
            parent_id=parent_id or None,
            created_at=now,
            updated_at=now,
        )
        await self._check_parent(node)
        category_id = await self.categories.add(node)
        logger.info("Category added", category_id=category_id, name=node.name, level=node.level.value)
        return category_id

    async def update(self, category_id: str, node: CategoryNode) -> CategoryNode:
        """Replace a node, keeping its creation time.

        Raises:
            NotFoundError: If the id does not exist.
            ValidationError: If the node breaks a taxonomy rule.
        """
        existing = await self.get(category_id)
        if node.parent_id == category_id:
            raise ValidationError("Category cannot be its own parent", field="parentId")

        updated = CategoryNode(
            id=category_id,
            name=node.name.strip(),
            level=_parse_level(node.level),
            parent_id=node.parent_id or None,
            created_at=existing.created_at,
            updated_at=datetime.now(timezone.utc),
        )
        if (
            existing.level is CategoryLevel.CATEGORY
            and updated.level is CategoryLevel.SUBCATEGORY
            and await self.subcategories(category_id)
        ):
            raise ValidationError(
                "Category with subcategories cannot become a subcategory",
                field="level",
            )
        await self._check_parent(updated)
        await self.categories.replace(category_id, updated)
        logger.info("Category updated", category_id=category_id, name=updated.name)
        return updated

    async def delete(self, category_id: str) -> None:
        """Delete a node and, for a category, its subcategories.

        Raises:
            NotFoundError: If the id does not exist.
        """
        node = await self.get(category_id)
        if node.level is CategoryLevel.CATEGORY:
            for child in await self.subcategories(category_id):
                await self.categories.delete(child.id)
        await self.categories.delete(category_id)
        logger.info("Category deleted", category_id=category_id, name=node.name)

    async def derive_from_products(self) -> list[DerivedCategory]:
        """Group stored products by their category strings.

        Returns:
            Derived categories ordered by product count, highest first.
        """
        derived: dict[str, DerivedCategory] = {}
        for product in await self.products.find_all():
            name = product.category.strip() or UNCATEGORIZED
            subcategory = product.subcategory.strip() or GENERAL

            entry = derived.setdefault(name, DerivedCategory(name=name))
            entry.product_count += 1
            if subcategory not in entry.subcategories:
                entry.subcategories.append(subcategory)

        return sorted(derived.values(), key=lambda c: c.product_count, reverse=True)

    async def overview(self) -> list[DerivedCategory]:
        """Merge derived and persisted categories by name.

        Persisted categories without products appear with a zero count;
        persisted subcategory names are merged into their parent's list.

        Returns:
            Combined categories ordered by product count, highest first.
        """
        combined = {c.name: c for c in await self.derive_from_products()}
        nodes = await self.list_all()
        names_by_id = {
            n.id: n.name for n in nodes if n.level is CategoryLevel.CATEGORY
        }

        for node in nodes:
            if node.level is CategoryLevel.CATEGORY:
                combined.setdefault(node.name, DerivedCategory(name=node.name))

        for node in nodes:
            parent_name = names_by_id.get(node.parent_id or "")
            if node.level is CategoryLevel.SUBCATEGORY and parent_name:
                entry = combined[parent_name]
                if node.name not in entry.subcategories:
                    entry.subcategories.append(node.name)

        return sorted(combined.values(), key=lambda c: c.product_count, reverse=True)
