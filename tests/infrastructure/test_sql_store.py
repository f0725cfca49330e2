"""Tests for the SQL document store on SQLite."""

from pathlib import Path

import pytest

from catalogadmin.catalog.pagination import PageOptions, product_pagination
from catalogadmin.catalog.repository import ProductRepository
from catalogadmin.domain.models import Product
from catalogadmin.infrastructure.sql_store import SqlDocumentStore
from catalogadmin.infrastructure.store import DocumentNotFoundError, StoreError


async def open_store(tmp_path: Path) -> SqlDocumentStore:
    """Create a store on a fresh SQLite file."""
    store = SqlDocumentStore.from_url(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await store.create_schema()
    return store


class TestSqlDocumentStore:
    """Tests for SqlDocumentStore."""

    @pytest.mark.asyncio
    async def test_crud(self, tmp_path: Path) -> None:
        """Documents can be created, read, replaced and deleted."""
        store = await open_store(tmp_path)
        try:
            doc_id = await store.create("products", {"name": "Cola", "ingredients": ["water"]})
            assert (await store.get("products", doc_id)).data["ingredients"] == ["water"]

            await store.replace("products", doc_id, {"name": "Cola Zero"})
            assert (await store.get("products", doc_id)).data == {"name": "Cola Zero"}

            await store.delete("products", doc_id)
            assert await store.get("products", doc_id) is None
            await store.delete("products", doc_id)
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_collections_are_separate(self, tmp_path: Path) -> None:
        """Counts and lookups are scoped to a collection."""
        store = await open_store(tmp_path)
        try:
            doc_id = await store.create("products", {"name": "Cola"})
            await store.create("preferences", {"name": "Keto"})

            assert await store.count("products") == 1
            assert await store.get("preferences", doc_id) is None
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_replace_missing(self, tmp_path: Path) -> None:
        """Replacing a missing id raises."""
        store = await open_store(tmp_path)
        try:
            with pytest.raises(DocumentNotFoundError):
                await store.replace("products", "missing", {"name": "X"})
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_nested_lists_rejected(self, tmp_path: Path) -> None:
        """Nested lists are refused before reaching the database."""
        store = await open_store(tmp_path)
        try:
            with pytest.raises(StoreError):
                await store.create("products", {"ingredients": [["a"]]})
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_keyset_query(self, tmp_path: Path) -> None:
        """Range queries order by field then id and resume after a position."""
        store = await open_store(tmp_path)
        try:
            for name in ["b", "a", "b", "c"]:
                await store.create("products", {"name": name})
            await store.create("products", {"brand": "no name"})

            ordered = await store.query("products", order_by="name")
            positions = [(d.data.get("name", ""), d.id) for d in ordered]
            assert positions == sorted(positions)
            assert positions[0][0] == ""

            rest = await store.query(
                "products", order_by="name", start_after=positions[2], limit=2
            )
            assert [(d.data["name"], d.id) for d in rest] == positions[3:5]
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_paginated_traversal(self, tmp_path: Path) -> None:
        """Cursor traversal over SQL visits every product once."""
        store = await open_store(tmp_path)
        try:
            repo = ProductRepository(store)
            ids = {
                await repo.add(Product(name=f"Item {i % 4}", brand="ACME", barcode=str(i)))
                for i in range(11)
            }
            engine = product_pagination(repo)

            seen: list[str] = []
            cursor = None
            while True:
                page = await engine.fetch_page(PageOptions(page_size=3, cursor=cursor))
                seen.extend(p.id for p in page.items)
                if not page.has_more:
                    break
                cursor = page.next_cursor

            assert len(seen) == 11
            assert set(seen) == ids
        finally:
            await store.close()
