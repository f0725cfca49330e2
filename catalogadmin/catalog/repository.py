"""Catalog repositories.

Bind a document store client, a collection name and a converter pair so
the rest of the catalog works with canonical records. Store failures are
translated here: reads raise ``FetchError``, writes raise ``WriteError``.
"""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

import structlog

from catalogadmin.catalog.converters import (
    category_from_record,
    category_to_record,
    preference_from_record,
    preference_to_record,
    product_from_record,
    product_to_record,
)
from catalogadmin.domain.exceptions import FetchError, NotFoundError, WriteError
from catalogadmin.domain.models import CategoryNode, Preference, Product
from catalogadmin.infrastructure.store import (
    Document,
    DocumentNotFoundError,
    DocumentStore,
    StoreError,
)

logger = structlog.get_logger()

T = TypeVar("T")

PRODUCTS = "products"
PREFERENCES = "preferences"
CATEGORIES = "categories"


class DocumentRepository(Generic[T]):
    """Repository for one collection of canonical records.

    Example usage:
        store = InMemoryDocumentStore()
        repo = ProductRepository(store)
        product_id = await repo.add(Product(name="Cola", brand="ACME"))
        product = await repo.get(product_id)
    """

    collection: str = ""
    sort_field: str = "name"

    def __init__(
        self,
        store: DocumentStore,
        encode: Callable[[T], dict[str, Any]],
        decode: Callable[[dict[str, Any], str], T],
    ) -> None:
        """Initialize repository.

        Args:
            store: Document store client.
            encode: Record to document converter (may raise ValidationError).
            decode: Document to record converter (never raises).
        """
        self.store = store
        self.encode = encode
        self.decode = decode

    def _decode(self, document: Document) -> T:
        return self.decode(document.data, document.id)

    async def add(self, record: T) -> str:
        """Store a new record.

        Args:
            record: Record to store.

        Returns:
            Generated document id.

        Raises:
            ValidationError: If the record breaks a structural rule.
            WriteError: If the store rejects the write.
        """
        data = self.encode(record)
        try:
            return await self.store.create(self.collection, data)
        except StoreError as e:
            raise WriteError(e.message, self.collection) from e

    async def replace(self, doc_id: str, record: T) -> None:
        """Overwrite a whole record.

        Raises:
            ValidationError: If the record breaks a structural rule.
            NotFoundError: If the id does not exist.
            WriteError: If the store rejects the write.
        """
        data = self.encode(record)
        try:
            await self.store.replace(self.collection, doc_id, data)
        except DocumentNotFoundError as e:
            raise NotFoundError(self.collection, doc_id) from e
        except StoreError as e:
            raise WriteError(e.message, self.collection) from e

    async def delete(self, doc_id: str) -> None:
        """Delete a record by id."""
        try:
            await self.store.delete(self.collection, doc_id)
        except StoreError as e:
            raise WriteError(e.message, self.collection) from e

    async def get(self, doc_id: str) -> T | None:
        """Get a record by id, or None."""
        try:
            document = await self.store.get(self.collection, doc_id)
        except StoreError as e:
            raise FetchError(e.message, self.collection) from e
        return self._decode(document) if document is not None else None

    async def find_page(
        self,
        start_after: tuple[str, str] | None,
        limit: int,
    ) -> list[Document]:
        """Fetch raw documents in sort order after a position.

        Args:
            start_after: ``(sort value, id)`` to resume after.
            limit: Maximum documents.

        Returns:
            Stored documents; callers decode them so they keep ids and
            sort values for cursors.
        """
        try:
            return await self.store.query(
                self.collection,
                order_by=self.sort_field,
                start_after=start_after,
                limit=limit,
            )
        except StoreError as e:
            raise FetchError(e.message, self.collection) from e

    async def find_all_documents(self) -> list[Document]:
        """Fetch every raw document in sort order."""
        try:
            return await self.store.query(self.collection, order_by=self.sort_field)
        except StoreError as e:
            raise FetchError(e.message, self.collection) from e

    async def find_all(self) -> list[T]:
        """Fetch every record in sort order."""
        return [self._decode(document) for document in await self.find_all_documents()]

    async def count(self) -> int:
        """Count stored records."""
        try:
            return await self.store.count(self.collection)
        except StoreError as e:
            raise FetchError(e.message, self.collection) from e


class ProductRepository(DocumentRepository[Product]):
    """Repository for products."""

    collection = PRODUCTS

    def __init__(self, store: DocumentStore) -> None:
        super().__init__(store, product_to_record, product_from_record)

    async def get_brands(self) -> list[str]:
        """Get sorted unique non-blank brand names as stored."""
        products = await self.find_all()
        return sorted({p.brand for p in products if p.brand.strip()})


class PreferenceRepository(DocumentRepository[Preference]):
    """Repository for dietary preferences."""

    collection = PREFERENCES

    def __init__(self, store: DocumentStore) -> None:
        super().__init__(store, preference_to_record, preference_from_record)

    async def get_types(self) -> list[str]:
        """Get sorted unique non-blank preference types."""
        preferences = await self.find_all()
        return sorted({p.type for p in preferences if p.type.strip()})


class CategoryRepository(DocumentRepository[CategoryNode]):
    """Repository for persisted category nodes."""

    collection = CATEGORIES

    def __init__(self, store: DocumentStore) -> None:
        super().__init__(store, category_to_record, category_from_record)
