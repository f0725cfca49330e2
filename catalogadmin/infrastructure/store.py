"""Document store client.

The catalog persists flat JSON documents in named collections. This module
defines the client contract every backend implements plus an in-memory
backend used for local runs and tests.

Documents hold JSON scalars and lists of scalars only; every backend rejects
lists nested inside lists on the write path.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

import structlog

logger = structlog.get_logger()


# ============================================================================
# Errors
# ============================================================================


class StoreError(Exception):
    """Raised when the store cannot complete an operation."""

    def __init__(self, message: str, collection: str | None = None) -> None:
        """Initialize store error.

        Args:
            message: Error description.
            collection: Collection involved, if known.
        """
        super().__init__(message)
        self.message = message
        self.collection = collection


class DocumentNotFoundError(StoreError):
    """Raised when replacing or deleting a document that does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"Document {doc_id} not found in {collection}", collection)
        self.doc_id = doc_id


# ============================================================================
# Contract
# ============================================================================


@dataclass(frozen=True)
class Document:
    """A stored document and its id."""

    id: str
    data: dict[str, Any]


def sort_key(data: dict[str, Any], field: str) -> str:
    """Get the ordering value of a document field.

    Missing or null fields sort as the empty string.

    Args:
        data: Document fields.
        field: Field to order by.

    Returns:
        String sort value.
    """
    value = data.get(field)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def ensure_flat(collection: str, data: dict[str, Any]) -> None:
    """Reject documents holding lists nested inside lists.

    Args:
        collection: Target collection.
        data: Document fields.

    Raises:
        StoreError: If any list field contains a list.
    """
    for key, value in data.items():
        if isinstance(value, (list, tuple)) and any(
            isinstance(item, (list, tuple)) for item in value
        ):
            raise StoreError(
                f"Nested arrays are not supported. Field: {key}",
                collection,
            )


class DocumentStore(ABC):
    """Client contract for a document database.

    Ordered queries sort by one field ascending with the document id as
    tie-breaker, so ``(sort value, id)`` is a total order usable as a
    resumable position.
    """

    @abstractmethod
    async def create(self, collection: str, data: dict[str, Any]) -> str:
        """Store a new document and return its generated id."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Document | None:
        """Fetch one document by id."""

    @abstractmethod
    async def replace(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Overwrite a whole document.

        Raises:
            DocumentNotFoundError: If the id does not exist.
        """

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing id is a no-op."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        order_by: str,
        start_after: tuple[str, str] | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """Run an ordered range query.

        Args:
            collection: Collection to read.
            order_by: Field to sort by, ascending.
            start_after: ``(sort value, id)`` position to resume after.
            limit: Maximum documents to return, None for all.

        Returns:
            Documents in order.
        """

    @abstractmethod
    async def count(self, collection: str) -> int:
        """Count documents in a collection."""

    async def close(self) -> None:
        """Release backend resources."""


# ============================================================================
# In-Memory Backend
# ============================================================================


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed document store.

    Example usage:
        store = InMemoryDocumentStore()
        doc_id = await store.create("products", {"name": "Cola"})
        page = await store.query("products", order_by="name", limit=10)
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def create(self, collection: str, data: dict[str, Any]) -> str:
        ensure_flat(collection, data)
        doc_id = uuid4().hex
        self._collection(collection)[doc_id] = dict(data)
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Document | None:
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        return Document(id=doc_id, data=dict(data))

    async def replace(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        ensure_flat(collection, data)
        documents = self._collection(collection)
        if doc_id not in documents:
            raise DocumentNotFoundError(collection, doc_id)
        documents[doc_id] = dict(data)

    async def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)

    async def query(
        self,
        collection: str,
        order_by: str,
        start_after: tuple[str, str] | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        ordered = sorted(
            self._collection(collection).items(),
            key=lambda item: (sort_key(item[1], order_by), item[0]),
        )
        if start_after is not None:
            ordered = [
                item for item in ordered
                if (sort_key(item[1], order_by), item[0]) > start_after
            ]
        if limit is not None:
            ordered = ordered[:limit]
        return [Document(id=doc_id, data=dict(data)) for doc_id, data in ordered]

    async def count(self, collection: str) -> int:
        return len(self._collection(collection))
