"""Infrastructure layer - configuration, logging and document store clients."""

from catalogadmin.infrastructure.store import (
    Document,
    DocumentNotFoundError,
    DocumentStore,
    InMemoryDocumentStore,
    StoreError,
)

__all__ = [
    "Document",
    "DocumentNotFoundError",
    "DocumentStore",
    "InMemoryDocumentStore",
    "StoreError",
]
