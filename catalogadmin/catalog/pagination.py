"""Cursor-based pagination over a document collection.

Two execution modes share one ``fetch_page`` interface:

- Indexed mode (no search term, no filter): an ordered range query of
  ``page_size + 1`` documents after the cursor. The extra document only
  signals that another page exists.
- Scan-and-filter mode (search term and/or filter): the store has no text
  index, so the whole ordered collection is loaded and matched in process,
  then windowed after the cursor. This does not scale with collection size
  and is kept behind the same interface so a server-side index can replace
  it without touching callers.

Cursors are opaque URL-safe tokens carrying the last item's sort value and
id plus a fingerprint of the request shape. A cursor presented with a
different search term or filter restarts the traversal at page one.
"""

import base64
import binascii
import hashlib
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog

from catalogadmin.catalog.repository import DocumentRepository
from catalogadmin.domain.exceptions import FetchError, ValidationError
from catalogadmin.domain.models import PaginatedResult, Preference, Product
from catalogadmin.infrastructure.store import Document, sort_key

logger = structlog.get_logger()

T = TypeVar("T")


# ============================================================================
# Cursor
# ============================================================================


@dataclass(frozen=True)
class Cursor:
    """Decoded cursor position.

    Attributes:
        sort_value: Sort field value of the last returned item.
        doc_id: Id of the last returned item.
        fingerprint: Hash of the request shape that produced the cursor.
    """

    sort_value: str
    doc_id: str
    fingerprint: str

    @property
    def position(self) -> tuple[str, str]:
        """Get the ``(sort value, id)`` store position."""
        return (self.sort_value, self.doc_id)

    def encode(self) -> str:
        """Serialize to an opaque token."""
        payload = json.dumps(
            {"k": self.sort_value, "i": self.doc_id, "f": self.fingerprint},
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")

    @classmethod
    def decode(cls, token: str) -> "Cursor":
        """Parse a token produced by ``encode``.

        Raises:
            ValidationError: If the token is malformed.
        """
        try:
            padded = token + "=" * (-len(token) % 4)
            payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
            return cls(
                sort_value=str(payload["k"]),
                doc_id=str(payload["i"]),
                fingerprint=str(payload["f"]),
            )
        except (binascii.Error, UnicodeError, ValueError, TypeError, KeyError) as e:
            raise ValidationError("Invalid pagination cursor", field="cursor") from e


def request_fingerprint(sort_field: str, search_term: str, filter_value: str) -> str:
    """Hash the ``(sort field, search term, filter)`` triple."""
    raw = json.dumps([sort_field, search_term, filter_value], ensure_ascii=False)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


# ============================================================================
# Engine
# ============================================================================


@dataclass
class PageOptions:
    """Page request.

    Attributes:
        page_size: Items per page.
        cursor: Token from the previous page, None for the first page.
        search_term: Case-insensitive substring to search for.
        filter_value: Exact value of the engine's filter field.
    """

    page_size: int = 20
    cursor: str | None = None
    search_term: str | None = None
    filter_value: str | None = None


class PaginationEngine(Generic[T]):
    """Page fetcher for one repository.

    Example usage:
        engine = product_pagination(ProductRepository(store))
        first = await engine.fetch_page(PageOptions(page_size=20))
        second = await engine.fetch_page(
            PageOptions(page_size=20, cursor=first.next_cursor)
        )
    """

    def __init__(
        self,
        repository: DocumentRepository[T],
        search_fields: Callable[[T], tuple[str, ...]],
        filter_field: Callable[[T], str],
        max_page_size: int = 100,
    ) -> None:
        """Initialize engine.

        Args:
            repository: Repository to read from.
            search_fields: Values a search term is matched against.
            filter_field: Value an exact filter is matched against.
            max_page_size: Upper bound for requested page sizes.
        """
        self.repository = repository
        self.search_fields = search_fields
        self.filter_field = filter_field
        self.max_page_size = max_page_size

    async def fetch_page(self, options: PageOptions) -> PaginatedResult[T]:
        """Fetch one page.

        Args:
            options: Page request.

        Returns:
            Page of records with the cursor for the next one.

        Raises:
            FetchError: If the store query fails.
            ValidationError: If the cursor token is malformed.
        """
        page_size = max(1, min(options.page_size, self.max_page_size))
        search_term = (options.search_term or "").strip()
        filter_value = options.filter_value or ""
        fingerprint = request_fingerprint(
            self.repository.sort_field, search_term, filter_value
        )
        start_after = self._resume_position(options.cursor, fingerprint)

        if search_term or filter_value:
            return await self._scan_page(
                page_size, start_after, search_term, filter_value, fingerprint
            )
        return await self._indexed_page(page_size, start_after, fingerprint)

    def _resume_position(
        self,
        token: str | None,
        fingerprint: str,
    ) -> Cursor | None:
        if not token:
            return None
        cursor = Cursor.decode(token)
        if cursor.fingerprint != fingerprint:
            logger.warning(
                "Cursor does not match request, restarting from first page",
                collection=self.repository.collection,
            )
            return None
        return cursor

    def _cursor_for(self, document: Document, fingerprint: str) -> str:
        return Cursor(
            sort_value=sort_key(document.data, self.repository.sort_field),
            doc_id=document.id,
            fingerprint=fingerprint,
        ).encode()

    async def _count(self) -> int | None:
        try:
            return await self.repository.count()
        except FetchError as e:
            logger.warning(
                "Failed to get total count, continuing without it",
                collection=self.repository.collection,
                error=e.message,
            )
            return None

    async def _indexed_page(
        self,
        page_size: int,
        cursor: Cursor | None,
        fingerprint: str,
    ) -> PaginatedResult[T]:
        # Counting every page would re-scan the collection each time.
        total = await self._count() if cursor is None else None

        documents = await self.repository.find_page(
            cursor.position if cursor else None,
            page_size + 1,
        )
        has_more = len(documents) > page_size
        page = documents[:page_size]

        return PaginatedResult(
            items=[self.repository.decode(d.data, d.id) for d in page],
            next_cursor=self._cursor_for(page[-1], fingerprint) if has_more else None,
            has_more=has_more,
            total=total,
        )

    def _matches(self, record: T, search_lower: str, filter_value: str) -> bool:
        if filter_value and self.filter_field(record) != filter_value:
            return False
        if search_lower:
            return any(search_lower in value.lower() for value in self.search_fields(record))
        return True

    async def _scan_page(
        self,
        page_size: int,
        cursor: Cursor | None,
        search_term: str,
        filter_value: str,
        fingerprint: str,
    ) -> PaginatedResult[T]:
        search_lower = search_term.lower()
        matched: list[tuple[Document, T]] = []
        for document in await self.repository.find_all_documents():
            record = self.repository.decode(document.data, document.id)
            if self._matches(record, search_lower, filter_value):
                matched.append((document, record))

        window = matched
        if cursor is not None:
            window = self._after_cursor(matched, cursor)

        has_more = len(window) > page_size
        page = window[:page_size]

        return PaginatedResult(
            items=[record for _, record in page],
            next_cursor=self._cursor_for(page[-1][0], fingerprint) if has_more else None,
            has_more=has_more,
            total=len(matched),
        )

    def _after_cursor(
        self,
        matched: list[tuple[Document, T]],
        cursor: Cursor,
    ) -> list[tuple[Document, T]]:
        for index, (document, _) in enumerate(matched):
            if document.id == cursor.doc_id:
                return matched[index + 1:]

        # The cursor item was deleted or edited out of the filter.
        sort_field = self.repository.sort_field
        return [
            (document, record)
            for document, record in matched
            if (sort_key(document.data, sort_field), document.id) > cursor.position
        ]


# ============================================================================
# Engines
# ============================================================================


def product_pagination(
    repository: DocumentRepository[Product],
    max_page_size: int = 100,
) -> PaginationEngine[Product]:
    """Create the product engine: search name/brand/barcode, filter brand."""
    return PaginationEngine(
        repository,
        search_fields=lambda p: (p.name, p.brand, p.barcode),
        filter_field=lambda p: p.brand,
        max_page_size=max_page_size,
    )


def preference_pagination(
    repository: DocumentRepository[Preference],
    max_page_size: int = 100,
) -> PaginationEngine[Preference]:
    """Create the preference engine: search name/type id, filter type."""
    return PaginationEngine(
        repository,
        search_fields=lambda p: (p.name, p.type_id),
        filter_field=lambda p: p.type,
        max_page_size=max_page_size,
    )
