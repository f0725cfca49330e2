"""SQL-backed document store.

Stores every collection in a single ``documents`` table with a JSON column,
using async SQLAlchemy. Works with PostgreSQL (asyncpg) in deployment and
SQLite (aiosqlite) in tests.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import structlog
from sqlalchemy import JSON, DateTime, String, and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from catalogadmin.infrastructure.store import (
    Document,
    DocumentNotFoundError,
    DocumentStore,
    StoreError,
    ensure_flat,
)

logger = structlog.get_logger()

# Base class for models
Base = declarative_base()


class DocumentRow(Base):
    """One stored document.

    Attributes:
        collection: Collection name (e.g. "products").
        id: Generated document id, unique within the collection.
        data: Flat JSON document body.
        created_at: Creation timestamp.
        updated_at: Last replace timestamp.
    """

    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String(100), primary_key=True)
    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: uuid4().hex,
    )
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<DocumentRow(collection={self.collection}, id={self.id})>"


class SqlDocumentStore(DocumentStore):
    """Document store over an async SQLAlchemy engine.

    Example usage:
        store = SqlDocumentStore.from_url("sqlite+aiosqlite:///catalog.db")
        await store.create_schema()
        doc_id = await store.create("products", {"name": "Cola"})
    """

    def __init__(self, engine: AsyncEngine) -> None:
        """Initialize store with an engine.

        Args:
            engine: Async SQLAlchemy engine.
        """
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False, **engine_kwargs: Any) -> "SqlDocumentStore":
        """Create a store with its own engine.

        Args:
            database_url: SQLAlchemy async database URL.
            echo: Log emitted SQL.
            **engine_kwargs: Extra ``create_async_engine`` arguments.

        Returns:
            Configured store.
        """
        engine = create_async_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
            **engine_kwargs,
        )
        return cls(engine)

    async def create_schema(self) -> None:
        """Create the documents table if it doesn't exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    def _sort_column(self, field: str) -> Any:
        return func.coalesce(DocumentRow.data[field].as_string(), "")

    async def create(self, collection: str, data: dict[str, Any]) -> str:
        ensure_flat(collection, data)
        row = DocumentRow(collection=collection, id=uuid4().hex, data=dict(data))
        try:
            async with self.session_factory() as session, session.begin():
                session.add(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Insert failed: {e}", collection) from e
        return row.id

    async def get(self, collection: str, doc_id: str) -> Document | None:
        try:
            async with self.session_factory() as session:
                row = await session.get(DocumentRow, (collection, doc_id))
        except SQLAlchemyError as e:
            raise StoreError(f"Lookup failed: {e}", collection) from e
        if row is None:
            return None
        return Document(id=row.id, data=dict(row.data))

    async def replace(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        ensure_flat(collection, data)
        try:
            async with self.session_factory() as session, session.begin():
                row = await session.get(DocumentRow, (collection, doc_id))
                if row is None:
                    raise DocumentNotFoundError(collection, doc_id)
                row.data = dict(data)
        except SQLAlchemyError as e:
            raise StoreError(f"Update failed: {e}", collection) from e

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            async with self.session_factory() as session, session.begin():
                row = await session.get(DocumentRow, (collection, doc_id))
                if row is not None:
                    await session.delete(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Delete failed: {e}", collection) from e

    async def query(
        self,
        collection: str,
        order_by: str,
        start_after: tuple[str, str] | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        sort_column = self._sort_column(order_by)
        query = select(DocumentRow).where(DocumentRow.collection == collection)

        if start_after is not None:
            last_value, last_id = start_after
            query = query.where(
                or_(
                    sort_column > last_value,
                    and_(sort_column == last_value, DocumentRow.id > last_id),
                )
            )

        query = query.order_by(sort_column.asc(), DocumentRow.id.asc())
        if limit is not None:
            query = query.limit(limit)

        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreError(f"Query failed: {e}", collection) from e

        return [Document(id=row.id, data=dict(row.data)) for row in rows]

    async def count(self, collection: str) -> int:
        query = select(func.count(DocumentRow.id)).where(
            DocumentRow.collection == collection
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return result.scalar_one()
        except SQLAlchemyError as e:
            raise StoreError(f"Count failed: {e}", collection) from e
