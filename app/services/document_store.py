"""
Document Store
==============

Keyed-document storage for todos.

Documents are plain dicts keyed by camelCase field name. A field that is
absent from a document is "not set"; writing ``None`` through ``update``
clears it. Timestamps go in and come out as timezone-aware ``datetime``.

Backends:
    memory - process-local dict (development and tests)
    sql    - SQLAlchemy async over PostgreSQL (``todos`` table)
"""

import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from sqlalchemy import delete as sql_delete, select, update as sql_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.core.errors import StoreError, one_line
from app.db.base import generate_document_id
from app.models.todo import DOCUMENT_FIELDS, TodoCategory, TodoDocument, TodoPriority
from app.utils.helpers import call_with_timeout

logger = logging.getLogger(__name__)

# (field, value) equality filter
Filter = tuple[str, Any]
# (field, "asc" | "desc")
OrderBy = tuple[str, str]

_ENUM_FIELDS = {"category": TodoCategory, "priority": TodoPriority}


class DocumentStore(ABC):
    """Contract for the todo collection."""

    @abstractmethod
    async def get(self, doc_id: str) -> Optional[dict]:
        """Return the document with its ``id``, or None if it does not exist."""

    @abstractmethod
    async def query(
        self,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
    ) -> list[dict]:
        """Return all documents matching every equality filter, in order."""

    @abstractmethod
    async def add(self, fields: dict) -> str:
        """Store a new document and return its generated id."""

    @abstractmethod
    async def update(self, doc_id: str, fields: dict) -> None:
        """Merge ``fields`` into an existing document. ``None`` clears a field."""

    @abstractmethod
    async def delete(self, doc_id: str) -> None:
        """Permanently remove a document."""

    async def close(self) -> None:
        """Release backend resources."""


def _check_order(order_by: Optional[OrderBy]) -> None:
    if order_by is None:
        return
    field, direction = order_by
    if direction not in ("asc", "desc"):
        raise ValueError(f"order direction must be 'asc' or 'desc', got {direction!r}")


# =============================================================================
# In-process backend
# =============================================================================

class InMemoryDocumentStore(DocumentStore):
    """
    Process-local store. Documents are copied on the way in and out so
    callers never share state with the store.
    """

    def __init__(self) -> None:
        self._documents: dict[str, dict] = {}

    async def get(self, doc_id: str) -> Optional[dict]:
        document = self._documents.get(doc_id)
        if document is None:
            return None
        return {"id": doc_id, **copy.deepcopy(document)}

    async def query(
        self,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
    ) -> list[dict]:
        _check_order(order_by)
        results = [
            {"id": doc_id, **copy.deepcopy(document)}
            for doc_id, document in self._documents.items()
            if all(document.get(field) == value for field, value in (filters or ()))
        ]

        if order_by is not None:
            field, direction = order_by
            present = [d for d in results if d.get(field) is not None]
            missing = [d for d in results if d.get(field) is None]
            present.sort(key=lambda d: d[field], reverse=direction == "desc")
            # Documents without the ordering field go last
            results = present + missing

        return results

    async def add(self, fields: dict) -> str:
        doc_id = generate_document_id()
        self._documents[doc_id] = {
            k: copy.deepcopy(v) for k, v in fields.items() if k != "id"
        }
        return doc_id

    async def update(self, doc_id: str, fields: dict) -> None:
        document = self._documents.get(doc_id)
        if document is None:
            raise StoreError(details=f"No document to update: {doc_id}")
        for field, value in fields.items():
            if field == "id":
                continue
            if value is None:
                document.pop(field, None)
            else:
                document[field] = copy.deepcopy(value)

    async def delete(self, doc_id: str) -> None:
        self._documents.pop(doc_id, None)


# =============================================================================
# SQL backend
# =============================================================================

class SQLDocumentStore(DocumentStore):
    """
    Document store over the ``todos`` table.

    Each call opens its own session and commits before returning.
    Backend errors and timeouts surface as ``StoreError``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: Optional[float] = None,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout or settings.EXTERNAL_CALL_TIMEOUT_SECONDS

    @staticmethod
    def _column(field: str):
        try:
            return getattr(TodoDocument, DOCUMENT_FIELDS[field])
        except KeyError:
            raise ValueError(f"Unknown document field: {field}")

    @staticmethod
    def _coerce(field: str, value: Any) -> Any:
        if isinstance(value, str) and field in _ENUM_FIELDS:
            return _ENUM_FIELDS[field](value)
        return value

    @classmethod
    def _to_values(cls, fields: dict) -> dict:
        return {
            DOCUMENT_FIELDS[field]: cls._coerce(field, value)
            for field, value in fields.items()
            if field in DOCUMENT_FIELDS
        }

    async def _run(self, operation: str, work):
        try:
            return await call_with_timeout(work(), self._timeout)
        except asyncio.TimeoutError:
            logger.error("document_store_timeout op=%s timeout=%.1fs", operation, self._timeout)
            raise StoreError(details=f"Document store timed out during {operation}")
        except SQLAlchemyError as exc:
            logger.error("document_store_error op=%s error=%s", operation, one_line(exc))
            raise StoreError(details=f"Document store failed during {operation}")

    async def get(self, doc_id: str) -> Optional[dict]:
        async def work():
            async with self._session_factory() as session:
                row = await session.get(TodoDocument, doc_id)
                if row is None:
                    return None
                return {"id": row.id, **row.to_document()}

        return await self._run("get", work)

    async def query(
        self,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
    ) -> list[dict]:
        _check_order(order_by)
        stmt = select(TodoDocument)
        for field, value in filters or ():
            stmt = stmt.where(self._column(field) == self._coerce(field, value))
        if order_by is not None:
            field, direction = order_by
            column = self._column(field)
            stmt = stmt.order_by(
                column.desc().nulls_last() if direction == "desc" else column.asc().nulls_last()
            )

        async def work():
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [
                    {"id": row.id, **row.to_document()}
                    for row in result.scalars().all()
                ]

        return await self._run("query", work)

    async def add(self, fields: dict) -> str:
        doc_id = generate_document_id()

        async def work():
            async with self._session_factory() as session:
                session.add(TodoDocument(id=doc_id, **self._to_values(fields)))
                await session.commit()
            return doc_id

        return await self._run("add", work)

    async def update(self, doc_id: str, fields: dict) -> None:
        values = self._to_values(fields)
        if not values:
            return

        async def work():
            async with self._session_factory() as session:
                await session.execute(
                    sql_update(TodoDocument)
                    .where(TodoDocument.id == doc_id)
                    .values(**values)
                )
                await session.commit()

        await self._run("update", work)

    async def delete(self, doc_id: str) -> None:
        async def work():
            async with self._session_factory() as session:
                await session.execute(
                    sql_delete(TodoDocument).where(TodoDocument.id == doc_id)
                )
                await session.commit()

        await self._run("delete", work)

    async def close(self) -> None:
        from app.db.session import close_db

        await close_db()


# Singleton instance
_document_store: Optional[DocumentStore] = None


def get_document_store() -> DocumentStore:
    """Get or create the configured document store."""
    global _document_store

    if _document_store is None:
        if settings.DOCUMENT_STORE_BACKEND == "sql":
            from app.db.session import get_session_factory

            _document_store = SQLDocumentStore(get_session_factory())
        else:
            _document_store = InMemoryDocumentStore()
        logger.info("document_store backend=%s", settings.DOCUMENT_STORE_BACKEND)

    return _document_store
