"""
db/record_store.py
------------------
Collection-oriented gateway over the relational store.

Callers address records by collection name ("users", "companies", ...) and
plain dicts, the way the admin tooling has always talked to its document
database. Nothing above this module builds SQL.

Design decisions:
  - One session per call. Batch operations run writes concurrently and an
    AsyncSession must never be shared between tasks.
  - Every write commits on its own. Two writes that belong together (a
    company and its user) are NOT atomic; the reconciliation scan exists
    to find the pairs that diverged.
  - Any SQLAlchemyError is logged and re-raised as StoreUnavailable. There
    is no retry.
"""

from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, Mapping, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chathub_admin.core.exceptions import RecordNotFound, StoreUnavailable
from chathub_admin.core.logging import get_logger
from chathub_admin.models import (
    AuditLogEntry,
    Company,
    DeletedCompany,
    User,
    WebsiteRequest,
)

logger = get_logger(__name__)

COLLECTIONS = {
    "users": User,
    "companies": Company,
    "deleted_companies": DeletedCompany,
    "audit_log": AuditLogEntry,
    "website_requests": WebsiteRequest,
}


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class RecordStore:

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # ── Helpers ───────────────────────────────────────────────────────────────

    @staticmethod
    def _model(collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection '{collection}'") from None

    @staticmethod
    def _column(model, field: str):
        if field not in model.__table__.columns:
            raise ValueError(f"Unknown field '{field}' on '{model.__tablename__}'")
        return getattr(model, field)

    def _clean(self, model, doc: Mapping[str, Any]) -> dict:
        for field in doc:
            self._column(model, field)
        return {k: _plain(v) for k, v in doc.items()}

    @asynccontextmanager
    async def _session(self, collection: str, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error(
                "Record store call failed",
                collection=collection,
                operation=operation,
                error=str(exc),
            )
            raise StoreUnavailable(collection, operation, str(exc)) from exc

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def list(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
    ) -> list:
        """
        Full scan of a collection, optionally narrowed by equality filters.

        A filter value of None matches records where the field is missing.
        Ties under order_by keep the store's natural order.
        """
        model = self._model(collection)
        stmt = select(model)
        for field, value in (filters or {}).items():
            column = self._column(model, field)
            if value is None:
                stmt = stmt.where(column.is_(None))
            else:
                stmt = stmt.where(column == _plain(value))
        if order_by is not None:
            column = self._column(model, order_by)
            stmt = stmt.order_by(column.desc() if descending else column.asc())

        async with self._session(collection, "list") as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def get(self, collection: str, record_id: str):
        model = self._model(collection)
        async with self._session(collection, "get") as session:
            return await session.get(model, record_id)

    # ── Writes ────────────────────────────────────────────────────────────────

    async def create(self, collection: str, doc: Mapping[str, Any]) -> str:
        model = self._model(collection)
        record = model(**self._clean(model, doc))
        async with self._session(collection, "create") as session:
            session.add(record)
            await session.commit()
            logger.debug("Record created", collection=collection, record_id=record.id)
            return record.id

    async def update(
        self, collection: str, record_id: str, patch: Mapping[str, Any]
    ) -> None:
        model = self._model(collection)
        values = self._clean(model, patch)
        async with self._session(collection, "update") as session:
            result = await session.execute(
                update(model).where(model.id == record_id).values(**values)
            )
            await session.commit()
        if result.rowcount == 0:
            raise RecordNotFound(record_id, collection)

    async def delete(self, collection: str, record_id: str) -> None:
        model = self._model(collection)
        async with self._session(collection, "delete") as session:
            result = await session.execute(delete(model).where(model.id == record_id))
            await session.commit()
        if result.rowcount == 0:
            raise RecordNotFound(record_id, collection)
