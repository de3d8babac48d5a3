"""
Archive store: where ArchivedMessage records live.

- ArchiveStore: protocol for insert / iter_expired / delete_expired.
- InMemoryArchiveStore: dict-backed store for tests and local dev without a database.
- SqlArchiveStore: SQLAlchemy async store over the `messages` table.

"Expired" always means saved_at < cutoff (strict), for both reads and deletes.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import AsyncIterator, Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from telegram_archive.db import session_scope
from telegram_archive.models import ArchivedMessage, ArchivedMessageRow

DEFAULT_BATCH_SIZE = 500


class ArchiveStore(Protocol):
    """Protocol for archive persistence."""

    async def insert(self, record: ArchivedMessage) -> None:
        ...

    def iter_expired(self, cutoff: datetime, batch_size: int = DEFAULT_BATCH_SIZE) -> AsyncIterator[ArchivedMessage]:
        """Yield records with saved_at < cutoff, fetched batch_size at a time."""
        ...

    async def delete_expired(self, cutoff: datetime) -> int:
        """Delete every record with saved_at < cutoff in one operation; return the count."""
        ...


async def find_expired(
    store: ArchiveStore, cutoff: datetime, batch_size: int = DEFAULT_BATCH_SIZE
) -> list[ArchivedMessage]:
    """Collect iter_expired() into a list."""
    return [record async for record in store.iter_expired(cutoff, batch_size)]


class InMemoryArchiveStore:
    """
    In-memory store for tests and local dev.

    Implements insert, iter_expired, delete_expired; no external services.
    """

    def __init__(self) -> None:
        self._records: dict[uuid.UUID, ArchivedMessage] = {}

    async def insert(self, record: ArchivedMessage) -> None:
        self._records[record.id] = record

    async def iter_expired(
        self, cutoff: datetime, batch_size: int = DEFAULT_BATCH_SIZE
    ) -> AsyncIterator[ArchivedMessage]:
        expired = sorted((r for r in self._records.values() if r.saved_at < cutoff), key=lambda r: r.id)
        for record in expired:
            yield record

    async def delete_expired(self, cutoff: datetime) -> int:
        expired = [key for key, r in self._records.items() if r.saved_at < cutoff]
        for key in expired:
            del self._records[key]
        return len(expired)

    def records(self) -> list[ArchivedMessage]:
        return list(self._records.values())


class SqlArchiveStore:
    """
    SQLAlchemy async store. Each call uses its own session from session_factory.

    iter_expired pages through expired rows by primary key, so memory stays
    bounded by batch_size regardless of archive size.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def insert(self, record: ArchivedMessage) -> None:
        async with session_scope(self._session_factory) as session:
            session.add(ArchivedMessageRow.from_record(record))

    async def iter_expired(
        self, cutoff: datetime, batch_size: int = DEFAULT_BATCH_SIZE
    ) -> AsyncIterator[ArchivedMessage]:
        last_id: uuid.UUID | None = None
        while True:
            stmt = select(ArchivedMessageRow).where(ArchivedMessageRow.saved_at < cutoff)
            if last_id is not None:
                stmt = stmt.where(ArchivedMessageRow.id > last_id)
            stmt = stmt.order_by(ArchivedMessageRow.id).limit(batch_size)
            async with session_scope(self._session_factory) as session:
                rows = list((await session.scalars(stmt)).all())
            for row in rows:
                yield row.to_record()
            if len(rows) < batch_size:
                return
            last_id = rows[-1].id

    async def delete_expired(self, cutoff: datetime) -> int:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(delete(ArchivedMessageRow).where(ArchivedMessageRow.saved_at < cutoff))
        return result.rowcount or 0
