from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from data.database import Database
from data.schema import DBSeenItem


class SeenItemRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def insert_if_new(self, source: str, url: str) -> bool:
        """Record ``url`` for ``source``. Returns False if it was already there."""
        stmt = (
            sqlite_insert(DBSeenItem)
            .values(source=source, url=url, fetch_date=datetime.now(timezone.utc))
            .on_conflict_do_nothing(index_elements=["source", "url"])
        )
        result = await self._s.execute(stmt)
        return bool(result.rowcount and result.rowcount > 0)

    async def latest_url(self, source: str) -> str | None:
        q = (
            select(DBSeenItem.url)
            .where(DBSeenItem.source == source)
            .order_by(DBSeenItem.fetch_date.desc(), DBSeenItem.id.desc())
            .limit(1)
        )
        return await self._s.scalar(q)


class DedupGate:
    """Durable "have we reported this post before" ledger."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def mark_and_check(self, source_name: str, url: str) -> bool:
        """Mark ``(source_name, url)`` as seen; True only the first time."""
        async with self._db.session() as session:
            return await SeenItemRepository(session).insert_if_new(source_name, url)

    async def latest(self, source_name: str) -> str | None:
        async with self._db.session() as session:
            return await SeenItemRepository(session).latest_url(source_name)
