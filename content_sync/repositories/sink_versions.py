"""Sink Version Ledger — last version applied per (sink, content_id, locale).

Invariants:
    - last_recorded() first makes sure the ledger row exists (version 0), then
      row-locks it, so read, delivery and record() all run under one lock even
      for an item the sink has never seen
    - record() runs under that lock and simply stores the delivered version
"""

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.domain_types import Sink
from content_sync.core.downstream_payload import DownstreamPayload
from content_sync.models.sink_version import SinkVersion

NEVER_APPLIED = 0


class SinkVersionRepository:
    """SQL implementation of the VersionLedger protocol."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def last_recorded(self, sink: Sink, payload: DownstreamPayload) -> int | None:
        """Create-then-lock the ledger row; None when nothing was applied yet."""
        await self._ensure_row(sink, payload)
        row = await self._get(sink, payload, lock=True)
        if row is None or row.version == NEVER_APPLIED:
            return None
        return row.version

    async def record(self, sink: Sink, payload: DownstreamPayload) -> None:
        row = await self._get(sink, payload, lock=False)
        row.version = payload.version
        await self.db.flush()

    async def _ensure_row(self, sink: Sink, payload: DownstreamPayload) -> None:
        insert = (
            sqlite_insert if self.db.get_bind().dialect.name == "sqlite" else pg_insert
        )
        await self.db.execute(
            insert(SinkVersion)
            .values(
                sink=sink.value, content_id=payload.content_id,
                locale=payload.locale, version=NEVER_APPLIED,
            )
            .on_conflict_do_nothing()
        )

    async def _get(self, sink: Sink, payload: DownstreamPayload, lock: bool) -> SinkVersion | None:
        query = (
            select(SinkVersion)
            .where(SinkVersion.sink == sink.value)
            .where(SinkVersion.content_id == payload.content_id)
            .where(SinkVersion.locale == payload.locale)
        )
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
