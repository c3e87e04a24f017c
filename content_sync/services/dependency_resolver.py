"""Dependency Resolver — re-sends items that link to a changed item.

Invariants:
    - Dependents are found through link targets, restricted to editions in the
      sink's fallback states; the changed item itself is excluded
    - Fan-out jobs carry the triggering version, go to the low queue and never
      resolve dependencies again (no cascades)
    - Live fan-out is a links-only update for message routing
    - Dependents are walked in keyset pages over (content_id, locale)
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.domain_types import QueueClass, Sink, UpdateType, fallback_order_for
from content_sync.models.document import Document
from content_sync.repositories.editions import EditionRepository
from content_sync.services.downstream_dispatch import DownstreamDispatch
from content_sync.services.keyset_pagination import KeysetPagination

logger = logging.getLogger(__name__)

DEPENDENT_KEY = {"content_id": Document.content_id, "locale": Document.locale}


class DependencyResolver:
    def __init__(self, db: AsyncSession, dispatch: DownstreamDispatch, page_size: int = 500):
        self.db = db
        self.dispatch = dispatch
        self.page_size = page_size

    async def enqueue_dependents(self, content_id: UUID, version: int, sink: Sink) -> int:
        query = EditionRepository.dependents_query(content_id, fallback_order_for(sink))
        after = None
        enqueued = 0
        while True:
            page = KeysetPagination(
                self.db, query, DEPENDENT_KEY, count=self.page_size, after=after,
            )
            records = await page.call()
            for record in records:
                await self._send(sink, record["content_id"], record["locale"], version)
                enqueued += 1
            if not records or not await page.has_next_after():
                break
            after = page.next_after_key

        if enqueued:
            logger.info(
                f"Enqueued {enqueued} dependents of {content_id} for {sink.value}",
                extra={"content_id": content_id, "sink": sink.value, "version": version},
            )
        return enqueued

    async def _send(self, sink: Sink, content_id: UUID, locale: str, version: int) -> None:
        if sink == Sink.DRAFT:
            await self.dispatch.send_draft(
                content_id, locale, version,
                queue_class=QueueClass.LOW, resolve_dependencies=False,
            )
        else:
            await self.dispatch.send_live(
                content_id, locale, version,
                queue_class=QueueClass.LOW,
                update_type_override=UpdateType.LINKS.value,
                resolve_dependencies=False,
            )
