"""Requeue — bulk resynchronization of every live edition.

Invariants:
    - Jobs go to the low queue, target a specific edition and never resolve
      dependencies
    - Broadcasts use the "bulk.reindex" update type so subscribers can ignore them
    - Message queue only: the live content store is not rewritten and the version
      ledger is bypassed, so every live edition is rebroadcast on every run
    - Invalid-state results are logged, not reported: editions may move on
      between enqueue and processing
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.domain_types import QueueClass
from content_sync.models.document import Document
from content_sync.repositories.editions import EditionRepository
from content_sync.repositories.events import EventRepository
from content_sync.services.downstream_dispatch import DownstreamDispatch
from content_sync.services.keyset_pagination import KeysetPagination

logger = logging.getLogger(__name__)

BULK_REINDEX = "bulk.reindex"
LIVE_ITEM_KEY = {"content_id": Document.content_id, "locale": Document.locale}


class RequeueLiveContent:
    def __init__(self, db: AsyncSession, dispatch: DownstreamDispatch, batch_size: int = 500):
        self.db = db
        self.dispatch = dispatch
        self.batch_size = batch_size

    async def call(self, version: int | None = None) -> int:
        version = version or await EventRepository(self.db).max_version()
        if version is None:
            return 0

        query = EditionRepository.live_items_query()
        after = None
        enqueued = 0
        while True:
            page = KeysetPagination(
                self.db, query, LIVE_ITEM_KEY, count=self.batch_size, after=after,
            )
            records = await page.call()
            for record in records:
                await self.dispatch.send_live(
                    record["content_id"], record["locale"], version,
                    queue_class=QueueClass.LOW,
                    update_type_override=BULK_REINDEX,
                    resolve_dependencies=False,
                    edition_id=record["edition_id"],
                    alert_on_invalid_state=False,
                    message_queue_only=True,
                )
                enqueued += 1
            if not records or not await page.has_next_after():
                break
            after = page.next_after_key

        logger.info(f"Requeued {enqueued} live editions at version {version}")
        return enqueued
