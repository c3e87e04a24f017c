"""Patch Link Set — links-only update of a document's draft and live editions.

Invariants:
    - Merge-by-type: link types absent from the request are untouched
    - Both the draft and the live edition (if any) receive the new links, so the
      change is visible without a new publish
    - The live sink is notified with update type "links" for message routing
    - Like a draft edit, a link patch moves neither counter
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.config import Settings
from content_sync.core.domain_types import EventAction, UpdateType
from content_sync.core.edition_rules import check_previous_version
from content_sync.core.errors import EntityNotFoundError, ErrorContext
from content_sync.core.keyed_lock import KeyedLock
from content_sync.core.link_policy import MergeByType, normalize_links
from content_sync.repositories.documents import DocumentRepository
from content_sync.repositories.editions import EditionRepository
from content_sync.repositories.events import EventRepository
from content_sync.schemas.content import EditionResponse, LinkSetRequest
from content_sync.services.downstream_dispatch import DownstreamDispatch, queue_class_for
from content_sync.services.edition_writer import EditionWriter
from content_sync.services.presenters import present_edition

logger = logging.getLogger(__name__)


class PatchLinkSet:
    def __init__(
        self,
        db: AsyncSession,
        dispatch: DownstreamDispatch,
        locks: KeyedLock,
        settings: Settings,
    ):
        self.db = db
        self.dispatch = dispatch
        self.locks = locks
        self.settings = settings
        self.documents = DocumentRepository(db)
        self.editions = EditionRepository(db)
        self.events = EventRepository(db)
        self.writer = EditionWriter(db)

    async def call(self, content_id: UUID, request: LinkSetRequest) -> EditionResponse:
        locale = request.locale or self.settings.default_locale
        context = ErrorContext(content_id=str(content_id), locale=locale)
        links = normalize_links(request.links)

        async with self.locks.hold(content_id, locale):
            try:
                document = await self.documents.find_locked(content_id, locale)
                if document is None:
                    raise EntityNotFoundError("Document", str(content_id), context)
                check_previous_version(
                    request.previous_version, document.lock_counter, str(content_id),
                )

                draft = await self.editions.draft_for(document)
                live = await self.editions.latest_live_for(document)
                targets = [e for e in (draft, live) if e is not None]
                if not targets:
                    raise EntityNotFoundError("Edition", str(content_id), context)

                for edition in targets:
                    await self.writer.apply_links(edition, MergeByType(), links, None)

                event = await self.events.record(
                    EventAction.PATCH_LINK_SET,
                    {"content_id": str(content_id), **request.model_dump(mode="json")},
                    content_id=content_id,
                    locale=locale,
                )
                await self.db.commit()
            except BaseException:
                await self.db.rollback()
                raise

        logger.info(
            "Link set patched",
            extra={"content_id": content_id, "locale": locale, "version": event.id},
        )
        queue_class = queue_class_for(request.bulk_publishing)
        await self.dispatch.send_draft(content_id, locale, event.id, queue_class=queue_class)
        if live is not None:
            await self.dispatch.send_live(
                content_id, locale, event.id,
                queue_class=queue_class,
                update_type_override=UpdateType.LINKS.value,
            )
        return present_edition(draft or live, event.id)
