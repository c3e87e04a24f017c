"""Publish — promotes a document's draft edition to published.

Invariants:
    - The previous live edition (published or unpublished) becomes superseded,
      so a document never has two live editions
    - update_type comes from the request, else the draft; missing in both is a
      ValidationError
    - lock_counter goes up by one; user_facing_version stays as the draft's
    - Both the draft and live sinks are notified after commit
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.config import Settings
from content_sync.core.domain_types import EditionState, EventAction
from content_sync.core.edition_rules import (
    check_previous_version, next_lock_counter, resolve_publish_update_type,
)
from content_sync.core.errors import EntityNotFoundError, ErrorContext, ValidationError
from content_sync.core.keyed_lock import KeyedLock
from content_sync.repositories.documents import DocumentRepository
from content_sync.repositories.editions import EditionRepository
from content_sync.repositories.events import EventRepository
from content_sync.schemas.content import EditionResponse, PublishRequest
from content_sync.services.downstream_dispatch import DownstreamDispatch, queue_class_for
from content_sync.services.presenters import present_edition

logger = logging.getLogger(__name__)


class Publish:
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

    async def call(self, content_id: UUID, request: PublishRequest) -> EditionResponse:
        locale = request.locale or self.settings.default_locale
        context = ErrorContext(content_id=str(content_id), locale=locale)

        async with self.locks.hold(content_id, locale):
            try:
                document = await self.documents.find_locked(content_id, locale)
                if document is None:
                    raise EntityNotFoundError("Document", str(content_id), context)
                check_previous_version(
                    request.previous_version, document.lock_counter, str(content_id),
                )

                draft = await self.editions.draft_for(document)
                if draft is None:
                    if await self.editions.latest_live_for(document):
                        raise ValidationError(
                            "Cannot publish an already published edition",
                            {"state": ["no draft to publish"]}, context,
                        )
                    raise EntityNotFoundError("Draft edition", str(content_id), context)

                update_type = resolve_publish_update_type(
                    request.update_type, draft.update_type,
                )

                previous = await self.editions.latest_live_for(document)
                if previous is not None:
                    previous.state = EditionState.SUPERSEDED.value
                    # Flushed first: the partial unique index allows one published edition
                    await self.db.flush()

                draft.state = EditionState.PUBLISHED.value
                draft.update_type = update_type.value
                draft.published_at = datetime.now(timezone.utc)
                document.lock_counter = next_lock_counter(document.lock_counter)

                event = await self.events.record(
                    EventAction.PUBLISH,
                    {"content_id": str(content_id), **request.model_dump(mode="json")},
                    content_id=content_id,
                    locale=locale,
                )
                await self.db.commit()
            except BaseException:
                await self.db.rollback()
                raise

        logger.info(
            f"Published v{draft.user_facing_version}",
            extra={"content_id": content_id, "locale": locale, "version": event.id},
        )
        queue_class = queue_class_for(request.bulk_publishing)
        await self.dispatch.send_draft(content_id, locale, event.id, queue_class=queue_class)
        await self.dispatch.send_live(content_id, locale, event.id, queue_class=queue_class)
        return present_edition(draft, event.id)
