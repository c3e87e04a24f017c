"""Unpublish — withdraws, removes or redirects a document's live edition.

Invariants:
    - Only a published or unpublished edition can be unpublished; unpublishing an
      unpublished edition amends its unpublishing details
    - A present draft blocks the operation unless discard_drafts is set, in which
      case the draft is deleted in the same transaction
    - redirect requires alternative_path, withdrawal requires explanation
    - lock_counter goes up by one; live and draft sinks notified after commit
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.config import Settings
from content_sync.core.domain_types import EditionState, EventAction, UnpublishingType
from content_sync.core.edition_rules import (
    can_unpublish, check_previous_version, next_lock_counter, validate_base_path,
)
from content_sync.core.errors import EntityNotFoundError, ErrorContext, ValidationError
from content_sync.core.keyed_lock import KeyedLock
from content_sync.repositories.documents import DocumentRepository
from content_sync.repositories.editions import EditionRepository
from content_sync.repositories.events import EventRepository
from content_sync.schemas.content import EditionResponse, UnpublishRequest
from content_sync.services.downstream_dispatch import DownstreamDispatch, queue_class_for
from content_sync.services.presenters import present_edition

logger = logging.getLogger(__name__)


def validate_unpublishing(request: UnpublishRequest) -> None:
    if request.type == UnpublishingType.REDIRECT:
        if not request.alternative_path:
            raise ValidationError(
                "alternative_path is required for a redirect",
                {"alternative_path": ["is required"]},
            )
        validate_base_path(request.alternative_path, required=True)
    if request.type == UnpublishingType.WITHDRAWAL and not request.explanation:
        raise ValidationError(
            "explanation is required for a withdrawal",
            {"explanation": ["is required"]},
        )


class Unpublish:
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

    async def call(self, content_id: UUID, request: UnpublishRequest) -> EditionResponse:
        locale = request.locale or self.settings.default_locale
        context = ErrorContext(content_id=str(content_id), locale=locale)
        validate_unpublishing(request)

        async with self.locks.hold(content_id, locale):
            try:
                document = await self.documents.find_locked(content_id, locale)
                if document is None:
                    raise EntityNotFoundError("Document", str(content_id), context)
                check_previous_version(
                    request.previous_version, document.lock_counter, str(content_id),
                )

                draft = await self.editions.draft_for(document)
                if draft is not None:
                    if not request.discard_drafts:
                        raise ValidationError(
                            "Cannot unpublish with a draft present",
                            {"discard_drafts": ["must be true to discard the draft"]},
                            context,
                        )
                    await self.db.delete(draft)

                live = await self.editions.latest_live_for(document)
                if live is None or not can_unpublish(EditionState(live.state)):
                    raise EntityNotFoundError("Published edition", str(content_id), context)

                live.state = EditionState.UNPUBLISHED.value
                live.unpublishing = {
                    "type": request.type.value,
                    "explanation": request.explanation,
                    "alternative_path": request.alternative_path,
                    "unpublished_at": datetime.now(timezone.utc).isoformat(),
                }
                document.lock_counter = next_lock_counter(document.lock_counter)

                event = await self.events.record(
                    EventAction.UNPUBLISH,
                    {"content_id": str(content_id), **request.model_dump(mode="json")},
                    content_id=content_id,
                    locale=locale,
                )
                await self.db.commit()
            except BaseException:
                await self.db.rollback()
                raise

        logger.info(
            f"Unpublished ({request.type.value})",
            extra={"content_id": content_id, "locale": locale, "version": event.id},
        )
        queue_class = queue_class_for(request.bulk_publishing)
        await self.dispatch.send_live(content_id, locale, event.id, queue_class=queue_class)
        await self.dispatch.send_draft(content_id, locale, event.id, queue_class=queue_class)
        return present_edition(live, event.id)
