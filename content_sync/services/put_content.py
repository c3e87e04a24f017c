"""Put Content — the content-mutation transaction for one (content_id, locale).

Invariants:
    - Request validation (base_path, links, access limit) runs before any write
    - The whole mutation, including its Event row, commits atomically or not at all
    - Concurrent mutations of the same (content_id, locale) are serialized:
      KeyedLock in-process, SELECT ... FOR UPDATE on the document row otherwise
    - Downstream jobs are enqueued only after commit, carrying the Event id

Design Decisions:
    - The link policy is a parameter: MergeByType for the v2 endpoint,
      ReplaceExceptProtected for the legacy draft-with-links endpoint
    - Only the draft sink is notified; the live sinks hear about publish/unpublish
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.config import Settings
from content_sync.core.domain_types import EventAction
from content_sync.core.edition_rules import (
    base_path_required, check_previous_version, needs_redirect,
    validate_access_limit, validate_base_path,
)
from content_sync.core.keyed_lock import KeyedLock
from content_sync.core.link_policy import LinkPolicy, MergeByType, normalize_links
from content_sync.models.edition import Edition
from content_sync.repositories.documents import DocumentRepository
from content_sync.repositories.editions import EditionRepository
from content_sync.repositories.events import EventRepository
from content_sync.repositories.path_reservations import PathReservationRepository
from content_sync.repositories.redirects import RedirectRepository
from content_sync.schemas.content import ContentRequest, EditionResponse
from content_sync.services.downstream_dispatch import DownstreamDispatch, queue_class_for
from content_sync.services.edition_writer import EditionWriter
from content_sync.services.presenters import edition_warnings, present_edition

logger = logging.getLogger(__name__)


@dataclass
class _Validated:
    links: dict[str, list[UUID]]
    access_limit: tuple[list[str], list[str]] | None
    base_path_required: bool


class PutContent:
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
        self.reservations = PathReservationRepository(db)
        self.redirects = RedirectRepository(db)
        self.writer = EditionWriter(db)

    async def call(
        self,
        content_id: UUID,
        request: ContentRequest,
        policy: LinkPolicy = MergeByType(),
        action: EventAction = EventAction.PUT_CONTENT,
    ) -> EditionResponse:
        locale = request.locale or self.settings.default_locale
        validated = self._validate(request)

        async with self.locks.hold(content_id, locale):
            try:
                edition, version = await self._mutate(
                    content_id, locale, request, validated, policy, action,
                )
                warnings = await edition_warnings(self.editions, edition)
                await self.db.commit()
            except BaseException:
                await self.db.rollback()
                raise

        logger.info(
            f"{action.value} committed",
            extra={"content_id": content_id, "locale": locale, "version": version},
        )
        await self.dispatch.send_draft(
            content_id, locale, version,
            queue_class=queue_class_for(request.bulk_publishing),
        )
        return present_edition(edition, version, warnings)

    def _validate(self, request: ContentRequest) -> _Validated:
        required = base_path_required(
            request.schema_name, frozenset(self.settings.empty_base_path_formats),
        )
        validate_base_path(request.base_path, required)
        links = normalize_links(request.links)
        access_limit = None
        if request.access_limited is not None:
            access_limit = validate_access_limit(
                request.access_limited.users, request.access_limited.bypass_ids(),
            )
        return _Validated(links, access_limit, required)

    async def _mutate(
        self,
        content_id: UUID,
        locale: str,
        request: ContentRequest,
        validated: _Validated,
        policy: LinkPolicy,
        action: EventAction,
    ) -> tuple[Edition, int]:
        document = await self.documents.find_or_create_locked(content_id, locale)
        check_previous_version(
            request.previous_version, document.lock_counter, str(content_id),
        )
        if request.base_path is not None:
            await self.reservations.reserve(request.base_path, request.publishing_app)

        live = await self.editions.latest_live_for(document)
        edition = await self.writer.create_or_update(document, request)

        if live is not None and needs_redirect(
            live.base_path, request.base_path, validated.base_path_required,
        ):
            await self.redirects.create(
                content_id, locale, live.base_path, request.base_path,
            )

        self.writer.set_access_limit(edition, validated.access_limit)
        self.writer.set_last_edited_at(edition, request.last_edited_at, request.update_type)
        await self.writer.apply_links(
            edition, policy, validated.links, request.publishing_app,
        )

        event = await self.events.record(
            action,
            request.model_dump(mode="json"),
            content_id=content_id,
            locale=locale,
        )
        return edition, event.id

