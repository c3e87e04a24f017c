"""Put Draft Content With Links — legacy endpoint for publishers not yet on v2.

Invariants:
    - With a content_id: replace-except-protected link policy, then the ordinary
      content-mutation transaction
    - Without a content_id: reserve the path, record the Event, commit, then
      write the draft content store synchronously; its failures reach the caller

Design Decisions:
    - The synchronous write carries no content_id, so it bypasses the version
      ledger; the store's own payload_version check still applies
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.config import Settings
from content_sync.core.domain_types import EditionState, EventAction, Sink, DRAFT_FALLBACK_ORDER
from content_sync.core.downstream_payload import EditionSnapshot, build_downstream_payload
from content_sync.core.edition_rules import base_path_required, validate_base_path
from content_sync.core.errors import ValidationError
from content_sync.core.keyed_lock import KeyedLock
from content_sync.core.link_policy import ReplaceExceptProtected
from content_sync.core.repository_protocols import ContentStore
from content_sync.repositories.events import EventRepository
from content_sync.repositories.path_reservations import PathReservationRepository
from content_sync.schemas.content import ContentRequest
from content_sync.services.downstream_dispatch import DownstreamDispatch
from content_sync.services.put_content import PutContent

logger = logging.getLogger(__name__)


class PutDraftContentWithLinks:
    def __init__(
        self,
        db: AsyncSession,
        dispatch: DownstreamDispatch,
        locks: KeyedLock,
        settings: Settings,
        draft_store: ContentStore,
    ):
        self.db = db
        self.dispatch = dispatch
        self.locks = locks
        self.settings = settings
        self.draft_store = draft_store
        self.policy = ReplaceExceptProtected(
            protected_link_types=frozenset(settings.protected_link_types),
            exempt_apps=frozenset(settings.link_replace_exempt_apps),
        )

    async def call(self, request: ContentRequest) -> dict:
        if request.content_id is not None:
            response = await PutContent(
                self.db, self.dispatch, self.locks, self.settings,
            ).call(
                request.content_id, request,
                policy=self.policy,
                action=EventAction.PUT_DRAFT_CONTENT_WITH_LINKS,
            )
            return response.model_dump(mode="json")
        return await self._write_pathed_draft(request)

    async def _write_pathed_draft(self, request: ContentRequest) -> dict:
        if request.base_path is None:
            raise ValidationError(
                "base_path is required without a content_id",
                {"base_path": ["is required"]},
            )
        validate_base_path(
            request.base_path,
            base_path_required(
                request.schema_name, frozenset(self.settings.empty_base_path_formats),
            ),
        )
        locale = request.locale or self.settings.default_locale

        async with self.locks.hold(request.base_path, locale):
            try:
                await PathReservationRepository(self.db).reserve(
                    request.base_path, request.publishing_app,
                )
                event = await EventRepository(self.db).record(
                    EventAction.PUT_DRAFT_CONTENT_WITH_LINKS,
                    request.model_dump(mode="json"),
                    locale=locale,
                )
                await self.db.commit()
            except BaseException:
                await self.db.rollback()
                raise

        snapshot = EditionSnapshot(
            edition_id=None,
            content_id=None,
            locale=locale,
            state=EditionState.DRAFT,
            user_facing_version=1,
            base_path=request.base_path,
            title=request.title,
            schema_name=request.schema_name,
            document_type=request.document_type,
            update_type=request.update_type.value if request.update_type else None,
            publishing_app=request.publishing_app,
            content=request.body(),
            last_edited_at=request.last_edited_at,
            default_locale=self.settings.default_locale,
        )
        payload = build_downstream_payload(snapshot, event.id, DRAFT_FALLBACK_ORDER)
        body = payload.for_content_store(Sink.DRAFT)
        await self.draft_store.put_content(request.base_path, body)
        logger.info(
            f"Wrote {request.base_path} to the draft content store",
            extra={"path": request.base_path, "version": event.id},
        )
        return body
