"""Downstream Worker — processes one DownstreamJob against the draft or live sinks.

Invariants:
    - Draft jobs resolve the edition by the draft fallback order and only write
      the draft content store
    - Live jobs accept only published/unpublished editions; anything else is an
      InvalidStateError and never reaches a live sink
    - The message queue hears only about published editions
    - Every sink write goes through VersionGuard, except message_queue_only jobs
      (bulk requeue): they rebroadcast any live edition without the guard, never
      touch the live content store and record nothing in the ledger
    - EntityNotFoundError and InvalidStateError are reported, not retried;
      transport errors propagate so the work queue retries the job

Design Decisions:
    - alert_on_invalid_state=False downgrades the report to a warning log, used by
      bulk jobs that expect some items to have moved on
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.config import Settings
from content_sync.core.domain_types import (
    DRAFT_FALLBACK_ORDER, LIVE_FALLBACK_ORDER, EditionState, Sink,
)
from content_sync.core.downstream_payload import DownstreamPayload, build_downstream_payload
from content_sync.core.downstream_rules import (
    assert_live_state, message_update_type, routing_key,
    should_broadcast, should_send_to_draft, should_send_to_live,
)
from content_sync.core.errors import EntityNotFoundError, ErrorContext, InvalidStateError
from content_sync.core.keyed_lock import KeyedLock
from content_sync.core.repository_protocols import (
    ContentStore, ErrorReporter, MessagePublisher, WorkQueue,
)
from content_sync.models.edition import Edition
from content_sync.repositories.editions import EditionRepository
from content_sync.repositories.sink_versions import SinkVersionRepository
from content_sync.schemas.jobs import DownstreamJob
from content_sync.services.dependency_resolver import DependencyResolver
from content_sync.services.downstream_dispatch import DownstreamDispatch
from content_sync.services.version_guard import VersionGuard

logger = logging.getLogger(__name__)


class DownstreamWorker:
    def __init__(
        self,
        db: AsyncSession,
        draft_store: ContentStore,
        live_store: ContentStore,
        publisher: MessagePublisher,
        queue: WorkQueue,
        reporter: ErrorReporter,
        settings: Settings,
        locks: KeyedLock | None = None,
    ):
        self.db = db
        self.draft_store = draft_store
        self.live_store = live_store
        self.publisher = publisher
        self.reporter = reporter
        self.settings = settings
        self.editions = EditionRepository(db)
        self.guard = VersionGuard(db, SinkVersionRepository(db), locks)
        self.resolver = DependencyResolver(
            db, DownstreamDispatch(queue), settings.dependency_page_size,
        )
        self.empty_formats = frozenset(settings.empty_base_path_formats)

    async def perform(self, job: DownstreamJob) -> None:
        try:
            if job.sink == Sink.DRAFT:
                await self._perform_draft(job)
            else:
                await self._perform_live(job)
        except EntityNotFoundError as e:
            self.reporter.report(e, job.parameters())
        except InvalidStateError as e:
            if job.alert_on_invalid_state:
                self.reporter.report(e, job.parameters())
            else:
                logger.warning(
                    e.message,
                    extra={"content_id": job.content_id, "sink": job.sink.value},
                )

    # ─── Draft sink ─────────────────────────────────────────────

    async def _perform_draft(self, job: DownstreamJob) -> None:
        edition = await self._edition_for(job, DRAFT_FALLBACK_ORDER)
        payload = await self._payload(edition, job.version, DRAFT_FALLBACK_ORDER)

        if should_send_to_draft(payload.base_path, payload.schema_name, self.empty_formats):
            await self.guard.apply(Sink.DRAFT, payload, self._put_draft)

        if job.resolve_dependencies:
            await self.resolver.enqueue_dependents(job.content_id, job.version, Sink.DRAFT)

    async def _put_draft(self, payload: DownstreamPayload) -> None:
        await self.draft_store.put_content(
            payload.base_path, payload.for_content_store(Sink.DRAFT),
        )

    # ─── Live sinks ─────────────────────────────────────────────

    async def _perform_live(self, job: DownstreamJob) -> None:
        edition = await self._edition_for(job, LIVE_FALLBACK_ORDER)
        state = EditionState(edition.state)
        assert_live_state(state, str(job.content_id))
        payload = await self._payload(edition, job.version, LIVE_FALLBACK_ORDER)
        update_type = message_update_type(job.update_type_override, payload.update_type)

        if job.message_queue_only:
            await self._broadcast(payload, update_type)
            return

        if should_send_to_live(payload.base_path):
            await self.guard.apply(Sink.LIVE, payload, self._put_live)

        if should_broadcast(state):
            await self.guard.apply(
                Sink.MESSAGE_QUEUE, payload,
                lambda p: self._broadcast(p, update_type),
            )

        if job.resolve_dependencies:
            await self.resolver.enqueue_dependents(job.content_id, job.version, Sink.LIVE)

    async def _put_live(self, payload: DownstreamPayload) -> None:
        await self.live_store.put_content(
            payload.base_path, payload.for_content_store(Sink.LIVE),
        )

    async def _broadcast(self, payload: DownstreamPayload, update_type: str) -> None:
        await self.publisher.send_message(
            routing_key(payload.schema_name, update_type),
            payload.for_message_queue(update_type),
        )

    # ─── Loading ────────────────────────────────────────────────

    async def _edition_for(self, job: DownstreamJob, fallback_order) -> Edition:
        if job.edition_id is not None:
            edition = await self.editions.get(job.edition_id)
        elif job.sink == Sink.LIVE:
            edition = await self.editions.find_for_live(job.content_id, job.locale)
        else:
            edition = await self.editions.find_for_sink(
                job.content_id, job.locale, fallback_order,
            )
        if edition is None:
            raise EntityNotFoundError(
                "Edition", f"{job.content_id}:{job.locale}",
                ErrorContext(content_id=str(job.content_id), locale=job.locale),
            )
        return edition

    async def _payload(self, edition: Edition, version: int, fallback_order) -> DownstreamPayload:
        snapshot = await self.editions.snapshot(
            edition, fallback_order, self.settings.default_locale,
        )
        return build_downstream_payload(snapshot, version, fallback_order)
