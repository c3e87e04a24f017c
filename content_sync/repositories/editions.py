"""Edition Repository — edition lookups, snapshots and the relations paginated over.

Invariants:
    - draft_for returns at most one edition (partial unique index on editions)
    - find_for_sink picks the first state in the sink's fallback order, newest
      user_facing_version first within a state
    - snapshot() only reads; links and access limit are already eager-loaded
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.domain_types import EditionState, LIVE_FALLBACK_ORDER
from content_sync.core.downstream_payload import (
    AccessLimitSnapshot, EditionSnapshot, LinkedEdition,
)
from content_sync.core.link_policy import LinkRow
from content_sync.models.document import Document
from content_sync.models.edition import Edition
from content_sync.models.link import Link

LIVE_STATE_VALUES = [s.value for s in LIVE_FALLBACK_ORDER]


class EditionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Per-document lookups ───────────────────────────────────

    async def draft_for(self, document: Document) -> Edition | None:
        return await self._latest(document, [EditionState.DRAFT.value])

    async def latest_live_for(self, document: Document) -> Edition | None:
        """Most recent published or unpublished edition, the seed for a new draft."""
        return await self._latest(document, LIVE_STATE_VALUES)

    async def _latest(self, document: Document, states: list[str]) -> Edition | None:
        result = await self.db.execute(
            select(Edition)
            .where(Edition.document_id == document.id)
            .where(Edition.state.in_(states))
            .order_by(Edition.user_facing_version.desc(), Edition.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    # ─── Sink lookups ───────────────────────────────────────────

    async def get(self, edition_id: UUID) -> Edition | None:
        result = await self.db.execute(select(Edition).where(Edition.id == edition_id))
        return result.scalar_one_or_none()

    async def find_for_sink(
        self, content_id: UUID, locale: str, fallback_order: tuple[EditionState, ...],
    ) -> Edition | None:
        editions = await self._for_content(
            content_id, locale, [s.value for s in fallback_order],
        )
        if not editions:
            return None
        rank = {state.value: i for i, state in enumerate(fallback_order)}
        return min(editions, key=lambda e: (rank[e.state], -e.user_facing_version))

    async def find_for_live(self, content_id: UUID, locale: str) -> Edition | None:
        """Live edition if any, else the newest edition of any state.

        Returning a draft or superseded edition lets the caller detect and
        report the invalid state instead of silently skipping.
        """
        edition = await self.find_for_sink(content_id, locale, LIVE_FALLBACK_ORDER)
        if edition:
            return edition
        editions = await self._for_content(content_id, locale, None)
        if not editions:
            return None
        return max(editions, key=lambda e: e.user_facing_version)

    async def _for_content(
        self, content_id: UUID, locale: str, states: list[str] | None,
    ) -> list[Edition]:
        query = (
            select(Edition)
            .join(Document, Edition.document_id == Document.id)
            .where(Document.content_id == content_id)
            .where(Document.locale == locale)
        )
        if states is not None:
            query = query.where(Edition.state.in_(states))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def blocking_edition(self, edition: Edition) -> Edition | None:
        """Another document's published edition holding the same base_path."""
        if edition.base_path is None:
            return None
        result = await self.db.execute(
            select(Edition)
            .join(Document, Edition.document_id == Document.id)
            .where(Edition.base_path == edition.base_path)
            .where(Edition.state == EditionState.PUBLISHED.value)
            .where(Edition.document_id != edition.document_id)
            .where(Document.locale == edition.document.locale)
            .limit(1)
        )
        return result.scalar_one_or_none()

    # ─── Snapshots ──────────────────────────────────────────────

    async def snapshot(
        self,
        edition: Edition,
        fallback_order: tuple[EditionState, ...],
        default_locale: str,
    ) -> EditionSnapshot:
        document = edition.document
        links = tuple(
            LinkRow(link.link_type, link.target_content_id, link.position)
            for link in edition.links
        )
        linked = await self.linked_editions(
            {link.target_content_id for link in links},
            {document.locale, default_locale},
            fallback_order,
        )
        access_limit = None
        if edition.access_limit is not None:
            access_limit = AccessLimitSnapshot(
                users=tuple(edition.access_limit.users),
                auth_bypass_ids=tuple(edition.access_limit.auth_bypass_ids),
            )
        return EditionSnapshot(
            edition_id=edition.id,
            content_id=document.content_id,
            locale=document.locale,
            state=EditionState(edition.state),
            user_facing_version=edition.user_facing_version,
            base_path=edition.base_path,
            title=edition.title,
            schema_name=edition.schema_name,
            document_type=edition.document_type,
            update_type=edition.update_type,
            publishing_app=edition.publishing_app,
            content=dict(edition.content or {}),
            unpublishing=edition.unpublishing,
            last_edited_at=edition.last_edited_at,
            published_at=edition.published_at,
            links=links,
            access_limit=access_limit,
            linked_editions=tuple(linked),
            default_locale=default_locale,
        )

    async def linked_editions(
        self,
        target_ids: set[UUID],
        locales: set[str],
        fallback_order: tuple[EditionState, ...],
    ) -> list[LinkedEdition]:
        if not target_ids:
            return []
        result = await self.db.execute(
            select(
                Document.content_id, Document.locale, Edition.state,
                Edition.base_path, Edition.title,
                Edition.schema_name, Edition.document_type,
            )
            .join(Document, Edition.document_id == Document.id)
            .where(Document.content_id.in_(target_ids))
            .where(Document.locale.in_(locales))
            .where(Edition.state.in_([s.value for s in fallback_order]))
        )
        return [
            LinkedEdition(
                content_id=row.content_id,
                locale=row.locale,
                state=EditionState(row.state),
                base_path=row.base_path,
                title=row.title,
                schema_name=row.schema_name,
                document_type=row.document_type,
            )
            for row in result.all()
        ]

    # ─── Relations for keyset pagination ───────────────────────

    @staticmethod
    def dependents_query(
        content_id: UUID, fallback_order: tuple[EditionState, ...],
    ) -> Select:
        """Documents whose editions in the given states link to content_id."""
        return (
            select(
                Document.content_id.label("content_id"),
                Document.locale.label("locale"),
            )
            .join(Edition, Edition.document_id == Document.id)
            .join(Link, Link.edition_id == Edition.id)
            .where(Link.target_content_id == content_id)
            .where(Edition.state.in_([s.value for s in fallback_order]))
            .where(Document.content_id != content_id)
            .distinct()
        )

    @staticmethod
    def live_items_query() -> Select:
        return (
            select(
                Edition.id.label("edition_id"),
                Document.content_id.label("content_id"),
                Document.locale.label("locale"),
            )
            .join(Document, Edition.document_id == Document.id)
            .where(Edition.state.in_(LIVE_STATE_VALUES))
        )

    @staticmethod
    def listing_query(
        publishing_app: str | None = None, states: list[str] | None = None,
    ) -> Select:
        query = (
            select(
                Edition.id.label("id"),
                Document.content_id.label("content_id"),
                Document.locale.label("locale"),
                Edition.state.label("state"),
                Edition.user_facing_version.label("user_facing_version"),
                Edition.base_path.label("base_path"),
                Edition.title.label("title"),
                Edition.schema_name.label("schema_name"),
                Edition.document_type.label("document_type"),
                Edition.publishing_app.label("publishing_app"),
                Edition.updated_at.label("updated_at"),
            )
            .join(Document, Edition.document_id == Document.id)
        )
        if publishing_app:
            query = query.where(Edition.publishing_app == publishing_app)
        if states:
            query = query.where(Edition.state.in_(states))
        return query
