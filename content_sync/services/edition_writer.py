"""Edition Writer — creates or updates the draft edition of a locked document.

Invariants:
    - At most one draft per document: an existing draft is updated in place and
      its counters do not move
    - A new draft gets user_facing_version = latest live + 1 and bumps the
      document lock_counter
    - A new draft starts from the live edition's links
    - Link deletions are flushed before insertions so re-adding a removed
      (link_type, target) never trips the unique constraint

Design Decisions:
    - Relationships are initialised explicitly on new editions so no lazy load
      is ever triggered on an AsyncSession
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.domain_types import EditionState, UpdateType
from content_sync.core.edition_rules import (
    next_lock_counter, next_user_facing_version, resolve_last_edited_at,
)
from content_sync.core.link_policy import LinkPlan, LinkPolicy, LinkRow, plan_link_mutation
from content_sync.models.access_limit import AccessLimit
from content_sync.models.document import Document
from content_sync.models.edition import Edition
from content_sync.models.link import Link
from content_sync.repositories.editions import EditionRepository
from content_sync.schemas.content import ContentRequest

logger = logging.getLogger(__name__)


class EditionWriter:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.editions = EditionRepository(db)

    async def create_or_update(self, document: Document, request: ContentRequest) -> Edition:
        draft = await self.editions.draft_for(document)
        if draft is not None:
            self._assign(draft, request)
            return draft

        live = await self.editions.latest_live_for(document)
        document.lock_counter = next_lock_counter(document.lock_counter)
        edition = Edition(
            document=document,
            state=EditionState.DRAFT.value,
            user_facing_version=next_user_facing_version(
                live.user_facing_version if live else None,
            ),
            links=[
                Link(
                    link_type=link.link_type,
                    target_content_id=link.target_content_id,
                    position=link.position,
                )
                for link in (live.links if live else [])
            ],
            access_limit=None,
        )
        self._assign(edition, request)
        self.db.add(edition)
        await self.db.flush()
        logger.info(
            f"Created draft v{edition.user_facing_version}",
            extra={"content_id": document.content_id, "locale": document.locale},
        )
        return edition

    def _assign(self, edition: Edition, request: ContentRequest) -> None:
        edition.base_path = request.base_path
        edition.title = request.title
        edition.schema_name = request.schema_name
        edition.document_type = request.document_type
        edition.update_type = request.update_type.value if request.update_type else None
        edition.publishing_app = request.publishing_app
        edition.content = request.body()

    def set_access_limit(self, edition: Edition, limit: tuple[list[str], list[str]] | None) -> None:
        """Replace the access limit wholesale; None removes it."""
        if limit is None:
            edition.access_limit = None
            return
        users, auth_bypass_ids = limit
        if edition.access_limit is None:
            edition.access_limit = AccessLimit(users=users, auth_bypass_ids=auth_bypass_ids)
        else:
            edition.access_limit.users = users
            edition.access_limit.auth_bypass_ids = auth_bypass_ids

    def set_last_edited_at(
        self,
        edition: Edition,
        explicit: datetime | None,
        update_type: UpdateType | None,
    ) -> None:
        stamped = resolve_last_edited_at(explicit, update_type, datetime.now(timezone.utc))
        if stamped is not None:
            edition.last_edited_at = stamped

    async def apply_links(
        self,
        edition: Edition,
        policy: LinkPolicy,
        incoming: dict[str, list[UUID]],
        publishing_app: str | None,
    ) -> LinkPlan:
        existing = [
            LinkRow(link.link_type, link.target_content_id, link.position)
            for link in edition.links
        ]
        plan = plan_link_mutation(policy, existing, incoming, publishing_app)
        if plan.delete:
            doomed = set(plan.delete)
            edition.links = [
                link for link in edition.links
                if LinkRow(link.link_type, link.target_content_id, link.position) not in doomed
            ]
            await self.db.flush()
        for row in plan.create:
            edition.links.append(Link(
                link_type=row.link_type,
                target_content_id=row.target_content_id,
                position=row.position,
            ))
        if plan.changed:
            await self.db.flush()
        return plan
