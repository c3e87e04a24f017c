"""Document Registry — find-or-create a document under an exclusive row lock."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.models.document import Document

logger = logging.getLogger(__name__)


class DocumentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_or_create_locked(self, content_id: UUID, locale: str) -> Document:
        """Return the document row locked FOR UPDATE until the transaction ends.

        A concurrent insert of the same (content_id, locale) loses on the unique
        constraint inside a savepoint and re-reads the winner's row.
        """
        document = await self._find_locked(content_id, locale)
        if document:
            return document

        try:
            async with self.db.begin_nested():
                document = Document(content_id=content_id, locale=locale, lock_counter=0)
                self.db.add(document)
                await self.db.flush()
        except IntegrityError:
            logger.info(
                "Document created concurrently, re-reading",
                extra={"content_id": content_id, "locale": locale},
            )
            document = await self._find_locked(content_id, locale)
            if document is None:
                raise
        return document

    async def _find_locked(self, content_id: UUID, locale: str) -> Document | None:
        result = await self.db.execute(
            select(Document)
            .where(Document.content_id == content_id)
            .where(Document.locale == locale)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def find_locked(self, content_id: UUID, locale: str) -> Document | None:
        """Existing document locked FOR UPDATE, or None. Never creates."""
        return await self._find_locked(content_id, locale)
