"""Redirects — previous base_path forwarded to the new one when an item moves."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.models.redirect import Redirect


class RedirectRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self, content_id: UUID, locale: str, source_path: str, destination_path: str,
    ) -> Redirect:
        """Redirect source_path, repointing an existing redirect from the same path."""
        result = await self.db.execute(
            select(Redirect)
            .where(Redirect.content_id == content_id)
            .where(Redirect.locale == locale)
            .where(Redirect.source_path == source_path)
        )
        redirect = result.scalar_one_or_none()
        if redirect is None:
            redirect = Redirect(
                content_id=content_id, locale=locale,
                source_path=source_path, destination_path=destination_path,
            )
            self.db.add(redirect)
        else:
            redirect.destination_path = destination_path
        await self.db.flush()
        return redirect

    async def for_content(self, content_id: UUID, locale: str) -> list[Redirect]:
        result = await self.db.execute(
            select(Redirect)
            .where(Redirect.content_id == content_id)
            .where(Redirect.locale == locale)
            .order_by(Redirect.created_at)
        )
        return list(result.scalars().all())
