"""Event Log — the Version Clock. One row per committed mutation."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.domain_types import EventAction
from content_sync.models.event import Event


class EventRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        action: EventAction,
        payload: dict,
        content_id: UUID | None = None,
        locale: str | None = None,
    ) -> Event:
        """Append an event and flush so its id (the version) is assigned."""
        event = Event(
            action=action.value, payload=payload,
            content_id=content_id, locale=locale,
        )
        self.db.add(event)
        await self.db.flush()
        return event

    async def max_version(self) -> int | None:
        result = await self.db.execute(select(func.max(Event.id)))
        return result.scalar_one_or_none()
