"""Path Reservation Guard — one owning publishing app per base_path."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.errors import PathReservationConflictError
from content_sync.models.path_reservation import PathReservation


class PathReservationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def reserve(self, base_path: str, publishing_app: str | None) -> PathReservation:
        """Reserve base_path for publishing_app, or raise if another app owns it."""
        result = await self.db.execute(
            select(PathReservation)
            .where(PathReservation.base_path == base_path)
            .with_for_update()
        )
        reservation = result.scalar_one_or_none()
        if reservation is None:
            reservation = PathReservation(
                base_path=base_path, publishing_app=publishing_app or "unknown",
            )
            self.db.add(reservation)
            await self.db.flush()
            return reservation
        if publishing_app and reservation.publishing_app != publishing_app:
            raise PathReservationConflictError(base_path, reservation.publishing_app)
        return reservation
