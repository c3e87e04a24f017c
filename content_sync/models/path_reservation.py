"""PathReservation ORM — which publishing app owns a base_path."""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from content_sync.db.base import Base


class PathReservation(Base):
    __tablename__ = "path_reservations"

    base_path: Mapped[str] = mapped_column(String(512), primary_key=True)
    publishing_app: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
