"""Document ORM — identity anchor for one content item in one locale.

Invariants:
    - Exactly one row per (content_id, locale)
    - lock_counter never decreases; it survives publish/unpublish/redraft cycles
    - Never deleted by this service

Design Decisions:
    - lock_counter lives here, not on Edition, so a fresh draft resumes counting
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from content_sync.db.base import Base


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("content_id", "locale", name="uq_documents_content_id_locale"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    content_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    locale: Mapped[str] = mapped_column(String(10), nullable=False)
    lock_counter: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
