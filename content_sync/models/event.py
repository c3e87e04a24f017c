"""Event ORM — append-only log of accepted mutations; id is the Version Clock.

Invariants:
    - id strictly increases and is never reused
    - Exactly one row per committed mutation, written in the same transaction
    - Every downstream payload carries an Event id as its version

Design Decisions:
    - BigInteger identity in PostgreSQL, INTEGER PRIMARY KEY (rowid alias) in SQLite
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Integer, String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from content_sync.db.base import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True, autoincrement=True,
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    content_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True, index=True,
    )
    locale: Mapped[str | None] = mapped_column(String(10), nullable=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
