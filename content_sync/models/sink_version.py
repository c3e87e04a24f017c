"""SinkVersion ORM — version guard ledger, last applied version per sink and item.

Invariants:
    - One row per (sink, content_id, locale)
    - version only ever increases; 0 means the row was created by the guard
      before anything was delivered
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from content_sync.db.base import Base


class SinkVersion(Base):
    __tablename__ = "sink_versions"

    sink: Mapped[str] = mapped_column(String(20), primary_key=True)
    content_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True,
    )
    locale: Mapped[str] = mapped_column(String(10), primary_key=True)
    version: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
