"""Edition ORM — one versioned instance of a document's content and lifecycle state.

Invariants:
    - state is one of: draft, published, unpublished, superseded
    - At most one draft and at most one published edition per document
    - Links and the access limit are owned by the edition (delete-orphan)
    - content holds the opaque body (description, details)

Design Decisions:
    - JSON columns for content and unpublishing: stored as submitted
    - document eager-joined: every edition read needs content_id/locale
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, JSON, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from content_sync.db.base import Base


# A document never has two drafts or two published editions.
SINGLE_STATE_CONDITION = "state IN ('draft', 'published')"


class Edition(Base):
    __tablename__ = "editions"
    __table_args__ = (
        Index("ix_editions_document_id_state", "document_id", "state"),
        Index("ix_editions_base_path_state", "base_path", "state"),
        Index("ix_editions_updated_at_id", "updated_at", "id"),
        Index(
            "uq_editions_document_id_single_state", "document_id", "state",
            unique=True,
            postgresql_where=text(SINGLE_STATE_CONDITION),
            sqlite_where=text(SINGLE_STATE_CONDITION),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("documents.id"), nullable=False,
    )
    state: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft",
    )
    user_facing_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1,
    )
    base_path: Mapped[str | None] = mapped_column(String(512), nullable=True)
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)
    schema_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    document_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    update_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    publishing_app: Mapped[str | None] = mapped_column(String(100), nullable=True)
    content: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    unpublishing: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    last_edited_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    document: Mapped["Document"] = relationship("Document", lazy="joined")
    links: Mapped[list["Link"]] = relationship(
        "Link", back_populates="edition",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Link.position",
    )
    access_limit: Mapped["AccessLimit | None"] = relationship(
        "AccessLimit", back_populates="edition", uselist=False,
        cascade="all, delete-orphan", lazy="selectin",
    )
