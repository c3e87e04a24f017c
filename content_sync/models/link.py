"""Link ORM — directed, typed edge from an edition to another content item.

Invariants:
    - Unique on (edition_id, link_type, target_content_id)
    - position orders targets within a link_type
    - Deleted with the owning edition
"""

import uuid

from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from content_sync.db.base import Base


class Link(Base):
    __tablename__ = "links"
    __table_args__ = (
        UniqueConstraint(
            "edition_id", "link_type", "target_content_id",
            name="uq_links_edition_type_target",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    edition_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("editions.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    link_type: Mapped[str] = mapped_column(String(100), nullable=False)
    target_content_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    edition: Mapped["Edition"] = relationship("Edition", back_populates="links")
