"""AccessLimit ORM — restricts an edition to named users and auth-bypass tokens.

Invariants:
    - Zero or one row per edition; absence means unrestricted
    - Replaced wholesale on every write (never merged)
"""

import uuid

from sqlalchemy import ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from content_sync.db.base import Base


class AccessLimit(Base):
    __tablename__ = "access_limits"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    edition_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("editions.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    users: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    auth_bypass_ids: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )

    edition: Mapped["Edition"] = relationship(
        "Edition", back_populates="access_limit",
    )
