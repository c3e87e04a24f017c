"""Initial schema — documents, editions, links, access limits, events, sink ledger.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("content_id", UUID(as_uuid=True), nullable=False),
        sa.Column("locale", sa.String(10), nullable=False),
        sa.Column("lock_counter", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("content_id", "locale", name="uq_documents_content_id_locale"),
    )
    op.create_index("ix_documents_content_id", "documents", ["content_id"])

    op.create_table(
        "editions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("document_id", UUID(as_uuid=True), sa.ForeignKey("documents.id"), nullable=False),
        sa.Column("state", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("user_facing_version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("base_path", sa.String(512), nullable=True),
        sa.Column("title", sa.String(512), nullable=True),
        sa.Column("schema_name", sa.String(100), nullable=True),
        sa.Column("document_type", sa.String(100), nullable=True),
        sa.Column("update_type", sa.String(20), nullable=True),
        sa.Column("publishing_app", sa.String(100), nullable=True),
        sa.Column("content", sa.JSON, nullable=False),
        sa.Column("unpublishing", sa.JSON, nullable=True),
        sa.Column("last_edited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_editions_document_id_state", "editions", ["document_id", "state"])
    op.create_index("ix_editions_base_path_state", "editions", ["base_path", "state"])
    op.create_index("ix_editions_updated_at_id", "editions", ["updated_at", "id"])
    op.create_index(
        "uq_editions_document_id_single_state", "editions", ["document_id", "state"],
        unique=True,
        postgresql_where=sa.text("state IN ('draft', 'published')"),
        sqlite_where=sa.text("state IN ('draft', 'published')"),
    )

    op.create_table(
        "links",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "edition_id", UUID(as_uuid=True),
            sa.ForeignKey("editions.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("link_type", sa.String(100), nullable=False),
        sa.Column("target_content_id", UUID(as_uuid=True), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.UniqueConstraint(
            "edition_id", "link_type", "target_content_id",
            name="uq_links_edition_type_target",
        ),
    )
    op.create_index("ix_links_edition_id", "links", ["edition_id"])
    op.create_index("ix_links_target_content_id", "links", ["target_content_id"])

    op.create_table(
        "access_limits",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "edition_id", UUID(as_uuid=True),
            sa.ForeignKey("editions.id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column("users", sa.JSON, nullable=False),
        sa.Column("auth_bypass_ids", sa.JSON, nullable=False),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("content_id", UUID(as_uuid=True), nullable=True),
        sa.Column("locale", sa.String(10), nullable=True),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_events_content_id", "events", ["content_id"])

    op.create_table(
        "path_reservations",
        sa.Column("base_path", sa.String(512), primary_key=True),
        sa.Column("publishing_app", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "redirects",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("content_id", UUID(as_uuid=True), nullable=False),
        sa.Column("locale", sa.String(10), nullable=False),
        sa.Column("source_path", sa.String(512), nullable=False),
        sa.Column("destination_path", sa.String(512), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_redirects_content_id", "redirects", ["content_id"])

    op.create_table(
        "sink_versions",
        sa.Column("sink", sa.String(20), primary_key=True),
        sa.Column("content_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("locale", sa.String(10), primary_key=True),
        sa.Column("version", sa.BigInteger, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("sink_versions")
    op.drop_table("redirects")
    op.drop_table("path_reservations")
    op.drop_table("events")
    op.drop_table("access_limits")
    op.drop_table("links")
    op.drop_table("editions")
    op.drop_table("documents")
