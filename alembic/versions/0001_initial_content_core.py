"""initial content core

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _document_status():
    return sa.Column(
        "status",
        sa.Enum("draft", "published", name="page_status", native_enum=False, create_constraint=True),
        nullable=False,
        server_default="draft",
    )


def upgrade():
    op.create_table(
        "auth_identities",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("email", sa.String(length=160), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("email_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_auth_identities"),
    )
    op.create_index("ix_auth_identities_email", "auth_identities", ["email"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("email", sa.String(length=160), nullable=False),
        sa.Column("first_name", sa.String(length=80), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(length=80), nullable=False, server_default=""),
        sa.Column("phone_number", sa.String(length=40), nullable=False, server_default=""),
        sa.Column(
            "role",
            sa.Enum("admin", "editor", "viewer", name="userrole", native_enum=False),
            nullable=False,
            server_default="viewer",
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "content_models",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("api_identifier", sa.String(length=64), nullable=False),
        sa.Column("description", sa.String(length=1024), nullable=False, server_default=""),
        sa.Column("icon", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("fields", JSON_TYPE, nullable=False),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_content_models"),
        sa.UniqueConstraint("api_identifier", name="uq_content_models_api_identifier"),
    )

    op.create_table(
        "content_entries",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("content_model_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("fields", JSON_TYPE, nullable=False),
        sa.Column(
            "status",
            sa.Enum("draft", "published", "archived", name="entry_status", native_enum=False, create_constraint=True),
            nullable=False,
            server_default="draft",
        ),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_content_entries"),
    )
    op.create_index("ix_content_entries_content_model_id", "content_entries", ["content_model_id"])
    op.create_index("ix_content_entries_model_status", "content_entries", ["content_model_id", "status"])

    op.create_table(
        "media",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("url", sa.String(length=1024), nullable=False),
        sa.Column("mime_type", sa.String(length=128), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("uploaded_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_media"),
    )

    for table, extra in (
        ("pages", []),
        ("posts", [
            sa.Column("excerpt", sa.String(length=1024), nullable=False, server_default=""),
            sa.Column("featured_image", sa.String(length=1024), nullable=False, server_default=""),
        ]),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("slug", sa.String(length=255), nullable=False),
            sa.Column("content", sa.Text(), nullable=False, server_default=""),
            *extra,
            sa.Column("meta_description", sa.String(length=512), nullable=False, server_default=""),
            sa.Column("meta_keywords", sa.String(length=512), nullable=False, server_default=""),
            _document_status(),
            sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_by", sa.String(length=36), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
            sa.UniqueConstraint("slug", name=f"uq_{table}_slug"),
        )


def downgrade():
    for table in ("posts", "pages", "media"):
        op.drop_table(table)
    op.drop_index("ix_content_entries_model_status", table_name="content_entries")
    op.drop_index("ix_content_entries_content_model_id", table_name="content_entries")
    op.drop_table("content_entries")
    op.drop_table("content_models")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_auth_identities_email", table_name="auth_identities")
    op.drop_table("auth_identities")
