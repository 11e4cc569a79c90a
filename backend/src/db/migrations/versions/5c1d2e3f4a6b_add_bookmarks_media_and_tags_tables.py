"""
Add bookmarks, media, tags and bookmark_tags tables.

Seeds the standard tags ("To do", "To read").

Revision ID: 5c1d2e3f4a6b
Revises:
Create Date: 2024-11-02 14:05:12.418230
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "5c1d2e3f4a6b"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "bookmarks",
        sa.Column("id", sa.String(length=30), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("full_text", sa.Text(), nullable=False),
        sa.Column("screen_name", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("profile_image_url", sa.Text(), nullable=False),
        sa.Column("in_reply_to", sa.String(length=30), nullable=True),
        sa.Column("retweeted_status", sa.String(length=30), nullable=True),
        sa.Column("quoted_status", sa.String(length=30), nullable=True),
        sa.Column("favorite_count", sa.Integer(), nullable=False),
        sa.Column("retweet_count", sa.Integer(), nullable=False),
        sa.Column("bookmark_count", sa.Integer(), nullable=False),
        sa.Column("quote_count", sa.Integer(), nullable=False),
        sa.Column("reply_count", sa.Integer(), nullable=False),
        sa.Column("views_count", sa.Integer(), nullable=False),
        sa.Column("favorited", sa.Boolean(), nullable=False),
        sa.Column("retweeted", sa.Boolean(), nullable=False),
        sa.Column("bookmarked", sa.Boolean(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("archived", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_bookmarks_archived_created_at", "bookmarks", ["archived", "created_at"],
    )

    op.create_table(
        "media",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("bookmark_id", sa.String(length=30), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("thumbnail", sa.Text(), nullable=False),
        sa.Column("original", sa.Text(), nullable=False),
        sa.Column("file_name", sa.Text(), nullable=True),
        sa.Column("file_data", sa.LargeBinary(), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["bookmark_id"], ["bookmarks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_media_bookmark_id"), "media", ["bookmark_id"])

    tags = op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "bookmark_tags",
        sa.Column("bookmark_id", sa.String(length=30), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.Column("completed", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["bookmark_id"], ["bookmarks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("bookmark_id", "tag_id"),
    )
    op.create_index("ix_bookmark_tags_tag_id", "bookmark_tags", ["tag_id"])
    op.create_index(op.f("ix_bookmark_tags_completed"), "bookmark_tags", ["completed"])

    op.bulk_insert(tags, [{"name": "To do"}, {"name": "To read"}])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_bookmark_tags_completed"), table_name="bookmark_tags")
    op.drop_index("ix_bookmark_tags_tag_id", table_name="bookmark_tags")
    op.drop_table("bookmark_tags")
    op.drop_table("tags")
    op.drop_index(op.f("ix_media_bookmark_id"), table_name="media")
    op.drop_table("media")
    op.drop_index("ix_bookmarks_archived_created_at", table_name="bookmarks")
    op.drop_table("bookmarks")
