"""
Add bookmark_views materialized view.

A denormalized copy of bookmarks with media and tags embedded as JSON text,
refreshed periodically by the API process. The unique index on id is what
allows REFRESH MATERIALIZED VIEW CONCURRENTLY.

Revision ID: 8e4f1a7b9c20
Revises: 5c1d2e3f4a6b
Create Date: 2024-11-09 10:41:37.092115
"""
from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8e4f1a7b9c20"
down_revision: str | Sequence[str] | None = "5c1d2e3f4a6b"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.execute(
        """
        CREATE MATERIALIZED VIEW bookmark_views AS
        SELECT
            b.id,
            b.created_at,
            b.full_text,
            b.screen_name,
            b.name,
            b.profile_image_url,
            b.favorite_count,
            b.retweet_count,
            b.views_count,
            b.url,
            b.archived,
            COALESCE(
                (
                    SELECT json_agg(
                        json_build_object(
                            'id', m.id,
                            'type', m.type,
                            'url', m.url,
                            'thumbnail', m.thumbnail,
                            'original', m.original,
                            'file_name', m.file_name,
                            'has_file', m.file_data IS NOT NULL
                        )
                        ORDER BY m.id
                    )
                    FROM media m
                    WHERE m.bookmark_id = b.id
                ),
                '[]'::json
            )::text AS media_json,
            COALESCE(
                (
                    SELECT json_agg(
                        json_build_object('id', t.id, 'name', t.name, 'completed', bt.completed)
                        ORDER BY t.name
                    )
                    FROM bookmark_tags bt
                    JOIN tags t ON t.id = bt.tag_id
                    WHERE bt.bookmark_id = b.id
                ),
                '[]'::json
            )::text AS tags_json
        FROM bookmarks b
        WITH DATA
        """,
    )
    op.execute("CREATE UNIQUE INDEX ix_bookmark_views_id ON bookmark_views (id)")
    op.execute(
        "CREATE INDEX ix_bookmark_views_archived_created_at "
        "ON bookmark_views (archived, created_at DESC)",
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.execute("DROP MATERIALIZED VIEW IF EXISTS bookmark_views")
