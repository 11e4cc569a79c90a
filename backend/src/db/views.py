"""
DDL for the bookmark_views materialized view.

The view embeds each bookmark's media and tags as JSON text so listing pages
need a single indexed read instead of joins plus per-row preloads. It is a
snapshot: rows appear or change only when ``REFRESH_BOOKMARK_VIEW_SQL`` runs.

The unique index on ``id`` is required by ``REFRESH MATERIALIZED VIEW
CONCURRENTLY``, which keeps the old contents readable while the new ones are
computed and swaps them in at the end.
"""
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

BOOKMARK_VIEW_NAME = "bookmark_views"

CREATE_BOOKMARK_VIEW_SQL = f"""
CREATE MATERIALIZED VIEW IF NOT EXISTS {BOOKMARK_VIEW_NAME} AS
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
"""

CREATE_BOOKMARK_VIEW_INDEXES_SQL = (
    f"CREATE UNIQUE INDEX IF NOT EXISTS ix_bookmark_views_id ON {BOOKMARK_VIEW_NAME} (id)",
    f"CREATE INDEX IF NOT EXISTS ix_bookmark_views_archived_created_at "
    f"ON {BOOKMARK_VIEW_NAME} (archived, created_at DESC)",
)

DROP_BOOKMARK_VIEW_SQL = f"DROP MATERIALIZED VIEW IF EXISTS {BOOKMARK_VIEW_NAME}"

REFRESH_BOOKMARK_VIEW_SQL = f"REFRESH MATERIALIZED VIEW CONCURRENTLY {BOOKMARK_VIEW_NAME}"


async def create_bookmark_view(conn: AsyncConnection) -> None:
    """Create the materialized view and its indexes if they don't exist yet."""
    await conn.execute(text(CREATE_BOOKMARK_VIEW_SQL))
    for statement in CREATE_BOOKMARK_VIEW_INDEXES_SQL:
        await conn.execute(text(statement))


async def drop_bookmark_view(conn: AsyncConnection) -> None:
    """Drop the materialized view (indexes go with it)."""
    await conn.execute(text(DROP_BOOKMARK_VIEW_SQL))
