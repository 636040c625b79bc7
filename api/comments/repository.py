"""
Comment persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core.db import Database

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS comments (
      id         BIGSERIAL PRIMARY KEY,
      slug       TEXT NOT NULL DEFAULT '',
      body       TEXT NOT NULL DEFAULT '',
      author     TEXT NOT NULL DEFAULT '',
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
)


class CommentRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def migrate(self) -> None:
        await self.db.migrate(*SCHEMA)

    async def get_comment(self, comment_id: int) -> dict[str, Any] | None:
        return await self.db.fetch_one(
            """
            SELECT id, slug, body, author
            FROM comments
            WHERE id = $1
            """,
            comment_id,
        )

    async def list_comments(self) -> list[dict[str, Any]]:
        return await self.db.fetch_all(
            """
            SELECT id, slug, body, author
            FROM comments
            ORDER BY id
            """
        )

    async def insert_comment(self, *, slug: str, body: str, author: str) -> dict[str, Any]:
        row = await self.db.fetch_one(
            """
            INSERT INTO comments (slug, body, author)
            VALUES ($1, $2, $3)
            RETURNING id, slug, body, author
            """,
            slug,
            body,
            author,
        )
        if row is None:
            raise RuntimeError("Failed to insert comment.")
        return row

    async def update_comment(
        self,
        comment_id: int,
        *,
        slug: str,
        body: str,
        author: str,
    ) -> dict[str, Any] | None:
        """
        Overwrite every mutable column. Returns None when the row does not exist.
        """
        return await self.db.fetch_one(
            """
            UPDATE comments
            SET slug = $2,
                body = $3,
                author = $4,
                updated_at = now()
            WHERE id = $1
            RETURNING id, slug, body, author
            """,
            comment_id,
            slug,
            body,
            author,
        )

    async def delete_comment(self, comment_id: int) -> bool:
        row = await self.db.fetch_one(
            """
            DELETE FROM comments
            WHERE id = $1
            RETURNING id
            """,
            comment_id,
        )
        return row is not None
