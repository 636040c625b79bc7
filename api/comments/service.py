"""
Comment business logic.

Pure pass-through to the repository: no cache, no retries, no transactions
spanning operations. Missing rows become `NotFoundError`; driver and
connection failures become `PersistenceError`.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import asyncpg

from core.errors import CommentServiceError, NotFoundError, PersistenceError

from . import schemas
from .repository import CommentRepository


def _to_comment(row: dict) -> schemas.Comment:
    return schemas.Comment(
        id=int(row["id"]),
        slug=str(row["slug"]),
        body=str(row["body"]),
        author=str(row["author"]),
    )


def _not_found(comment_id: int) -> NotFoundError:
    return NotFoundError(f"comment {comment_id} not found")


class CommentService:
    def __init__(self, repository: CommentRepository, logger: logging.Logger) -> None:
        self.repository = repository
        self.logger = logger

    @asynccontextmanager
    async def _storage(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except CommentServiceError:
            raise
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError, RuntimeError) as exc:
            self.logger.error(
                "persistence_failed",
                exc_info=True,
                extra={"fields": {"operation": operation}},
            )
            raise PersistenceError(str(exc) or exc.__class__.__name__) from exc

    async def get_comment(self, comment_id: int) -> schemas.Comment:
        async with self._storage("get_comment"):
            row = await self.repository.get_comment(comment_id)
        if row is None:
            raise _not_found(comment_id)
        return _to_comment(row)

    async def get_all_comments(self) -> list[schemas.Comment]:
        async with self._storage("get_all_comments"):
            rows = await self.repository.list_comments()
        return [_to_comment(row) for row in rows]

    async def post_comment(self, draft: schemas.CommentDraft) -> schemas.Comment:
        # draft.id is ignored; the store assigns ids.
        async with self._storage("post_comment"):
            row = await self.repository.insert_comment(
                slug=draft.slug,
                body=draft.body,
                author=draft.author,
            )
        return _to_comment(row)

    async def update_comment(self, comment_id: int, draft: schemas.CommentDraft) -> schemas.Comment:
        # The path id wins over any id in the payload.
        async with self._storage("update_comment"):
            row = await self.repository.update_comment(
                comment_id,
                slug=draft.slug,
                body=draft.body,
                author=draft.author,
            )
        if row is None:
            raise _not_found(comment_id)
        return _to_comment(row)

    async def delete_comment(self, comment_id: int) -> None:
        async with self._storage("delete_comment"):
            deleted = await self.repository.delete_comment(comment_id)
        if not deleted:
            raise _not_found(comment_id)
