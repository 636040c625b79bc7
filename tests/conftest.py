from __future__ import annotations

import io
import json
import logging

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.log import build_logger
from main import create_app


class InMemoryCommentRepository:
    """
    Same interface as comments.repository.CommentRepository, backed by a dict.
    """

    def __init__(self) -> None:
        self.rows: dict[int, dict] = {}
        self.calls = 0
        self._next_id = 1

    async def migrate(self) -> None:
        return None

    async def get_comment(self, comment_id: int) -> dict | None:
        self.calls += 1
        row = self.rows.get(comment_id)
        return dict(row) if row is not None else None

    async def list_comments(self) -> list[dict]:
        self.calls += 1
        return [dict(self.rows[k]) for k in sorted(self.rows)]

    async def insert_comment(self, *, slug: str, body: str, author: str) -> dict:
        self.calls += 1
        row = {"id": self._next_id, "slug": slug, "body": body, "author": author}
        self.rows[self._next_id] = row
        self._next_id += 1
        return dict(row)

    async def update_comment(self, comment_id: int, *, slug: str, body: str, author: str) -> dict | None:
        self.calls += 1
        if comment_id not in self.rows:
            return None
        row = {"id": comment_id, "slug": slug, "body": body, "author": author}
        self.rows[comment_id] = row
        return dict(row)

    async def delete_comment(self, comment_id: int) -> bool:
        self.calls += 1
        return self.rows.pop(comment_id, None) is not None


class FailingCommentRepository:
    """
    Every storage call fails the way a dropped connection does.
    """

    def __init__(self, exc: Exception | None = None) -> None:
        self.exc = exc or ConnectionRefusedError("connection refused")

    async def migrate(self) -> None:
        return None

    async def get_comment(self, comment_id: int) -> dict | None:
        raise self.exc

    async def list_comments(self) -> list[dict]:
        raise self.exc

    async def insert_comment(self, **kwargs) -> dict:
        raise self.exc

    async def update_comment(self, comment_id: int, **kwargs) -> dict | None:
        raise self.exc

    async def delete_comment(self, comment_id: int) -> bool:
        raise self.exc


def read_log(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def log_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(log_stream: io.StringIO) -> logging.Logger:
    return build_logger("comments.test", level="DEBUG", fmt="json", stream=log_stream)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def repository() -> InMemoryCommentRepository:
    return InMemoryCommentRepository()


@pytest.fixture
def client(settings, logger, repository):
    app = create_app(settings, logger=logger, repository=repository)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def make_client(logger):
    """
    Build a client around any repository / settings combination.
    """
    clients: list[TestClient] = []

    def _make(repository, settings: Settings | None = None) -> TestClient:
        app = create_app(settings or Settings(), logger=logger, repository=repository)
        test_client = TestClient(app, raise_server_exceptions=False)
        test_client.__enter__()
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        test_client.__exit__(None, None, None)
