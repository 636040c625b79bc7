"""
Failures surfaced to HTTP callers.

Each class maps to one response status in `comments/router.py`.
"""

from __future__ import annotations


class CommentServiceError(RuntimeError):
    pass


class InputError(CommentServiceError):
    """Malformed path id or request body."""


class NotFoundError(CommentServiceError):
    pass


class PersistenceError(CommentServiceError):
    """The database failed (connection loss, constraint violation, ...)."""
