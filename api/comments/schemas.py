"""
Pydantic schemas for comment endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Comment(BaseModel):
    id: int
    slug: str
    body: str
    author: str


class CommentDraft(BaseModel):
    """
    Client payload for create/update. Missing or null fields decode as empty
    strings. A client-supplied `id` must be an unsigned integer and is never used.
    """

    model_config = ConfigDict(extra="ignore")

    id: int | None = Field(default=None, ge=0)
    slug: str = ""
    body: str = ""
    author: str = ""

    @field_validator("slug", "body", "author", mode="before")
    @classmethod
    def _null_is_empty(cls, value):
        return "" if value is None else value


class MessageResponse(BaseModel):
    Message: str


class ErrorResponse(BaseModel):
    Message: str
    Error: str
