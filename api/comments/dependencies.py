"""
Request-scoped access to the objects wired in `main.create_app`.
"""

from __future__ import annotations

import logging

from fastapi import Request

from core.config import Settings

from .service import CommentService


def get_comment_service(request: Request) -> CommentService:
    return request.app.state.comment_service


def get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
