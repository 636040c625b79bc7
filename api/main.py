from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Callable

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from comments import router as comments_router
from comments.repository import CommentRepository
from comments.service import CommentService
from core.config import Settings
from core.db import Database
from core.log import build_logger


def create_app(
    settings: Settings | None = None,
    *,
    logger: logging.Logger | None = None,
    repository: CommentRepository | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    logger = logger or build_logger(level=settings.log_level, fmt=settings.log_format)

    database: Database | None = None
    if repository is None:
        database = Database(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
        repository = CommentRepository(database)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        logger.info(
            "Setting up application",
            extra={"fields": {"AppName": settings.app_name, "AppVersion": settings.app_version}},
        )
        # An injected repository brings its own storage.
        if database is not None:
            await database.connect()
        try:
            if database is not None:
                await repository.migrate()
            yield
        finally:
            if database is not None:
                await database.close()

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.logger = logger
    app.state.comment_service = CommentService(repository, logger)

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable):
        start_time = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request",
            extra={
                "fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "elapsed_ms": round((time.perf_counter() - start_time) * 1000, 2),
                }
            },
        )
        return response

    async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        # Fails this request only; the server keeps running.
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            extra={"fields": {"method": request.method, "path": request.url.path}},
        )
        return JSONResponse(
            status_code=500,
            content={"Message": "Internal server error", "Error": str(exc) or exc.__class__.__name__},
        )

    app.add_exception_handler(comments_router.RouteError, comments_router.route_error_handler)
    app.add_exception_handler(Exception, unhandled_exception)
    app.include_router(comments_router.router, tags=["comments"])
    return app


def run() -> None:
    settings = Settings.from_env()
    logger = build_logger(level=settings.log_level, fmt=settings.log_format)
    app = create_app(settings, logger=logger)
    try:
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    except Exception:
        logger.error("Failed to set up server", exc_info=True)
        raise


if __name__ == "__main__":
    run()
