"""
Comment API endpoints.

Every failure is answered with `{"Message": ..., "Error": ...}`. The status
depends on the error class (400 / 404 / 500) unless the app runs with
`uniform_error_status`, in which case every failure is a 500.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from core.errors import CommentServiceError, InputError, NotFoundError

from . import dependencies, schemas
from .service import CommentService

router = APIRouter(prefix="/api")

# comments.id is a BIGSERIAL.
MAX_COMMENT_ID = 2**63 - 1

MSG_BAD_ID = "Unable to parse UINT from ID"
MSG_BAD_BODY = "Failed to decode JSON body"


class RouteError(Exception):
    """
    A service or input failure paired with the operation-level message shown
    to the client.
    """

    def __init__(self, message: str, cause: CommentServiceError) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


def parse_comment_id(raw: str) -> int:
    if not raw.isascii() or not raw.isdigit():
        raise InputError(f'invalid comment id "{raw}": not an unsigned integer')
    value = int(raw)
    if value > MAX_COMMENT_ID:
        raise InputError(f'invalid comment id "{raw}": value out of range')
    return value


def decode_draft(raw: bytes) -> schemas.CommentDraft:
    # A JSON null body decodes to an empty draft.
    if raw.strip() == b"null":
        return schemas.CommentDraft()
    try:
        return schemas.CommentDraft.model_validate_json(raw)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        raise InputError(details) from exc


def _status_for(exc: CommentServiceError) -> int:
    if isinstance(exc, InputError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    return 500


async def route_error_handler(request: Request, exc: RouteError) -> JSONResponse:
    settings = dependencies.get_settings(request)
    logger = dependencies.get_logger(request)

    status_code = 500 if settings.uniform_error_status else _status_for(exc.cause)
    fields = {
        "method": request.method,
        "path": request.url.path,
        "status": status_code,
        "error": str(exc.cause),
    }
    if isinstance(exc.cause, InputError):
        logger.warning(exc.message, extra={"fields": fields})
    elif isinstance(exc.cause, NotFoundError):
        logger.info(exc.message, extra={"fields": fields})
    else:
        logger.error(exc.message, extra={"fields": fields})

    body = schemas.ErrorResponse(Message=exc.message, Error=str(exc.cause))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.get("/comments")
async def get_all_comments(
    service: CommentService = Depends(dependencies.get_comment_service),
) -> list[schemas.Comment]:
    try:
        return await service.get_all_comments()
    except CommentServiceError as exc:
        raise RouteError("Failed to retrieve all comments", exc) from exc


@router.post("/comments")
async def post_comment(
    request: Request,
    service: CommentService = Depends(dependencies.get_comment_service),
) -> schemas.Comment:
    try:
        draft = decode_draft(await request.body())
    except InputError as exc:
        raise RouteError(MSG_BAD_BODY, exc) from exc

    try:
        return await service.post_comment(draft)
    except CommentServiceError as exc:
        raise RouteError("Failed to add new comment", exc) from exc


@router.get("/comments/{comment_id}")
async def get_comment(
    comment_id: str,
    service: CommentService = Depends(dependencies.get_comment_service),
) -> schemas.Comment:
    try:
        parsed_id = parse_comment_id(comment_id)
    except InputError as exc:
        raise RouteError(MSG_BAD_ID, exc) from exc

    try:
        return await service.get_comment(parsed_id)
    except CommentServiceError as exc:
        raise RouteError("Error retrieving comment by ID", exc) from exc


@router.put("/comments/{comment_id}")
async def update_comment(
    comment_id: str,
    request: Request,
    service: CommentService = Depends(dependencies.get_comment_service),
) -> schemas.Comment:
    # Body first, then id.
    try:
        draft = decode_draft(await request.body())
    except InputError as exc:
        raise RouteError(MSG_BAD_BODY, exc) from exc

    try:
        parsed_id = parse_comment_id(comment_id)
    except InputError as exc:
        raise RouteError(MSG_BAD_ID, exc) from exc

    try:
        return await service.update_comment(parsed_id, draft)
    except CommentServiceError as exc:
        raise RouteError("Failed to update comment", exc) from exc


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: str,
    service: CommentService = Depends(dependencies.get_comment_service),
) -> schemas.MessageResponse:
    try:
        parsed_id = parse_comment_id(comment_id)
    except InputError as exc:
        raise RouteError(MSG_BAD_ID, exc) from exc

    try:
        await service.delete_comment(parsed_id)
    except CommentServiceError as exc:
        raise RouteError("Error deleting comment by ID", exc) from exc
    return schemas.MessageResponse(Message="Successfully deleted comment")


@router.get("/health")
async def health() -> schemas.MessageResponse:
    # Liveness only; never touches the database.
    return schemas.MessageResponse(Message="I am alive!")
