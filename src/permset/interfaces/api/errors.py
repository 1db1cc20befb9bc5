"""Mapping of domain and validation errors onto HTTP responses."""

import logging

import falcon
import falcon.asgi
from pydantic import ValidationError

from permset.domain.exceptions import (
    Conflict,
    DatabaseError,
    Forbidden,
    InternalError,
    NotFound,
    PermsetError,
    Unauthorized,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

_STATUS = {
    NotFound: falcon.HTTP_404,
    Conflict: falcon.HTTP_409,
    ValidationFailed: falcon.HTTP_400,
    DatabaseError: falcon.HTTP_500,
    InternalError: falcon.HTTP_500,
    Unauthorized: falcon.HTTP_401,
    Forbidden: falcon.HTTP_403,
}


def status_for(error: PermsetError) -> str:
    for cls in type(error).__mro__:
        if cls in _STATUS:
            return _STATUS[cls]
    return falcon.HTTP_500


async def handle_permset_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: PermsetError, params
) -> None:
    resp.status = status_for(ex)
    resp.media = {"error": ex.to_dict()}


async def handle_validation_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: ValidationError, params
) -> None:
    first = ex.errors()[0] if ex.error_count() else {}
    body = {"code": "VALIDATION_FAILED", "message": first.get("msg", "Validation failed")}
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        body["field"] = location
    resp.status = falcon.HTTP_400
    resp.media = {"error": body}


async def handle_unexpected_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: Exception, params
) -> None:
    logger.exception("Unhandled error on %s %s", req.method, req.path)
    resp.status = falcon.HTTP_500
    resp.media = {"error": InternalError().to_dict()}


def register_error_handlers(app: falcon.asgi.App) -> None:
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(ValidationError, handle_validation_error)
    app.add_error_handler(PermsetError, handle_permset_error)
