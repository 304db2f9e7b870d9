"""Application errors and their mapping to HTTP status and message."""

from __future__ import annotations

import logging
from http import HTTPStatus

__all__ = [
    "AppError",
    "BadRequest",
    "DatabaseError",
    "MultipartError",
    "NotFoundError",
    "SerializationError",
    "error_response",
]

log = logging.getLogger(__name__)


class AppError(Exception):
    """Base class of errors that map to an HTTP response."""

    prefix = ""

    def __init__(self, detail: str) -> None:
        super().__init__(f"{self.prefix}{detail}")
        self.detail = detail


class DatabaseError(AppError):
    prefix = "database error: "


class NotFoundError(DatabaseError):
    """A query that expected a row returned none."""

    def __init__(
        self,
        detail: str = "no rows returned by a query that expected to return at least one row",
    ) -> None:
        super().__init__(detail)


class SerializationError(AppError):
    prefix = "serialization error: "


class BadRequest(AppError):
    prefix = "bad request: "


class MultipartError(AppError):
    prefix = "multipart error: "


def error_response(error: AppError) -> tuple[HTTPStatus, str]:
    """HTTP status and user-facing message for an application error."""
    if not isinstance(error, AppError):
        raise TypeError(f"not an application error: {error!r}")
    if isinstance(error, NotFoundError):
        return HTTPStatus.NOT_FOUND, "The requested item was not found."
    if isinstance(error, DatabaseError):
        log.error("database error: %s", error.detail)
        return HTTPStatus.INTERNAL_SERVER_ERROR, "A database error occurred. Please try again."
    if isinstance(error, BadRequest):
        return HTTPStatus.BAD_REQUEST, error.detail
    if isinstance(error, MultipartError):
        log.error("multipart error: %s", error.detail)
        return HTTPStatus.BAD_REQUEST, error.detail
    log.error("serialization error: %s", error.detail)
    return HTTPStatus.INTERNAL_SERVER_ERROR, "An internal error occurred."