import logging
from http import HTTPStatus

import pytest

from f1clash.error import (
    BadRequest,
    DatabaseError,
    MultipartError,
    NotFoundError,
    SerializationError,
    error_response,
)


def test_not_found_maps_to_404():
    err = NotFoundError()
    assert isinstance(err, DatabaseError)
    assert error_response(err) == (HTTPStatus.NOT_FOUND, "The requested item was not found.")


def test_database_error_hides_detail(caplog):
    with caplog.at_level(logging.ERROR):
        result = error_response(DatabaseError("connection refused"))
    assert result == (
        HTTPStatus.INTERNAL_SERVER_ERROR,
        "A database error occurred. Please try again.",
    )
    assert "connection refused" in caplog.text


def test_serialization_error():
    assert error_response(SerializationError("bad json")) == (
        HTTPStatus.INTERNAL_SERVER_ERROR,
        "An internal error occurred.",
    )


def test_bad_request_passes_message():
    assert error_response(BadRequest("Invalid level")) == (HTTPStatus.BAD_REQUEST, "Invalid level")


def test_multipart_error_passes_detail():
    assert error_response(MultipartError("missing boundary")) == (
        HTTPStatus.BAD_REQUEST,
        "missing boundary",
    )


def test_messages_carry_prefixes():
    assert str(BadRequest("x")) == "bad request: x"
    assert str(DatabaseError("boom")) == "database error: boom"
    assert str(SerializationError("eof")) == "serialization error: eof"
    assert str(MultipartError("cut")) == "multipart error: cut"


def test_non_app_error_rejected():
    with pytest.raises(TypeError):
        error_response(ValueError("nope"))