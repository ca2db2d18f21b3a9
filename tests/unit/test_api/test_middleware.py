"""Unit tests for request ID and logging middleware helpers."""

import pytest

from colorquiz.api.middleware.error_handler import status_for
from colorquiz.api.middleware.logging_middleware import LoggingMiddleware
from colorquiz.api.middleware.request_id import RequestIDMiddleware
from colorquiz.utils.exceptions import (
    AllocationError,
    DataIntegrityError,
    IncompleteError,
    NoQuestionsError,
    ResourceNotFoundError,
    StoreFailure,
    ValidationError,
)


async def noop_app(scope, receive, send):
    pass


class TestRequestIdValidation:

    @pytest.mark.parametrize("request_id, valid", [
        ("abcd-1234", True),
        ("a" * 128, True),
        ("short", False),
        ("a" * 129, False),
        ("<script>alert</script>", False),
        ("", False),
        (None, False),
    ])
    def test_header_values(self, request_id, valid):
        middleware = RequestIDMiddleware(noop_app)

        assert middleware._is_valid_request_id(request_id) is valid


class TestResourceId:

    @pytest.mark.parametrize("path, expected", [
        ("/api/v1/attempts/abc/answers", "abc"),
        ("/api/v1/sessions/s1/question", "s1"),
        ("/api/v1/attempts", None),
        ("/health", None),
    ])
    def test_extracts_id(self, path, expected):
        assert LoggingMiddleware(noop_app)._resource_id(path) == expected


class TestStatusMapping:

    @pytest.mark.parametrize("error, status_code", [
        (ValidationError("bad"), 400),
        (ResourceNotFoundError("gone"), 404),
        (IncompleteError(assigned=3, answered=1), 409),
        (NoQuestionsError(), 400),
        (DataIntegrityError("broken"), 500),
        (AllocationError("short", expected=4, received=3), 500),
        (StoreFailure("down"), 500),
    ])
    def test_status_for(self, error, status_code):
        assert status_for(error) == status_code
