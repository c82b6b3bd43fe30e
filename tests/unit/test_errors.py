"""Tests for error classification, retry policy and error payloads."""

from __future__ import annotations

import json
import random

import httpx
import pytest

from mcp_codeberg.errors import CIRCULAR_MARKER, ErrorHandler, to_jsonable
from mcp_codeberg.exceptions import (
    ApiError,
    CodebergError,
    InvalidRepositoryDataError,
    NetworkError,
    ValidationError,
)

URL = "https://codeberg.example.com/api/v1/repos/goern/mcp-codeberg"


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def random(self) -> float:
        return self.value


def _status_error(status: int, **kwargs) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", URL)
    response = httpx.Response(status, request=request, **kwargs)
    return httpx.HTTPStatusError(f"{status}", request=request, response=response)


@pytest.fixture
def handler() -> ErrorHandler:
    return ErrorHandler(random.Random(7))


class TestClassify:
    def test_response_becomes_api_error(self, handler):
        error = handler.classify(_status_error(404, json={"message": "repo not found"}))
        assert isinstance(error, ApiError)
        assert error.status_code == 404
        assert error.message == "repo not found"
        assert error.context["url"] == URL
        assert error.context["method"] == "GET"
        assert error.context["data"] == {"message": "repo not found"}

    def test_response_without_message(self, handler):
        error = handler.classify(_status_error(502, text="Bad Gateway"))
        assert isinstance(error, ApiError)
        assert error.message == "API error: 502"
        assert error.context["data"] == "Bad Gateway"

    def test_no_response_becomes_network_error(self, handler):
        request = httpx.Request("POST", URL)
        cause = httpx.ConnectError("connection refused", request=request)
        error = handler.classify(cause)
        assert isinstance(error, NetworkError)
        assert error.message == "connection refused"
        assert error.context == {"url": URL, "method": "POST"}
        assert error.__cause__ is cause

    def test_network_error_without_request(self, handler):
        error = handler.classify(httpx.ReadTimeout("timed out"))
        assert isinstance(error, NetworkError)
        assert error.context == {"url": None, "method": None}

    def test_typed_errors_pass_through(self, handler):
        original = InvalidRepositoryDataError()
        assert handler.classify(original) is original

    def test_unknown_errors_are_wrapped(self, handler):
        cause = KeyError("id")
        error = handler.classify(cause)
        assert type(error) is CodebergError
        assert error.code == "UNKNOWN_ERROR"
        assert error.cause is cause


class TestShouldRetry:
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (ValidationError("bad input"), False),
            (NetworkError("down"), True),
            (ApiError("boom", 500), True),
            (ApiError("bad gateway", 502), True),
            (ApiError("slow down", 429), True),
            (ApiError("timeout", 408), True),
            (ApiError("not found", 404), False),
            (ApiError("unauthorized", 401), False),
            (ApiError("unprocessable", 422), False),
            (CodebergError("unknown"), False),
            (RuntimeError("other"), False),
        ],
    )
    def test_policy(self, handler, error, expected):
        assert handler.should_retry(error) is expected


class TestRetryDelay:
    def test_exponential_without_jitter(self):
        handler = ErrorHandler(FixedRandom(0.0))
        assert [handler.retry_delay(n) for n in range(1, 5)] == [1000, 2000, 4000, 8000]

    def test_jitter_is_below_200ms(self):
        handler = ErrorHandler(FixedRandom(0.999))
        delay = handler.retry_delay(1)
        assert 1000 <= delay < 1200

    def test_monotonic_below_cap(self, handler):
        delays = [handler.retry_delay(n) for n in range(1, 5)]
        assert delays == sorted(delays)
        assert len(set(delays)) == len(delays)

    def test_capped_at_ten_seconds(self, handler):
        for attempt in range(1, 20):
            assert handler.retry_delay(attempt) <= 10000
        assert ErrorHandler(FixedRandom(0.5)).retry_delay(5) == 10000


class TestFormatError:
    def test_typed_error(self, handler):
        payload = handler.format_error(ApiError("Not Found", 404, {"url": URL}))
        assert payload["error"] == "Not Found"
        assert payload["details"]["code"] == "API_ERROR"
        assert payload["details"]["status_code"] == 404
        assert payload["details"]["context"] == {"url": URL}

    def test_cause_chain(self, handler):
        root = ConnectionResetError("reset by peer")
        network = NetworkError("unreachable", cause=root)
        error = ApiError("Update failed", 500, cause=network)

        details = handler.format_error(error)["details"]
        assert details["cause"]["code"] == "NETWORK_ERROR"
        assert details["cause"]["cause"]["name"] == "ConnectionResetError"
        assert details["cause"]["cause"]["message"] == "reset by peer"

    def test_circular_context(self, handler):
        context: dict = {"owner": "goern"}
        context["self"] = context
        payload = handler.format_error(ValidationError("bad", context))

        assert payload["details"]["context"]["owner"] == "goern"
        assert payload["details"]["context"]["self"] == CIRCULAR_MARKER
        json.dumps(payload)

    def test_circular_cause_chain(self, handler):
        first = CodebergError("first")
        second = CodebergError("second", cause=first)
        first.__cause__ = second
        details = handler.format_error(first)["details"]
        assert details["cause"]["message"] == "second"
        assert details["cause"]["cause"] == CIRCULAR_MARKER

    def test_plain_exception(self, handler):
        payload = handler.format_error(RuntimeError("kaboom"))
        assert payload["error"] == "kaboom"
        assert payload["details"] == {"message": "kaboom", "name": "RuntimeError"}

    def test_non_exception(self, handler):
        payload = handler.format_error({"weird": True})
        assert payload == {
            "error": "An unexpected error occurred",
            "details": {"error": {"weird": True}},
        }


def test_to_jsonable_keeps_shared_references():
    shared = {"login": "goern"}
    assert to_jsonable({"a": shared, "b": [shared]}) == {
        "a": {"login": "goern"},
        "b": [{"login": "goern"}],
    }


def test_to_jsonable_self_referencing_list():
    items: list = [1]
    items.append(items)
    assert to_jsonable(items) == [1, CIRCULAR_MARKER]
