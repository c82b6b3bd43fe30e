"""Error classification, retry policy and error payload formatting."""

from __future__ import annotations

import random
from datetime import date, datetime
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel

from .exceptions import ApiError, CodebergError, NetworkError, ValidationError

BASE_DELAY_MS = 1000
MAX_DELAY_MS = 10000
MAX_JITTER_MS = 200
RETRYABLE_STATUSES = (408, 429)
CIRCULAR_MARKER = "[Circular Reference]"


def _response_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"API error: {response.status_code}"


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _request_context(request: httpx.Request | None) -> dict[str, Any]:
    if request is None:
        return {"url": None, "method": None}
    return {"url": str(request.url), "method": request.method}


def _safe_request(error: httpx.RequestError) -> httpx.Request | None:
    # httpx raises RuntimeError when the error was built without a request
    try:
        return error.request
    except RuntimeError:
        return None


class ErrorHandler:
    """Turns transport failures into typed errors and decides how to retry them.

    ``rng`` supplies the backoff jitter; pass a seeded :class:`random.Random`
    for deterministic delays.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def classify(self, error: BaseException) -> CodebergError:
        """Map any exception onto the error taxonomy."""
        if isinstance(error, CodebergError):
            return error

        if isinstance(error, httpx.HTTPStatusError):
            response = error.response
            context = _request_context(error.request)
            context["data"] = _response_body(response)
            return ApiError(
                _response_message(response), response.status_code, context, cause=error
            )

        if isinstance(error, httpx.RequestError):
            return NetworkError(
                str(error) or "Network error occurred",
                _request_context(_safe_request(error)),
                cause=error,
            )

        return CodebergError(
            "An unexpected error occurred",
            context={"error": repr(error)},
            cause=error,
        )

    def should_retry(self, error: BaseException) -> bool:
        if isinstance(error, ValidationError):
            return False
        if isinstance(error, NetworkError):
            return True
        if isinstance(error, ApiError):
            status = error.status_code
            return status >= 500 or status in RETRYABLE_STATUSES
        return False

    def retry_delay(self, attempt: int) -> float:
        """Backoff before retrying after ``attempt``, in milliseconds.

        ``1000 * 2 ** (attempt - 1)`` plus up to 200 ms of jitter, capped at 10 s.
        """
        exponential = BASE_DELAY_MS * 2 ** max(attempt - 1, 0)
        jitter = self._rng.random() * MAX_JITTER_MS
        return min(exponential + jitter, MAX_DELAY_MS)

    def format_error(self, error: Any) -> dict[str, Any]:
        """Build the ``{"error": ..., "details": ...}`` payload returned to tool callers."""
        if isinstance(error, BaseException):
            message = str(getattr(error, "message", None) or error) or type(error).__name__
            details = _error_details(error, set())
        else:
            message = "An unexpected error occurred"
            details = {"error": to_jsonable(error)}
        return {"error": message, "details": details}


def _error_details(error: BaseException, visited: set[int]) -> Any:
    if id(error) in visited:
        return CIRCULAR_MARKER
    visited = visited | {id(error)}

    if isinstance(error, CodebergError):
        result: dict[str, Any] = {
            "message": error.message,
            "code": error.code,
            "context": to_jsonable(error.context, visited),
        }
        if isinstance(error, ApiError):
            result["status_code"] = error.status_code
    else:
        result = {"message": str(error), "name": type(error).__name__}

    cause = error.__cause__ or getattr(error, "cause", None)
    if isinstance(cause, BaseException):
        result["cause"] = _error_details(cause, visited)
    return result


def to_jsonable(value: Any, visited: frozenset[int] | set[int] = frozenset()) -> Any:
    """Render ``value`` as JSON-native data.

    Containers already on the current path are replaced by a marker string, so
    self-referential structures serialize instead of recursing forever.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, BaseException):
        return _error_details(value, set(visited))

    if id(value) in visited:
        return CIRCULAR_MARKER
    path = set(visited) | {id(value)}

    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {str(key): to_jsonable(item, path) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(item, path) for item in value]
    if hasattr(value, "__dict__"):
        return {
            key: to_jsonable(item, path)
            for key, item in vars(value).items()
            if not key.startswith("_")
        }
    return str(value)
