"""Codeberg API exceptions.

Every error carries a machine-readable ``code`` and an optional ``context``
mapping, and may wrap the failure that caused it.
"""

from __future__ import annotations

from typing import Any


class CodebergError(Exception):
    """Base exception for Codeberg operations. Also the last-resort unclassified error."""

    default_code = "UNKNOWN_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.context = context
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ValidationError(CodebergError):
    """Raised when caller-supplied input fails a precondition. Never retried."""

    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, self.default_code, context, cause)


class NetworkError(CodebergError):
    """Raised when the forge could not be reached and no response was obtained."""

    default_code = "NETWORK_ERROR"

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, self.default_code, context, cause)


class ApiError(CodebergError):
    """Raised when the forge returns a non-success response."""

    default_code = "API_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, self.default_code, context, cause)
        self.status_code = status_code


class InvalidRepositoryDataError(ApiError):
    """Raised when a repository payload lacks required fields."""

    def __init__(
        self,
        message: str = "Invalid repository data",
        status_code: int = 400,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code, context)


class InvalidUserDataError(ApiError):
    """Raised when a user payload lacks required fields."""

    def __init__(
        self,
        message: str = "Invalid user data",
        status_code: int = 400,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code, context)


class WriteDisabledError(CodebergError):
    """Raised when a write operation is attempted in read-only mode."""

    def __init__(self) -> None:
        super().__init__(
            "Write operations are disabled (CODEBERG_READ_ONLY=true)", "WRITE_DISABLED"
        )
