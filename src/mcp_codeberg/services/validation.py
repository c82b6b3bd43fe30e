"""Pre-flight checks on caller-supplied arguments."""

from __future__ import annotations

from ..exceptions import ValidationError
from ..models.issues import TITLE_MAX_LENGTH


def _blank(value: str | None) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_repo_params(owner: str, name: str | None = None) -> None:
    if _blank(owner):
        raise ValidationError("Repository owner is required")
    if name is not None and _blank(name):
        raise ValidationError("Repository name cannot be empty when provided")


def validate_issue_number(number: int) -> None:
    if isinstance(number, bool) or not isinstance(number, int) or number <= 0:
        raise ValidationError("Issue number must be positive", {"number": number})


def validate_title(title: str | None) -> None:
    if _blank(title):
        raise ValidationError("Issue title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(
            f"Title cannot exceed {TITLE_MAX_LENGTH} characters", {"length": len(title)}
        )


def validate_username(username: str) -> None:
    if _blank(username):
        raise ValidationError("Username is required")
