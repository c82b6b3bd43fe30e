"""Translation from raw forge payloads into domain models.

All functions are pure. Missing optional wire fields fall back to defaults;
missing required ones raise the matching ``Invalid*DataError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from .exceptions import ApiError, InvalidRepositoryDataError, InvalidUserDataError
from .models.common import Label, Milestone, User
from .models.issues import Issue, IssueState
from .models.repositories import Repository
from .models.wire import RawIssue, RawLabel, RawMilestone, RawRepository, RawUser

ISSUE_STATES = (IssueState.OPEN.value, IssueState.CLOSED.value)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; ``None`` for anything unparsable."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def response_object(data: Any, context: dict[str, Any] | None = None) -> Mapping[str, Any]:
    """Return a single-entity response body, or fail if it is empty or not an object."""
    if not isinstance(data, Mapping) or not data:
        raise ApiError("Invalid response from server", 500, context)
    return data


def map_user(data: RawUser | None) -> User:
    if not isinstance(data, Mapping) or not data:
        raise InvalidUserDataError("Invalid user data", 400)
    return User(
        id=data.get("id"),
        login=data.get("login"),
        full_name=data.get("full_name"),
        email=data.get("email"),
        avatar_url=data.get("avatar_url"),
        html_url=data.get("html_url"),
        created_at=parse_datetime(data.get("created_at")) or _now(),
    )


def map_repository(data: RawRepository | None) -> Repository:
    if not isinstance(data, Mapping) or not data:
        raise InvalidRepositoryDataError("Invalid repository data", 400)

    owner_data = data.get("owner")
    if not isinstance(owner_data, Mapping) or not owner_data:
        raise InvalidRepositoryDataError(
            "Repository owner data is required", 400, {"repository": data.get("full_name")}
        )

    # The owner is embedded in a listing and often lacks profile fields
    owner = User(
        id=owner_data.get("id"),
        login=owner_data.get("login"),
        full_name=owner_data.get("full_name") or owner_data.get("login"),
        email=owner_data.get("email") or "",
        avatar_url=owner_data.get("avatar_url") or "",
        html_url=owner_data.get("html_url") or "",
        created_at=parse_datetime(owner_data.get("created_at")) or _now(),
    )

    return Repository(
        id=data.get("id"),
        name=data.get("name"),
        full_name=data.get("full_name"),
        description=data.get("description"),
        html_url=data.get("html_url"),
        clone_url=data.get("clone_url"),
        created_at=parse_datetime(data.get("created_at")),
        updated_at=parse_datetime(data.get("updated_at")),
        owner=owner,
    )


def map_label(data: RawLabel) -> Label:
    return Label(
        id=data.get("id"),
        name=data.get("name") or "",
        color=data.get("color") or "",
        description=data.get("description"),
    )


def map_milestone(data: RawMilestone) -> Milestone:
    return Milestone(
        id=data.get("id"),
        number=data.get("number"),
        title=data.get("title") or "",
        description=data.get("description"),
        due_date=parse_datetime(data.get("due_on")) if data.get("due_on") else None,
        state=data.get("state") or "",
        created_at=parse_datetime(data.get("created_at")),
        updated_at=parse_datetime(data.get("updated_at")),
    )


def map_issue(data: RawIssue) -> Issue:
    if not isinstance(data, Mapping):
        raise ApiError("Invalid issue data", 500, {"data": data})
    updated_at = parse_datetime(data.get("updated_at"))
    milestone = data.get("milestone")
    if not isinstance(milestone, Mapping) or not milestone:
        milestone = None
    return Issue(
        id=data.get("id"),
        number=data.get("number"),
        title=data.get("title"),
        body=data.get("body"),
        state=data.get("state"),
        html_url=data.get("html_url"),
        created_at=parse_datetime(data.get("created_at")),
        updated_at=updated_at,
        user=map_user(data.get("user")),
        labels=[
            map_label(label) for label in data.get("labels") or [] if isinstance(label, Mapping)
        ],
        assignees=[map_user(user) for user in data.get("assignees") or [] if user],
        milestone=map_milestone(milestone) if milestone else None,
        comments=data.get("comments") or 0,
        locked=bool(data.get("locked", data.get("is_locked"))),
        last_updated=updated_at,
        update_in_progress=False,
        update_error=None,
        validation_rules=[],
    )


def coerce_issue(value: Any) -> Issue | None:
    """Return ``value`` as a structurally valid :class:`Issue`, or ``None``.

    Used for issues read back from the cache, which may hold a model or a
    plain mapping (e.g. from an external store).
    """
    if isinstance(value, Mapping):
        try:
            value = Issue.model_validate(value)
        except ValueError:
            return None
    if not isinstance(value, Issue):
        return None
    valid = (
        _is_int(value.id)
        and _is_int(value.number)
        and isinstance(value.title, str)
        and value.state in ISSUE_STATES
        and isinstance(value.created_at, datetime)
        and isinstance(value.updated_at, datetime)
        and isinstance(value.user, User)
    )
    return value if valid else None


def is_valid_issue(value: Any) -> bool:
    return coerce_issue(value) is not None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
