"""Issue models and the request payloads that create, update and list them."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import Field

from .base import CodebergModel
from .common import Label, Milestone, User

TITLE_MAX_LENGTH = 255


class IssueState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    # list filters only
    ALL = "all"


class ValidationRule(CodebergModel):
    """A constraint an issue field must satisfy."""

    field: str
    type: Literal["required", "maxLength"]
    value: int | None = None
    message: str = ""


TITLE_RULES = (
    ValidationRule(field="title", type="required", message="Issue title is required"),
    ValidationRule(
        field="title",
        type="maxLength",
        value=TITLE_MAX_LENGTH,
        message=f"Issue title cannot exceed {TITLE_MAX_LENGTH} characters",
    ),
)


class Issue(CodebergModel):
    id: int | None = None
    number: int | None = None
    title: str | None = None
    body: str | None = None
    state: str | None = None
    html_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user: User | None = None
    labels: list[Label] = []

    # enhanced metadata
    last_modified_by: User | None = None
    assignees: list[User] = []
    milestone: Milestone | None = None
    comments: int = 0
    locked: bool = False

    # update tracking
    last_updated: datetime | None = None
    update_in_progress: bool = False
    update_error: str | None = None

    validation_rules: list[ValidationRule] = []


class CreateIssueData(CodebergModel):
    title: str
    body: str = ""
    labels: list[int] | None = None
    assignees: list[str] | None = None
    milestone: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class UpdateIssueData(CodebergModel):
    title: str | None = None
    body: str | None = None
    state: Literal["open", "closed"] | None = None
    assignees: list[str] | None = None
    labels: list[int] | None = None
    milestone: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ListIssueOptions(CodebergModel):
    state: IssueState | None = None
    labels: list[str] | None = None
    sort: Literal["created", "updated", "comments"] | None = None
    direction: Literal["asc", "desc"] | None = None
    page: int | None = Field(default=None, ge=1)
    per_page: int | None = Field(default=None, ge=1)

    def to_params(self) -> dict[str, Any]:
        """Query parameters; the forge reads ``labels`` as one comma-separated value."""
        params = self.model_dump(mode="json", exclude_none=True)
        labels = params.pop("labels", None)
        if labels:
            params["labels"] = ",".join(labels)
        return params
