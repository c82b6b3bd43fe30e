"""Raw forge payload shapes, as returned by the REST API.

Every key is optional: the mappers check presence before projecting into the
domain models.
"""

from __future__ import annotations

from typing import TypedDict


class RawUser(TypedDict, total=False):
    id: int
    login: str
    full_name: str
    email: str
    avatar_url: str
    html_url: str
    created_at: str


class RawLabel(TypedDict, total=False):
    id: int
    name: str
    color: str
    description: str


class RawMilestone(TypedDict, total=False):
    id: int
    number: int
    title: str
    description: str
    due_on: str | None
    state: str
    created_at: str
    updated_at: str


class RawRepository(TypedDict, total=False):
    id: int
    name: str
    full_name: str
    description: str
    html_url: str
    clone_url: str
    created_at: str
    updated_at: str
    owner: RawUser


class RawIssue(TypedDict, total=False):
    id: int
    number: int
    title: str
    body: str
    state: str
    html_url: str
    created_at: str
    updated_at: str
    user: RawUser
    labels: list[RawLabel]
    assignees: list[RawUser | None]
    milestone: RawMilestone | None
    comments: int
    locked: bool
    is_locked: bool

