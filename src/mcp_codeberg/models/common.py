"""Entities shared across domains: users, labels, milestones."""

from __future__ import annotations

from datetime import datetime

from .base import CodebergModel


class User(CodebergModel):
    id: int | None = None
    login: str | None = None
    full_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    html_url: str | None = None
    created_at: datetime


class Label(CodebergModel):
    id: int | None = None
    name: str = ""
    color: str = ""
    description: str | None = None


class Milestone(CodebergModel):
    id: int | None = None
    number: int | None = None
    title: str = ""
    description: str | None = None
    due_date: datetime | None = None
    state: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
