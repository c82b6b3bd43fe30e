"""Repository model."""

from __future__ import annotations

from datetime import datetime

from .base import CodebergModel
from .common import User


class Repository(CodebergModel):
    model_config = {"extra": "ignore", "populate_by_name": True, "frozen": True}

    id: int | None = None
    name: str | None = None
    full_name: str | None = None
    description: str | None = None
    html_url: str | None = None
    clone_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    owner: User
