"""Base model for Codeberg domain entities."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class CodebergModel(BaseModel):
    """Common config for domain models: unknown forge fields are dropped."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict without unset optional fields, as sent to MCP clients."""
        return self.model_dump(mode="json", exclude_none=True)
