"""Codeberg MCP server configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_URL = "https://codeberg.org"


@dataclass
class CodebergConfig:
    """Configuration for the Codeberg MCP server, loaded from environment variables."""

    url: str = DEFAULT_URL
    token: str = ""
    timeout: float = 10
    max_retries: int = 3
    read_only: bool = False
    ssl_verify: bool = True

    @classmethod
    def from_env(cls) -> CodebergConfig:
        url = os.getenv("CODEBERG_URL", DEFAULT_URL).rstrip("/")
        token = (
            os.getenv("CODEBERG_API_TOKEN")
            or os.getenv("CODEBERG_TOKEN")
            or os.getenv("FORGEJO_TOKEN", "")
        )
        timeout = float(os.getenv("CODEBERG_TIMEOUT", "10"))
        max_retries = int(os.getenv("CODEBERG_MAX_RETRIES", "3"))
        read_only = os.getenv("CODEBERG_READ_ONLY", "false").lower() in (
            "true",
            "1",
            "yes",
        )
        ssl_verify = os.getenv("CODEBERG_SSL_VERIFY", "true").lower() not in (
            "false",
            "0",
            "no",
        )

        return cls(
            url=url,
            token=token,
            timeout=timeout,
            max_retries=max_retries,
            read_only=read_only,
            ssl_verify=ssl_verify,
        )

    @property
    def api_url(self) -> str:
        return f"{self.url.rstrip('/')}/api/v1"

    def validate(self) -> None:
        if not self.url:
            msg = "CODEBERG_URL environment variable is required"
            raise ValueError(msg)
        if not self.token:
            msg = (
                "Codeberg token is required. Set one of: CODEBERG_API_TOKEN, "
                "CODEBERG_TOKEN, or FORGEJO_TOKEN"
            )
            raise ValueError(msg)
        if self.max_retries < 1:
            msg = f"CODEBERG_MAX_RETRIES must be at least 1, got {self.max_retries}"
            raise ValueError(msg)
        if self.timeout <= 0:
            msg = f"CODEBERG_TIMEOUT must be positive, got {self.timeout}"
            raise ValueError(msg)
