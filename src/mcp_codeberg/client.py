"""Codeberg / Forgejo API client using httpx."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from .config import CodebergConfig
from .exceptions import ApiError


class CodebergClient:
    """Async HTTP client for the Forgejo REST API v1.

    Each call makes exactly one request. Non-success responses surface as
    :class:`httpx.HTTPStatusError` and transport failures as
    :class:`httpx.RequestError`; classifying and retrying them is the
    executor's job.
    """

    def __init__(self, config: CodebergConfig | None = None) -> None:
        self.config = config or CodebergConfig.from_env()
        self.config.validate()
        self._client = httpx.AsyncClient(
            base_url=self.config.api_url,
            headers={
                "Authorization": f"token {self.config.token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=self.config.timeout,
            verify=self.config.ssl_verify,
        )

    async def close(self) -> None:
        await self._client.aclose()

    # ── HTTP helpers ──────────────────────────────────────────────

    @staticmethod
    def _enc(segment: str | int) -> str:
        return quote(str(segment), safe="")

    def _repo_path(self, owner: str, repo: str) -> str:
        return f"/repos/{self._enc(owner)}/{self._enc(repo)}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make an API request and return parsed JSON, or ``None`` for an empty body."""
        kwargs: dict[str, Any] = {"params": params}
        if json_data is not None:
            kwargs["json"] = json_data

        resp = await self._client.request(method, path, **kwargs)
        resp.raise_for_status()

        if resp.status_code == 204 or not resp.content:
            return None

        context = {"url": str(resp.request.url), "method": method}
        content_type = resp.headers.get("content-type", "")
        if "text/html" in content_type:
            msg = "Unexpected HTML response — check URL and authentication"
            raise ApiError(msg, resp.status_code, {**context, "data": resp.text[:500]})

        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(
                f"JSON parse error: {e}",
                resp.status_code,
                {**context, "data": resp.text[:500]},
                cause=e,
            ) from e

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, json_data: Any = None) -> Any:
        return await self._request("POST", path, json_data=json_data)

    async def patch(self, path: str, json_data: Any = None) -> Any:
        return await self._request("PATCH", path, json_data=json_data)

    # ── Repositories ──────────────────────────────────────────────

    async def list_user_repos(self, owner: str) -> Any:
        return await self.get(f"/users/{self._enc(owner)}/repos")

    async def get_repo(self, owner: str, repo: str) -> Any:
        return await self.get(self._repo_path(owner, repo))

    # ── Issues ────────────────────────────────────────────────────

    async def list_issues(
        self, owner: str, repo: str, params: dict[str, Any] | None = None
    ) -> Any:
        return await self.get(f"{self._repo_path(owner, repo)}/issues", params=params)

    async def get_issue(self, owner: str, repo: str, number: int) -> Any:
        return await self.get(f"{self._repo_path(owner, repo)}/issues/{number}")

    async def create_issue(self, owner: str, repo: str, payload: dict[str, Any]) -> Any:
        return await self.post(f"{self._repo_path(owner, repo)}/issues", payload)

    async def update_issue(
        self, owner: str, repo: str, number: int, payload: dict[str, Any]
    ) -> Any:
        return await self.patch(f"{self._repo_path(owner, repo)}/issues/{number}", payload)

    async def list_issue_comments(self, owner: str, repo: str, number: int) -> Any:
        return await self.get(f"{self._repo_path(owner, repo)}/issues/{number}/comments")

    async def list_issue_events(self, owner: str, repo: str, number: int) -> Any:
        return await self.get(f"{self._repo_path(owner, repo)}/issues/{number}/events")

    async def get_issue_milestone(self, owner: str, repo: str, number: int) -> Any:
        return await self.get(f"{self._repo_path(owner, repo)}/issues/{number}/milestone")

    # ── Users ─────────────────────────────────────────────────────

    async def get_user(self, username: str) -> Any:
        return await self.get(f"/users/{self._enc(username)}")

    async def get_current_user(self) -> Any:
        return await self.get("/user")
