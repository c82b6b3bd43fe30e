"""MCP resources for Codeberg — read-only views of users, repositories and issues."""

from __future__ import annotations

from fastmcp import Context

from ..exceptions import ValidationError
from .codeberg import _err, _get_service, _ok, mcp


@mcp.resource(
    "codeberg://user/profile",
    name="Current user profile",
    description="Profile information for the authenticated user",
    mime_type="application/json",
    tags={"codeberg", "users"},
)
async def current_user_profile(ctx: Context) -> str:
    try:
        return _ok(await _get_service(ctx).get_current_user())
    except Exception as e:
        return _err(e)


@mcp.resource(
    "codeberg://repos/{owner}/{repo}",
    name="Repository details",
    description="Details about a specific repository",
    mime_type="application/json",
    tags={"codeberg", "repositories"},
)
async def repository_details(owner: str, repo: str, ctx: Context) -> str:
    try:
        return _ok(await _get_service(ctx).get_repository(owner, repo))
    except Exception as e:
        return _err(e)


@mcp.resource(
    "codeberg://repos/{owner}/{repo}/issues",
    name="Repository issues",
    description="List of issues for a repository",
    mime_type="application/json",
    tags={"codeberg", "issues"},
)
async def repository_issues(owner: str, repo: str, ctx: Context) -> str:
    try:
        return _ok(await _get_service(ctx).list_issues(owner, repo))
    except Exception as e:
        return _err(e)


@mcp.resource(
    "codeberg://repos/{owner}/{repo}/issues/{number}",
    name="Repository issue details",
    description="Details of a specific issue in a repository",
    mime_type="application/json",
    tags={"codeberg", "issues"},
)
async def repository_issue(owner: str, repo: str, number: str, ctx: Context) -> str:
    try:
        if not number.isdigit():
            raise ValidationError("Issue number must be positive", {"number": number})
        return _ok(await _get_service(ctx).get_issue(owner, repo, int(number)))
    except Exception as e:
        return _err(e)


@mcp.resource(
    "codeberg://users/{username}",
    name="User information",
    description="Details about a specific user",
    mime_type="application/json",
    tags={"codeberg", "users"},
)
async def user_details(username: str, ctx: Context) -> str:
    try:
        return _ok(await _get_service(ctx).get_user(username))
    except Exception as e:
        return _err(e)
