"""Codeberg MCP server — all tool registrations."""


import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any, Literal

from fastmcp import Context, FastMCP
from pydantic import Field

from ..config import CodebergConfig
from ..errors import ErrorHandler, to_jsonable
from ..exceptions import (
    ApiError,
    CodebergError,
    ValidationError,
    WriteDisabledError,
)
from ..models.base import CodebergModel
from ..models.issues import CreateIssueData, IssueState, ListIssueOptions, UpdateIssueData
from ..services.codeberg import CodebergService

_error_handler = ErrorHandler()


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    config = CodebergConfig.from_env()
    config.validate()
    service = CodebergService(config)
    try:
        yield {"service": service, "config": config}
    finally:
        await service.close()


mcp = FastMCP(
    name="Codeberg MCP Server",
    instructions=(
        "Provides tools for interacting with the Codeberg / Forgejo API"
        " — repositories, issues and users."
    ),
    lifespan=lifespan,
)


def _get_service(ctx: Context) -> CodebergService:
    return ctx.request_context.lifespan_context["service"]


def _get_config(ctx: Context) -> CodebergConfig:
    return ctx.request_context.lifespan_context["config"]


def _check_write(ctx: Context) -> None:
    if _get_config(ctx).read_only:
        raise WriteDisabledError


def _ok(data: Any) -> str:
    if isinstance(data, CodebergModel):
        data = data.to_dict()
    elif isinstance(data, list):
        data = [item.to_dict() if isinstance(item, CodebergModel) else item for item in data]
    return json.dumps(to_jsonable(data), indent=2, ensure_ascii=False)


def _err(error: Exception) -> str:
    detail = _error_handler.format_error(error)

    if isinstance(error, WriteDisabledError):
        detail["hint"] = (
            "Server is in read-only mode. Set CODEBERG_READ_ONLY=false to enable writes."
        )
    elif isinstance(error, ValidationError):
        detail["hint"] = "Check the tool arguments — the request was not sent."
    elif isinstance(error, ApiError):
        status = error.status_code
        if status in (401, 403):
            detail["hint"] = "Check CODEBERG_API_TOKEN permissions for this resource."
        elif status == 404:
            detail["hint"] = "Verify the owner, repository and issue number exist."
        elif status == 409:
            detail["hint"] = "Conflict — resource may already exist or be locked."
        elif status == 422:
            detail["hint"] = "Validation failed — check required fields and formats."
        elif status == 429:
            detail["hint"] = "Rate limited. Wait before retrying."
    elif not isinstance(error, CodebergError):
        detail["hint"] = "Unexpected failure — see details."
    return json.dumps(detail, indent=2, ensure_ascii=False)


Owner = Annotated[str, Field(description="Repository owner (user or organization)", min_length=1)]
RepoName = Annotated[str, Field(description="Repository name", min_length=1)]
IssueNumber = Annotated[int, Field(description="Issue number", gt=0)]


# ════════════════════════════════════════════════════════════════════
# Repositories
# ════════════════════════════════════════════════════════════════════


@mcp.tool(
    tags={"codeberg", "repositories", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def codeberg_list_repositories(
    ctx: Context,
    owner: Annotated[str, Field(description="Username or organization name", min_length=1)],
) -> str:
    """List repositories for a user or organization."""
    try:
        data = await _get_service(ctx).list_repositories(owner)
        return _ok(data)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"codeberg", "repositories", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def codeberg_get_repository(ctx: Context, owner: Owner, name: RepoName) -> str:
    """Get details about a specific repository."""
    try:
        data = await _get_service(ctx).get_repository(owner, name)
        return _ok(data)
    except Exception as e:
        return _err(e)


# ════════════════════════════════════════════════════════════════════
# Issues
# ════════════════════════════════════════════════════════════════════


@mcp.tool(
    tags={"codeberg", "issues", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def codeberg_list_issues(
    ctx: Context,
    owner: Owner,
    repo: RepoName,
    state: Annotated[IssueState | None, Field(description="open, closed, or all")] = None,
    labels: Annotated[list[str] | None, Field(description="Only issues with these labels")] = None,
    sort: Annotated[
        Literal["created", "updated", "comments"] | None, Field(description="Sort field")
    ] = None,
    direction: Annotated[Literal["asc", "desc"] | None, Field(description="Sort direction")] = None,
    page: Annotated[int | None, Field(description="Page number", ge=1)] = None,
    per_page: Annotated[int | None, Field(description="Results per page", ge=1)] = None,
) -> str:
    """List issues for a repository."""
    try:
        options = ListIssueOptions(
            state=state,
            labels=labels,
            sort=sort,
            direction=direction,
            page=page,
            per_page=per_page,
        )
        data = await _get_service(ctx).list_issues(owner, repo, options)
        return _ok(data)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"codeberg", "issues", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def codeberg_get_issue(
    ctx: Context,
    owner: Owner,
    repo: RepoName,
    number: IssueNumber,
    include_metadata: Annotated[
        bool, Field(description="Also fetch comment count, last actor and milestone")
    ] = False,
    force_fresh: Annotated[bool, Field(description="Bypass the issue cache")] = False,
) -> str:
    """Get details about a specific issue."""
    try:
        data = await _get_service(ctx).get_issue(
            owner, repo, number, include_metadata=include_metadata, force_fresh=force_fresh
        )
        return _ok(data)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"codeberg", "issues", "write"},
    annotations={"readOnlyHint": False, "openWorldHint": True},
)
async def codeberg_create_issue(
    ctx: Context,
    owner: Owner,
    repo: RepoName,
    title: Annotated[str, Field(description="Issue title", min_length=1, max_length=255)],
    body: Annotated[str, Field(description="Issue body (Markdown)")] = "",
    labels: Annotated[list[int] | None, Field(description="Label IDs to apply")] = None,
) -> str:
    """Create a new issue in a repository."""
    try:
        _check_write(ctx)
        data = CreateIssueData(title=title, body=body, labels=labels)
        issue = await _get_service(ctx).create_issue(owner, repo, data)
        return _ok(issue)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"codeberg", "issues", "write"},
    annotations={"readOnlyHint": False, "idempotentHint": True, "openWorldHint": True},
)
async def codeberg_update_issue(
    ctx: Context,
    owner: Owner,
    repo: RepoName,
    issue_number: IssueNumber,
    title: Annotated[str | None, Field(description="New title", max_length=255)] = None,
    body: Annotated[str | None, Field(description="New body")] = None,
    state: Annotated[Literal["open", "closed"] | None, Field(description="New state")] = None,
    assignees: Annotated[list[str] | None, Field(description="Usernames to assign")] = None,
    labels: Annotated[list[int] | None, Field(description="Label IDs to set")] = None,
    milestone: Annotated[int | None, Field(description="Milestone ID")] = None,
) -> str:
    """Update an issue's title, body, state, assignees, labels, or milestone."""
    try:
        _check_write(ctx)
        data = UpdateIssueData(
            title=title,
            body=body,
            state=state,
            assignees=assignees,
            labels=labels,
            milestone=milestone,
        )
        issue = await _get_service(ctx).update_issue(owner, repo, issue_number, data)
        return _ok(issue)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"codeberg", "issues", "write"},
    annotations={"readOnlyHint": False, "idempotentHint": True, "openWorldHint": True},
)
async def codeberg_update_issue_title(
    ctx: Context,
    owner: Owner,
    repo: RepoName,
    issue_number: IssueNumber,
    title: Annotated[str, Field(description="New title", min_length=1, max_length=255)],
    optimistic: Annotated[
        bool, Field(description="Show the new title in cached reads before the forge confirms")
    ] = False,
) -> str:
    """Update the title of an existing issue."""
    try:
        _check_write(ctx)
        issue = await _get_service(ctx).update_title(
            owner, repo, issue_number, title, optimistic=optimistic
        )
        return _ok(issue)
    except Exception as e:
        return _err(e)


# ════════════════════════════════════════════════════════════════════
# Users
# ════════════════════════════════════════════════════════════════════


@mcp.tool(
    tags={"codeberg", "users", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def codeberg_get_user(
    ctx: Context,
    username: Annotated[str, Field(description="Username", min_length=1)],
) -> str:
    """Get details about a user."""
    try:
        data = await _get_service(ctx).get_user(username)
        return _ok(data)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"codeberg", "users", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def codeberg_get_current_user(ctx: Context) -> str:
    """Get the profile of the authenticated user."""
    try:
        data = await _get_service(ctx).get_current_user()
        return _ok(data)
    except Exception as e:
        return _err(e)
