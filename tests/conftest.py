"""Shared test fixtures for mcp-codeberg."""

from __future__ import annotations

import copy
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import pytest
import respx
from fastmcp import Client

from mcp_codeberg.cache import MemoryCache
from mcp_codeberg.config import CodebergConfig
from mcp_codeberg.errors import ErrorHandler
from mcp_codeberg.services.codeberg import CodebergService

TEST_URL = "https://codeberg.example.com"
TEST_TOKEN = "test-token"
API_URL = f"{TEST_URL}/api/v1"

USER = {
    "id": 56207,
    "login": "goern",
    "login_name": "",
    "full_name": "Christoph Görn",
    "email": "christoph@goern.name",
    "avatar_url": "https://codeberg.org/avatars/4771738d0ef74ceeef0ea68f02b59f07",
    "html_url": "https://codeberg.org/goern",
    "created": "2022-07-04T04:28:06Z",
    "username": "goern",
}

REPOSITORY = {
    "id": 399408,
    "owner": USER,
    "name": "mcp-codeberg",
    "full_name": "goern/mcp-codeberg",
    "description": "MCP server for the Codeberg.org REST API.",
    "private": False,
    "html_url": "https://codeberg.org/goern/mcp-codeberg",
    "ssh_url": "git@codeberg.org:goern/mcp-codeberg.git",
    "clone_url": "https://codeberg.org/goern/mcp-codeberg.git",
    "default_branch": "main",
    "created_at": "2025-03-30T15:00:13Z",
    "updated_at": "2025-04-06T15:04:40Z",
}

ISSUE = {
    "id": 1247357,
    "url": "https://codeberg.org/api/v1/repos/goern/mcp-codeberg/issues/4",
    "html_url": "https://codeberg.org/goern/mcp-codeberg/issues/4",
    "number": 4,
    "user": USER,
    "title": "BUG-001: Missing Test Coverage in Core Services",
    "body": "Several critical service methods lack test coverage.",
    "labels": [{"id": 7, "name": "bug", "color": "ee0701", "description": "Something is broken"}],
    "milestone": None,
    "assignee": USER,
    "assignees": [USER],
    "state": "closed",
    "is_locked": False,
    "comments": 1,
    "created_at": "2025-04-06T12:29:29Z",
    "updated_at": "2025-04-06T12:58:24Z",
    "closed_at": "2025-04-06T12:58:19Z",
}

MILESTONE = {
    "id": 1,
    "number": 1,
    "title": "v1.0",
    "description": "First release",
    "due_on": "2025-02-01T00:00:00Z",
    "state": "open",
    "created_at": "2025-01-01T00:00:00Z",
    "updated_at": "2025-01-01T00:00:00Z",
}


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records the requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def user_data() -> dict:
    return copy.deepcopy(USER)


@pytest.fixture
def repo_data() -> dict:
    return copy.deepcopy(REPOSITORY)


@pytest.fixture
def issue_data() -> dict:
    return copy.deepcopy(ISSUE)


@pytest.fixture
def open_issue_data() -> dict:
    return {**copy.deepcopy(ISSUE), "state": "open", "closed_at": None}


@pytest.fixture
def milestone_data() -> dict:
    return copy.deepcopy(MILESTONE)


@pytest.fixture
def config() -> CodebergConfig:
    return CodebergConfig(url=TEST_URL, token=TEST_TOKEN)


@pytest.fixture
def sleeps() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
async def service(config: CodebergConfig, cache: MemoryCache, sleeps: RecordingSleep):
    svc = CodebergService(
        config,
        cache=cache,
        error_handler=ErrorHandler(random.Random(42)),
        sleep=sleeps,
    )
    yield svc
    await svc.close()


@pytest.fixture
def mock_api() -> respx.MockRouter:
    with respx.mock(base_url=API_URL, assert_all_called=False) as router:
        yield router


def _swap_lifespan(*, read_only: bool = False):
    """Point the shared FastMCP server at a test service; returns (mcp, original)."""
    from fastmcp import FastMCP

    from mcp_codeberg.servers import resources  # noqa: F401
    from mcp_codeberg.servers.codeberg import mcp

    config = CodebergConfig(url=TEST_URL, token=TEST_TOKEN, read_only=read_only)
    service = CodebergService(config, sleep=RecordingSleep())

    @asynccontextmanager
    async def mock_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        try:
            yield {"service": service, "config": config}
        finally:
            await service.close()

    original_lifespan = mcp._lifespan
    mcp._lifespan = mock_lifespan
    return mcp, original_lifespan


@pytest.fixture
async def tool_client():
    """FastMCP test client with mocked lifespan and respx-mocked HTTP."""
    mcp, original_lifespan = _swap_lifespan()
    with respx.mock(base_url=API_URL, assert_all_called=False) as router:
        async with Client(mcp) as client:
            yield client, router
    mcp._lifespan = original_lifespan
    mcp._lifespan_result = None
    mcp._lifespan_result_set = False


@pytest.fixture
async def readonly_client():
    """FastMCP test client in read-only mode."""
    mcp, original_lifespan = _swap_lifespan(read_only=True)
    with respx.mock(base_url=API_URL, assert_all_called=False) as router:
        async with Client(mcp) as client:
            yield client, router
    mcp._lifespan = original_lifespan
    mcp._lifespan_result = None
    mcp._lifespan_result_set = False
