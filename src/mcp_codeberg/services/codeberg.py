"""Facade wiring the client, retry executor, cache and entity services together."""

from __future__ import annotations

from ..cache import CacheManager, MemoryCache
from ..client import CodebergClient
from ..config import CodebergConfig
from ..errors import ErrorHandler
from ..executor import RequestExecutor, Sleep
from ..models.common import User
from ..models.issues import CreateIssueData, Issue, ListIssueOptions, UpdateIssueData
from ..models.repositories import Repository
from .issues import IssueService
from .repositories import RepositoryService
from .users import UserService


class CodebergService:
    """All repository, issue and user operations behind one object."""

    def __init__(
        self,
        config: CodebergConfig | None = None,
        *,
        cache: CacheManager | None = None,
        error_handler: ErrorHandler | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self.client = CodebergClient(config)
        self.config = self.client.config
        self.error_handler = error_handler or ErrorHandler()
        executor_kwargs = {"sleep": sleep} if sleep is not None else {}
        self.executor = RequestExecutor(
            self.error_handler, self.config.max_retries, **executor_kwargs
        )
        self.cache = cache if cache is not None else MemoryCache()

        self.repositories = RepositoryService(self.client, self.executor)
        self.issues = IssueService(self.client, self.executor, self.cache)
        self.users = UserService(self.client, self.executor)

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> CodebergService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ── Repositories ──────────────────────────────────────────────

    async def list_repositories(self, owner: str) -> list[Repository]:
        return await self.repositories.list_repositories(owner)

    async def get_repository(self, owner: str, name: str) -> Repository:
        return await self.repositories.get_repository(owner, name)

    # ── Issues ────────────────────────────────────────────────────

    async def list_issues(
        self, owner: str, repo: str, options: ListIssueOptions | None = None
    ) -> list[Issue]:
        return await self.issues.list_issues(owner, repo, options)

    async def get_issue(
        self,
        owner: str,
        repo: str,
        number: int,
        *,
        include_metadata: bool = False,
        force_fresh: bool = False,
    ) -> Issue:
        return await self.issues.get_issue(
            owner, repo, number, include_metadata=include_metadata, force_fresh=force_fresh
        )

    async def create_issue(self, owner: str, repo: str, data: CreateIssueData) -> Issue:
        return await self.issues.create_issue(owner, repo, data)

    async def update_issue(
        self, owner: str, repo: str, number: int, data: UpdateIssueData
    ) -> Issue:
        return await self.issues.update_issue(owner, repo, number, data)

    async def update_title(
        self, owner: str, repo: str, number: int, new_title: str, *, optimistic: bool = False
    ) -> Issue:
        return await self.issues.update_title(
            owner, repo, number, new_title, optimistic=optimistic
        )

    # ── Users ─────────────────────────────────────────────────────

    async def get_user(self, username: str) -> User:
        return await self.users.get_user(username)

    async def get_current_user(self) -> User:
        return await self.users.get_current_user()
