"""Repository operations."""

from __future__ import annotations

from ..client import CodebergClient
from ..exceptions import ApiError
from ..executor import RequestExecutor
from ..mappers import map_repository, response_object
from ..models.repositories import Repository
from .validation import validate_repo_params


class RepositoryService:
    def __init__(self, client: CodebergClient, executor: RequestExecutor) -> None:
        self.client = client
        self.executor = executor

    async def list_repositories(self, owner: str) -> list[Repository]:
        """List repositories owned by a user or organization."""
        validate_repo_params(owner)

        data = await self.executor.execute(
            "listRepositories",
            lambda: self.client.list_user_repos(owner),
            {"owner": owner},
        )
        if data is None:
            raise ApiError("Invalid response from server", 500, {"owner": owner})
        if not isinstance(data, list):
            raise ApiError("Invalid response format", 500, {"owner": owner, "data": data})
        return [map_repository(item) for item in data]

    async def get_repository(self, owner: str, name: str) -> Repository:
        validate_repo_params(owner, name or "")

        data = await self.executor.execute(
            "getRepository",
            lambda: self.client.get_repo(owner, name),
            {"owner": owner, "name": name},
        )
        return map_repository(response_object(data, {"owner": owner, "name": name}))
