"""User operations."""

from __future__ import annotations

from ..client import CodebergClient
from ..executor import RequestExecutor
from ..mappers import map_user, response_object
from ..models.common import User
from .validation import validate_username


class UserService:
    def __init__(self, client: CodebergClient, executor: RequestExecutor) -> None:
        self.client = client
        self.executor = executor

    async def get_user(self, username: str) -> User:
        validate_username(username)

        data = await self.executor.execute(
            "getUser",
            lambda: self.client.get_user(username),
            {"username": username},
        )
        return map_user(response_object(data, {"username": username}))

    async def get_current_user(self) -> User:
        """Profile of the user the token belongs to."""
        data = await self.executor.execute("getCurrentUser", self.client.get_current_user)
        data = response_object(data)
        # some proxies wrap the profile in a {"data": {...}} envelope
        if isinstance(data.get("data"), dict):
            data = response_object(data["data"])
        return map_user(data)
