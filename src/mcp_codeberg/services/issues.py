"""Issue operations: cached reads, metadata enrichment and optimistic title updates."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Mapping
from datetime import datetime, timezone
from typing import Any

from ..cache import CacheManager
from ..client import CodebergClient
from ..exceptions import ApiError, CodebergError, ValidationError
from ..executor import RequestExecutor
from ..mappers import coerce_issue, map_issue, map_milestone, map_user, response_object
from ..models.common import Milestone, User
from ..models.issues import (
    TITLE_RULES,
    CreateIssueData,
    Issue,
    IssueState,
    ListIssueOptions,
    UpdateIssueData,
)
from .validation import validate_issue_number, validate_repo_params, validate_title

logger = logging.getLogger(__name__)

CLOSED_ISSUE_TTL = 3600
OPEN_ISSUE_TTL = 300
OPTIMISTIC_TTL = 300
UPDATE_FAILED = "Update failed"


def issue_cache_key(owner: str, repo: str, number: int) -> str:
    return f"issue:{owner}:{repo}:{number}"


def issue_ttl(issue: Issue) -> int:
    """Closed issues churn less, so they stay cached longer."""
    return CLOSED_ISSUE_TTL if issue.state == IssueState.CLOSED else OPEN_ISSUE_TTL


def _with_rules(issue: Issue) -> Issue:
    return issue.model_copy(update={"validation_rules": list(TITLE_RULES)})


class IssueService:
    def __init__(
        self,
        client: CodebergClient,
        executor: RequestExecutor,
        cache: CacheManager | None = None,
    ) -> None:
        self.client = client
        self.executor = executor
        self.cache = cache

    async def list_issues(
        self, owner: str, repo: str, options: ListIssueOptions | None = None
    ) -> list[Issue]:
        """List issues; ``options`` are sent as query parameters unchanged."""
        validate_repo_params(owner, repo)
        params = (options or ListIssueOptions()).to_params()

        data = await self.executor.execute(
            "listIssues",
            lambda: self.client.list_issues(owner, repo, params),
            {"owner": owner, "repo": repo, "options": params},
        )
        if not isinstance(data, list):
            return []
        return [map_issue(item) for item in data]

    async def get_issue(
        self,
        owner: str,
        repo: str,
        number: int,
        *,
        include_metadata: bool = False,
        force_fresh: bool = False,
    ) -> Issue:
        """Fetch one issue, serving it from the cache when a valid entry exists.

        With ``include_metadata`` the comment count, last actor and milestone are
        fetched concurrently from their sub-resources. Each of those lookups may
        fail on its own without failing the call.
        """
        validate_repo_params(owner, repo)
        validate_issue_number(number)
        key = issue_cache_key(owner, repo, number)
        context = {"owner": owner, "repo": repo, "number": number}

        if not force_fresh and self.cache is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                issue = coerce_issue(cached)
                if issue is not None:
                    logger.debug("Returning cached issue", extra={"context": {"cache_key": key}})
                    return issue
                logger.warning("Invalid cached issue data", extra={"context": {"cache_key": key}})
                await self.cache.delete(key)

        data = await self.executor.execute(
            "getIssue",
            lambda: self.client.get_issue(owner, repo, number),
            {**context, "include_metadata": include_metadata, "force_fresh": force_fresh},
        )
        issue = map_issue(response_object(data, context))
        if include_metadata:
            issue = issue.model_copy(update=await self._fetch_metadata(owner, repo, number))
        issue = _with_rules(issue)

        if self.cache is not None:
            await self.cache.set(key, issue, issue_ttl(issue))
        return issue

    async def _fetch_metadata(self, owner: str, repo: str, number: int) -> dict[str, Any]:
        args = (owner, repo, number)
        context = {"owner": owner, "repo": repo, "number": number}
        comments, last_modified_by, milestone = await asyncio.gather(
            self._optional("comments", self._comment_count(*args), 0, context),
            self._optional("events", self._last_actor(*args), None, context),
            self._optional("milestone", self._milestone(*args), None, context),
        )
        return {
            "comments": comments,
            "last_modified_by": last_modified_by,
            "milestone": milestone,
        }

    async def _comment_count(self, owner: str, repo: str, number: int) -> int:
        comments = await self.client.list_issue_comments(owner, repo, number)
        return len(comments) if isinstance(comments, list) else 0

    async def _last_actor(self, owner: str, repo: str, number: int) -> User | None:
        """Actor of the first event the forge lists for the issue."""
        events = await self.client.list_issue_events(owner, repo, number)
        if not isinstance(events, list) or not events or not isinstance(events[0], Mapping):
            return None
        actor = events[0].get("actor")
        return map_user(actor) if actor else None

    async def _milestone(self, owner: str, repo: str, number: int) -> Milestone | None:
        data = await self.client.get_issue_milestone(owner, repo, number)
        return map_milestone(data) if isinstance(data, Mapping) and data else None

    async def _optional(
        self, what: str, call: Awaitable[Any], default: Any, context: dict[str, Any]
    ) -> Any:
        # a failed lookup, including one whose payload cannot be mapped, yields the default
        try:
            return await call
        except Exception as exc:
            logger.warning(
                "Failed to fetch issue %s",
                what,
                extra={"context": {**context, "error": self.executor.error_handler.classify(exc)}},
            )
            return default

    async def create_issue(self, owner: str, repo: str, data: CreateIssueData) -> Issue:
        validate_repo_params(owner, repo)
        validate_title(data.title)
        payload = data.to_payload()

        created = await self.executor.execute(
            "createIssue",
            lambda: self.client.create_issue(owner, repo, payload),
            {"owner": owner, "repo": repo, "data": payload},
        )
        created = response_object(created, {"owner": owner, "repo": repo})
        return _with_rules(map_issue(created))

    async def update_issue(
        self, owner: str, repo: str, number: int, data: UpdateIssueData
    ) -> Issue:
        """Patch an issue and replace its cache entry with the server's version."""
        validate_repo_params(owner, repo)
        validate_issue_number(number)

        updated = await self._patch_issue(owner, repo, number, data)
        if self.cache is not None:
            key = issue_cache_key(owner, repo, number)
            await self.cache.set(key, updated, issue_ttl(updated))
        return updated

    async def _patch_issue(
        self, owner: str, repo: str, number: int, data: UpdateIssueData
    ) -> Issue:
        payload = data.to_payload()
        context = {"owner": owner, "repo": repo, "number": number}
        response = await self.executor.execute(
            "updateIssue",
            lambda: self.client.update_issue(owner, repo, number, payload),
            {**context, "data": payload},
        )
        return _with_rules(map_issue(response_object(response, context)))

    async def update_title(
        self,
        owner: str,
        repo: str,
        number: int,
        new_title: str,
        *,
        optimistic: bool = False,
    ) -> Issue:
        """Change an issue's title.

        With ``optimistic`` the cache shows the new title, flagged
        ``update_in_progress``, while the request is in flight. If the request
        fails the entry is rolled back to the original title with
        ``update_error`` set. An issue already flagged ``update_in_progress`` is
        rejected without sending anything.

        The in-progress check is a read followed by a write on the cache, so two
        callers racing on the same issue can both pass it.
        """
        validate_repo_params(owner, repo)
        validate_issue_number(number)
        validate_title(new_title)

        key = issue_cache_key(owner, repo, number)
        context = {"owner": owner, "repo": repo, "number": number}

        original = await self.get_issue(owner, repo, number)
        if original.update_in_progress:
            raise ValidationError(
                "Update already in progress",
                {"issue_number": number, "current_title": original.title},
            )

        applied = False
        if optimistic and self.cache is not None:
            pending = original.model_copy(
                update={
                    "title": new_title,
                    "update_in_progress": True,
                    "last_updated": datetime.now(timezone.utc),
                }
            )
            await self.cache.set(key, pending, OPTIMISTIC_TTL)
            applied = True

        try:
            updated = await self._patch_issue(
                owner, repo, number, UpdateIssueData(title=new_title)
            )
        except Exception as exc:
            logger.warning(
                "updateIssue request failed", extra={"context": {**context, "error": exc}}
            )
            if applied:
                await self._rollback(key, original, exc)
            if isinstance(exc, CodebergError):
                raise
            raise ApiError(UPDATE_FAILED, 500, context, cause=exc) from exc

        if self.cache is not None:
            await self.cache.set(key, updated, issue_ttl(updated))
        return updated

    async def _rollback(self, key: str, original: Issue, error: Exception) -> None:
        restored = original.model_copy(
            update={
                "title": original.title,
                "update_in_progress": False,
                "update_error": UPDATE_FAILED,
            }
        )
        try:
            await self.cache.set(key, restored, OPTIMISTIC_TTL)
        except Exception as rollback_error:
            logger.error(
                "Failed to rollback optimistic update",
                exc_info=rollback_error,
                extra={"context": {"cache_key": key}},
            )
            raise rollback_error from error
