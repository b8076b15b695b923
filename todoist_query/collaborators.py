"""
Assignee lookup for todoist-query.

Tasks only carry the user ID of their assignee. Names come from the
members of the owning workspace, or from the collaborator list of a shared
personal project. CollaboratorCache fetches each of those lists once per
command and answers name lookups from memory.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Iterable, Mapping, Optional

from .types import CollaboratorInfo, Project, ProjectKind, Task, classify_project

if TYPE_CHECKING:
    from .client import TodoistClient

logger = logging.getLogger(__name__)

WORKSPACE_USERS_PAGE_SIZE = 200

ProjectClassifier = Callable[[Project], ProjectKind]

# ("workspace", workspace_id) or ("project", project_id)
ScopeKey = tuple[str, str]


class CollaboratorCache:
    """
    Per-command cache of user identities keyed by workspace or project.

    Create one per command; entries are never invalidated. Each workspace
    and each shared personal project is fetched at most once per instance.

    Example:
        >>> cache = CollaboratorCache(client)
        >>> await cache.preload(tasks, projects)
        >>> for task in tasks:
        ...     print(format_assignee(task.responsible_uid, task.project_id, projects, cache))
    """

    def __init__(
        self,
        client: "TodoistClient",
        classify: ProjectClassifier = classify_project,
        workspace_page_size: int = WORKSPACE_USERS_PAGE_SIZE,
    ) -> None:
        """
        Initialize the cache.

        Args:
            client: Client used for the member and collaborator fetches.
            classify: Decides whether a project is workspace-owned, shared
                personal or private.
            workspace_page_size: Page size for workspace member fetches.
        """
        self._client = client
        self._classify = classify
        self._workspace_page_size = workspace_page_size
        self._workspace_users: dict[str, dict[str, CollaboratorInfo]] = {}
        self._project_collaborators: dict[str, dict[str, CollaboratorInfo]] = {}
        self._in_flight: dict[ScopeKey, "asyncio.Task[None]"] = {}
        self._waiters: dict[ScopeKey, int] = {}

    async def preload(self, tasks: Iterable[Task], projects: Mapping[str, Project]) -> None:
        """
        Fetch the identities needed to name the assignees of ``tasks``.

        Only projects owning at least one assigned task are considered.
        Workspace projects are deduplicated by workspace, so a workspace
        spanning many projects is fetched once. Private projects and
        projects missing from ``projects`` are skipped. All fetches run
        concurrently. A scope already being fetched by an overlapping call
        is awaited rather than fetched again. The first failure propagates
        to the caller once the fetches it started have been cancelled.

        Args:
            tasks: Tasks about to be displayed.
            projects: Projects by ID, covering the tasks' projects.
        """
        assigned_project_ids = {task.project_id for task in tasks if task.responsible_uid}
        if not assigned_project_ids:
            return

        workspace_ids: set[str] = set()
        shared_project_ids: set[str] = set()

        for project_id in assigned_project_ids:
            project = projects.get(project_id)
            if project is None:
                continue
            kind = self._classify(project)
            if kind is ProjectKind.WORKSPACE and project.workspace_id is not None:
                workspace_ids.add(project.workspace_id)
            elif kind is ProjectKind.SHARED_PERSONAL:
                shared_project_ids.add(project_id)

        keys = [("workspace", workspace_id) for workspace_id in sorted(workspace_ids)]
        keys += [("project", project_id) for project_id in sorted(shared_project_ids)]
        keys = [key for key in keys if not self._is_cached(key)]
        if not keys:
            return

        logger.debug(
            "Preloading collaborators for %d workspaces and %d shared projects",
            len(workspace_ids),
            len(shared_project_ids),
        )
        fetches = [self._join_fetch(key) for key in keys]
        try:
            # Shielded so cancelling this call never cancels a fetch another
            # preload is waiting on.
            await asyncio.gather(*(asyncio.shield(fetch) for fetch in fetches))
        finally:
            await self._release(keys, fetches)

    def _is_cached(self, key: ScopeKey) -> bool:
        kind, scope_id = key
        if kind == "workspace":
            return scope_id in self._workspace_users
        return scope_id in self._project_collaborators

    def _join_fetch(self, key: ScopeKey) -> "asyncio.Task[None]":
        """Return the in-flight fetch for ``key``, starting one if needed."""
        fetch = self._in_flight.get(key)
        if fetch is None:
            kind, scope_id = key
            if kind == "workspace":
                fetch = asyncio.ensure_future(self._fetch_workspace_users(scope_id))
            else:
                fetch = asyncio.ensure_future(self._fetch_project_collaborators(scope_id))
            self._in_flight[key] = fetch
            fetch.add_done_callback(lambda done, key=key: self._forget(key, done))
        self._waiters[key] = self._waiters.get(key, 0) + 1
        return fetch

    def _forget(self, key: ScopeKey, fetch: "asyncio.Task[None]") -> None:
        if self._in_flight.get(key) is fetch:
            del self._in_flight[key]

    async def _release(self, keys: list[ScopeKey], fetches: list["asyncio.Task[None]"]) -> None:
        """
        Drop this caller's interest in ``fetches``.

        Fetches nobody else waits on and that are still running are
        cancelled and awaited, so no write lands after the caller returns.
        """
        orphans = []
        for key, fetch in zip(keys, fetches):
            self._waiters[key] -= 1
            if self._waiters[key]:
                continue
            del self._waiters[key]
            if not fetch.done():
                fetch.cancel()
                orphans.append(fetch)
        if orphans:
            logger.debug("Cancelling %d unfinished collaborator fetches", len(orphans))
            await asyncio.gather(*orphans, return_exceptions=True)

    async def _fetch_workspace_users(self, workspace_id: str) -> None:
        users: dict[str, CollaboratorInfo] = {}
        cursor: Optional[str] = None

        while True:
            page = await self._client.workspaces.users_page(
                workspace_id, cursor=cursor, limit=self._workspace_page_size
            )
            for user in page.workspace_users:
                users[user.user_id] = CollaboratorInfo(
                    id=user.user_id,
                    name=user.full_name,
                    email=user.user_email,
                )
            if not page.has_more or not page.next_cursor:
                break
            cursor = page.next_cursor

        logger.debug("Loaded %d users for workspace %s", len(users), workspace_id)
        self._workspace_users[workspace_id] = users

    async def _fetch_project_collaborators(self, project_id: str) -> None:
        users: dict[str, CollaboratorInfo] = {}
        cursor: Optional[str] = None

        while True:
            page = await self._client.projects.collaborators_page(project_id, cursor=cursor)
            for collaborator in page.results:
                users[collaborator.id] = CollaboratorInfo(
                    id=collaborator.id,
                    name=collaborator.name,
                    email=collaborator.email,
                )
            if page.next_cursor is None:
                break
            cursor = page.next_cursor

        logger.debug("Loaded %d collaborators for project %s", len(users), project_id)
        self._project_collaborators[project_id] = users

    def get_user(
        self,
        user_id: str,
        project_id: str,
        projects: Mapping[str, Project],
    ) -> Optional[CollaboratorInfo]:
        """Return the cached identity of ``user_id`` in the project's scope, if any."""
        project = projects.get(project_id)
        if project is None:
            return None

        if self._classify(project) is ProjectKind.WORKSPACE and project.workspace_id is not None:
            users = self._workspace_users.get(project.workspace_id, {})
        else:
            users = self._project_collaborators.get(project_id, {})
        return users.get(user_id)

    def get_user_name(
        self,
        user_id: str,
        project_id: str,
        projects: Mapping[str, Project],
    ) -> Optional[str]:
        """
        Return the full name of an assignee, or None.

        Never raises: an unknown project, a scope that was not preloaded,
        or a user missing from the scope all yield None.
        """
        user = self.get_user(user_id, project_id, projects)
        return user.name if user else None


def format_user_short_name(full_name: str) -> str:
    """
    Shorten a full name to ``First L.``.

    Example:
        >>> format_user_short_name("Ada King Lovelace")
        'Ada L.'
        >>> format_user_short_name("Cher")
        'Cher'
    """
    parts = full_name.split()
    if len(parts) <= 1:
        return full_name.strip()
    return f"{parts[0]} {parts[-1][0]}."


def format_assignee(
    user_id: Optional[str],
    project_id: str,
    projects: Mapping[str, Project],
    cache: CollaboratorCache,
) -> Optional[str]:
    """
    Render an assignee for task output.

    Returns ``+First L.`` when the name is cached, ``+<user_id>`` when it
    is not, and None for unassigned tasks.
    """
    if not user_id:
        return None

    name = cache.get_user_name(user_id, project_id, projects)
    if name:
        return f"+{format_user_short_name(name)}"
    return f"+{user_id}"
