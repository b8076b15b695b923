"""
Projects API for todoist-query.

This module provides read access to projects and to the collaborator
lists of shared personal projects.
"""

from typing import TYPE_CHECKING, Optional

from .pagination import ALL, MAX_PAGE_SIZE, paginate
from .types import Collaborator, Page, Project

if TYPE_CHECKING:
    from .client import TodoistClient


class ProjectsAPI:
    """API for reading projects."""

    def __init__(self, client: "TodoistClient") -> None:
        self._client = client

    async def get(self, project_id: str) -> Project:
        """
        Get a specific project by ID.

        Raises:
            NotFoundError: If the project doesn't exist or isn't accessible.
        """
        data = await self._client._request_json("GET", f"/projects/{project_id}")
        return Project.from_dict(data)

    async def list_page(
        self,
        cursor: Optional[str] = None,
        limit: int = MAX_PAGE_SIZE,
    ) -> Page[Project]:
        """Fetch one page of active projects."""
        data = await self._client._request_json(
            "GET", "/projects", params={"cursor": cursor, "limit": limit}
        )
        return Page(
            results=[Project.from_dict(p) for p in data.get("results", [])],
            next_cursor=data.get("next_cursor"),
        )

    async def list_all(self) -> list[Project]:
        """List every active project, following all cursors."""
        result = await paginate(self.list_page, limit=ALL)
        return result.results

    async def collaborators_page(
        self,
        project_id: str,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Page[Collaborator]:
        """
        Fetch one page of collaborators on a shared project.

        Args:
            project_id: The shared project.
            cursor: Cursor returned by the previous page, if any.
            limit: Page size; the backend default when omitted.
        """
        data = await self._client._request_json(
            "GET",
            f"/projects/{project_id}/collaborators",
            params={"cursor": cursor, "limit": limit},
        )
        return Page(
            results=[Collaborator.from_dict(c) for c in data.get("results", [])],
            next_cursor=data.get("next_cursor"),
        )
