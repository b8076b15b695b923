"""
Tasks API for todoist-query.

This module provides read access to tasks: single-task fetches for ``id:``
references and cursor-paged listings for the paginator.
"""

from typing import TYPE_CHECKING, Any, Optional

from .pagination import ALL, MAX_PAGE_SIZE, paginate
from .types import Page, Task

if TYPE_CHECKING:
    from .client import TodoistClient


def _task_page(data: dict[str, Any]) -> Page[Task]:
    return Page(
        results=[Task.from_dict(t) for t in data.get("results", [])],
        next_cursor=data.get("next_cursor"),
    )


class TasksAPI:
    """
    API for reading tasks.

    Listing methods return a single ``Page``; wrap them in ``paginate`` to
    collect more than one page.
    """

    def __init__(self, client: "TodoistClient") -> None:
        """
        Initialize the Tasks API.

        Args:
            client: The TodoistClient instance to use for API calls.
        """
        self._client = client

    async def get(self, task_id: str) -> Task:
        """
        Get a specific task by ID.

        Raises:
            NotFoundError: If the task doesn't exist or isn't accessible.
        """
        data = await self._client._request_json("GET", f"/tasks/{task_id}")
        return Task.from_dict(data)

    async def list_page(
        self,
        cursor: Optional[str] = None,
        limit: int = MAX_PAGE_SIZE,
        project_id: Optional[str] = None,
        section_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        label: Optional[str] = None,
    ) -> Page[Task]:
        """
        Fetch one page of active tasks.

        Args:
            cursor: Cursor returned by the previous page, if any.
            limit: Page size.
            project_id: Only tasks in this project.
            section_id: Only tasks in this section.
            parent_id: Only subtasks of this task.
            label: Only tasks carrying this label name.

        Returns:
            One Page of Task objects.

        Example:
            >>> page = await client.tasks.list_page(project_id="6Jf8VQXxpwv56VQ7")
            >>> for task in page.results:
            ...     print(task.content)
        """
        params = {
            "cursor": cursor,
            "limit": limit,
            "project_id": project_id,
            "section_id": section_id,
            "parent_id": parent_id,
            "label": label,
        }
        data = await self._client._request_json("GET", "/tasks", params=params)
        return _task_page(data)

    async def filter_page(
        self,
        query: str,
        cursor: Optional[str] = None,
        limit: int = MAX_PAGE_SIZE,
    ) -> Page[Task]:
        """
        Fetch one page of tasks matching a filter query.

        Raises:
            ValidationError: If the backend rejects the query syntax.
        """
        params = {"query": query, "cursor": cursor, "limit": limit}
        data = await self._client._request_json("GET", "/tasks/filter", params=params)
        return _task_page(data)

    async def list_all(
        self,
        project_id: Optional[str] = None,
        section_id: Optional[str] = None,
    ) -> list[Task]:
        """List every active task in the given scope, following all cursors."""
        result = await paginate(
            lambda cursor, limit: self.list_page(
                cursor, limit, project_id=project_id, section_id=section_id
            ),
            limit=ALL,
        )
        return result.results
