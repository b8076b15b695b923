"""Shared test fixtures for todoist-query tests."""

from typing import Any, Optional

import pytest

from todoist_query import TodoistClient
from todoist_query.types import Page, Project, Task


@pytest.fixture
def api_token() -> str:
    """Test API token."""
    return "0123456789abcdef0123456789abcdef01234567"


@pytest.fixture
def base_url() -> str:
    """Test base URL."""
    return "http://todoist.test/api/v1"


@pytest.fixture
def client(api_token: str, base_url: str) -> TodoistClient:
    """Create a test client."""
    return TodoistClient(token=api_token, url=base_url)


@pytest.fixture
def no_retry_client(api_token: str, base_url: str) -> TodoistClient:
    """Create a test client with no retries (for error handling tests)."""
    return TodoistClient(token=api_token, url=base_url, max_retries=0)


@pytest.fixture
def mock_task_data() -> dict:
    """Mock task payload in API v1 format."""
    return {
        "id": "6X7rM8997g3RQmvh",
        "content": "Write release notes",
        "description": "",
        "project_id": "6Jf8VQXxpwv56VQ7",
        "section_id": None,
        "parent_id": None,
        "responsible_uid": None,
        "priority": 4,
        "labels": ["writing"],
        "checked": False,
        "due": {"date": "2025-02-01", "string": "Feb 1", "is_recurring": False},
        "added_at": "2025-01-01T00:00:00Z",
    }


@pytest.fixture
def mock_project_data() -> dict:
    """Mock workspace project payload."""
    return {
        "id": "6Jf8VQXxpwv56VQ7",
        "name": "Work",
        "workspace_id": "42",
        "is_shared": True,
        "is_favorite": False,
        "is_archived": False,
        "color": "blue",
    }


def make_task(
    task_id: str,
    content: str = "",
    project_id: str = "p1",
    responsible_uid: Optional[str] = None,
    **kwargs: Any,
) -> Task:
    return Task(
        id=task_id,
        content=content or f"Task {task_id}",
        project_id=project_id,
        responsible_uid=responsible_uid,
        **kwargs,
    )


def make_project(
    project_id: str,
    name: str = "",
    workspace_id: Optional[str] = None,
    is_shared: bool = False,
) -> Project:
    return Project(
        id=project_id,
        name=name or f"Project {project_id}",
        workspace_id=workspace_id,
        is_shared=is_shared,
    )


class FakePager:
    """
    In-memory cursor-paged listing.

    Records every (cursor, page_size) call so tests can assert on the
    number and order of page fetches.
    """

    def __init__(self, items: list[Any]) -> None:
        self.items = items
        self.calls: list[tuple[Optional[str], int]] = []

    async def __call__(self, cursor: Optional[str], page_size: int) -> Page[Any]:
        self.calls.append((cursor, page_size))
        start = int(cursor) if cursor is not None else 0
        end = start + page_size
        next_cursor = str(end) if end < len(self.items) else None
        return Page(results=self.items[start:end], next_cursor=next_cursor)
