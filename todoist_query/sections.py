"""
Sections API for todoist-query.
"""

from typing import TYPE_CHECKING, Optional

from .pagination import ALL, MAX_PAGE_SIZE, paginate
from .types import Page, Section

if TYPE_CHECKING:
    from .client import TodoistClient


class SectionsAPI:
    """API for reading project sections."""

    def __init__(self, client: "TodoistClient") -> None:
        self._client = client

    async def get(self, section_id: str) -> Section:
        data = await self._client._request_json("GET", f"/sections/{section_id}")
        return Section.from_dict(data)

    async def list_page(
        self,
        cursor: Optional[str] = None,
        limit: int = MAX_PAGE_SIZE,
        project_id: Optional[str] = None,
    ) -> Page[Section]:
        """Fetch one page of sections, optionally restricted to one project."""
        data = await self._client._request_json(
            "GET",
            "/sections",
            params={"cursor": cursor, "limit": limit, "project_id": project_id},
        )
        return Page(
            results=[Section.from_dict(s) for s in data.get("results", [])],
            next_cursor=data.get("next_cursor"),
        )

    async def list_all(self, project_id: Optional[str] = None) -> list[Section]:
        result = await paginate(
            lambda cursor, limit: self.list_page(cursor, limit, project_id=project_id),
            limit=ALL,
        )
        return result.results
