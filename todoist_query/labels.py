"""
Labels API for todoist-query.
"""

from typing import TYPE_CHECKING, Optional

from .pagination import ALL, MAX_PAGE_SIZE, paginate
from .types import Label, Page

if TYPE_CHECKING:
    from .client import TodoistClient


class LabelsAPI:
    """API for reading personal labels."""

    def __init__(self, client: "TodoistClient") -> None:
        self._client = client

    async def get(self, label_id: str) -> Label:
        data = await self._client._request_json("GET", f"/labels/{label_id}")
        return Label.from_dict(data)

    async def list_page(
        self,
        cursor: Optional[str] = None,
        limit: int = MAX_PAGE_SIZE,
    ) -> Page[Label]:
        data = await self._client._request_json(
            "GET", "/labels", params={"cursor": cursor, "limit": limit}
        )
        return Page(
            results=[Label.from_dict(item) for item in data.get("results", [])],
            next_cursor=data.get("next_cursor"),
        )

    async def list_all(self) -> list[Label]:
        result = await paginate(self.list_page, limit=ALL)
        return result.results
