"""
Filters API for todoist-query.

Saved filters are not exposed as a REST listing; they are read from the
sync endpoint in a single request.
"""

from typing import TYPE_CHECKING

from .types import Filter

if TYPE_CHECKING:
    from .client import TodoistClient


class FiltersAPI:
    """API for reading saved filters."""

    def __init__(self, client: "TodoistClient") -> None:
        self._client = client

    async def list_all(self) -> list[Filter]:
        """
        List saved filters.

        Deleted filters still present in the sync payload are dropped.

        Example:
            >>> for f in await client.filters.list_all():
            ...     print(f"{f.name}: {f.query}")
        """
        body = await self._client._sync(["filters"])
        filters = [Filter.from_dict(f) for f in body.get("filters") or []]
        return [f for f in filters if not f.is_deleted]
