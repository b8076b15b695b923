"""
Workspaces API for todoist-query.

This module provides the workspace listing (from the sync endpoint) and
the paged workspace-members endpoint used for assignee lookup.
"""

from typing import TYPE_CHECKING, Optional

from .types import Workspace, WorkspaceUsersPage

if TYPE_CHECKING:
    from .client import TodoistClient


class WorkspacesAPI:
    """API for reading workspaces and their members."""

    def __init__(self, client: "TodoistClient") -> None:
        """
        Initialize the Workspaces API.

        Args:
            client: The TodoistClient instance to use for API calls.
        """
        self._client = client

    async def list_all(self) -> list[Workspace]:
        """
        List the workspaces the user belongs to.

        Returns:
            List of Workspace objects.
        """
        body = await self._client._sync(["workspaces"])
        return [Workspace.from_dict(w) for w in body.get("workspaces") or []]

    async def users_page(
        self,
        workspace_id: str,
        cursor: Optional[str] = None,
        limit: int = 200,
    ) -> WorkspaceUsersPage:
        """
        Fetch one page of workspace members.

        Unlike other listings, this endpoint signals continuation with a
        ``has_more`` flag alongside the cursor.

        Args:
            workspace_id: The workspace to list members of.
            cursor: Cursor returned by the previous page, if any.
            limit: Page size.

        Returns:
            A WorkspaceUsersPage.
        """
        data = await self._client._request_json(
            "GET",
            "/workspaces/users",
            params={"workspace_id": workspace_id, "cursor": cursor, "limit": limit},
        )
        return WorkspaceUsersPage.from_dict(data)
