"""Tests for the collaborator cache and assignee formatting."""

import asyncio
import re
from typing import Optional

import pytest
from pytest_httpx import HTTPXMock

from todoist_query import TodoistClient
from todoist_query.collaborators import (
    CollaboratorCache,
    format_assignee,
    format_user_short_name,
)
from todoist_query.exceptions import ServerError
from todoist_query.types import (
    Collaborator,
    Page,
    ProjectKind,
    WorkspaceUser,
    WorkspaceUsersPage,
)

from conftest import make_project, make_task


class FakeWorkspaces:
    def __init__(self, pages: dict[str, list[WorkspaceUsersPage]]) -> None:
        self.pages = pages
        self.calls: list[tuple[str, Optional[str]]] = []

    async def users_page(self, workspace_id, cursor=None, limit=200) -> WorkspaceUsersPage:
        self.calls.append((workspace_id, cursor))
        index = 0 if cursor is None else int(cursor)
        return self.pages[workspace_id][index]


class FakeProjects:
    def __init__(self, pages: dict[str, list[Page[Collaborator]]]) -> None:
        self.pages = pages
        self.calls: list[tuple[str, Optional[str]]] = []

    async def collaborators_page(self, project_id, cursor=None, limit=None) -> Page[Collaborator]:
        self.calls.append((project_id, cursor))
        index = 0 if cursor is None else int(cursor)
        return self.pages[project_id][index]


class FakeClient:
    """Stands in for TodoistClient; the cache only uses these two calls."""

    def __init__(self, workspace_pages=None, project_pages=None) -> None:
        self.workspaces = FakeWorkspaces(workspace_pages or {})
        self.projects = FakeProjects(project_pages or {})


def ws_page(*users: tuple[str, str], next_cursor: Optional[str] = None) -> WorkspaceUsersPage:
    return WorkspaceUsersPage(
        workspace_users=[
            WorkspaceUser(user_id=uid, full_name=name, user_email=f"{uid}@example.com")
            for uid, name in users
        ],
        has_more=next_cursor is not None,
        next_cursor=next_cursor,
    )


def collab_page(*users: tuple[str, str], next_cursor: Optional[str] = None) -> Page[Collaborator]:
    return Page(
        results=[Collaborator(id=uid, name=name, email=f"{uid}@example.com") for uid, name in users],
        next_cursor=next_cursor,
    )


@pytest.fixture
def projects() -> dict:
    return {
        "p1": make_project("p1", workspace_id="w1"),
        "p2": make_project("p2", is_shared=True),
        "p3": make_project("p3", workspace_id="w1"),
        "p4": make_project("p4"),
    }


class TestPreload:
    """Tests for CollaboratorCache.preload()."""

    @pytest.mark.asyncio
    async def test_one_fetch_per_distinct_scope(self, projects: dict) -> None:
        """Test 3 tasks in a workspace project and 2 in a shared project cost 2 fetches."""
        client = FakeClient(
            workspace_pages={"w1": [ws_page(("u1", "Ada Lovelace"))]},
            project_pages={"p2": [collab_page(("u2", "Grace Hopper"))]},
        )
        tasks = [make_task(f"t{i}", project_id="p1", responsible_uid="u1") for i in range(3)]
        tasks += [make_task(f"s{i}", project_id="p2", responsible_uid="u2") for i in range(2)]

        cache = CollaboratorCache(client)
        await cache.preload(tasks, projects)

        assert client.workspaces.calls == [("w1", None)]
        assert client.projects.calls == [("p2", None)]
        assert cache.get_user_name("u1", "p1", projects) == "Ada Lovelace"
        assert cache.get_user_name("u2", "p2", projects) == "Grace Hopper"

    @pytest.mark.asyncio
    async def test_workspace_shared_by_projects_fetched_once(self, projects: dict) -> None:
        client = FakeClient(workspace_pages={"w1": [ws_page(("u1", "Ada Lovelace"))]})
        tasks = [
            make_task("t1", project_id="p1", responsible_uid="u1"),
            make_task("t2", project_id="p3", responsible_uid="u1"),
        ]
        cache = CollaboratorCache(client)
        await cache.preload(tasks, projects)
        assert client.workspaces.calls == [("w1", None)]
        assert cache.get_user_name("u1", "p3", projects) == "Ada Lovelace"

    @pytest.mark.asyncio
    async def test_skips_unassigned_private_and_unknown(self, projects: dict) -> None:
        """Test that no fetch happens without a relevant assigned task."""
        client = FakeClient()
        tasks = [
            make_task("t1", project_id="p1"),
            make_task("t2", project_id="p4", responsible_uid="u1"),
            make_task("t3", project_id="unknown", responsible_uid="u1"),
        ]
        await CollaboratorCache(client).preload(tasks, projects)
        assert client.workspaces.calls == []
        assert client.projects.calls == []

    @pytest.mark.asyncio
    async def test_follows_cursors(self, projects: dict) -> None:
        """Test that every page of members and collaborators is loaded."""
        client = FakeClient(
            workspace_pages={
                "w1": [ws_page(("u1", "Ada Lovelace"), next_cursor="1"), ws_page(("u3", "Alan Turing"))]
            },
            project_pages={
                "p2": [collab_page(("u2", "Grace Hopper"), next_cursor="1"), collab_page(("u4", "Edsger Dijkstra"))]
            },
        )
        tasks = [
            make_task("t1", project_id="p1", responsible_uid="u3"),
            make_task("t2", project_id="p2", responsible_uid="u4"),
        ]
        cache = CollaboratorCache(client)
        await cache.preload(tasks, projects)

        assert client.workspaces.calls == [("w1", None), ("w1", "1")]
        assert client.projects.calls == [("p2", None), ("p2", "1")]
        assert cache.get_user_name("u3", "p1", projects) == "Alan Turing"
        assert cache.get_user_name("u4", "p2", projects) == "Edsger Dijkstra"

    @pytest.mark.asyncio
    async def test_workspace_loop_stops_without_has_more(self, projects: dict) -> None:
        """Test that has_more=False ends the loop even if a cursor is present."""
        page = ws_page(("u1", "Ada Lovelace"), next_cursor="1")
        page.has_more = False
        client = FakeClient(workspace_pages={"w1": [page]})
        await CollaboratorCache(client).preload(
            [make_task("t1", project_id="p1", responsible_uid="u1")], projects
        )
        assert client.workspaces.calls == [("w1", None)]

    @pytest.mark.asyncio
    async def test_cached_scopes_not_refetched(self, projects: dict) -> None:
        client = FakeClient(workspace_pages={"w1": [ws_page(("u1", "Ada Lovelace"))]})
        tasks = [make_task("t1", project_id="p1", responsible_uid="u1")]
        cache = CollaboratorCache(client)
        await cache.preload(tasks, projects)
        await cache.preload(tasks, projects)
        assert client.workspaces.calls == [("w1", None)]

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self, projects: dict) -> None:
        """Test that the workspace fetch can wait on the project fetch without deadlock."""
        project_started = asyncio.Event()

        class BlockingWorkspaces(FakeWorkspaces):
            async def users_page(self, workspace_id, cursor=None, limit=200):
                await project_started.wait()
                return await super().users_page(workspace_id, cursor, limit)

        class SignallingProjects(FakeProjects):
            async def collaborators_page(self, project_id, cursor=None, limit=None):
                project_started.set()
                return await super().collaborators_page(project_id, cursor, limit)

        client = FakeClient()
        client.workspaces = BlockingWorkspaces({"w1": [ws_page(("u1", "Ada Lovelace"))]})
        client.projects = SignallingProjects({"p2": [collab_page(("u2", "Grace Hopper"))]})
        tasks = [
            make_task("t1", project_id="p1", responsible_uid="u1"),
            make_task("t2", project_id="p2", responsible_uid="u2"),
        ]

        await asyncio.wait_for(CollaboratorCache(client).preload(tasks, projects), timeout=2)

    @pytest.mark.asyncio
    async def test_custom_classifier(self, projects: dict) -> None:
        """Test that the caller's classifier decides which scope is fetched."""
        client = FakeClient(project_pages={"p4": [collab_page(("u9", "Barbara Liskov"))]})
        cache = CollaboratorCache(client, classify=lambda p: ProjectKind.SHARED_PERSONAL)
        await cache.preload([make_task("t1", project_id="p4", responsible_uid="u9")], projects)
        assert cache.get_user_name("u9", "p4", projects) == "Barbara Liskov"

    @pytest.mark.asyncio
    async def test_errors_propagate(self, projects: dict) -> None:
        class FailingProjects(FakeProjects):
            async def collaborators_page(self, project_id, cursor=None, limit=None):
                raise ServerError("collaborators unavailable")

        client = FakeClient()
        client.projects = FailingProjects({})
        with pytest.raises(ServerError, match="collaborators unavailable"):
            await CollaboratorCache(client).preload(
                [make_task("t1", project_id="p2", responsible_uid="u2")], projects
            )

    @pytest.mark.asyncio
    async def test_failure_cancels_unfinished_fetches(self, projects: dict) -> None:
        """Test that nothing is written to the cache after preload has raised."""
        workspace_started = asyncio.Event()
        workspace_cancelled = asyncio.Event()

        class SlowWorkspaces(FakeWorkspaces):
            async def users_page(self, workspace_id, cursor=None, limit=200):
                workspace_started.set()
                try:
                    await asyncio.sleep(0.05)
                except asyncio.CancelledError:
                    workspace_cancelled.set()
                    raise
                return await super().users_page(workspace_id, cursor, limit)

        class FailingProjects(FakeProjects):
            async def collaborators_page(self, project_id, cursor=None, limit=None):
                await workspace_started.wait()
                raise ServerError("collaborators unavailable")

        client = FakeClient()
        client.workspaces = SlowWorkspaces({"w1": [ws_page(("u1", "Ada Lovelace"))]})
        client.projects = FailingProjects({})
        tasks = [
            make_task("t1", project_id="p1", responsible_uid="u1"),
            make_task("t2", project_id="p2", responsible_uid="u2"),
        ]
        cache = CollaboratorCache(client)

        with pytest.raises(ServerError):
            await cache.preload(tasks, projects)

        assert workspace_cancelled.is_set()
        await asyncio.sleep(0.1)
        assert cache.get_user_name("u1", "p1", projects) is None

    @pytest.mark.asyncio
    async def test_overlapping_preloads_share_fetch(self, projects: dict) -> None:
        client = FakeClient(workspace_pages={"w1": [ws_page(("u1", "Ada Lovelace"))]})
        tasks = [make_task("t1", project_id="p1", responsible_uid="u1")]
        cache = CollaboratorCache(client)

        await asyncio.gather(cache.preload(tasks, projects), cache.preload(tasks, projects))

        assert client.workspaces.calls == [("w1", None)]
        assert cache.get_user_name("u1", "p1", projects) == "Ada Lovelace"

    @pytest.mark.asyncio
    async def test_cancelled_preload_leaves_shared_fetch_running(self, projects: dict) -> None:
        """Test that cancelling one caller does not abort a fetch another caller awaits."""
        release = asyncio.Event()

        class GatedWorkspaces(FakeWorkspaces):
            async def users_page(self, workspace_id, cursor=None, limit=200):
                await release.wait()
                return await super().users_page(workspace_id, cursor, limit)

        client = FakeClient()
        client.workspaces = GatedWorkspaces({"w1": [ws_page(("u1", "Ada Lovelace"))]})
        tasks = [make_task("t1", project_id="p1", responsible_uid="u1")]
        cache = CollaboratorCache(client)

        first = asyncio.ensure_future(cache.preload(tasks, projects))
        second = asyncio.ensure_future(cache.preload(tasks, projects))
        await asyncio.sleep(0)
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        release.set()
        await second
        assert client.workspaces.calls == [("w1", None)]
        assert cache.get_user_name("u1", "p1", projects) == "Ada Lovelace"


class TestPreloadWithClient:
    """Tests for preload() against the HTTP API."""

    @pytest.mark.asyncio
    async def test_end_to_end_requests(self, client: TodoistClient, httpx_mock: HTTPXMock) -> None:
        """Test that two scopes produce exactly two requests."""
        httpx_mock.add_response(
            url=re.compile(r".*/workspaces/users\?.*workspace_id=w1.*"),
            json={
                "workspace_users": [
                    {"user_id": "u1", "full_name": "Ada Lovelace", "user_email": "ada@example.com"}
                ],
                "has_more": False,
                "next_cursor": None,
            },
        )
        httpx_mock.add_response(
            url=re.compile(r".*/projects/p2/collaborators.*"),
            json={
                "results": [{"id": "u2", "name": "Grace Hopper", "email": "grace@example.com"}],
                "next_cursor": None,
            },
        )
        projects = {
            "p1": make_project("p1", workspace_id="w1"),
            "p2": make_project("p2", is_shared=True),
        }
        tasks = [make_task(f"t{i}", project_id="p1", responsible_uid="u1") for i in range(3)]
        tasks += [make_task(f"s{i}", project_id="p2", responsible_uid="u2") for i in range(2)]

        cache = CollaboratorCache(client)
        await cache.preload(tasks, projects)

        assert len(httpx_mock.get_requests()) == 2
        assert cache.get_user_name("u1", "p1", projects) == "Ada Lovelace"
        assert cache.get_user_name("u2", "p2", projects) == "Grace Hopper"


class TestGetUserName:
    """Tests for get_user_name()."""

    def test_unknown_project(self, projects: dict) -> None:
        cache = CollaboratorCache(FakeClient())
        assert cache.get_user_name("u1", "nope", projects) is None

    def test_scope_not_preloaded(self, projects: dict) -> None:
        cache = CollaboratorCache(FakeClient())
        assert cache.get_user_name("u1", "p1", projects) is None
        assert cache.get_user_name("u1", "p2", projects) is None

    @pytest.mark.asyncio
    async def test_unknown_user(self, projects: dict) -> None:
        client = FakeClient(workspace_pages={"w1": [ws_page(("u1", "Ada Lovelace"))]})
        cache = CollaboratorCache(client)
        await cache.preload([make_task("t1", project_id="p1", responsible_uid="u1")], projects)
        assert cache.get_user_name("u404", "p1", projects) is None


class TestFormatting:
    """Tests for assignee display helpers."""

    @pytest.mark.parametrize(
        "full_name,expected",
        [
            ("Ada Lovelace", "Ada L."),
            ("Ada King Lovelace", "Ada L."),
            ("  Grace   Hopper ", "Grace H."),
            ("Cher", "Cher"),
        ],
    )
    def test_format_user_short_name(self, full_name: str, expected: str) -> None:
        assert format_user_short_name(full_name) == expected

    @pytest.mark.asyncio
    async def test_format_assignee(self, projects: dict) -> None:
        client = FakeClient(workspace_pages={"w1": [ws_page(("u1", "Ada Lovelace"))]})
        cache = CollaboratorCache(client)
        await cache.preload([make_task("t1", project_id="p1", responsible_uid="u1")], projects)

        assert format_assignee("u1", "p1", projects, cache) == "+Ada L."
        assert format_assignee("u2", "p1", projects, cache) == "+u2"
        assert format_assignee(None, "p1", projects, cache) is None
