"""
Task listing for todoist-query.

This module strings the pieces together the way the list commands use
them: build a filter query from options, page through the matching tasks,
then preload assignee names for display.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Union

from .collaborators import CollaboratorCache, format_assignee
from .exceptions import ConflictingFiltersError, InvalidPriorityError
from .pagination import LIMITS, paginate, target_limit
from .refs import extract_id, is_id_ref, resolve_workspace_ref
from .types import Project, Section, Task, is_workspace_project

if TYPE_CHECKING:
    from .client import TodoistClient

logger = logging.getLogger(__name__)


@dataclass
class TaskListOptions:
    """
    Options accepted by task list commands.

    Attributes:
        priority: ``p1`` (most urgent) to ``p4``.
        due: ``today``, ``overdue`` or any due-date filter expression.
        filter: Raw filter query, combined with the other options.
        label: Comma-separated label names; any of them matches.
        parent: Only subtasks of this task (``id:`` form or raw ID).
        assignee: ``me``, a name or email, or ``id:<user id>``.
        unassigned: Only tasks without an assignee.
        workspace: Only tasks in this workspace.
        personal: Only tasks in personal projects.
        limit: Number of tasks to fetch.
        cursor: Resume from a cursor printed by a previous run.
        all_items: Fetch every matching task.
    """

    priority: Optional[str] = None
    due: Optional[str] = None
    filter: Optional[str] = None
    label: Optional[str] = None
    parent: Optional[str] = None
    assignee: Optional[str] = None
    unassigned: bool = False
    workspace: Optional[str] = None
    personal: bool = False
    limit: Optional[Union[int, str]] = None
    cursor: Optional[str] = None
    all_items: bool = False


@dataclass
class TaskListing:
    """
    Result of list_tasks, ready for rendering.

    Attributes:
        tasks: The tasks after client-side filtering.
        next_cursor: Cursor for the next run, or None when exhausted.
        projects: Projects by ID, covering every listed task.
        sections: Sections of the project when listing a single project.
        collaborators: Cache preloaded for the listed tasks.
    """

    tasks: list[Task]
    next_cursor: Optional[str]
    projects: dict[str, Project]
    collaborators: CollaboratorCache
    sections: list[Section] = field(default_factory=list)

    def assignee_for(self, task: Task) -> Optional[str]:
        return format_assignee(task.responsible_uid, task.project_id, self.projects, self.collaborators)


def parse_priority(priority: str) -> int:
    """
    Convert a displayed priority to the API value.

    ``p1`` is the most urgent and maps to 4.

    Raises:
        InvalidPriorityError: For anything other than p1-p4.
    """
    value = priority.lower()
    if len(value) != 2 or value[0] != "p" or value[1] not in "1234":
        raise InvalidPriorityError(priority)
    return 5 - int(value[1])


def build_filter_query(options: TaskListOptions) -> Optional[str]:
    """
    Build a filter query from list options.

    Returns None when no option needs server-side filtering. ``id:``
    assignees are filtered client-side and contribute nothing here.
    """
    parts: list[str] = []

    if options.label:
        labels = [name.strip() for name in options.label.split(",")]
        if len(labels) == 1:
            parts.append(f"@{labels[0]}")
        else:
            parts.append("(" + " | ".join(f"@{name}" for name in labels) + ")")

    if options.priority:
        parse_priority(options.priority)
        parts.append(options.priority)

    if options.due:
        parts.append(options.due)

    if options.assignee:
        if options.assignee.lower() == "me":
            parts.append("assigned to: me")
        elif not is_id_ref(options.assignee):
            parts.append(f"assigned to: {options.assignee}")

    if options.unassigned:
        parts.append("!assigned")

    if options.workspace:
        parts.append(f"workspace: {options.workspace}")

    if options.personal:
        parts.append("workspace: personal")

    return " & ".join(parts) if parts else None


def combine_filter_query(user_filter: Optional[str], built: Optional[str]) -> Optional[str]:
    if user_filter and built:
        return f"({user_filter}) & ({built})"
    return user_filter or built


async def filter_by_workspace_or_personal(
    client: "TodoistClient",
    tasks: list[Task],
    workspace: Optional[str] = None,
    personal: bool = False,
) -> tuple[list[Task], dict[str, Project]]:
    """
    Keep only tasks in one workspace, or only tasks in personal projects.

    Returns the filtered tasks together with every project by ID, which
    callers need for rendering anyway.

    Raises:
        ConflictingFiltersError: If both ``workspace`` and ``personal`` are set.
    """
    if workspace and personal:
        raise ConflictingFiltersError("--workspace and --personal are mutually exclusive.")

    projects = {p.id: p for p in await client.projects.list_all()}

    if workspace:
        ws = await resolve_workspace_ref(client, workspace)
        tasks = [
            t
            for t in tasks
            if t.project_id in projects
            and is_workspace_project(projects[t.project_id])
            and projects[t.project_id].workspace_id == ws.id
        ]
    elif personal:
        tasks = [
            t
            for t in tasks
            if t.project_id in projects and not is_workspace_project(projects[t.project_id])
        ]

    return tasks, projects


async def list_tasks(
    client: "TodoistClient",
    project_id: Optional[str],
    options: TaskListOptions,
    preload_assignees: bool = True,
) -> TaskListing:
    """
    List tasks for a project, or across all projects when project_id is None.

    Args:
        client: The TodoistClient instance to use for API calls.
        project_id: Resolved project ID (see resolve_project_id).
        options: List options.
        preload_assignees: Skip the collaborator fetches when False, e.g.
            for JSON output that shows raw user IDs.

    Raises:
        InvalidLimitError: For a non-positive limit.
        InvalidPriorityError: For a malformed priority.
        ValidationError: If the backend rejects the filter query.
    """
    limit = target_limit(options.limit, options.all_items, default=LIMITS["tasks"])
    query = combine_filter_query(options.filter, build_filter_query(options))

    if query:
        logger.debug("Listing tasks with filter %r", query)

        def fetch_page(cursor, size):
            return client.tasks.filter_page(query, cursor=cursor, limit=size)
    else:

        def fetch_page(cursor, size):
            return client.tasks.list_page(cursor=cursor, limit=size, project_id=project_id)

    result = await paginate(fetch_page, limit, start_cursor=options.cursor)
    tasks = result.results

    if options.parent:
        parent_id = extract_id(options.parent) if is_id_ref(options.parent) else options.parent
        tasks = [t for t in tasks if t.parent_id == parent_id]

    if options.assignee and is_id_ref(options.assignee):
        assignee_id = extract_id(options.assignee)
        tasks = [t for t in tasks if t.responsible_uid == assignee_id]

    sections: list[Section] = []
    if project_id:
        project, sections = await asyncio.gather(
            client.projects.get(project_id),
            client.sections.list_all(project_id=project_id),
        )
        projects = {project.id: project}
    else:
        projects = {p.id: p for p in await client.projects.list_all()}

    collaborators = CollaboratorCache(client)
    if preload_assignees:
        await collaborators.preload(tasks, projects)

    return TaskListing(
        tasks=tasks,
        next_cursor=result.next_cursor,
        projects=projects,
        collaborators=collaborators,
        sections=sections,
    )
