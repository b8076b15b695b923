"""
todoist-query

Reference resolution, cursor pagination and assignee lookup for a Todoist
command-line client.

Example:
    >>> from todoist_query import TodoistClient, paginate, resolve_project_id
    >>>
    >>> async with TodoistClient(token="...") as client:
    ...     project_id = await resolve_project_id(client, "work")
    ...     result = await paginate(
    ...         lambda cursor, size: client.tasks.list_page(cursor, size, project_id=project_id),
    ...         limit=50,
    ...     )
    ...     for task in result.results:
    ...         print(task.content)
"""

from .client import TodoistClient
from .collaborators import CollaboratorCache, format_assignee, format_user_short_name
from .exceptions import (
    AmbiguousRefError,
    AuthenticationError,
    AuthorizationError,
    ConflictingFiltersError,
    InvalidLimitError,
    InvalidPriorityError,
    InvalidRefError,
    NotFoundError,
    RateLimitError,
    RefError,
    RefNotFoundError,
    SectionNotInProjectError,
    ServerError,
    TodoistConnectionError,
    TodoistQueryError,
    TodoistTimeoutError,
    ValidationError,
)
from .filters import FiltersAPI
from .labels import LabelsAPI
from .pagination import ALL, LIMITS, MAX_PAGE_SIZE, PaginatedResult, next_cursor_hint, paginate, target_limit
from .projects import ProjectsAPI
from .refs import (
    extract_id,
    is_id_ref,
    match_by_name,
    require_id_ref,
    resolve_filter_ref,
    resolve_label_ref,
    resolve_parent_task_id,
    resolve_project_id,
    resolve_project_ref,
    resolve_ref,
    resolve_section_id,
    resolve_section_ref,
    resolve_task_ref,
    resolve_workspace_ref,
)
from .sections import SectionsAPI
from .task_list import TaskListing, TaskListOptions, build_filter_query, list_tasks, parse_priority
from .tasks import TasksAPI
from .types import (
    Collaborator,
    CollaboratorInfo,
    Filter,
    Label,
    Page,
    Project,
    ProjectKind,
    Section,
    Task,
    Workspace,
    WorkspaceUser,
    WorkspaceUsersPage,
    classify_project,
    is_personal_project,
    is_workspace_project,
)
from .workspaces import WorkspacesAPI

__version__ = "0.1.0"

__all__ = [
    # Main client
    "TodoistClient",
    # API classes
    "TasksAPI",
    "ProjectsAPI",
    "SectionsAPI",
    "LabelsAPI",
    "FiltersAPI",
    "WorkspacesAPI",
    # Resolution
    "resolve_ref",
    "match_by_name",
    "is_id_ref",
    "extract_id",
    "require_id_ref",
    "resolve_task_ref",
    "resolve_project_ref",
    "resolve_project_id",
    "resolve_section_ref",
    "resolve_section_id",
    "resolve_parent_task_id",
    "resolve_workspace_ref",
    "resolve_filter_ref",
    "resolve_label_ref",
    # Pagination
    "ALL",
    "LIMITS",
    "MAX_PAGE_SIZE",
    "PaginatedResult",
    "paginate",
    "target_limit",
    "next_cursor_hint",
    # Collaborators
    "CollaboratorCache",
    "format_assignee",
    "format_user_short_name",
    # Task listing
    "TaskListOptions",
    "TaskListing",
    "build_filter_query",
    "parse_priority",
    "list_tasks",
    # Types
    "Collaborator",
    "CollaboratorInfo",
    "Filter",
    "Label",
    "Page",
    "Project",
    "ProjectKind",
    "Section",
    "Task",
    "Workspace",
    "WorkspaceUser",
    "WorkspaceUsersPage",
    "classify_project",
    "is_personal_project",
    "is_workspace_project",
    # Exceptions
    "TodoistQueryError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ValidationError",
    "RateLimitError",
    "ServerError",
    "TodoistConnectionError",
    "TodoistTimeoutError",
    "RefError",
    "RefNotFoundError",
    "AmbiguousRefError",
    "InvalidRefError",
    "SectionNotInProjectError",
    "InvalidLimitError",
    "InvalidPriorityError",
    "ConflictingFiltersError",
]
