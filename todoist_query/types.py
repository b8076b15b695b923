"""
Type definitions for todoist-query.

This module contains the dataclasses the resolver, paginator and
collaborator cache operate on. Every ``from_dict`` accepts the snake_case
keys of the Todoist API v1 as well as camelCase keys.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ProjectKind(str, Enum):
    """How a project relates to other users, for assignee lookup."""

    WORKSPACE = "workspace"
    SHARED_PERSONAL = "shared_personal"
    PRIVATE = "private"


def _get(data: dict[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    value = data.get(snake)
    if value is None:
        value = data.get(camel, default)
    return value


def _str_or_none(value: Any) -> Optional[str]:
    return None if value is None else str(value)


@dataclass
class Task:
    """
    Represents a task.

    Attributes:
        id: Unique task identifier.
        content: Task title, used as its display name.
        project_id: Owning project ID.
        section_id: Section ID if the task is in a section.
        parent_id: Parent task ID for subtasks.
        responsible_uid: User ID of the assignee, if any.
        priority: API priority (4 is most urgent, shown as p1).
        labels: Label names attached to the task.
        description: Task description.
        due: Raw due object from the API.
        is_completed: Whether the task is checked.
        added_at: When the task was created.
    """

    id: str
    content: str
    project_id: str
    section_id: Optional[str] = None
    parent_id: Optional[str] = None
    responsible_uid: Optional[str] = None
    priority: int = 1
    labels: list[str] = field(default_factory=list)
    description: str = ""
    due: Optional[dict[str, Any]] = None
    is_completed: bool = False
    added_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Create a Task from an API response dictionary."""
        return cls(
            id=str(data["id"]),
            content=data.get("content", ""),
            project_id=str(_get(data, "project_id", "projectId")),
            section_id=_str_or_none(_get(data, "section_id", "sectionId")),
            parent_id=_str_or_none(_get(data, "parent_id", "parentId")),
            responsible_uid=_str_or_none(_get(data, "responsible_uid", "responsibleUid")),
            priority=data.get("priority", 1),
            labels=data.get("labels", []),
            description=data.get("description") or "",
            due=data.get("due"),
            is_completed=bool(_get(data, "checked", "isCompleted", False)),
            added_at=_parse_datetime(_get(data, "added_at", "addedAt")),
        )


@dataclass
class Project:
    """
    Represents a project.

    A project is workspace-owned when it carries a ``workspace_id``;
    otherwise it is a personal project, shared or private.
    """

    id: str
    name: str
    workspace_id: Optional[str] = None
    is_shared: bool = False
    is_favorite: bool = False
    is_archived: bool = False
    parent_id: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        """Create a Project from an API response dictionary."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            workspace_id=_str_or_none(_get(data, "workspace_id", "workspaceId")),
            is_shared=bool(_get(data, "is_shared", "isShared", False)),
            is_favorite=bool(_get(data, "is_favorite", "isFavorite", False)),
            is_archived=bool(_get(data, "is_archived", "isArchived", False)),
            parent_id=_str_or_none(_get(data, "parent_id", "parentId")),
            color=data.get("color"),
        )


@dataclass
class Section:
    """A section within a project."""

    id: str
    name: str
    project_id: str
    order: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Section":
        """Create a Section from an API response dictionary."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            project_id=str(_get(data, "project_id", "projectId")),
            order=_get(data, "section_order", "order", 0),
        )


@dataclass
class Label:
    """A personal label."""

    id: str
    name: str
    color: Optional[str] = None
    is_favorite: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Label":
        """Create a Label from an API response dictionary."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            color=data.get("color"),
            is_favorite=bool(_get(data, "is_favorite", "isFavorite", False)),
        )


@dataclass
class Filter:
    """
    A saved filter.

    Attributes:
        query: The filter query string run against the tasks endpoint.
        is_deleted: Deleted filters still appear in sync payloads.
    """

    id: str
    name: str
    query: str
    color: Optional[str] = None
    item_order: Optional[int] = None
    is_favorite: bool = False
    is_deleted: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Filter":
        """Create a Filter from a sync payload dictionary."""
        item_order = _get(data, "item_order", "itemOrder")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            query=str(data.get("query", "")),
            color=data.get("color") or None,
            item_order=int(item_order) if item_order is not None else None,
            is_favorite=bool(_get(data, "is_favorite", "isFavorite", False)),
            is_deleted=bool(_get(data, "is_deleted", "isDeleted", False)),
        )


@dataclass
class Workspace:
    """A multi-user workspace."""

    id: str
    name: str
    role: Optional[str] = None
    plan: Optional[str] = None
    domain_name: Optional[str] = None
    current_member_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Workspace":
        """Create a Workspace from a sync payload dictionary."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            role=data.get("role"),
            plan=data.get("plan"),
            domain_name=_get(data, "domain_name", "domainName"),
            current_member_count=_get(data, "current_member_count", "currentMemberCount", 0),
        )


@dataclass
class WorkspaceUser:
    """A member of a workspace as returned by the workspace-users endpoint."""

    user_id: str
    full_name: str
    user_email: str
    role: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkspaceUser":
        return cls(
            user_id=str(_get(data, "user_id", "userId")),
            full_name=_get(data, "full_name", "fullName", ""),
            user_email=_get(data, "user_email", "userEmail", ""),
            role=data.get("role"),
        )


@dataclass
class Collaborator:
    """A collaborator on a shared personal project."""

    id: str
    name: str
    email: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Collaborator":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            email=data.get("email", ""),
        )


@dataclass(frozen=True)
class CollaboratorInfo:
    """Identity of a possible assignee, as held by the collaborator cache."""

    id: str
    name: str
    email: str


@dataclass
class Page(Generic[T]):
    """
    One page of a cursor-paginated listing.

    Attributes:
        results: Items on this page.
        next_cursor: Opaque token for the next page, or None when exhausted.
    """

    results: list[T] = field(default_factory=list)
    next_cursor: Optional[str] = None


@dataclass
class WorkspaceUsersPage:
    """One page of the workspace-users endpoint."""

    workspace_users: list[WorkspaceUser] = field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkspaceUsersPage":
        users = _get(data, "workspace_users", "workspaceUsers", [])
        return cls(
            workspace_users=[WorkspaceUser.from_dict(u) for u in users],
            has_more=bool(_get(data, "has_more", "hasMore", False)),
            next_cursor=_get(data, "next_cursor", "nextCursor"),
        )


def is_workspace_project(project: Project) -> bool:
    """Return True if the project is owned by a workspace."""
    return project.workspace_id is not None


def is_personal_project(project: Project) -> bool:
    return not is_workspace_project(project)


def classify_project(project: Project) -> ProjectKind:
    """
    Classify a project for assignee lookup.

    Workspace projects resolve assignees through workspace membership,
    shared personal projects through their collaborator list. Private
    personal projects have no one else to assign to.
    """
    if is_workspace_project(project):
        return ProjectKind.WORKSPACE
    if project.is_shared:
        return ProjectKind.SHARED_PERSONAL
    return ProjectKind.PRIVATE


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO format datetime string."""
    if not value:
        return None
    try:
        # Handle various ISO formats
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except (ValueError, AttributeError):
        return None
