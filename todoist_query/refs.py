"""
Reference resolution for todoist-query.

Users name entities either canonically, as ``id:<id>``, or by typing part
of a display name. The functions here turn such a reference into exactly
one entity, or raise a RefError describing why they could not.

Name matching is case-insensitive. An exact name match always wins over
substring matches; otherwise a single substring match is accepted and
several are reported as ambiguous with up to five candidates as hints.
"""

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Optional, Protocol, TypeVar

from .exceptions import (
    AmbiguousRefError,
    InvalidRefError,
    RefNotFoundError,
    SectionNotInProjectError,
)
from .types import Filter, Label, Project, Section, Task, Workspace

if TYPE_CHECKING:
    from .client import TodoistClient

logger = logging.getLogger(__name__)

ID_PREFIX = "id:"
MAX_HINTS = 5


class Identified(Protocol):
    id: str


E = TypeVar("E", bound=Identified)

FetchById = Callable[[str], Awaitable[E]]
ListAll = Callable[[], Awaitable[list[E]]]
NameOf = Callable[[E], str]


def is_id_ref(ref: str) -> bool:
    return ref.startswith(ID_PREFIX)


def extract_id(ref: str) -> str:
    return ref[len(ID_PREFIX):]


def require_id_ref(ref: str, entity_name: str) -> str:
    """
    Return the ID of a reference that must be given in ``id:`` form.

    Raises:
        InvalidRefError: If ``ref`` is free text.
    """
    if not is_id_ref(ref):
        raise InvalidRefError(
            f'Invalid {entity_name} reference "{ref}".',
            [f"Use id:xxx format (e.g., id:{ref})"],
        )
    return extract_id(ref)


def format_candidate(item: E, name_of: NameOf[E]) -> str:
    return f'"{name_of(item)}" (id:{item.id})'


def find_by_name(
    ref: str,
    candidates: Iterable[E],
    name_of: NameOf[E],
    kind: str,
    noun: Optional[str] = None,
    scope: Optional[str] = None,
    extra_hints: Iterable[str] = (),
) -> Optional[E]:
    """
    Match a free-text reference against candidate names.

    When two candidates share the same name (ignoring case), the first one
    in listing order is returned; the backend order is stable, so repeated
    runs pick the same entity.

    Args:
        ref: The free-text reference.
        candidates: Entities to match against, in listing order.
        name_of: Returns the display name of a candidate.
        kind: Entity kind used in the error code (``AMBIGUOUS_<KIND>``).
        noun: Word used in the error message; defaults to ``kind``.
        scope: Where the candidates came from, appended to the message
            (e.g. ``"section"``).
        extra_hints: Hints placed before the candidate list.

    Returns:
        The matching entity, or None if nothing matched.

    Raises:
        AmbiguousRefError: If several candidates contain ``ref`` and none
            equals it.
    """
    items = list(candidates)
    lower = ref.lower()

    for item in items:
        if name_of(item).lower() == lower:
            return item

    partial = [item for item in items if lower in name_of(item).lower()]
    if len(partial) == 1:
        return partial[0]
    if partial:
        where = f" in {scope}" if scope else ""
        hints = list(extra_hints) + [format_candidate(item, name_of) for item in partial[:MAX_HINTS]]
        raise AmbiguousRefError(
            kind,
            f'Multiple {noun or kind}s match "{ref}"{where}:',
            hints,
            candidates=partial,
        )
    return None


def match_by_name(
    ref: str,
    candidates: Iterable[E],
    name_of: NameOf[E],
    kind: str,
    not_found_message: Optional[str] = None,
    extra_hints: Iterable[str] = (),
) -> E:
    """
    Like find_by_name, but a reference with no match is an error.

    Raises:
        RefNotFoundError: If no candidate matches. The message quotes
            ``ref`` verbatim.
        AmbiguousRefError: If several candidates match.
    """
    item = find_by_name(ref, candidates, name_of, kind, extra_hints=extra_hints)
    if item is None:
        raise RefNotFoundError(
            kind,
            not_found_message or f'{kind.capitalize()} "{ref}" not found.',
        )
    return item


async def resolve_ref(
    ref: str,
    fetch_by_id: FetchById[E],
    list_all: ListAll[E],
    name_of: NameOf[E],
    kind: str,
) -> E:
    """
    Resolve a reference to exactly one entity.

    An ``id:`` reference is passed straight to ``fetch_by_id`` without
    listing anything; whether that ID exists is up to the fetch (typically
    a NotFoundError from the API). Free text is matched against the result
    of a single ``list_all()`` call.

    Args:
        ref: ``id:<id>`` or free text.
        fetch_by_id: Coroutine function fetching one entity by ID.
        list_all: Coroutine function listing every candidate.
        name_of: Returns the display name of a candidate.
        kind: Entity kind for error codes, e.g. ``"project"``.

    Raises:
        RefNotFoundError: ``<KIND>_NOT_FOUND`` when nothing matches.
        AmbiguousRefError: ``AMBIGUOUS_<KIND>`` when several match.

    Example:
        >>> project = await resolve_ref(
        ...     "inbox",
        ...     client.projects.get,
        ...     client.projects.list_all,
        ...     lambda p: p.name,
        ...     "project",
        ... )
    """
    if is_id_ref(ref):
        return await fetch_by_id(extract_id(ref))

    item = match_by_name(ref, await list_all(), name_of, kind)
    logger.debug("Resolved %s reference %r to id:%s", kind, ref, item.id)
    return item


def _match_listed(
    ref: str,
    items: list[E],
    name_of: NameOf[E],
    kind: str,
    extra_hints: Iterable[str] = (),
) -> E:
    # For kinds with no fetch-by-id endpoint: id: refs are looked up in the listing.
    if is_id_ref(ref):
        wanted = extract_id(ref)
        for item in items:
            if item.id == wanted:
                return item
        raise RefNotFoundError(kind, f"{kind.capitalize()} id:{wanted} not found.")
    return match_by_name(ref, items, name_of, kind, extra_hints=extra_hints)


async def resolve_task_ref(client: "TodoistClient", ref: str) -> Task:
    return await resolve_ref(
        ref,
        client.tasks.get,
        client.tasks.list_all,
        lambda t: t.content,
        "task",
    )


async def resolve_project_ref(client: "TodoistClient", ref: str) -> Project:
    return await resolve_ref(
        ref,
        client.projects.get,
        client.projects.list_all,
        lambda p: p.name,
        "project",
    )


async def resolve_project_id(client: "TodoistClient", ref: str) -> str:
    project = await resolve_project_ref(client, ref)
    return project.id


async def resolve_label_ref(client: "TodoistClient", ref: str) -> Label:
    """Resolve a label reference; ``@work`` and ``work`` are equivalent."""
    if not is_id_ref(ref) and ref.startswith("@"):
        ref = ref[1:]
    return await resolve_ref(
        ref,
        client.labels.get,
        client.labels.list_all,
        lambda label: label.name,
        "label",
    )


async def resolve_section_ref(client: "TodoistClient", ref: str, project_id: str) -> Section:
    """
    Resolve a section reference within one project.

    Only the project's own sections are candidates. An ``id:`` reference
    that is not among them raises SectionNotInProjectError so callers can
    tell the user the section lives elsewhere.

    Raises:
        SectionNotInProjectError: For an ``id:`` outside the project.
        RefNotFoundError: ``SECTION_NOT_FOUND`` when no name matches.
        AmbiguousRefError: ``AMBIGUOUS_SECTION`` when several match.
    """
    sections = await client.sections.list_all(project_id=project_id)

    if is_id_ref(ref):
        section_id = extract_id(ref)
        for section in sections:
            if section.id == section_id:
                return section
        raise SectionNotInProjectError(section_id, project_id)

    return match_by_name(
        ref,
        sections,
        lambda s: s.name,
        "section",
        not_found_message=f'Section "{ref}" not found in project.',
    )


async def resolve_section_id(client: "TodoistClient", ref: str, project_id: str) -> str:
    section = await resolve_section_ref(client, ref, project_id)
    return section.id


async def resolve_parent_task_id(
    client: "TodoistClient",
    ref: str,
    project_id: str,
    section_id: Optional[str] = None,
) -> str:
    """
    Resolve the parent task for a new or moved subtask.

    When a section is known, its tasks are searched first; the whole
    project is searched only if nothing in the section matched. Each scope
    applies the exact / single-partial / ambiguous rules on its own, so an
    ambiguous match inside the section is reported without looking at the
    rest of the project.

    Raises:
        AmbiguousRefError: ``AMBIGUOUS_PARENT`` within either scope.
        RefNotFoundError: ``PARENT_NOT_FOUND`` when neither scope matches.
    """
    if is_id_ref(ref):
        return extract_id(ref)

    def content(t: Task) -> str:
        return t.content

    if section_id:
        section_tasks = await client.tasks.list_all(section_id=section_id)
        task = find_by_name(ref, section_tasks, content, "parent", noun="task", scope="section")
        if task is not None:
            return task.id

    project_tasks = await client.tasks.list_all(project_id=project_id)
    task = find_by_name(ref, project_tasks, content, "parent", noun="task", scope="project")
    if task is None:
        raise RefNotFoundError("parent", f'Parent task "{ref}" not found in project.')
    return task.id


async def resolve_workspace_ref(client: "TodoistClient", ref: str) -> Workspace:
    """
    Resolve a workspace reference.

    Workspaces have no fetch-by-id call, so ``id:`` references are checked
    against the listing and an unknown ID raises ``WORKSPACE_NOT_FOUND``.
    """
    workspaces = await client.workspaces.list_all()
    return _match_listed(ref, workspaces, lambda w: w.name, "workspace")


async def resolve_filter_ref(client: "TodoistClient", ref: str) -> Filter:
    """
    Resolve a saved-filter reference.

    Like workspaces, ``id:`` references are checked against the listing.
    Ambiguity hints start with a reminder to use the ``id:`` form.
    """
    filters = await client.filters.list_all()
    return _match_listed(
        ref,
        filters,
        lambda f: f.name,
        "filter",
        extra_hints=["Use id:xxx to specify exactly"],
    )
