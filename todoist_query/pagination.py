"""
Cursor pagination for todoist-query.

Todoist list endpoints return one page at a time together with an opaque
``next_cursor``. ``paginate`` turns "give me N items" or "give me
everything" into the sequence of page requests needed to satisfy it.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Literal, Optional, TypeVar, Union

from .exceptions import InvalidLimitError
from .types import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")

ALL: Literal["ALL"] = "ALL"
"""Sentinel limit that pages until the backend reports exhaustion."""

MAX_PAGE_SIZE = 200

LIMITS: dict[str, int] = {
    "tasks": 300,
    "projects": 50,
    "sections": 300,
    "labels": 300,
    "comments": 10,
}

Limit = Union[int, Literal["ALL"]]
FetchPage = Callable[[Optional[str], int], Awaitable[Page[T]]]


@dataclass
class PaginatedResult(Generic[T]):
    """
    Accumulated results of a pagination run.

    Attributes:
        results: At most ``limit`` items, in backend order.
        next_cursor: Cursor to resume from, or None when the listing is
            exhausted.
    """

    results: list[T] = field(default_factory=list)
    next_cursor: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


async def paginate(
    fetch_page: FetchPage[T],
    limit: Limit,
    start_cursor: Optional[str] = None,
    page_size: int = MAX_PAGE_SIZE,
) -> PaginatedResult[T]:
    """
    Fetch pages sequentially until ``limit`` items are collected.

    Each call receives the cursor returned by the previous one, so calls
    for a single chain are never issued concurrently. Errors raised by
    ``fetch_page`` propagate unchanged and are not retried.

    The backend is trusted to honour the requested page size. Should a
    page overfill, the surplus is cut to keep ``limit``, and resuming from
    the returned cursor skips the cut items; a warning is logged.

    Args:
        fetch_page: Coroutine function ``(cursor, page_size) -> Page``.
        limit: Target number of items, or ``ALL`` to page until exhaustion.
        start_cursor: Cursor from a previous run to resume from. Passed
            through as-is.
        page_size: Maximum items requested per call.

    Returns:
        PaginatedResult with the items and the cursor to resume from.

    Example:
        >>> result = await paginate(
        ...     lambda cursor, size: client.tasks.list_page(cursor, size),
        ...     limit=500,
        ... )
        >>> len(result.results)
        500
    """
    if page_size < 1:
        raise ValueError("page_size must be a positive integer")
    if limit != ALL and (not isinstance(limit, int) or limit < 1):
        raise InvalidLimitError(limit)

    results: list[T] = []
    cursor = start_cursor
    calls = 0

    while limit == ALL or len(results) < limit:
        size = page_size if limit == ALL else min(page_size, limit - len(results))
        page = await fetch_page(cursor, size)
        calls += 1
        if limit != ALL and len(page.results) > size:
            logger.warning(
                "Backend returned %d items for a page of %d; the extra items are dropped "
                "and resuming from the returned cursor will skip them",
                len(page.results),
                size,
            )
        results.extend(page.results)
        cursor = page.next_cursor
        if cursor is None:
            break

    logger.debug(
        "Paginated %d items in %d calls (limit=%s, exhausted=%s)",
        len(results),
        calls,
        limit,
        cursor is None,
    )

    if limit != ALL:
        results = results[:limit]
    return PaginatedResult(results=results, next_cursor=cursor)


def target_limit(
    limit: Optional[Union[int, str]] = None,
    all_items: bool = False,
    default: int = LIMITS["tasks"],
) -> Limit:
    """
    Normalise "N items", "everything" or "the default" into a limit.

    Args:
        limit: Requested count, as an int or a string typed by the user.
        all_items: If True, return ``ALL`` and ignore ``limit``.
        default: Count used when neither is given.

    Raises:
        InvalidLimitError: If ``limit`` is not a positive integer.
    """
    if all_items:
        return ALL
    if limit is None:
        return default
    try:
        value = int(limit)
    except (TypeError, ValueError):
        raise InvalidLimitError(limit) from None
    if value < 1:
        raise InvalidLimitError(limit)
    return value


def next_cursor_hint(next_cursor: Optional[str]) -> Optional[str]:
    """Return the "more items exist" hint, or None when nothing is left."""
    if next_cursor is None:
        return None
    return (
        "More items exist. Use --all to fetch everything, "
        f"or --cursor {next_cursor} to continue."
    )
