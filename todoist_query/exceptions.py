"""
Custom exceptions for todoist-query.

This module defines two families of errors sharing a common base:

- API errors raised by the HTTP client when the Todoist backend rejects a
  request or cannot be reached.
- Reference errors raised by the resolver when a user-typed reference
  cannot be turned into exactly one entity. These carry a machine-readable
  code and optional hints, and render as the error block shown by the CLI.
"""

from typing import Any, Optional


class TodoistQueryError(Exception):
    """
    Base exception for all todoist-query errors.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code if applicable.
        response_body: Raw response body from the API if available.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

    def __str__(self) -> str:
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message


class AuthenticationError(TodoistQueryError):
    """
    Raised when authentication fails.

    This occurs when the API token is missing, invalid or revoked.
    """

    def __init__(
        self,
        message: str = "Authentication failed. Check your API token.",
        status_code: int = 401,
        response_body: Optional[Any] = None,
    ) -> None:
        super().__init__(message, status_code, response_body)


class AuthorizationError(TodoistQueryError):
    """Raised when the token lacks access to the requested resource."""

    def __init__(
        self,
        message: str = "Insufficient permissions for this action.",
        status_code: int = 403,
        response_body: Optional[Any] = None,
    ) -> None:
        super().__init__(message, status_code, response_body)


class NotFoundError(TodoistQueryError):
    """
    Raised when the backend reports a 404.

    This is the error a fetch-by-id call raises for an ``id:`` reference
    that does not exist; the resolver does not check existence itself.
    """

    def __init__(
        self,
        message: str = "Resource not found.",
        status_code: int = 404,
        response_body: Optional[Any] = None,
    ) -> None:
        super().__init__(message, status_code, response_body)


class ValidationError(TodoistQueryError):
    """
    Raised when request validation fails (400/422).

    Commands running filter queries reinterpret this as invalid filter
    syntax.

    Attributes:
        errors: Dictionary mapping field names to error messages.
    """

    def __init__(
        self,
        message: str = "Validation error.",
        status_code: int = 400,
        response_body: Optional[Any] = None,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, status_code, response_body)
        self.errors = errors or {}


class RateLimitError(TodoistQueryError):
    """
    Raised when the API rate limit is exceeded.

    Attributes:
        retry_after: Number of seconds to wait before retrying.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded.",
        status_code: int = 429,
        response_body: Optional[Any] = None,
        retry_after: Optional[int] = None,
    ) -> None:
        super().__init__(message, status_code, response_body)
        self.retry_after = retry_after


class ServerError(TodoistQueryError):
    """Raised when the server returns a 5xx error or an unreadable body."""

    def __init__(
        self,
        message: str = "Server error occurred.",
        status_code: int = 500,
        response_body: Optional[Any] = None,
    ) -> None:
        super().__init__(message, status_code, response_body)


class TodoistConnectionError(TodoistQueryError):
    """Raised when unable to connect to the Todoist API."""

    def __init__(
        self,
        message: str = "Failed to connect to Todoist API.",
        response_body: Optional[Any] = None,
    ) -> None:
        super().__init__(message, None, response_body)


class TodoistTimeoutError(TodoistQueryError):
    """
    Raised when a request times out.
    """

    def __init__(
        self,
        message: str = "Request timed out.",
        response_body: Optional[Any] = None,
    ) -> None:
        super().__init__(message, None, response_body)


class RefError(TodoistQueryError):
    """
    Base class for errors the user can fix by changing their input.

    Attributes:
        code: Machine-readable error code (e.g. ``PROJECT_NOT_FOUND``).
        hints: Suggestions shown under the message, such as the ``id:``
            form of each candidate for an ambiguous reference.
    """

    def __init__(
        self,
        code: str,
        message: str,
        hints: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.hints = list(hints or [])

    def __str__(self) -> str:
        lines = [f"Error: {self.code}", self.message]
        if self.hints:
            lines.append("")
            lines.extend(f"  - {hint}" for hint in self.hints)
        return "\n".join(lines)


class RefNotFoundError(RefError):
    """Raised when no candidate matches a free-text reference."""

    def __init__(self, kind: str, message: str, hints: Optional[list[str]] = None) -> None:
        super().__init__(f"{kind.upper()}_NOT_FOUND", message, hints)
        self.kind = kind


class AmbiguousRefError(RefError):
    """
    Raised when two or more candidates partially match a reference.

    Attributes:
        candidates: The matching entities, in listing order.
    """

    def __init__(
        self,
        kind: str,
        message: str,
        hints: Optional[list[str]] = None,
        candidates: Optional[list[Any]] = None,
    ) -> None:
        super().__init__(f"AMBIGUOUS_{kind.upper()}", message, hints)
        self.kind = kind
        self.candidates = list(candidates or [])


class InvalidRefError(RefError):
    """Raised when a command requires an ``id:`` reference and got free text."""

    def __init__(self, message: str, hints: Optional[list[str]] = None) -> None:
        super().__init__("INVALID_REF", message, hints)


class SectionNotInProjectError(RefError):
    """Raised when an ``id:`` section reference points outside the project."""

    def __init__(self, section_id: str, project_id: Optional[str] = None) -> None:
        super().__init__(
            "SECTION_NOT_IN_PROJECT",
            f"Section id:{section_id} does not belong to this project.",
        )
        self.section_id = section_id
        self.project_id = project_id


class InvalidLimitError(RefError):
    """Raised when a requested item count is not a positive integer."""

    def __init__(self, limit: Any) -> None:
        super().__init__(
            "INVALID_LIMIT",
            f'Invalid limit "{limit}". Use a positive integer.',
        )


class InvalidPriorityError(RefError):
    def __init__(self, priority: str) -> None:
        super().__init__(
            "INVALID_PRIORITY",
            f'Invalid priority "{priority}". Use p1, p2, p3, or p4.',
        )


class ConflictingFiltersError(RefError):
    def __init__(self, message: str) -> None:
        super().__init__("CONFLICTING_FILTERS", message)
