"""
Main client for todoist-query.

This module provides the TodoistClient class, the facade the resolver,
paginator and collaborator cache use to talk to the Todoist API.
"""

import asyncio
import logging
import os
from json import dumps as json_dumps
from typing import Any, Optional

import httpx

from .exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TodoistConnectionError,
    TodoistQueryError,
    TodoistTimeoutError,
    ValidationError,
)
from .filters import FiltersAPI
from .labels import LabelsAPI
from .projects import ProjectsAPI
from .sections import SectionsAPI
from .tasks import TasksAPI
from .workspaces import WorkspacesAPI

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://api.todoist.com/api/v1"


class TodoistClient:
    """
    Async client for the Todoist API.

    Every call is a coroutine; a single client is meant to live for the
    duration of one command and be closed with ``aclose()`` or used as an
    async context manager.

    Attributes:
        tasks: API for reading tasks.
        projects: API for reading projects and their collaborators.
        sections: API for reading sections.
        labels: API for reading personal labels.
        filters: API for reading saved filters.
        workspaces: API for reading workspaces and their members.

    Example:
        >>> from todoist_query import TodoistClient, resolve_project_ref
        >>>
        >>> # Token from TODOIST_API_TOKEN
        >>> async with TodoistClient() as client:
        ...     project = await resolve_project_ref(client, "work")
        ...     print(project.id)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        url: Optional[str] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
    ) -> None:
        """
        Initialize the Todoist client.

        Args:
            token: API token for authentication.
                   Falls back to TODOIST_API_TOKEN environment variable.
            url: Base URL of the API.
                 Falls back to TODOIST_API_URL environment variable.
                 Defaults to https://api.todoist.com/api/v1.
            timeout: Request timeout in seconds (default 30).
            max_retries: Maximum number of retries for rate-limited and
                server errors (default 3).

        Raises:
            ValueError: If token is not provided and TODOIST_API_TOKEN is not set.
        """
        self._url = (url or os.environ.get("TODOIST_API_URL", DEFAULT_URL)).rstrip("/")
        self._token = token or os.environ.get("TODOIST_API_TOKEN")

        if not self._token:
            raise ValueError(
                "API token is required. Provide token parameter or set TODOIST_API_TOKEN "
                "environment variable."
            )

        self._timeout = timeout
        self._max_retries = max_retries

        self._http: Optional[httpx.AsyncClient] = None

        self.tasks = TasksAPI(self)
        self.projects = ProjectsAPI(self)
        self.sections = SectionsAPI(self)
        self.labels = LabelsAPI(self)
        self.filters = FiltersAPI(self)
        self.workspaces = WorkspacesAPI(self)

    def _get_http(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self._url,
                timeout=self._timeout,
                headers=self._get_headers(),
            )
        return self._http

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }

    def _handle_response_error(self, response: httpx.Response) -> None:
        """
        Handle error responses from the API.

        Args:
            response: The HTTP response to check.

        Raises:
            AuthenticationError: For 401 responses.
            AuthorizationError: For 403 responses.
            NotFoundError: For 404 responses.
            ValidationError: For 400 and 422 responses.
            RateLimitError: For 429 responses.
            ServerError: For 5xx responses.
            TodoistQueryError: For other error responses.
        """
        if response.is_success:
            return

        status_code = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("error", body.get("message", response.text))
        else:
            message = response.text or f"HTTP {status_code}"

        if status_code == 401:
            raise AuthenticationError(message, status_code, body)
        elif status_code == 403:
            raise AuthorizationError(message, status_code, body)
        elif status_code == 404:
            raise NotFoundError(message, status_code, body)
        elif status_code in (400, 422):
            errors = body.get("error_extra") if isinstance(body, dict) else None
            raise ValidationError(message, status_code, body, errors)
        elif status_code == 429:
            retry_after = None
            if "Retry-After" in response.headers:
                try:
                    retry_after = int(response.headers["Retry-After"])
                except ValueError:
                    pass
            raise RateLimitError(message, status_code, body, retry_after)
        elif 500 <= status_code < 600:
            raise ServerError(message, status_code, body)
        else:
            raise TodoistQueryError(message, status_code, body)

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Make an HTTP request.

        Args:
            method: HTTP method (GET, POST).
            path: API path relative to the base URL (e.g., /tasks).
            params: Query parameters. None values are dropped.
            json: JSON body.
            data: Form-encoded body, used by the sync endpoint.

        Returns:
            The HTTP response.

        Raises:
            TodoistConnectionError: If unable to connect.
            TodoistTimeoutError: If the request times out.
            Various TodoistQueryError subclasses for API errors.
        """
        http = self._get_http()
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        retries = 0
        last_error: Optional[Exception] = None

        while retries <= self._max_retries:
            try:
                logger.debug("%s %s params=%s", method, path, params)
                response = await http.request(method, path, params=params, json=json, data=data)
                self._handle_response_error(response)
                return response
            except (AuthenticationError, AuthorizationError, NotFoundError, ValidationError):
                # Don't retry client errors
                raise
            except RateLimitError as e:
                if retries >= self._max_retries:
                    raise
                wait_time = e.retry_after if e.retry_after else (2 ** retries)
                logger.debug("Rate limited on %s %s, retrying in %ss", method, path, wait_time)
                await asyncio.sleep(wait_time)
                last_error = e
                retries += 1
            except httpx.ConnectError as e:
                raise TodoistConnectionError(f"Failed to connect to {self._url}: {e}") from e
            except httpx.TimeoutException as e:
                raise TodoistTimeoutError(f"Request timed out: {e}") from e
            except TodoistQueryError as e:
                if retries >= self._max_retries:
                    raise
                wait_time = 2 ** retries
                logger.debug("%s on %s %s, retrying in %ss", e, method, path, wait_time)
                await asyncio.sleep(wait_time)
                last_error = e
                retries += 1

        if last_error:
            raise last_error
        raise TodoistQueryError("Request failed after retries")

    def _extract_data(self, response: httpx.Response) -> Any:
        """
        Decode a JSON response body.

        Raises:
            ServerError: If the response contains invalid JSON.
        """
        try:
            return response.json()
        except ValueError as e:
            raise ServerError(f"Invalid JSON response from server: {e}") from e

    async def _request_json(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Make a request and return the decoded JSON body."""
        response = await self._request(method, path, params=params, json=json, data=data)
        return self._extract_data(response)

    async def _sync(self, resource_types: list[str]) -> dict[str, Any]:
        """
        Read resources that are only exposed through the sync endpoint.

        Args:
            resource_types: Sync resource names, e.g. ``["filters"]``.

        Raises:
            ServerError: If the sync payload reports an error.
        """
        body = await self._request_json(
            "POST",
            "/sync",
            data={
                "sync_token": "*",
                "resource_types": json_dumps(resource_types),
            },
        )
        if not isinstance(body, dict):
            raise ServerError("Unexpected sync response from server", response_body=body)
        if body.get("error"):
            raise ServerError(f"Sync API error: {body['error']}", response_body=body)
        return body

    async def aclose(self) -> None:
        """
        Close the client and release resources.

        This should be called when done using the client to properly
        close HTTP connections.
        """
        if self._http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "TodoistClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
