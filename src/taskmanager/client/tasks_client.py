from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, TypeVar

import httpx
from pydantic import ValidationError
from pydantic_core import to_jsonable_python

from .errors import UNREACHABLE_MESSAGE, ApiRequestError, BackendUnreachableError
from .http import error_message, json_body
from .models import Task

logger = logging.getLogger(__name__)

T = TypeVar("T")


# PUBLIC_INTERFACE
class TaskApiClient:
    """
    Thin async client for the Task API.

    Payloads are mappings of camelCase task fields; dates and enums are
    converted to JSON automatically. Every failure is raised, never retried:
    ApiRequestError for error statuses and unusable response bodies,
    BackendUnreachableError when the server cannot be reached.
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, action: str, parse: Callable[[Any], T], payload: Any = None) -> T:
        try:
            response = await self._http.request(
                method,
                path,
                json=to_jsonable_python(payload) if payload is not None else None,
            )
        except httpx.TransportError as exc:
            logger.error("Error %s: %s", action, exc)
            raise BackendUnreachableError(UNREACHABLE_MESSAGE) from exc

        if response.is_error:
            message = error_message(response, f"Failed to {action}")
            logger.error("Error %s: %s", action, message)
            raise ApiRequestError(message, status_code=response.status_code)

        data = json_body(response)
        try:
            if data is None:
                raise ValueError("response body is not JSON")
            return parse(data)
        except (ValidationError, ValueError, TypeError, KeyError) as exc:
            logger.error("Error %s: unexpected response: %s", action, exc)
            raise ApiRequestError(f"Failed to {action}: unexpected response", status_code=response.status_code) from exc

    # PUBLIC_INTERFACE
    async def load_tasks(self) -> List[Task]:
        """Return all tasks, newest first."""
        return await self._request("GET", "/tasks", "fetch tasks", lambda data: [Task.model_validate(t) for t in data])

    # PUBLIC_INTERFACE
    async def create_task(self, fields: Mapping[str, Any]) -> Task:
        return await self._request("POST", "/tasks", "create task", Task.model_validate, dict(fields))

    # PUBLIC_INTERFACE
    async def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        return await self._request("PUT", f"/tasks/{task_id}", "update task", Task.model_validate, dict(updates))

    # PUBLIC_INTERFACE
    async def delete_task(self, task_id: str) -> Task:
        """Delete a task and return its last state."""
        return await self._request("DELETE", f"/tasks/{task_id}", "delete task", lambda data: Task.model_validate(data["task"]))

    # PUBLIC_INTERFACE
    async def bulk_update_tasks(self, updates: Sequence[Mapping[str, Any]]) -> List[Optional[Task]]:
        """
        Send independent per-task updates. Each mapping must carry "id".
        The result keeps input order; None marks an id the server did not find.
        """
        return await self._request(
            "PATCH",
            "/tasks/bulk-update",
            "bulk update tasks",
            lambda data: [Task.model_validate(t) if t is not None else None for t in data],
            {"tasks": [dict(u) for u in updates]},
        )
