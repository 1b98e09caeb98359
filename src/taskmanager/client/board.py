from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Mapping, Optional, Union

import httpx

from ..constants import TaskFilter
from .ai_service import AIService
from .config_store import ConfigStore
from .errors import ApiRequestError
from .http import create_http_client
from .models import PrioritizationResult, ProductivityInsights, Task, TaskStatistics, TaskSuggestion
from .retry import AIProxyClient, RetryConfig
from .settings import ClientSettings, get_client_settings
from .tasks_client import TaskApiClient
from .views import filter_tasks, get_task_statistics, sort_tasks_by_priority

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TaskBoard:
    """
    Client-side state: the current task list plus the operations a
    presentation layer triggers on it.

    Every mutation goes to the Task API first; the local list changes only
    after the server confirms, so a failed call leaves it as it was and the
    error propagates to the caller.
    """

    def __init__(self, api: TaskApiClient, ai: AIService) -> None:
        self._api = api
        self._ai = ai
        self._tasks: List[Task] = []

    @classmethod
    def connect(
        cls,
        settings: Optional[ClientSettings] = None,
        *,
        config: Optional[ConfigStore] = None,
        retry: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "TaskBoard":
        """Wire a board to the backend described by `settings` (env by default)."""
        s = settings or get_client_settings()
        http = create_http_client(s, transport=transport)
        store = config or ConfigStore(s.config_path)
        return cls(TaskApiClient(http), AIService(AIProxyClient(http, retry), store))

    async def aclose(self) -> None:
        await self._api.aclose()

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks)

    def _find(self, task_id: str) -> Task:
        for t in self._tasks:
            if t.id == task_id:
                return t
        raise ApiRequestError("Task not found", status_code=404)

    def _replace(self, task: Task) -> None:
        self._tasks = [task if t.id == task.id else t for t in self._tasks]

    async def refresh(self) -> List[Task]:
        self._tasks = await self._api.load_tasks()
        logger.info("Loaded %d task(s)", len(self._tasks))
        return self.tasks

    async def add(self, fields: Mapping[str, Any]) -> Task:
        created = await self._api.create_task(fields)
        self._tasks = [created, *self._tasks]
        return created

    async def edit(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        updated = await self._api.update_task(task_id, updates)
        self._replace(updated)
        return updated

    async def toggle(self, task_id: str) -> Task:
        current = self._find(task_id)
        return await self.edit(task_id, {"completed": not current.completed})

    async def remove(self, task_id: str) -> Task:
        deleted = await self._api.delete_task(task_id)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        return deleted

    def displayed(self, task_filter: Union[TaskFilter, str] = TaskFilter.ALL, today: Optional[date] = None) -> List[Task]:
        """Filtered, then sorted by effective priority."""
        return sort_tasks_by_priority(filter_tasks(self._tasks, task_filter, today))

    def statistics(self, today: Optional[date] = None) -> TaskStatistics:
        return get_task_statistics(self._tasks, today)

    async def prioritize(self, persist: bool = False) -> PrioritizationResult:
        """
        Run AI prioritization over the current list.

        With persist=True the assigned aiPriority/aiReason values are also
        written back through bulk update; entries the server no longer knows
        are left as computed locally.
        """
        result = await self._ai.prioritize_tasks(self._tasks)
        tasks = result.prioritized_tasks

        if persist:
            changed = [t for t in tasks if not t.completed and t.ai_priority is not None]
            if changed:
                saved = await self._api.bulk_update_tasks(
                    [{"id": t.id, "aiPriority": t.ai_priority, "aiReason": t.ai_reason} for t in changed]
                )
                by_id = {s.id: s for s in saved if s is not None}
                tasks = [by_id.get(t.id, t) for t in tasks]
                result.prioritized_tasks = tasks

        self._tasks = list(tasks)
        return result

    async def insights(self, today: Optional[date] = None) -> ProductivityInsights:
        return await self._ai.get_productivity_insights(self._tasks, today)

    async def suggest(self, title: str) -> TaskSuggestion:
        return await self._ai.generate_task_suggestions(title)
