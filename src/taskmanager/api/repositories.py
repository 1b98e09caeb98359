from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from functools import lru_cache
from threading import RLock
from typing import Any, Dict, List, Optional, Sequence

from .models import TaskEntity
from .schemas import BulkTaskUpdate, TaskCreate, TaskUpdate
from .settings import get_settings

logger = logging.getLogger(__name__)


def new_task_id() -> str:
    """Allocate an opaque task identifier."""
    return uuid.uuid4().hex


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskEntity:
        """Create and return a new TaskEntity with id and timestamps assigned."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskEntity]:
        """Return a TaskEntity by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        """Merge provided fields into an existing TaskEntity. Return updated entity or None if not found."""

    @abstractmethod
    def delete(self, task_id: str) -> Optional[TaskEntity]:
        """Delete a TaskEntity by id. Return the deleted snapshot, or None if not found."""

    @abstractmethod
    def list(self) -> List[TaskEntity]:
        """Return all TaskEntities, newest-created first."""

    def bulk_update(self, updates: Sequence[BulkTaskUpdate]) -> List[Optional[TaskEntity]]:
        """
        Apply each update independently, in order.

        The result has one slot per input; a slot is None when that id was not
        found. There is no transaction across the batch: earlier writes are
        kept whatever happens to later ones.
        """
        results: List[Optional[TaskEntity]] = []
        for item in updates:
            updated = self.update(item.id, item)
            if updated is None:
                logger.info("Bulk update skipped unknown task id=%s", item.id)
            results.append(updated)
        return results


def _merge(current: TaskEntity, changes: Dict[str, Any], now: datetime) -> TaskEntity:
    merged = current.copy()
    for key, value in changes.items():
        merged[key] = value  # type: ignore[literal-required]
    merged["updated_at"] = now
    return merged


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[str, TaskEntity] = {}

    def _now(self) -> datetime:
        return datetime.now()

    def create(self, data: TaskCreate) -> TaskEntity:
        now = self._now()
        entity: TaskEntity = {
            "id": new_task_id(),
            "title": data.title,
            "description": data.description,
            "priority": data.priority,
            "completed": data.completed,
            "due_date": data.due_date,
            "ai_priority": data.ai_priority,
            "ai_reason": data.ai_reason,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None
            updated = _merge(existing, data.changes(), self._now())
            self._items[task_id] = updated
            return updated.copy()

    def delete(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            return self._items.pop(task_id, None)

    def list(self) -> List[TaskEntity]:
        with self._lock:
            # Reverse insertion order so equal timestamps still come out newest first;
            # sorted() is stable with reverse=True.
            items = list(reversed(list(self._items.values())))
            items_sorted = sorted(items, key=lambda t: t["created_at"], reverse=True)
            return [t.copy() for t in items_sorted]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the configured repository, created once per process.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        logger.info("Using SQLite task store at %s", settings.sqlite_db_path)
        return SQLiteRepository(settings.sqlite_db_path)
    logger.info("Using in-memory task store")
    return InMemoryRepository()
