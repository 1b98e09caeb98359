from __future__ import annotations

from enum import Enum
from typing import Dict


# PUBLIC_INTERFACE
class Priority(str, Enum):
    """Priority levels accepted for both stored and AI-assigned priorities."""

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Higher rank sorts first.
PRIORITY_RANK: Dict[Priority, int] = {
    Priority.URGENT: 4,
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


# PUBLIC_INTERFACE
class TaskFilter(str, Enum):
    """Client-side list filters."""

    ALL = "all"
    TODAY = "today"
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    OVERDUE = "overdue"


# PUBLIC_INTERFACE
class StorageKey(str, Enum):
    """Keys of the locally persisted client configuration."""

    SETTINGS = "ai_task_manager_settings"
    API_KEY = "ai_task_manager_api_key"
