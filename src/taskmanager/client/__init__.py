"""
Client state layer for the AI Task Manager.

Talks to the backend over HTTP (TaskApiClient, AIProxyClient), runs the AI
use cases (AIService), computes derived views (views) and keeps the local
task list (TaskBoard).
"""

from .ai_service import AIService, extract_json_object
from .board import TaskBoard
from .config_store import ConfigStore
from .errors import (
    AIFeatureError,
    AIRequestError,
    ApiRequestError,
    BackendUnreachableError,
    InvalidApiKeyError,
    MalformedAIResponseError,
    MissingApiKeyError,
    TaskManagerError,
)
from .models import Task
from .retry import AIProxyClient, RetryConfig
from .tasks_client import TaskApiClient

__all__ = [
    "AIFeatureError",
    "AIProxyClient",
    "AIRequestError",
    "AIService",
    "ApiRequestError",
    "BackendUnreachableError",
    "ConfigStore",
    "InvalidApiKeyError",
    "MalformedAIResponseError",
    "MissingApiKeyError",
    "RetryConfig",
    "Task",
    "TaskApiClient",
    "TaskBoard",
    "TaskManagerError",
    "extract_json_object",
]
