from __future__ import annotations

from typing import Optional

UNREACHABLE_MESSAGE = "Network error: Unable to reach backend API. Please make sure the server is running."


# PUBLIC_INTERFACE
class TaskManagerError(Exception):
    """Base class for every error raised by the client layer."""


class ApiRequestError(TaskManagerError):
    """The Task API answered with an error status or a body that is not a valid task payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendUnreachableError(TaskManagerError):
    """The backend could not be reached at all (connection refused, DNS, timeout)."""


class MissingApiKeyError(TaskManagerError):
    """No AI API key is configured locally."""


class InvalidApiKeyError(TaskManagerError):
    """The AI service rejected the API key. Never retried."""


class AIRequestError(TaskManagerError):
    """The AI proxy kept failing until the retry budget ran out."""


class MalformedAIResponseError(TaskManagerError):
    """The generated text held no usable JSON object of the expected shape."""


class AIFeatureError(TaskManagerError):
    """
    Single descriptive error raised by the AI use cases (prioritize, insights,
    suggestions). The underlying error is chained as __cause__.
    """
