from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..constants import Priority

# Shared type for incoming due_date which can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]

TITLE_MAX_LENGTH = 200


def _parse_due_date(value: Optional[DueDateInput]) -> Optional[datetime]:
    """
    Internal helper to normalize due_date input into a datetime.
    - If value is a string, attempt to parse via datetime.fromisoformat; if time is missing, set to 00:00.
    - If value is a date (not datetime), convert to datetime at 00:00.
    - If value is a datetime, return as-is.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        # Browsers send a trailing 'Z' for UTC which older fromisoformat rejects
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(s)
        except ValueError:
            try:
                d = date.fromisoformat(s)
                return datetime(d.year, d.month, d.day, 0, 0, 0)
            except ValueError as e:
                raise ValueError(
                    "Invalid dueDate format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
                ) from e

    raise ValueError("Invalid type for dueDate; expected date, datetime, or ISO8601 string.")


def _clean_title(v: Optional[str]) -> str:
    if v is None:
        raise ValueError("title is required")
    s = v.strip()
    if not (1 <= len(s) <= TITLE_MAX_LENGTH):
        raise ValueError(f"title length must be between 1 and {TITLE_MAX_LENGTH} characters")
    return s


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


# PUBLIC_INTERFACE
class TaskCreate(CamelModel):
    """
    Schema for creating a new task. Only the title is required.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Prepare quarterly report",
                "description": "Collect numbers from finance",
                "priority": "high",
                "dueDate": "2025-02-01",
            }
        }
    )

    title: str = Field(..., description="Short title for the task")
    description: str = Field(default="", description="Free-text description")
    priority: Priority = Field(
        default=Priority.MEDIUM, validate_default=True, description="Stored priority level"
    )
    completed: bool = Field(default=False, description="Completion status flag")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )
    ai_priority: Optional[Priority] = Field(default=None, description="Priority suggested by AI")
    ai_reason: Optional[str] = Field(default=None, description="Reason given for aiPriority")

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        if v is not None and not isinstance(v, str):
            raise ValueError("title must be a string")
        return _clean_title(v)

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        """
        Normalize due_date from str/date/datetime to datetime.
        """
        return _parse_due_date(v)


# PUBLIC_INTERFACE
class TaskUpdate(CamelModel):
    """
    Schema for updating an existing task.

    All fields are optional; only provided fields are merged into the record.
    Sending null clears dueDate, aiPriority and aiReason. title, priority and
    completed cannot be null.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Prepare quarterly report (draft)",
                "completed": True,
                "dueDate": "2025-02-02T09:30:00",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Free-text description")
    priority: Optional[Priority] = Field(default=None, description="Stored priority level")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )
    ai_priority: Optional[Priority] = Field(default=None, description="Priority suggested by AI")
    ai_reason: Optional[str] = Field(default=None, description="Reason given for aiPriority")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        """
        If title is provided, strip whitespace and enforce 1..200 length.
        """
        return _clean_title(v)

    @field_validator("priority", "completed")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @field_validator("description")
    @classmethod
    def normalize_description(cls, v: Optional[str]) -> str:
        return "" if v is None else v.strip()

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        """
        Normalize due_date from str/date/datetime to datetime.
        """
        return _parse_due_date(v)

    # PUBLIC_INTERFACE
    def changes(self) -> Dict[str, Any]:
        """Return only the fields explicitly present in the payload, keyed by attribute name."""
        fields = set(self.model_fields_set) & set(TaskUpdate.model_fields)
        return self.model_dump(include=fields)


# PUBLIC_INTERFACE
class BulkTaskUpdate(TaskUpdate):
    """
    One entry of a bulk update: the task identifier plus the fields to merge.
    Accepts either 'id' or the document-store style '_id'.
    """

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"), description="Task identifier")


# PUBLIC_INTERFACE
class BulkUpdateRequest(CamelModel):
    """Payload of PATCH /api/tasks/bulk-update."""

    tasks: List[BulkTaskUpdate] = Field(..., description="Per-task updates, applied independently")


# PUBLIC_INTERFACE
class TaskOut(CamelModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f0c8a0b6d7e4b3f9a1e2c4d5b6a7980",
                "title": "Prepare quarterly report",
                "description": "Collect numbers from finance",
                "priority": "high",
                "completed": False,
                "dueDate": "2025-02-01T00:00:00",
                "aiPriority": "urgent",
                "aiReason": "Due tomorrow and blocks the board meeting",
                "createdAt": "2025-01-25T10:15:30.123456",
                "updatedAt": "2025-01-26T09:00:00.000001",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title for the task")
    description: str = Field(default="", description="Free-text description")
    priority: Priority = Field(..., description="Stored priority level")
    completed: bool = Field(..., description="Completion status flag")
    due_date: Optional[datetime] = Field(default=None, description="Due date/time as an ISO8601 datetime")
    ai_priority: Optional[Priority] = Field(default=None, description="Priority suggested by AI")
    ai_reason: Optional[str] = Field(default=None, description="Reason given for aiPriority")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


# PUBLIC_INTERFACE
class TaskDeleted(BaseModel):
    """Response body of DELETE /api/tasks/{id}."""

    message: str
    task: TaskOut


# PUBLIC_INTERFACE
class GenerateRequest(CamelModel):
    """
    Payload of POST /api/ai/generate.

    apiKey is optional at the schema level so that a missing key yields the
    proxy's own 400 response instead of a generic validation error.
    """

    prompt: str = Field(..., description="Prompt forwarded to the generative model")
    api_key: Optional[str] = Field(default=None, description="Caller-supplied vendor API key")
    max_tokens: Optional[int] = Field(default=None, gt=0, description="Output token budget")


# PUBLIC_INTERFACE
class GenerateResponse(CamelModel):
    """Successful AI proxy response."""

    generated_text: str
    success: bool = True
