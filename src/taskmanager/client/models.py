from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..constants import Priority


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class Task(CamelModel):
    """A task as seen by the client. Accepts 'id' or the store's '_id'."""

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    completed: bool = False
    due_date: Optional[datetime] = None
    ai_priority: Optional[Priority] = None
    ai_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def effective_priority(self) -> Priority:
        """aiPriority when set, otherwise the stored priority."""
        return self.ai_priority or self.priority


# AI response shapes. Required fields must be present with the right types;
# anything else is rejected as a malformed response.


class PrioritySuggestion(CamelModel):
    id: str
    priority: Priority
    reason: str


class PrioritizationResponse(CamelModel):
    priorities: List[PrioritySuggestion]
    summary: str


class InsightsResponse(CamelModel):
    completion_analysis: str
    recommendations: List[str]
    focus_areas: List[str]
    motivational_tip: Optional[str] = None


# PUBLIC_INTERFACE
class TaskSuggestion(CamelModel):
    """AI draft used to pre-fill the task creation form."""

    description: str
    subtasks: List[str]
    suggested_priority: Priority


# PUBLIC_INTERFACE
class TaskStatistics(CamelModel):
    total: int
    completed: int
    active: int
    overdue: int
    today: int
    completion_rate: int


# PUBLIC_INTERFACE
class ProductivityInsights(InsightsResponse):
    """AI insights augmented with the statistics they were computed from."""

    statistics: TaskStatistics


# PUBLIC_INTERFACE
@dataclass
class PrioritizationResult:
    prioritized_tasks: List[Task]
    reasoning: str
    details: List[PrioritySuggestion] = field(default_factory=list)
