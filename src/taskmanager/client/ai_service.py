from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Dict, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .config_store import ConfigStore
from .errors import AIFeatureError, MalformedAIResponseError, TaskManagerError
from .models import (
    InsightsResponse,
    PrioritizationResponse,
    PrioritizationResult,
    ProductivityInsights,
    Task,
    TaskSuggestion,
)
from .prompts import insights_prompt, prioritization_prompt, suggestion_prompt
from .retry import AIProxyClient
from .views import get_priority_distribution, get_task_statistics

logger = logging.getLogger(__name__)

NOTHING_TO_PRIORITIZE = "No active tasks to prioritize"
INVALID_FORMAT = "Invalid AI response format"
SUGGESTION_MAX_TOKENS = 1000

M = TypeVar("M", bound=BaseModel)

_decoder = json.JSONDecoder()


def _closing_brace(text: str, start: int) -> int:
    """Index of the '}' balancing the '{' at `start`, or -1 when it never closes."""
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


# PUBLIC_INTERFACE
def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Return the first JSON object embedded in `text`, ignoring prose around it.

    A brace group that does not decode is skipped as a whole, never searched
    for nested fragments; one that never closes (a truncated reply) fails.

    Raises:
        MalformedAIResponseError: no '{' in the text, or no complete brace
        group decodes to a JSON object.
    """
    start = text.find("{")
    if start == -1:
        raise MalformedAIResponseError(f"{INVALID_FORMAT}: no JSON object found")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, dict):
            return value
        end = _closing_brace(text, start)
        if end == -1:
            break
        start = text.find("{", end + 1)
    raise MalformedAIResponseError(f"{INVALID_FORMAT}: JSON object could not be parsed")


def parse_ai_response(text: str, model: Type[M]) -> M:
    """Extract the JSON object from generated text and validate it against `model`."""
    data = extract_json_object(text)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise MalformedAIResponseError(f"{INVALID_FORMAT}: unexpected shape ({fields})") from exc


# PUBLIC_INTERFACE
class AIService:
    """
    The three AI use cases: prioritization, productivity insights and task
    suggestions. Each either returns a validated result or raises one
    AIFeatureError; nothing partial is ever returned.
    """

    def __init__(self, proxy: AIProxyClient, config: ConfigStore) -> None:
        self._proxy = proxy
        self._config = config

    # PUBLIC_INTERFACE
    async def prioritize_tasks(self, tasks: Sequence[Task]) -> PrioritizationResult:
        """
        Ask the AI to re-rank incomplete tasks and merge its answer.

        aiPriority/aiReason are set only on incomplete tasks whose id the AI
        returned; every other task passes through unchanged. With nothing to
        do, returns immediately without contacting the AI.
        """
        active = [t for t in tasks if not t.completed]
        if not active:
            return PrioritizationResult(prioritized_tasks=list(tasks), reasoning=NOTHING_TO_PRIORITIZE)

        try:
            api_key = self._config.ensure_api_key()
            summary = [
                {
                    "index": i,
                    "id": t.id,
                    "title": t.title,
                    "description": t.description or "No description",
                    "currentPriority": t.priority.value,
                    "dueDate": t.due_date.isoformat() if t.due_date else "No due date",
                    "createdAt": t.created_at.isoformat() if t.created_at else None,
                }
                for i, t in enumerate(active)
            ]
            text = await self._proxy.generate(prioritization_prompt(summary), api_key)
            parsed = parse_ai_response(text, PrioritizationResponse)
        except TaskManagerError as exc:
            logger.error("Error prioritizing tasks: %s", exc)
            raise AIFeatureError(f"Failed to prioritize tasks: {exc}") from exc

        by_id = {p.id: p for p in parsed.priorities}
        prioritized = []
        for t in tasks:
            suggestion = None if t.completed else by_id.get(t.id)
            if suggestion is None:
                prioritized.append(t)
            else:
                prioritized.append(t.model_copy(update={"ai_priority": suggestion.priority, "ai_reason": suggestion.reason}))

        return PrioritizationResult(prioritized_tasks=prioritized, reasoning=parsed.summary, details=parsed.priorities)

    # PUBLIC_INTERFACE
    async def get_productivity_insights(self, tasks: Sequence[Task], today: Optional[date] = None) -> ProductivityInsights:
        """Ask the AI to analyze task statistics; the statistics are attached to the result."""
        statistics = get_task_statistics(tasks, today)
        try:
            api_key = self._config.ensure_api_key()
            prompt = insights_prompt(statistics.model_dump(), get_priority_distribution(tasks))
            text = await self._proxy.generate(prompt, api_key)
            parsed = parse_ai_response(text, InsightsResponse)
        except TaskManagerError as exc:
            logger.error("Error getting insights: %s", exc)
            raise AIFeatureError(f"Failed to generate insights: {exc}") from exc

        return ProductivityInsights(**parsed.model_dump(), statistics=statistics)

    # PUBLIC_INTERFACE
    async def generate_task_suggestions(self, title: str) -> TaskSuggestion:
        """Draft a description, subtasks and a priority for a new task title."""
        if not title.strip():
            raise AIFeatureError("Failed to generate suggestions: please enter a task title first")
        try:
            api_key = self._config.ensure_api_key()
            text = await self._proxy.generate(suggestion_prompt(title.strip()), api_key, SUGGESTION_MAX_TOKENS)
            return parse_ai_response(text, TaskSuggestion)
        except TaskManagerError as exc:
            logger.error("Error generating suggestions: %s", exc)
            raise AIFeatureError(f"Failed to generate suggestions: {exc}") from exc
