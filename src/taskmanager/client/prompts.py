from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping

from ..constants import Priority

_LEVELS = ", ".join(p.value for p in Priority)


def prioritization_prompt(task_summary: List[Dict[str, Any]]) -> str:
    return f"""You are an AI task prioritization assistant. Analyze these tasks and suggest optimal priority levels.

Tasks:
{json.dumps(task_summary, indent=2)}

Priority levels: {_LEVELS}

Consider:
1. Due dates and urgency
2. Task complexity (based on description)
3. Current priority
4. Creation date

Respond with ONLY a valid JSON object in this exact format (no additional text):
{{
  "priorities": [
    {{"id": "task_id", "priority": "urgent|high|medium|low", "reason": "brief reason"}}
  ],
  "summary": "Overall prioritization strategy"
}}"""


def insights_prompt(statistics: Mapping[str, int], distribution: Mapping[Priority, int]) -> str:
    return f"""You are a productivity coach AI. Analyze this task data and provide actionable insights.

Statistics:
- Total tasks: {statistics["total"]}
- Completed: {statistics["completed"]}
- Active: {statistics["active"]}
- Overdue: {statistics["overdue"]}
- Completion rate: {statistics["completion_rate"]}%

Active tasks by priority:
- Urgent: {distribution[Priority.URGENT]}
- High: {distribution[Priority.HIGH]}
- Medium: {distribution[Priority.MEDIUM]}
- Low: {distribution[Priority.LOW]}

Provide insights in ONLY valid JSON format (no additional text):
{{
  "completionAnalysis": "Analysis of completion rate and patterns",
  "recommendations": [
    "Specific actionable recommendation 1",
    "Specific actionable recommendation 2",
    "Specific actionable recommendation 3"
  ],
  "focusAreas": [
    "Priority area 1",
    "Priority area 2"
  ],
  "motivationalTip": "Encouraging message"
}}"""


def suggestion_prompt(title: str) -> str:
    return f"""You are a task planning assistant. Given this task: {json.dumps(title)}

Suggest:
1. A more detailed description
2. 2-3 subtasks to break it down
3. Estimated priority level

Respond with ONLY valid JSON (no additional text):
{{
  "description": "Detailed description",
  "subtasks": ["subtask 1", "subtask 2"],
  "suggestedPriority": "urgent|high|medium|low"
}}"""
