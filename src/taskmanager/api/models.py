from __future__ import annotations

from datetime import datetime
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    Storage-level representation of a task, shared by all repository backends.

    Fields:
    - id: Opaque unique identifier (uuid4 hex), assigned on create
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - description: Free text, empty string when not given
    - priority: One of urgent/high/medium/low (stored as the enum value)
    - completed: Boolean completion flag
    - due_date: Optional due datetime
    - ai_priority: Optional priority assigned by AI prioritization
    - ai_reason: Optional explanation for ai_priority
    - created_at: Creation timestamp
    - updated_at: Last write timestamp
    """

    id: str
    title: str
    description: str
    priority: str
    completed: bool
    due_date: Optional[datetime]
    ai_priority: Optional[str]
    ai_reason: Optional[str]
    created_at: datetime
    updated_at: datetime
