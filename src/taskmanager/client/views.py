"""
Derived views over the in-memory task list.

Pure functions, no I/O. Anything that depends on the current date takes an
optional `today` (or `now`) so results are reproducible.
"""
from __future__ import annotations

import math
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Union

from ..constants import PRIORITY_RANK, Priority, TaskFilter
from .models import Task, TaskStatistics


def _due_day(task: Task) -> Optional[date]:
    due = task.due_date
    if due is None:
        return None
    if due.tzinfo is not None:
        due = due.astimezone()
    return due.date()


def is_due_today(task: Task, today: Optional[date] = None) -> bool:
    return _due_day(task) == (today or date.today())


# PUBLIC_INTERFACE
def is_task_overdue(task: Task, today: Optional[date] = None) -> bool:
    """Has a due date on a day before today and is not completed."""
    day = _due_day(task)
    if day is None or task.completed:
        return False
    return day < (today or date.today())


def is_upcoming(task: Task, today: Optional[date] = None) -> bool:
    day = _due_day(task)
    if day is None or task.completed:
        return False
    return day > (today or date.today())


# PUBLIC_INTERFACE
def filter_tasks(
    tasks: Sequence[Task],
    task_filter: Union[TaskFilter, str] = TaskFilter.ALL,
    today: Optional[date] = None,
) -> List[Task]:
    """
    Filter tasks by one of all/today/upcoming/completed/overdue.

    today and upcoming only list tasks still to do. Unknown filters behave
    like 'all'.
    """
    today = today or date.today()
    try:
        selected = TaskFilter(task_filter)
    except ValueError:
        selected = TaskFilter.ALL

    if selected is TaskFilter.TODAY:
        return [t for t in tasks if not t.completed and is_due_today(t, today)]
    if selected is TaskFilter.UPCOMING:
        return [t for t in tasks if is_upcoming(t, today)]
    if selected is TaskFilter.COMPLETED:
        return [t for t in tasks if t.completed]
    if selected is TaskFilter.OVERDUE:
        return [t for t in tasks if is_task_overdue(t, today)]
    return list(tasks)


# PUBLIC_INTERFACE
def sort_tasks_by_priority(tasks: Sequence[Task]) -> List[Task]:
    """Urgent first by effective priority; ties keep their relative order."""
    return sorted(tasks, key=lambda t: PRIORITY_RANK[t.effective_priority], reverse=True)


# PUBLIC_INTERFACE
def sort_tasks_by_due_date(tasks: Sequence[Task]) -> List[Task]:
    """Earliest due date first; tasks without one go last."""
    dated = [t for t in tasks if t.due_date is not None]
    undated = [t for t in tasks if t.due_date is None]
    return sorted(dated, key=lambda t: _due_day(t)) + undated


def completion_rate(completed: int, total: int) -> int:
    """Percentage rounded half up; 0 for an empty list."""
    if total == 0:
        return 0
    return math.floor(completed * 100 / total + 0.5)


# PUBLIC_INTERFACE
def get_task_statistics(tasks: Sequence[Task], today: Optional[date] = None) -> TaskStatistics:
    today = today or date.today()
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    return TaskStatistics(
        total=total,
        completed=completed,
        active=total - completed,
        overdue=sum(1 for t in tasks if is_task_overdue(t, today)),
        today=sum(1 for t in tasks if not t.completed and is_due_today(t, today)),
        completion_rate=completion_rate(completed, total),
    )


# PUBLIC_INTERFACE
def get_priority_distribution(tasks: Sequence[Task]) -> Dict[Priority, int]:
    """Incomplete tasks per stored priority (aiPriority is ignored)."""
    distribution = {p: 0 for p in Priority}
    for t in tasks:
        if not t.completed:
            distribution[t.priority] += 1
    return distribution


# PUBLIC_INTERFACE
def format_due_date(due: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Human label for a due date, relative to now."""
    if due is None:
        return "No due date"
    if due.tzinfo is not None:
        due = due.astimezone()
    today = (now or datetime.now()).date()
    days = (due.date() - today).days

    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    if days < 0:
        n = -days
        return f"{n} day overdue" if n == 1 else f"{n} days overdue"
    if days <= 7:
        return f"{due:%A}"
    return f"{due:%b} {due.day}, {due.year}"
