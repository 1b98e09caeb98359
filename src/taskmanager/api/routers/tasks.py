from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..repositories import Repository, get_repository
from ..schemas import BulkUpdateRequest, TaskCreate, TaskDeleted, TaskOut, TaskUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)

TASK_NOT_FOUND = "Task not found"


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="Return every task, newest-created first. No pagination or filtering.",
    responses={200: {"description": "List retrieved successfully"}},
)
def list_tasks(repo: Repository = Depends(_get_repo)) -> List[TaskOut]:
    """
    List all tasks.
    """
    return [TaskOut(**t) for t in repo.list()]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task and return the stored record with its id and timestamps.",
    responses={
        201: {"description": "Task created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_task(payload: TaskCreate, repo: Repository = Depends(_get_repo)) -> TaskOut:
    """
    Create a new task.
    """
    created = repo.create(payload)
    logger.info("Created task id=%s", created["id"])
    return TaskOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/bulk-update",
    response_model=List[Optional[TaskOut]],
    summary="Bulk Update Tasks",
    description=(
        "Apply independent per-task updates. The response has one entry per input, "
        "null where the id was not found. Not transactional: a failed entry does not "
        "undo the others."
    ),
    responses={
        200: {"description": "Updates applied"},
        422: {"description": "Validation error"},
    },
)
def bulk_update_tasks(payload: BulkUpdateRequest, repo: Repository = Depends(_get_repo)) -> List[Optional[TaskOut]]:
    """
    Bulk update tasks (used to persist AI prioritization).
    """
    results = repo.bulk_update(payload.tasks)
    logger.info(
        "Bulk update applied=%d missing=%d",
        sum(1 for r in results if r is not None),
        sum(1 for r in results if r is None),
    )
    return [TaskOut(**r) if r is not None else None for r in results]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Merge the provided fields into an existing task. Omitted fields keep their values.",
    responses={
        200: {"description": "Task updated"},
        404: {"description": "Task not found"},
        422: {"description": "Validation error"},
    },
)
def update_task(task_id: str, payload: TaskUpdate, repo: Repository = Depends(_get_repo)) -> TaskOut:
    """
    Partial or full update of a task.
    """
    updated = repo.update(task_id, payload)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TASK_NOT_FOUND)
    return TaskOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=TaskDeleted,
    summary="Delete Task",
    description="Permanently delete a task and return its last state.",
    responses={
        200: {"description": "Task deleted"},
        404: {"description": "Task not found"},
    },
)
def delete_task(task_id: str, repo: Repository = Depends(_get_repo)) -> TaskDeleted:
    """
    Delete a task. Returns the deleted snapshot, 404 if not found.
    """
    deleted = repo.delete(task_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TASK_NOT_FOUND)
    logger.info("Deleted task id=%s", task_id)
    return TaskDeleted(message="Task deleted successfully", task=TaskOut(**deleted))  # type: ignore[arg-type]
