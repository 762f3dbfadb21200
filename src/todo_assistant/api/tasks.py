"""Task API endpoints."""

# FastAPI Depends pattern is safe in function signatures

import logging
from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field

from todo_assistant.api.models import (
    TaskDraft,
    TaskResponse,
    TaskStatus,
    TaskUpdates,
    task_to_response,
)
from todo_assistant.factory import get_task_store
from todo_assistant.store.task_store import TaskNotFoundError, TaskStore

logger = logging.getLogger(__name__)

router = APIRouter()

TaskStoreDep = Annotated[TaskStore, Depends(get_task_store)]


class CreateTaskRequest(TaskDraft):
    """Request model for creating a task."""

    title: str = Field(min_length=1)
    status: TaskStatus = "pending"


class UpdateTaskRequest(TaskUpdates):
    """Request model for updating a task; omitted fields stay unchanged."""

    status: TaskStatus | None = None


@router.get("/health")
async def health() -> dict[str, str]:
    """Health check."""
    return {"status": "ok", "timestamp": datetime.now().isoformat()}


@router.get("/tasks", response_model=list[TaskResponse])
async def list_tasks(
    store: TaskStoreDep,
    status: TaskStatus | None = None,
    priority: str | None = None,
    tag: str | None = None,
    search: str | None = None,
    sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
    order: Literal["asc", "desc"] = "desc",
) -> list[TaskResponse]:
    """List tasks.

    Args:
        status: Only tasks with this status
        priority: Only tasks with this priority
        tag: Only tasks carrying this tag
        search: Case-insensitive match on title or description
        sort_by: Field to sort by (default: creation time)
        order: "asc" or "desc"

    Returns:
        List of tasks matching the filter
    """
    tasks = store.list_tasks(
        status=status, priority=priority, tag=tag, search=search, sort_by=sort_by, order=order
    )
    return [task_to_response(task) for task in tasks]


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, store: TaskStoreDep) -> TaskResponse:
    """Get a single task."""
    try:
        return task_to_response(store.get(task_id))
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(request: CreateTaskRequest, store: TaskStoreDep) -> TaskResponse:
    """Create a task."""
    task = store.create(request, status=request.status)
    return task_to_response(task)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str, request: UpdateTaskRequest, store: TaskStoreDep
) -> TaskResponse:
    """Update a task."""
    try:
        return task_to_response(store.update(task_id, request.to_fields()))
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, store: TaskStoreDep) -> dict[str, str]:
    """Delete a task."""
    try:
        store.delete(task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return {"message": "Task deleted successfully"}


@router.put("/tasks/{task_id}/complete", response_model=TaskResponse)
async def complete_task(task_id: str, store: TaskStoreDep) -> TaskResponse:
    """Mark a task completed."""
    try:
        return task_to_response(store.complete(task_id))
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
