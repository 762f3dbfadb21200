"""In-memory task storage."""

import logging
import uuid
from datetime import datetime
from typing import Any, Protocol

from todo_assistant.api.models import Task, TaskDraft

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("created_at", "updated_at", "due_date", "priority", "title", "status")
_PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}


class TaskNotFoundError(LookupError):
    """Raised when a task ID is unknown."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class TaskStore(Protocol):
    """Protocol for task storage."""

    def create(self, draft: TaskDraft, status: str = "pending") -> Task:
        """Create a task from a draft."""
        ...

    def get(self, task_id: str) -> Task:
        """Read a task by ID."""
        ...

    def list_tasks(
        self,
        status: str | None = None,
        priority: str | None = None,
        tag: str | None = None,
        search: str | None = None,
        sort_by: str | None = None,
        order: str = "desc",
    ) -> list[Task]:
        """List tasks, optionally filtered and sorted."""
        ...

    def update(self, task_id: str, fields: dict[str, Any]) -> Task:
        """Apply field changes to a task."""
        ...

    def complete(self, task_id: str) -> Task:
        """Mark a task completed."""
        ...

    def delete(self, task_id: str) -> Task:
        """Remove a task."""
        ...

    def find_by_title(self, fragment: str) -> list[Task]:
        """Find tasks whose title contains the fragment."""
        ...


class InMemoryTaskStore:
    """Task store backed by a dict; contents are lost on restart."""

    def __init__(self) -> None:
        """Initialize empty store."""
        self._tasks: dict[str, Task] = {}

    def create(self, draft: TaskDraft, status: str = "pending") -> Task:
        task = Task(
            id=uuid.uuid4().hex,
            title=draft.title.strip(),
            description=draft.description,
            priority=draft.priority,
            status=status,
            due_date=draft.due_date,
            reminder=draft.reminder,
            tags=list(draft.tags),
        )
        self._tasks[task.id] = task
        logger.info(f"Created task {task.id}: {task.title}")
        return task

    def get(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def list_tasks(
        self,
        status: str | None = None,
        priority: str | None = None,
        tag: str | None = None,
        search: str | None = None,
        sort_by: str | None = None,
        order: str = "desc",
    ) -> list[Task]:
        tasks = list(self._tasks.values())

        if status:
            tasks = [t for t in tasks if t.status == status]
        if priority:
            tasks = [t for t in tasks if t.priority == priority]
        if tag:
            tasks = [t for t in tasks if tag in t.tags]
        if search:
            needle = search.lower()
            tasks = [
                t for t in tasks if needle in t.title.lower() or needle in t.description.lower()
            ]

        field = sort_by if sort_by in SORTABLE_FIELDS else "created_at"
        tasks.sort(key=lambda t: _sort_key(t, field), reverse=order != "asc")
        return tasks

    def update(self, task_id: str, fields: dict[str, Any]) -> Task:
        task = self.get(task_id)
        for name, value in fields.items():
            if name in ("id", "created_at", "updated_at") or not hasattr(task, name):
                logger.debug(f"Ignoring unknown or read-only field '{name}' for task {task_id}")
                continue
            setattr(task, name, value)
        task.updated_at = datetime.now()
        return task

    def complete(self, task_id: str) -> Task:
        return self.update(task_id, {"status": "completed"})

    def delete(self, task_id: str) -> Task:
        task = self.get(task_id)
        del self._tasks[task_id]
        logger.info(f"Deleted task {task_id}: {task.title}")
        return task

    def find_by_title(self, fragment: str) -> list[Task]:
        needle = fragment.strip().lower()
        if not needle:
            return []
        return [t for t in self.list_tasks() if needle in t.title.lower()]


def _sort_key(task: Task, field: str) -> tuple[bool, Any]:
    # Tasks without a value sort last in descending order
    if field == "priority":
        return (True, _PRIORITY_RANK.get(task.priority, 0))
    value = getattr(task, field)
    return (value is not None, value if value is not None else "")
