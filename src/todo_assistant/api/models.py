"""API models for TodoAssistant."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Priority = Literal["high", "medium", "low"]
TaskStatus = Literal["pending", "completed", "overdue"]

PRIORITIES: tuple[str, ...] = ("high", "medium", "low")


@dataclass
class Task:
    """Task held by the task store."""

    id: str
    title: str
    description: str = ""
    priority: str = "medium"  # high, medium, low
    status: str = "pending"  # pending, completed, overdue
    due_date: str | None = None  # YYYY-MM-DD HH:mm
    reminder: str | None = None  # YYYY-MM-DD HH:mm
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names (``dueDate``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _normalize_optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in ("null", "none"):
        return None
    return text


def _normalize_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, list | tuple):
        return [str(tag) for tag in value if tag is not None]
    return []


class TaskDraft(CamelModel):
    """Task fields extracted from free text, ready for task creation."""

    title: str
    description: str = ""
    priority: Priority = "medium"
    due_date: str | None = None
    tags: list[str] = Field(default_factory=list)
    reminder: str | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> str:
        # Models sometimes echo the template ("high/medium/low")
        if isinstance(value, str) and value.strip().lower() in PRIORITIES:
            return value.strip().lower()
        return "medium"

    @field_validator("due_date", "reminder", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        return _normalize_optional_text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> list[str]:
        return _normalize_tags(value)


class TaskUpdates(CamelModel):
    """Partial task fields; only fields that are set get applied."""

    title: str | None = None
    description: str | None = None
    priority: Priority | None = None
    due_date: str | None = None
    tags: list[str] | None = None
    reminder: str | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> str | None:
        if isinstance(value, str) and value.strip().lower() in PRIORITIES:
            return value.strip().lower()
        return None

    @field_validator("due_date", "reminder", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        return _normalize_optional_text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> list[str] | None:
        return None if value is None else _normalize_tags(value)

    def to_fields(self) -> dict[str, Any]:
        """Return the fields to apply, keyed by Task attribute name."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class ModificationResult(CamelModel):
    """Changes requested for an existing task."""

    updates: TaskUpdates = Field(default_factory=TaskUpdates)
    explanation: str = ""

    @field_validator("updates", mode="before")
    @classmethod
    def _updates(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("explanation", mode="before")
    @classmethod
    def _explanation(cls, value: Any) -> str:
        return "" if value is None else str(value)


class SummaryReport(CamelModel):
    """Summary of a task list."""

    completion_rate: str = "0%"
    completed_tasks: list[str] = Field(default_factory=list)
    pending_tasks: list[str] = Field(default_factory=list)
    overdue_tasks: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    summary_text: str = ""

    @field_validator("completion_rate", mode="before")
    @classmethod
    def _completion_rate(cls, value: Any) -> str:
        if isinstance(value, int | float):
            return f"{round(value)}%"
        return "0%" if value is None else str(value)

    @field_validator(
        "completed_tasks", "pending_tasks", "overdue_tasks", "suggestions", mode="before"
    )
    @classmethod
    def _string_list(cls, value: Any) -> list[str]:
        return _normalize_tags(value)

    @field_validator("summary_text", mode="before")
    @classmethod
    def _summary_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class TaskResponse(CamelModel):
    """API response model for tasks."""

    id: str
    title: str
    description: str
    priority: str
    status: str
    due_date: str | None
    reminder: str | None
    tags: list[str]
    created_at: datetime
    updated_at: datetime


def task_to_response(task: Task) -> TaskResponse:
    """Convert Task to TaskResponse."""
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        status=task.status,
        due_date=task.due_date,
        reminder=task.reminder,
        tags=list(task.tags),
        created_at=task.created_at,
        updated_at=task.updated_at,
    )
