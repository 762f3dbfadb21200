"""Deterministic task-list statistics shared by all providers."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from todo_assistant.api.models import Task


@dataclass
class StatusCounts:
    """Titles grouped by status plus the completion rate."""

    total: int
    completed: list[str]
    pending: list[str]
    overdue: list[str]
    rate: int

    @property
    def completion_rate(self) -> str:
        return f"{self.rate}%"


def completion_percentage(completed: int, total: int) -> int:
    """Percentage of completed tasks, rounded half up; 0 for an empty list."""
    if total <= 0:
        return 0
    return math.floor(completed / total * 100 + 0.5)


def summarize_statuses(tasks: Sequence[Task]) -> StatusCounts:
    """Group task titles by status."""
    completed = [t.title for t in tasks if t.status == "completed"]
    return StatusCounts(
        total=len(tasks),
        completed=completed,
        pending=[t.title for t in tasks if t.status == "pending"],
        overdue=[t.title for t in tasks if t.status == "overdue"],
        rate=completion_percentage(len(completed), len(tasks)),
    )
