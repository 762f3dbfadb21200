"""Summary API endpoint."""

import logging
from datetime import datetime, timedelta
from typing import Annotated, Literal

from fastapi import APIRouter, Depends

from todo_assistant.api.models import CamelModel, SummaryReport
from todo_assistant.factory import get_provider_manager, get_task_store
from todo_assistant.providers.manager import ProviderManager
from todo_assistant.store.task_store import TaskStore

logger = logging.getLogger(__name__)

router = APIRouter()

Period = Literal["day", "week", "month"]


class SummaryStats(CamelModel):
    """Task counts by status and priority."""

    total: int
    completed: int
    pending: int
    overdue: int
    by_priority: dict[str, int]


class SummaryResponse(CamelModel):
    """API response model for the summary endpoint."""

    stats: SummaryStats
    summary: SummaryReport
    period: str


def period_start(period: Period | None, now: datetime) -> datetime | None:
    """Earliest creation time included for a period; None means all tasks."""
    if period == "day":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now - timedelta(days=30)
    return None


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    manager: Annotated[ProviderManager, Depends(get_provider_manager)],
    store: Annotated[TaskStore, Depends(get_task_store)],
    period: Period | None = None,
    provider: str | None = None,
) -> SummaryResponse:
    """Summarize tasks created within a period.

    Args:
        period: "day", "week" or "month"; all tasks when omitted
        provider: Optional provider override for this call

    Returns:
        Basic statistics plus the provider-generated summary
    """
    start = period_start(period, datetime.now())
    tasks = store.list_tasks()
    if start is not None:
        tasks = [t for t in tasks if t.created_at >= start]

    summary = await manager.generate_summary(tasks, provider=provider)

    stats = SummaryStats(
        total=len(tasks),
        completed=sum(1 for t in tasks if t.status == "completed"),
        pending=sum(1 for t in tasks if t.status == "pending"),
        overdue=sum(1 for t in tasks if t.status == "overdue"),
        by_priority={
            priority: sum(1 for t in tasks if t.priority == priority)
            for priority in ("high", "medium", "low")
        },
    )

    return SummaryResponse(stats=stats, summary=summary, period=period or "all")
