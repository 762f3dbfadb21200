"""Chat API endpoints: natural-language task management."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from todo_assistant.api.models import CamelModel, Task, TaskResponse, task_to_response
from todo_assistant.chat.intent import Intent, detect_intent, extract_target
from todo_assistant.factory import get_provider_manager, get_task_store
from todo_assistant.providers.manager import ProviderManager
from todo_assistant.providers.summary import summarize_statuses
from todo_assistant.store.task_store import TaskNotFoundError, TaskStore

logger = logging.getLogger(__name__)

router = APIRouter()

ManagerDep = Annotated[ProviderManager, Depends(get_provider_manager)]
TaskStoreDep = Annotated[TaskStore, Depends(get_task_store)]

PRIORITY_ICONS = {"high": "🔴", "medium": "🟡", "low": "🟢"}

HELP_MESSAGE = (
    "🤔 I'm not sure what you mean. You can:\n"
    '- Type a task directly (e.g. "meeting tomorrow at 15:00")\n'
    '- Say "create task" to add a task\n'
    '- Say "summary" to see an overview'
)


class ChatRequest(CamelModel):
    """Request model for a chat message."""

    message: str = Field(min_length=1)
    current_task_id: str | None = None
    provider: str | None = None  # Per-call provider override


class ModifyTaskRequest(CamelModel):
    """Request model for modifying a task from natural language."""

    message: str = Field(min_length=1)
    task_id: str
    provider: str | None = None


class ChatResponse(CamelModel):
    """API response model for chat actions."""

    message: str
    action: str
    task: TaskResponse | None = None
    tasks: list[TaskResponse] | None = None
    explanation: str | None = None
    tasks_count: dict[str, int] | None = None


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(request: ChatRequest, manager: ManagerDep, store: TaskStoreDep) -> ChatResponse:
    """Detect the intent of a chat message and act on it.

    Returns:
        What was done, or what information is still needed
    """
    intent = detect_intent(request.message)
    logger.info(f"Chat intent: {intent.value}")

    if intent is Intent.MODIFY:
        if not request.current_task_id:
            return ChatResponse(
                message="❓ Which task do you want to change? Please select a task first.",
                action="need_task_selection",
            )
        task = _get_task(store, request.current_task_id)
        return await _modify(request.message, task, manager, store, request.provider)

    if intent is Intent.DELETE:
        matches = store.find_by_title(extract_target(request.message, intent))
        if not matches:
            return ChatResponse(
                message="❓ No matching task found to delete. Please select a task first.",
                action="need_task_selection",
            )
        deleted = store.delete(matches[0].id)
        return ChatResponse(message=f"✅ Deleted task: 「{deleted.title}」", action="deleted")

    if intent is Intent.COMPLETE:
        matches = store.find_by_title(extract_target(request.message, intent))
        if not matches:
            return ChatResponse(
                message="❓ No matching task found to complete. Please select a task first.",
                action="need_task_selection",
            )
        completed = store.complete(matches[0].id)
        return ChatResponse(
            message=f"✅ Completed task: 「{completed.title}」",
            action="completed",
            task=task_to_response(completed),
        )

    if intent is Intent.SUMMARY:
        all_tasks = store.list_tasks()
        counts = summarize_statuses(all_tasks)
        return ChatResponse(
            message=_quick_summary(all_tasks),
            action="summary",
            tasks_count={
                "total": counts.total,
                "completed": len(counts.completed),
                "pending": len(counts.pending),
            },
        )

    if intent is Intent.LIST:
        pending = store.list_tasks(status="pending", sort_by="priority")
        lines = [
            f"{i}. [{PRIORITY_ICONS.get(t.priority, '⚪')}] {t.title}"
            + (f" (due: {t.due_date})" if t.due_date else "")
            for i, t in enumerate(pending, start=1)
        ]
        return ChatResponse(
            message=f"📋 Pending tasks ({len(pending)}):\n\n"
            + ("\n".join(lines) or "No pending tasks"),
            action="list",
            tasks=[task_to_response(t) for t in pending],
        )

    # CREATE and UNKNOWN: treat the message as a new task
    draft = await manager.parse_task(request.message, provider=request.provider)
    if not draft.title.strip():
        return ChatResponse(message=HELP_MESSAGE, action="need_help")
    task = store.create(draft)
    return ChatResponse(
        message=f"✅ Created task: 「{task.title}」",
        action="created",
        task=task_to_response(task),
    )


@router.post("/chat/create-task", response_model=ChatResponse, response_model_exclude_none=True)
async def create_task_from_text(
    request: ChatRequest, manager: ManagerDep, store: TaskStoreDep
) -> ChatResponse:
    """Create a task directly from natural language.

    Raises:
        HTTPException: 400 if no task title could be extracted
    """
    draft = await manager.parse_task(request.message, provider=request.provider)
    if not draft.title.strip():
        raise HTTPException(status_code=400, detail="Could not extract a task title")
    task = store.create(draft)
    return ChatResponse(
        message=f"Created task: 「{task.title}」", action="created", task=task_to_response(task)
    )


@router.post("/chat/modify-task", response_model=ChatResponse, response_model_exclude_none=True)
async def modify_task_from_text(
    request: ModifyTaskRequest, manager: ManagerDep, store: TaskStoreDep
) -> ChatResponse:
    """Modify an existing task from natural language."""
    task = _get_task(store, request.task_id)
    return await _modify(request.message, task, manager, store, request.provider)


async def _modify(
    message: str,
    task: Task,
    manager: ProviderManager,
    store: TaskStore,
    provider: str | None,
) -> ChatResponse:
    modification = await manager.parse_modification(message, task, provider=provider)
    updated = store.update(task.id, modification.updates.to_fields())
    return ChatResponse(
        message=f"✅ Updated task: 「{updated.title}」",
        action="modified",
        task=task_to_response(updated),
        explanation=modification.explanation,
    )


def _get_task(store: TaskStore, task_id: str) -> Task:
    try:
        return store.get(task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


def _quick_summary(tasks: list[Task]) -> str:
    counts = summarize_statuses(tasks)
    lines: list[str] = [
        "📊 Task summary",
        "",
        f"📈 Completion rate: {counts.completion_rate}",
        f"✅ Completed: {len(counts.completed)}",
        f"⏳ Pending: {len(counts.pending)}",
        f"⚠️ Overdue: {len(counts.overdue)}",
    ]
    if counts.pending:
        high = sum(1 for t in tasks if t.status == "pending" and t.priority == "high")
        lines.append("")
        lines.append(f"🔥 High priority: {high}")
    return "\n".join(lines)
