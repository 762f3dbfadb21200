"""Test fixtures for TodoAssistant."""

from collections.abc import Callable
from datetime import datetime
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from todo_assistant.api.models import Task
from todo_assistant.providers.rule_based import RuleBasedProvider

FIXED_NOW = datetime(2026, 3, 10, 9, 30)


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed clock value used by the rule-based provider."""
    return FIXED_NOW


@pytest.fixture
def rule_based(fixed_now: datetime) -> RuleBasedProvider:
    """Rule-based provider with a frozen clock."""
    return RuleBasedProvider(now=lambda: fixed_now)


@pytest.fixture
def sample_tasks() -> list[Task]:
    """Three completed and two pending tasks."""
    return [
        Task(id="1", title="Write report", status="completed", priority="high"),
        Task(id="2", title="Call client", status="completed"),
        Task(id="3", title="Book flights", status="completed", priority="low"),
        Task(id="4", title="Review PR", status="pending", due_date="2026-03-11 10:00"),
        Task(id="5", title="Plan sprint", status="pending", priority="high"),
    ]


def openai_response(content: str | None, model: str = "gpt-3.5-turbo") -> SimpleNamespace:
    """Build an object shaped like an OpenAI ChatCompletion."""
    return SimpleNamespace(
        model=model,
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=34, total_tokens=46),
    )


def make_openai_client(*results: Any) -> MagicMock:
    """Mock AsyncOpenAI client whose completions return (or raise) the given results."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=list(results))
    client.close = AsyncMock()
    return client


def make_minimax_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.AsyncClient:
    """HTTP client that answers every request with the handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def minimax_body(content: str, status_code: int = 0, status_msg: str = "") -> dict[str, Any]:
    """Build a MiniMax chatcompletion_v2 response body."""
    return {
        "model": "abab6.5s-chat",
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"total_tokens": 30, "prompt_tokens": 10, "completion_tokens": 20},
        "base_resp": {"status_code": status_code, "status_msg": status_msg},
    }
