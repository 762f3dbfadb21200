"""MiniMax chat-completion provider."""

import json
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from todo_assistant.api.models import Task
from todo_assistant.providers.base import CompletionResult, Message, ProviderError, RemoteProvider

logger = logging.getLogger(__name__)

COMPLETION_ENDPOINT = "/text/chatcompletion_v2"
TOKENS_TO_GENERATE = 4096


class MiniMaxProvider(RemoteProvider):
    """Provider for the MiniMax chat completion API.

    MiniMax reports application errors inside HTTP 200 responses via
    ``base_resp.status_code``; any non-zero code is treated as a failure.
    """

    default_model = "abab6.5s-chat"
    supported_models = ("abab6.5-chat", "abab6.5t-chat", "abab6.5s-chat", "abab5.5-chat")
    strict_json = True

    def __init__(
        self,
        api_key: str | None,
        api_group: str = "default",
        base_url: str = "https://api.minimax.chat/v1",
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            api_key: MiniMax API key
            api_group: Value sent in the ``X-Api-Group`` header
            base_url: API root, without the endpoint path
            timeout: Request timeout in seconds
            client: Preconfigured HTTP client (used by tests)
        """
        super().__init__(api_key)
        self._api_group = api_group
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def name(self) -> str:
        return "minimax"

    async def complete(
        self, messages: Sequence[Message], model: str | None = None, temperature: float = 0.3
    ) -> CompletionResult:
        if not self.is_available():
            raise ProviderError(self.name, "MiniMax API key not configured")

        payload = {
            "model": model or self.default_model,
            "messages": [
                {
                    "role": "user" if m["role"] == "user" else "assistant",
                    "content": m["content"],
                }
                for m in messages
            ],
            "temperature": temperature,
            "tokens_to_generate": TOKENS_TO_GENERATE,
        }

        data = await self._post(COMPLETION_ENDPOINT, payload)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.name, f"Unexpected response shape: {e}") from e

        if not isinstance(content, str):
            raise ProviderError(self.name, "Response contained no message content")

        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        return CompletionResult(
            content=content,
            provider=self.name,
            model=data.get("model") or payload["model"],
            usage={
                "total_tokens": usage.get("total_tokens", 0),
                "prompt_tokens": usage.get("prompt_tokens", 0),
                "completion_tokens": usage.get("completion_tokens", 0),
            },
        )

    async def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
            "X-Api-Group": self._api_group,
        }

        try:
            response = await self._client.post(
                self._base_url + endpoint, headers=headers, json=payload
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                self.name, f"HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"Request failed: {e}") from e

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise ProviderError(self.name, "Failed to parse MiniMax response") from e

        if not isinstance(data, dict):
            raise ProviderError(self.name, "Failed to parse MiniMax response")

        base_resp = data.get("base_resp")
        if isinstance(base_resp, dict) and base_resp.get("status_code", 0) != 0:
            raise ProviderError(self.name, base_resp.get("status_msg") or "MiniMax API error")

        return data

    async def aclose(self) -> None:
        await self._client.aclose()

    def _task_messages(self, text: str) -> list[Message]:
        prompt = f"""You are a task assistant. Parse this input: "{text}".

Output in strict JSON format (no markdown, no other text):
{{
  "title": "Task title",
  "description": "Description",
  "priority": "high/medium/low",
  "dueDate": "YYYY-MM-DD HH:mm or null",
  "tags": ["tag1"],
  "reminder": "Reminder time or null"
}}"""
        return [{"role": "user", "content": prompt}]

    def _modification_messages(self, text: str, current_task: Task) -> list[Message]:
        current = json.dumps(
            {
                "title": current_task.title,
                "description": current_task.description,
                "priority": current_task.priority,
                "dueDate": current_task.due_date,
                "status": current_task.status,
            },
            ensure_ascii=False,
        )
        prompt = f"""You are a task assistant.

Current task: {current}
User request: {text}

Output in strict JSON format:
{{
  "updates": {{ "title": "...", "description": "...", "priority": "...", "dueDate": "...", "tags": [...] }},
  "explanation": "One sentence"
}}"""
        return [{"role": "user", "content": prompt}]

    def _summary_messages(self, tasks: Sequence[Task]) -> list[Message]:
        tasks_text = "\n".join(
            f"- [{'X' if t.status == 'completed' else ' '}] {t.title} "
            f"({t.priority}, due: {t.due_date or 'none'})"
            for t in tasks
        )
        prompt = f"""Analyze these tasks:
{tasks_text}

Output in strict JSON format:
{{
  "completionRate": "50%",
  "completedTasks": [],
  "pendingTasks": [],
  "overdueTasks": [],
  "suggestions": ["..."],
  "summaryText": "..."
}}"""
        return [{"role": "user", "content": prompt}]
