"""OpenAI chat-completion provider."""

import logging
from collections.abc import Sequence

from openai import AsyncOpenAI, OpenAIError

from todo_assistant.api.models import Task
from todo_assistant.providers.base import CompletionResult, Message, ProviderError, RemoteProvider

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a task assistant. Always output valid JSON."


class OpenAIProvider(RemoteProvider):
    """Provider for the OpenAI chat completions API (or a compatible proxy)."""

    default_model = "gpt-3.5-turbo"
    supported_models = ("gpt-3.5-turbo", "gpt-4", "gpt-4-turbo", "gpt-4o")

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = None,
        max_tokens: int = 2048,
        timeout: float = 60.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            api_key: OpenAI API key; no client is created without one
            base_url: Optional endpoint override, e.g. a proxy
            max_tokens: Upper bound for generated tokens
            timeout: Request timeout in seconds
            client: Preconfigured client (used by tests)
        """
        super().__init__(api_key)
        self._max_tokens = max_tokens
        self._client = client
        if self._client is None and api_key:
            self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    @property
    def name(self) -> str:
        return "openai"

    async def complete(
        self, messages: Sequence[Message], model: str | None = None, temperature: float = 0.3
    ) -> CompletionResult:
        if self._client is None:
            raise ProviderError(self.name, "OpenAI API key not configured")

        try:
            response = await self._client.chat.completions.create(
                model=model or self.default_model,
                messages=list(messages),  # type: ignore[arg-type]
                temperature=temperature,
                max_tokens=self._max_tokens,
            )
        except OpenAIError as e:
            raise ProviderError(self.name, str(e)) from e

        if not response.choices or response.choices[0].message.content is None:
            raise ProviderError(self.name, "Response contained no message content")

        usage: dict[str, int] = {}
        if response.usage is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return CompletionResult(
            content=response.choices[0].message.content,
            provider=self.name,
            model=response.model,
            usage=usage,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()

    def _task_messages(self, text: str) -> list[Message]:
        prompt = f"""You are a task assistant. Parse the user input and extract task information.

Please output in strict JSON format (no other text):
{{
  "title": "Task title (concise)",
  "description": "Task description (optional)",
  "priority": "high/medium/low",
  "dueDate": "YYYY-MM-DD HH:mm format",
  "tags": ["tag1", "tag2"],
  "reminder": "Reminder time"
}}

User input: {text}

Remember:
- If user only says "meeting", title is "meeting"
- If user says "3pm tomorrow", dueDate is tomorrow at 3pm
- priority based on urgency
"""
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    def _modification_messages(self, text: str, current_task: Task) -> list[Message]:
        prompt = f"""You are a task assistant. Parse the user's modification request.

Current task:
- Title: {current_task.title}
- Description: {current_task.description or "none"}
- Priority: {current_task.priority}
- Due Date: {current_task.due_date or "not set"}
- Status: {current_task.status}

User request: {text}

Output in strict JSON format:
{{
  "updates": {{
    "title": "Updated title",
    "description": "Updated description",
    "priority": "high/medium/low",
    "dueDate": "YYYY-MM-DD HH:mm",
    "reminder": "Reminder time",
    "tags": ["tag1"]
  }},
  "explanation": "One sentence explaining the modification"
}}
Only include fields in "updates" that the user asked to change.
"""
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    def _summary_messages(self, tasks: Sequence[Task]) -> list[Message]:
        tasks_text = "\n".join(
            f"- [{'✓' if t.status == 'completed' else ' '}] {t.title} "
            f"(priority: {t.priority}, due: {t.due_date or 'none'})"
            for t in tasks
        )
        prompt = f"""Analyze the task list and generate a summary:

{tasks_text}

Output in strict JSON format:
{{
  "completionRate": "completion rate",
  "completedTasks": ["completed task titles"],
  "pendingTasks": ["pending task titles"],
  "overdueTasks": ["overdue task titles"],
  "suggestions": ["one suggestion"],
  "summaryText": "A paragraph summarizing the current task status"
}}
"""
        return [
            {"role": "system", "content": "You are a task summary assistant."},
            {"role": "user", "content": prompt},
        ]
