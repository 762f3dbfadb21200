"""Provider interface and shared behaviour for remote chat-completion providers."""

import enum
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from todo_assistant.api.models import ModificationResult, SummaryReport, Task, TaskDraft
from todo_assistant.providers.json_extraction import extract_json
from todo_assistant.providers.summary import summarize_statuses

logger = logging.getLogger(__name__)

Message = dict[str, str]

ModelT = TypeVar("ModelT", bound=BaseModel)


class ProviderKind(enum.Enum):
    """How a provider is invoked by the manager."""

    REMOTE = "remote"  # async, network-bound, may fail
    RULE_BASED = "rule_based"  # sync, local, never fails


class ProviderError(RuntimeError):
    """A provider call failed (transport, HTTP status, vendor error or bad payload)."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class UnsupportedOperationError(RuntimeError):
    """The provider does not implement the requested operation."""


@dataclass
class CompletionResult:
    """Result of a raw chat completion."""

    content: str
    provider: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)


@dataclass
class ProviderInfo:
    """Introspection data for one provider."""

    name: str
    available: bool
    models: list[str] = field(default_factory=list)


class Provider(Protocol):
    """Members shared by every natural-language task provider."""

    @property
    def name(self) -> str:
        """Registry name of the provider."""
        ...

    def is_available(self) -> bool:
        """Whether the provider can serve calls."""
        ...

    def get_supported_models(self) -> list[str]:
        """Model identifiers this provider knows about."""
        ...

    async def complete(
        self, messages: Sequence[Message], model: str | None = None, temperature: float = 0.3
    ) -> CompletionResult:
        """Run a raw chat completion."""
        ...


class LocalProvider(Provider, Protocol):
    """Provider answering structured operations synchronously; never fails."""

    @property
    def kind(self) -> Literal[ProviderKind.RULE_BASED]: ...

    def parse_task(self, text: str) -> TaskDraft: ...

    def parse_modification(self, text: str, current_task: Task) -> ModificationResult: ...

    def generate_summary(self, tasks: Sequence[Task]) -> SummaryReport: ...


class NetworkProvider(Provider, Protocol):
    """Provider answering structured operations over the network.

    Structured operations return ``None`` for undecodable answers and may raise.
    """

    @property
    def kind(self) -> Literal[ProviderKind.REMOTE]: ...

    async def parse_task(self, text: str) -> TaskDraft | None: ...

    async def parse_modification(
        self, text: str, current_task: Task
    ) -> ModificationResult | None: ...

    async def generate_summary(self, tasks: Sequence[Task]) -> SummaryReport | None: ...

    async def aclose(self) -> None: ...


# Tagged by ``kind``: checking ``provider.kind`` narrows to one variant
AnyProvider = LocalProvider | NetworkProvider


class RemoteProvider(ABC):
    """Base class for providers backed by a hosted chat-completion API.

    Subclasses implement the wire format in ``complete`` and supply their own
    prompts. Structured operations return ``None`` when the model output cannot
    be decoded into the expected shape; errors raised by ``complete`` propagate.
    """

    kind: Literal[ProviderKind.REMOTE] = ProviderKind.REMOTE
    default_model: str = ""
    supported_models: tuple[str, ...] = ()
    strict_json = False

    def __init__(self, api_key: str | None) -> None:
        """Initialize with the provider credential."""
        self._api_key = api_key

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name of the provider."""

    def is_available(self) -> bool:
        """Available iff a non-empty credential was supplied."""
        return bool(self._api_key)

    def get_supported_models(self) -> list[str]:
        """Return the hardcoded model list (not checked against the vendor)."""
        return list(self.supported_models)

    @abstractmethod
    async def complete(
        self, messages: Sequence[Message], model: str | None = None, temperature: float = 0.3
    ) -> CompletionResult:
        """Send one chat-completion request.

        Raises:
            ProviderError: On transport errors, non-2xx responses, vendor error
                codes or malformed response bodies
        """

    async def aclose(self) -> None:
        """Release network resources."""

    @abstractmethod
    def _task_messages(self, text: str) -> list[Message]:
        """Build the prompt for task extraction."""

    @abstractmethod
    def _modification_messages(self, text: str, current_task: Task) -> list[Message]:
        """Build the prompt for modification extraction."""

    @abstractmethod
    def _summary_messages(self, tasks: Sequence[Task]) -> list[Message]:
        """Build the prompt for summarizing a task list."""

    async def parse_task(self, text: str) -> TaskDraft | None:
        """Extract task fields from free text."""
        result = await self.complete(self._task_messages(text), temperature=0.3)
        return self._decode(result.content, TaskDraft)

    async def parse_modification(self, text: str, current_task: Task) -> ModificationResult | None:
        """Extract requested changes for an existing task."""
        result = await self.complete(
            self._modification_messages(text, current_task), temperature=0.3
        )
        return self._decode(result.content, ModificationResult)

    async def generate_summary(self, tasks: Sequence[Task]) -> SummaryReport | None:
        """Summarize a task list.

        The completion rate and title lists are computed locally; the model only
        contributes suggestions and the summary text.
        """
        result = await self.complete(self._summary_messages(tasks), temperature=0.5)
        report = self._decode(result.content, SummaryReport)
        if report is None:
            return None

        counts = summarize_statuses(tasks)
        return report.model_copy(
            update={
                "completion_rate": counts.completion_rate,
                "completed_tasks": counts.completed,
                "pending_tasks": counts.pending,
                "overdue_tasks": counts.overdue,
            }
        )

    def _decode(self, content: str, model_type: type[ModelT]) -> ModelT | None:
        data = extract_json(content, strict=self.strict_json)
        if data is None:
            logger.warning(f"[{self.name}] Could not extract JSON from response: {content!r}")
            return None
        try:
            return model_type.model_validate(data)
        except ValidationError as e:
            logger.warning(f"[{self.name}] Response does not match {model_type.__name__}: {e}")
            return None
