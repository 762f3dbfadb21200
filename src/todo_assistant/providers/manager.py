"""Provider manager: selection, switching and fallback."""

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import TypeVar

from todo_assistant.api.models import ModificationResult, SummaryReport, Task, TaskDraft
from todo_assistant.config import Config
from todo_assistant.providers.base import (
    AnyProvider,
    CompletionResult,
    LocalProvider,
    Message,
    NetworkProvider,
    ProviderInfo,
    ProviderKind,
    UnsupportedOperationError,
)
from todo_assistant.providers.minimax_provider import MiniMaxProvider
from todo_assistant.providers.openai_provider import OpenAIProvider
from todo_assistant.providers.rule_based import RuleBasedProvider

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")

FALLBACK_PROVIDER = "simple"
AUTO = "auto"

# Remote providers tried by "auto", highest priority first
AUTO_PRIORITY = ("openai", "minimax")


class ProviderManager:
    """Owns the registered providers and the active selection.

    Structured operations (``parse_task``, ``parse_modification``,
    ``generate_summary``) never raise: any failure of a remote provider is
    logged and answered by the rule-based provider. ``complete`` has no
    fallback.
    """

    def __init__(
        self,
        providers: Mapping[str, AnyProvider] | None = None,
        default: str = AUTO,
    ) -> None:
        """Register providers and run the initial selection.

        Args:
            providers: Providers keyed by name; a RuleBasedProvider is added
                under "simple" when missing
            default: Provider name or "auto"

        Raises:
            ValueError: If the provider registered as "simple" is not rule-based
        """
        self._providers: dict[str, AnyProvider] = dict(providers or {})
        fallback = self._providers.setdefault(FALLBACK_PROVIDER, RuleBasedProvider())
        if fallback.kind is not ProviderKind.RULE_BASED:
            raise ValueError(f"Provider '{FALLBACK_PROVIDER}' must be rule-based")
        self._fallback: LocalProvider = fallback
        self._active: AnyProvider | None = None
        self.select_provider(default)

    @classmethod
    def from_config(cls, config: Config) -> "ProviderManager":
        """Create remote providers for every configured credential."""
        providers: dict[str, AnyProvider] = {}

        if config.openai_api_key:
            providers["openai"] = OpenAIProvider(
                api_key=config.openai_api_key,
                base_url=config.openai_base_url,
                max_tokens=config.openai_max_tokens,
                timeout=config.request_timeout,
            )
            logger.info("[ProviderManager] OpenAI provider initialized")

        if config.minimax_api_key:
            providers["minimax"] = MiniMaxProvider(
                api_key=config.minimax_api_key,
                api_group=config.minimax_api_group,
                base_url=config.minimax_base_url,
                timeout=config.request_timeout,
            )
            logger.info("[ProviderManager] MiniMax provider initialized")

        providers[FALLBACK_PROVIDER] = RuleBasedProvider()
        logger.info("[ProviderManager] Simple fallback provider initialized")

        return cls(providers, default=config.ai_provider)

    @property
    def providers(self) -> Mapping[str, AnyProvider]:
        return self._providers

    @property
    def active(self) -> AnyProvider | None:
        return self._active

    @property
    def fallback(self) -> LocalProvider:
        return self._fallback

    def select_provider(self, name: str) -> None:
        """Point the active selection at a provider.

        "auto" picks the first available provider in AUTO_PRIORITY and falls
        back to the rule-based provider. An unknown name selects the
        rule-based provider.
        """
        if name == AUTO:
            self._active = next(
                (
                    self._providers[candidate]
                    for candidate in AUTO_PRIORITY
                    if candidate in self._providers and self._providers[candidate].is_available()
                ),
                self._fallback,
            )
        elif name in self._providers:
            self._active = self._providers[name]
        else:
            logger.warning(
                f"[ProviderManager] Provider '{name}' not available, "
                f"falling back to {FALLBACK_PROVIDER}"
            )
            self._active = self._fallback

        logger.info(f"[ProviderManager] Active AI provider: {self._active.name}")

    def switch_provider(self, name: str) -> ProviderInfo:
        """Select a provider and return its info."""
        self.select_provider(name)
        return self.get_provider_info()

    def get_provider_info(self) -> ProviderInfo:
        """Describe the active provider."""
        if self._active is None:
            return ProviderInfo(name="none", available=False)
        return ProviderInfo(
            name=self._active.name,
            available=self._active.is_available(),
            models=self._active.get_supported_models(),
        )

    def get_available_providers(self) -> list[ProviderInfo]:
        """List every registered provider that reports available."""
        return [
            ProviderInfo(name=name, available=True, models=provider.get_supported_models())
            for name, provider in self._providers.items()
            if provider.is_available()
        ]

    def resolve(self, provider: str | None = None) -> AnyProvider:
        """Return the per-call override if registered, else the active provider."""
        if provider and provider in self._providers:
            return self._providers[provider]
        return self._active or self._fallback

    async def parse_task(self, text: str, provider: str | None = None) -> TaskDraft:
        """Extract a task draft from free text."""
        selected = self.resolve(provider)
        if selected.kind is ProviderKind.RULE_BASED:
            return selected.parse_task(text)
        remote = selected
        return await self._with_fallback(
            remote,
            "parse_task",
            lambda: remote.parse_task(text),
            lambda: self._fallback.parse_task(text),
        )

    async def parse_modification(
        self, text: str, current_task: Task, provider: str | None = None
    ) -> ModificationResult:
        """Extract requested changes for an existing task."""
        selected = self.resolve(provider)
        if selected.kind is ProviderKind.RULE_BASED:
            return selected.parse_modification(text, current_task)
        remote = selected
        return await self._with_fallback(
            remote,
            "parse_modification",
            lambda: remote.parse_modification(text, current_task),
            lambda: self._fallback.parse_modification(text, current_task),
        )

    async def generate_summary(
        self, tasks: Sequence[Task], provider: str | None = None
    ) -> SummaryReport:
        """Summarize a task list."""
        selected = self.resolve(provider)
        if selected.kind is ProviderKind.RULE_BASED:
            return selected.generate_summary(tasks)
        remote = selected
        return await self._with_fallback(
            remote,
            "generate_summary",
            lambda: remote.generate_summary(tasks),
            lambda: self._fallback.generate_summary(tasks),
        )

    async def complete(
        self,
        messages: Sequence[Message],
        provider: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
    ) -> CompletionResult:
        """Run a raw completion on the resolved provider, without fallback.

        Raises:
            UnsupportedOperationError: If the resolved provider is rule-based
            ProviderError: If the remote call fails
        """
        selected = self.resolve(provider)
        if selected.kind is ProviderKind.RULE_BASED:
            raise UnsupportedOperationError(
                f"Provider '{selected.name}' does not support generic completion"
            )
        return await selected.complete(
            messages, model=model, temperature=temperature if temperature is not None else 0.3
        )

    async def aclose(self) -> None:
        """Close network clients held by remote providers."""
        for provider in self._providers.values():
            if provider.kind is ProviderKind.REMOTE:
                try:
                    await provider.aclose()
                except Exception as e:
                    logger.error(f"[ProviderManager] Failed to close {provider.name}: {e}")

    async def _with_fallback(
        self,
        provider: NetworkProvider,
        operation: str,
        call: Callable[[], Awaitable[ResultT | None]],
        fallback: Callable[[], ResultT],
    ) -> ResultT:
        try:
            result = await call()
        except Exception as e:
            logger.error(
                f"[ProviderManager] Error with {provider.name} provider during {operation}: {e}"
            )
            return fallback()

        if result is None:
            logger.warning(
                f"[ProviderManager] {provider.name} returned no usable result for {operation}, "
                f"using {FALLBACK_PROVIDER}"
            )
            return fallback()
        return result
