"""Tests for ProviderManager selection, switching and fallback."""

import json
from datetime import datetime

import httpx
import openai
import pytest
from conftest import make_minimax_client, make_openai_client, minimax_body, openai_response

from todo_assistant.api.models import ModificationResult, SummaryReport, Task, TaskDraft
from todo_assistant.config import Config
from todo_assistant.providers.base import ProviderError, ProviderKind, UnsupportedOperationError
from todo_assistant.providers.manager import ProviderManager
from todo_assistant.providers.minimax_provider import MiniMaxProvider
from todo_assistant.providers.openai_provider import OpenAIProvider
from todo_assistant.providers.rule_based import RuleBasedProvider


def _connection_error() -> openai.APIConnectionError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return openai.APIConnectionError(request=request)


@pytest.mark.parametrize(
    ("openai_key", "minimax_key", "expected"),
    [
        (None, None, "simple"),
        ("sk-test", None, "openai"),
        (None, "mm-key", "minimax"),
        ("sk-test", "mm-key", "openai"),
    ],
)
def test_auto_selection_priority(
    openai_key: str | None, minimax_key: str | None, expected: str
) -> None:
    """Test auto selection order openai > minimax > simple for each configuration."""
    config = Config(_env_file=None, openai_api_key=openai_key, minimax_api_key=minimax_key)

    manager = ProviderManager.from_config(config)

    assert manager.get_provider_info().name == expected
    assert "simple" in manager.providers
    assert ("openai" in manager.providers) == bool(openai_key)
    assert ("minimax" in manager.providers) == bool(minimax_key)


def test_auto_selection_skips_unavailable_provider() -> None:
    """Test that auto never selects an adapter reporting unavailable."""
    manager = ProviderManager(
        {"openai": OpenAIProvider(api_key=""), "minimax": MiniMaxProvider(api_key="mm-key")}
    )

    assert manager.get_provider_info().name == "minimax"


def test_rule_based_always_registered() -> None:
    """Test that a manager without providers still has the fallback."""
    manager = ProviderManager()

    info = manager.get_provider_info()
    assert info.name == "simple"
    assert info.available is True
    assert info.models == ["rule-based"]


def test_explicit_default_from_config() -> None:
    """Test that a configured provider name is selected at startup."""
    config = Config(
        _env_file=None, openai_api_key="sk-test", minimax_api_key="mm-key", ai_provider="minimax"
    )

    assert ProviderManager.from_config(config).get_provider_info().name == "minimax"


class StubRuleBased:
    """Rule-based stand-in with canned answers."""

    kind = ProviderKind.RULE_BASED
    name = "simple"

    def is_available(self) -> bool:
        return True

    def get_supported_models(self) -> list[str]:
        return ["stub"]

    async def complete(self, messages, model=None, temperature=0.3):
        raise UnsupportedOperationError("stub")

    def parse_task(self, text: str) -> TaskDraft:
        return TaskDraft(title="from stub")

    def parse_modification(self, text: str, current_task: Task) -> ModificationResult:
        return ModificationResult(explanation="stub")

    def generate_summary(self, tasks: list[Task]) -> SummaryReport:
        return SummaryReport(summary_text="stub")


def test_injected_rule_based_double_is_used_as_fallback() -> None:
    """Test that any rule-based provider can be registered under simple."""
    stub = StubRuleBased()

    manager = ProviderManager({"simple": stub})

    assert manager.fallback is stub
    assert manager.get_provider_info().models == ["stub"]


def test_remote_provider_registered_as_simple_is_rejected() -> None:
    """Test that the fallback slot only accepts a rule-based provider."""
    with pytest.raises(ValueError, match="must be rule-based"):
        ProviderManager({"simple": OpenAIProvider(api_key="sk-test")})


def test_switch_provider_unknown_falls_back_to_simple() -> None:
    """Test that switching to an unknown provider selects simple without raising."""
    manager = ProviderManager({"openai": OpenAIProvider(api_key="sk-test")})
    assert manager.get_provider_info().name == "openai"

    info = manager.switch_provider("nonexistent")

    assert info.name == "simple"
    assert manager.active is manager.fallback


def test_switch_provider_returns_refreshed_info() -> None:
    """Test switching between registered providers."""
    manager = ProviderManager(
        {"openai": OpenAIProvider(api_key="sk-test"), "minimax": MiniMaxProvider(api_key="mm")}
    )

    info = manager.switch_provider("minimax")

    assert info.name == "minimax"
    assert info.available is True
    assert info.models == list(MiniMaxProvider.supported_models)
    assert manager.switch_provider("auto").name == "openai"


def test_get_available_providers() -> None:
    """Test that only available providers are listed."""
    manager = ProviderManager(
        {"openai": OpenAIProvider(api_key=""), "minimax": MiniMaxProvider(api_key="mm-key")}
    )

    names = [info.name for info in manager.get_available_providers()]

    assert names == ["minimax", "simple"]


@pytest.mark.asyncio
async def test_parse_task_remote_success() -> None:
    """Test that a remote draft is returned as-is."""
    answer = {"title": "Standup", "priority": "medium", "tags": ["team"]}
    client = make_openai_client(openai_response(json.dumps(answer)))
    manager = ProviderManager({"openai": OpenAIProvider(api_key="sk-test", client=client)})

    draft = await manager.parse_task("standup")

    assert draft.title == "Standup"
    assert draft.tags == ["team"]


@pytest.mark.asyncio
async def test_parse_task_falls_back_on_transport_error(fixed_now: datetime) -> None:
    """Test that a failing remote provider is masked by the rule-based result."""
    client = make_openai_client(_connection_error())
    manager = ProviderManager(
        {
            "openai": OpenAIProvider(api_key="sk-test", client=client),
            "simple": RuleBasedProvider(now=lambda: fixed_now),
        }
    )

    draft = await manager.parse_task("urgent: call client tomorrow at 3:00")

    assert draft is not None
    assert draft.priority == "high"
    assert draft.due_date == "2026-03-11 03:00"
    client.chat.completions.create.assert_awaited_once()


@pytest.mark.asyncio
async def test_parse_task_falls_back_on_undecodable_answer() -> None:
    """Test that a non-JSON answer is replaced by the rule-based result."""
    client = make_openai_client(openai_response("Sorry, I can't do that."))
    manager = ProviderManager({"openai": OpenAIProvider(api_key="sk-test", client=client)})

    draft = await manager.parse_task("buy milk #errand")

    assert draft.title == "buy milk #errand"
    assert draft.tags == ["errand"]


@pytest.mark.asyncio
async def test_parse_modification_falls_back_on_vendor_error() -> None:
    """Test fallback for modification when MiniMax reports an error code."""
    client = make_minimax_client(
        lambda request: httpx.Response(
            200, json=minimax_body("", status_code=1002, status_msg="rate limited")
        )
    )
    manager = ProviderManager({"minimax": MiniMaxProvider(api_key="mm-key", client=client)})

    result = await manager.parse_modification("make it urgent", Task(id="1", title="Call"))

    assert result.updates.to_fields() == {}
    assert result.explanation == "Understood your modification request"


@pytest.mark.asyncio
async def test_generate_summary_falls_back_and_is_deterministic(
    sample_tasks: list[Task],
) -> None:
    """Test summary fallback and stable completion rate across calls."""
    client = make_openai_client(
        _connection_error(),
        openai_response(json.dumps({"suggestions": ["x"], "summaryText": "y"})),
    )
    manager = ProviderManager({"openai": OpenAIProvider(api_key="sk-test", client=client)})

    first = await manager.generate_summary(sample_tasks)
    second = await manager.generate_summary(sample_tasks)

    assert first.completion_rate == second.completion_rate == "60%"
    assert first.completed_tasks == second.completed_tasks
    assert first.pending_tasks == second.pending_tasks
    assert first.suggestions == ["Keep focused on your pending tasks"]
    assert second.suggestions == ["x"]


@pytest.mark.asyncio
async def test_per_call_override_does_not_change_active() -> None:
    """Test that the provider option applies to one call only."""
    client = make_openai_client(openai_response('{"title": "remote"}'))
    manager = ProviderManager({"openai": OpenAIProvider(api_key="sk-test", client=client)})

    draft = await manager.parse_task("local only", provider="simple")

    assert draft.title == "local only"
    assert manager.get_provider_info().name == "openai"
    client.chat.completions.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_override_uses_active_provider() -> None:
    """Test that an unregistered override name falls back to the active provider."""
    client = make_openai_client(openai_response('{"title": "remote"}'))
    manager = ProviderManager({"openai": OpenAIProvider(api_key="sk-test", client=client)})

    draft = await manager.parse_task("text", provider="missing")

    assert draft.title == "remote"


@pytest.mark.asyncio
async def test_complete_with_only_rule_based_is_unsupported() -> None:
    """Test that raw completion refuses the rule-based provider."""
    manager = ProviderManager()

    with pytest.raises(UnsupportedOperationError):
        await manager.complete([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_complete_propagates_remote_errors() -> None:
    """Test that raw completion has no fallback."""
    client = make_openai_client(_connection_error())
    manager = ProviderManager({"openai": OpenAIProvider(api_key="sk-test", client=client)})

    with pytest.raises(ProviderError):
        await manager.complete([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_complete_passes_options() -> None:
    """Test model and default temperature forwarding."""
    client = make_openai_client(openai_response("pong"))
    manager = ProviderManager({"openai": OpenAIProvider(api_key="sk-test", client=client)})

    result = await manager.complete([{"role": "user", "content": "ping"}], model="gpt-4")

    assert result.content == "pong"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4"
    assert kwargs["temperature"] == 0.3


@pytest.mark.asyncio
async def test_aclose_closes_remote_clients() -> None:
    """Test that closing the manager closes provider clients."""
    client = make_openai_client()
    manager = ProviderManager({"openai": OpenAIProvider(api_key="sk-test", client=client)})

    await manager.aclose()

    client.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_remote_failure_falls_back_to_injected_double() -> None:
    """Test that fallback answers come from the registered rule-based provider."""
    client = make_openai_client(_connection_error(), _connection_error())
    manager = ProviderManager(
        {"openai": OpenAIProvider(api_key="sk-test", client=client), "simple": StubRuleBased()}
    )

    draft = await manager.parse_task("anything")
    summary = await manager.generate_summary([])

    assert draft.title == "from stub"
    assert summary.summary_text == "stub"
    assert (await manager.parse_task("local", provider="simple")).title == "from stub"
