"""Planner configuration, provider construction and wire-format conversion."""

from types import SimpleNamespace
from unittest.mock import (
    AsyncMock,
    MagicMock,
)

import pytest

from jamespot_agent.agent.planner_interface import (
    AnthropicPlanner,
    LLMConfig,
    LLMProvider,
    OpenAIPlanner,
    PlannerConfigError,
    SafebrainPlanner,
    build_safebrain_base_url,
    describe_llm_config,
    llm_config_from_settings,
    load_planner,
    to_anthropic_messages,
    to_openai_messages,
)
from jamespot_agent.config import Settings
from jamespot_agent.core.schema import (
    Message,
    ToolCall,
)


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


# =========================================================================
# Configuration
# =========================================================================


def test_config_from_settings_picks_key_per_provider() -> None:
    config = llm_config_from_settings(
        make_settings(LLM_PROVIDER="Safebrain", SAFEBRAIN_API_KEY="sb", OPENAI_API_KEY="oa", SAFEBRAIN_MODEL="m1")
    )

    assert config.provider is LLMProvider.SAFEBRAIN
    assert config.api_key == "sb"
    assert config.model == "m1"
    assert config.timeout == 60.0
    assert config.max_retries == 3


def test_unknown_provider_is_a_config_error() -> None:
    with pytest.raises(PlannerConfigError, match="Unsupported LLM provider"):
        llm_config_from_settings(make_settings(LLM_PROVIDER="mistral"))


def test_describe_masks_the_key() -> None:
    text = describe_llm_config(LLMConfig(api_key="sk-very-secret", bot_id="b"))

    assert "sk-very-secret" not in text
    assert "API Key: ✓ Set" in text
    assert "Provider: openai" in text


@pytest.mark.parametrize(
    "instance, expected",
    [
        ("acme.safebrain.ai", "https://acme.safebrain.ai/api/v2/bots/b1/groups/g1"),
        ("http://localhost:8080/", "http://localhost:8080/api/v2/bots/b1/groups/g1"),
        ("https://acme.safebrain.ai", "https://acme.safebrain.ai/api/v2/bots/b1/groups/g1"),
    ],
)
def test_safebrain_base_url(instance: str, expected: str) -> None:
    assert build_safebrain_base_url(instance, "b1", "g1") == expected


# =========================================================================
# Construction
# =========================================================================


def test_load_planner_by_provider() -> None:
    assert isinstance(load_planner(LLMConfig(api_key="k")), OpenAIPlanner)
    assert isinstance(load_planner(LLMConfig(provider=LLMProvider.ANTHROPIC, api_key="k")), AnthropicPlanner)


@pytest.mark.parametrize(
    "config, missing",
    [
        (LLMConfig(), "api_key"),
        (LLMConfig(provider=LLMProvider.ANTHROPIC), "api_key"),
        (LLMConfig(provider=LLMProvider.SAFEBRAIN, api_key="k", instance="acme"), "bot_id, group_id"),
    ],
)
def test_missing_required_fields_fail_before_any_client(config: LLMConfig, missing: str) -> None:
    with pytest.raises(PlannerConfigError, match=missing):
        load_planner(config)


def test_defaults_per_provider() -> None:
    assert load_planner(LLMConfig(api_key="k")).model == "gpt-4"
    safebrain = load_planner(
        LLMConfig(provider=LLMProvider.SAFEBRAIN, api_key="k", instance="acme.ai", bot_id="b", group_id="g")
    )
    assert safebrain.model == "gpt-4o"
    assert isinstance(safebrain, SafebrainPlanner)
    assert safebrain.base_url == "https://acme.ai/api/v2/bots/b/groups/g"


def test_safebrain_base_url_override() -> None:
    planner = SafebrainPlanner(
        LLMConfig(
            provider=LLMProvider.SAFEBRAIN,
            api_key="k",
            instance="acme.ai",
            bot_id="b",
            group_id="g",
            base_url="https://proxy.internal/v1",
        )
    )

    assert planner.base_url == "https://proxy.internal/v1"


# =========================================================================
# Wire formats
# =========================================================================

CONVERSATION = [
    Message.system("Be brief."),
    Message.user("List my groups"),
    Message.assistant(
        "",
        [ToolCall(id="c1", name="jamespot_list_groups", args={}), ToolCall(id="c2", name="jamespot_get_group", args={"groupId": "1"})],
    ),
    Message.tool("c1", "[]"),
    Message.tool("c2", "{}"),
    Message.assistant("You have no groups."),
]


def test_openai_messages() -> None:
    converted = to_openai_messages(CONVERSATION)

    assert converted[0] == {"role": "system", "content": "Be brief."}
    assert converted[2]["content"] is None
    assert converted[2]["tool_calls"][1]["function"] == {"name": "jamespot_get_group", "arguments": '{"groupId": "1"}'}
    assert converted[3] == {"role": "tool", "tool_call_id": "c1", "content": "[]"}
    assert converted[5] == {"role": "assistant", "content": "You have no groups."}


def test_anthropic_messages_merge_tool_results() -> None:
    system, converted = to_anthropic_messages(CONVERSATION)

    assert system == "Be brief."
    assert [m["role"] for m in converted] == ["user", "assistant", "user", "assistant"]
    assert converted[1]["content"][0] == {"type": "tool_use", "id": "c1", "name": "jamespot_list_groups", "input": {}}
    assert [block["tool_use_id"] for block in converted[2]["content"]] == ["c1", "c2"]


# =========================================================================
# Provider calls (SDK client mocked)
# =========================================================================


@pytest.mark.asyncio
async def test_openai_complete_parses_tool_calls() -> None:
    planner = OpenAIPlanner(LLMConfig(api_key="k"))
    tool_call = SimpleNamespace(id="c1", function=SimpleNamespace(name="jamespot_list_groups", arguments='{"limit": 5}'))
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=None, tool_calls=[tool_call]))])
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response)
    planner._client = client

    reply = await planner.complete([Message.user("hi")], [])

    assert reply.content == ""
    assert reply.tool_calls == [ToolCall(id="c1", name="jamespot_list_groups", args={"limit": 5})]
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4"
    assert "tools" not in kwargs


@pytest.mark.asyncio
async def test_openai_stream_accumulates_text_and_tool_call_fragments() -> None:
    def chunk(content=None, tool_calls=None):
        return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content, tool_calls=tool_calls))])

    def fragment(index, id=None, name=None, arguments=None):
        return SimpleNamespace(index=index, id=id, function=SimpleNamespace(name=name, arguments=arguments))

    async def stream():
        for item in (
            chunk("Let me "),
            chunk("check."),
            chunk(tool_calls=[fragment(0, id="c1", name="jamespot_get_group", arguments='{"group')]),
            chunk(tool_calls=[fragment(0, arguments='Id": "7"}')]),
            SimpleNamespace(choices=[]),
        ):
            yield item

    planner = OpenAIPlanner(LLMConfig(api_key="k"))
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=stream())
    planner._client = client

    chunks = [c async for c in planner.stream([Message.user("hi")], [])]

    assert [c.text for c in chunks] == ["Let me ", "Let me check.", "Let me check."]
    assert chunks[-1].done
    assert chunks[-1].tool_calls == [ToolCall(id="c1", name="jamespot_get_group", args={"groupId": "7"})]


@pytest.mark.asyncio
async def test_anthropic_complete() -> None:
    planner = AnthropicPlanner(LLMConfig(provider=LLMProvider.ANTHROPIC, api_key="k"))
    response = SimpleNamespace(
        content=[
            SimpleNamespace(type="text", text="Looking."),
            SimpleNamespace(type="tool_use", id="t1", name="jamespot_list_groups", input={"limit": 2}),
        ]
    )
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=response)
    planner._client = client

    reply = await planner.complete([Message.system("sys"), Message.user("hi")], [])

    assert reply.content == "Looking."
    assert reply.tool_calls[0].args == {"limit": 2}
    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["system"] == "sys"
    assert kwargs["max_tokens"] == 4096
    assert kwargs["model"] == "claude-3-5-haiku-latest"
