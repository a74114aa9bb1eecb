"""
Planner interface for the Jamespot agent.

This module is the only place that *directly* calls an LLM.  Everything else (agent loop, tools,
backend client) stays model-agnostic.

We support three back-ends out of the box:

1. **OpenAI** chat completions (the default).
2. **Safebrain**, an OpenAI-compatible proxy addressed by instance, bot id and group id.
3. **Anthropic** messages API.

Additional providers can be added by subclassing :class:`BasePlanner` and registering via
:func:`register_planner`.  Each planner declares the configuration fields it needs in
``REQUIRED_FIELDS``; they are checked when the planner is constructed, before any request is made.
"""

import json
import logging
from abc import (
    ABC,
    abstractmethod,
)
from enum import Enum
from typing import (
    Any,
    AsyncIterator,
    Callable,
    ClassVar,
    Dict,
    List,
    Sequence,
    Tuple,
    Type,
)

from pydantic import (
    BaseModel,
    ConfigDict,
)

from jamespot_agent.config import (
    Settings,
    settings,
)
from jamespot_agent.core.schema import (
    Message,
    PlannerChunk,
    PlannerReply,
    Role,
    ToolCall,
)
from jamespot_agent.tools import ToolDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_RETRIES = 3


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
class LLMProvider(str, Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    SAFEBRAIN = "safebrain"
    ANTHROPIC = "anthropic"


class PlannerConfigError(ValueError):
    """Raised when the LLM configuration is missing a field or names an unknown provider."""


class LLMConfig(BaseModel):
    """Everything needed to build a planner.  Immutable once built."""

    model_config = ConfigDict(frozen=True)

    provider: LLMProvider = LLMProvider.OPENAI
    model: str | None = None
    temperature: float = 0.0
    max_tokens: int | None = None
    api_key: str | None = None
    base_url: str | None = None
    # Safebrain tenant fields
    instance: str | None = None
    bot_id: str | None = None
    group_id: str | None = None
    # Adapter-level defaults shared by every provider
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES


def llm_config_from_settings(source: Settings | None = None) -> LLMConfig:
    """Map environment settings onto an :class:`LLMConfig`."""
    source = source or settings
    try:
        provider = LLMProvider((source.LLM_PROVIDER or "openai").strip().lower())
    except ValueError as exc:
        raise PlannerConfigError(f"Unsupported LLM provider: {source.LLM_PROVIDER}") from exc

    api_keys = {
        LLMProvider.OPENAI: source.OPENAI_API_KEY,
        LLMProvider.SAFEBRAIN: source.SAFEBRAIN_API_KEY,
        LLMProvider.ANTHROPIC: source.ANTHROPIC_API_KEY,
    }
    model = source.LLM_MODEL
    if provider is LLMProvider.SAFEBRAIN:
        model = model or source.SAFEBRAIN_MODEL

    return LLMConfig(
        provider=provider,
        model=model,
        temperature=source.LLM_TEMPERATURE,
        max_tokens=source.LLM_MAX_TOKENS,
        api_key=api_keys[provider],
        base_url=source.SAFEBRAIN_BASE_URL if provider is LLMProvider.SAFEBRAIN else None,
        instance=source.SAFEBRAIN_INSTANCE,
        bot_id=source.SAFEBRAIN_BOT_ID,
        group_id=source.SAFEBRAIN_GROUP_ID,
    )


def describe_llm_config(config: LLMConfig) -> str:
    """Human-readable summary of *config*; the API key is only reported as set or not set."""
    lines = [
        "LLM Configuration:",
        f"   Provider: {config.provider.value}",
        f"   Model: {config.model or 'default'}",
        f"   Temperature: {config.temperature}",
    ]
    if config.provider is LLMProvider.SAFEBRAIN:
        if config.base_url:
            lines.append(f"   Base URL: {config.base_url}")
        if config.bot_id:
            lines.append(f"   Bot ID: {config.bot_id}")
        if config.group_id:
            lines.append(f"   Group ID: {config.group_id}")
    if config.max_tokens:
        lines.append(f"   Max Tokens: {config.max_tokens}")
    lines.append(f"   API Key: {'✓ Set' if config.api_key else '✗ Not set'}")
    return "\n".join(lines)


def build_safebrain_base_url(instance: str, bot_id: str, group_id: str) -> str:
    """
    Compose the OpenAI-compatible Safebrain endpoint.

    A bare hostname gets ``https://``; an instance that already carries a scheme keeps it.
    """
    host = instance.strip().rstrip("/")
    if "://" not in host:
        host = f"https://{host}"
    return f"{host}/api/v2/bots/{bot_id}/groups/{group_id}"


# ---------------------------------------------------------------------------
# Registry helpers
# ---------------------------------------------------------------------------
_PLANNER_REGISTRY: dict[str, Type["BasePlanner"]] = {}


def register_planner(name: str) -> Callable:
    """Decorator to register a planner class under *name*."""

    def wrapper(cls: Type["BasePlanner"]) -> Type["BasePlanner"]:
        _PLANNER_REGISTRY[name] = cls
        return cls

    return wrapper


def load_planner(config: LLMConfig | None = None) -> "BasePlanner":
    """
    Factory that returns an instantiated planner for *config*.

    Falls back to :func:`llm_config_from_settings` when no config is given.

    Raises
    ------
    PlannerConfigError
        If the provider is not registered or a required field is missing.
    """
    config = config or llm_config_from_settings()
    cls = _PLANNER_REGISTRY.get(config.provider.value)
    if cls is None:
        raise PlannerConfigError(f"Planner '{config.provider.value}' is not registered.")
    return cls(config)


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------
class BasePlanner(ABC):
    """Abstract planner: sends the conversation and tool schemas, returns text and/or tool calls."""

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = ("api_key",)
    DEFAULT_MODEL: ClassVar[str] = ""

    def __init__(self, config: LLMConfig) -> None:
        missing = [field for field in self.REQUIRED_FIELDS if not getattr(config, field)]
        if missing:
            raise PlannerConfigError(
                f"{config.provider.value} configuration is missing: {', '.join(missing)}"
            )
        self.config = config
        self.model = config.model or self.DEFAULT_MODEL
        self._client: Any = None

    @abstractmethod
    def _create_client(self) -> Any:
        """Build the SDK client.  Called lazily on first use."""

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = self._create_client()
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    @abstractmethod
    async def complete(self, messages: Sequence[Message], tools: Sequence[ToolDescriptor]) -> PlannerReply:
        """Return the assistant's reply to *messages*."""

    async def stream(
        self, messages: Sequence[Message], tools: Sequence[ToolDescriptor]
    ) -> AsyncIterator[PlannerChunk]:
        """
        Yield the reply progressively.

        The default implementation does not stream: it yields the complete reply as one final chunk.
        """
        reply = await self.complete(messages, tools)
        yield PlannerChunk(text=reply.content, tool_calls=reply.tool_calls, done=True)


# ---------------------------------------------------------------------------
# OpenAI wire format
# ---------------------------------------------------------------------------
def to_openai_messages(messages: Sequence[Message]) -> List[Dict[str, Any]]:
    converted: List[Dict[str, Any]] = []
    for message in messages:
        if message.role is Role.TOOL:
            converted.append({"role": "tool", "tool_call_id": message.tool_call_id, "content": message.content})
        elif message.role is Role.ASSISTANT and message.tool_calls:
            converted.append(
                {
                    "role": "assistant",
                    "content": message.content or None,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": json.dumps(call.args)},
                        }
                        for call in message.tool_calls
                    ],
                }
            )
        else:
            converted.append({"role": message.role.value, "content": message.content})
    return converted


def to_openai_tools(tools: Sequence[ToolDescriptor]) -> List[Dict[str, Any]]:
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters_schema(),
            },
        }
        for tool in tools
    ]


def _parse_arguments(raw: str | None, tool_name: str) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Could not decode arguments for tool '%s': %s", tool_name, raw)
        return {}
    return args if isinstance(args, dict) else {}


@register_planner(LLMProvider.OPENAI.value)
class OpenAIPlanner(BasePlanner):
    """OpenAI chat-completions planner with native tool calling."""

    DEFAULT_MODEL = "gpt-4"

    def _client_options(self) -> Dict[str, Any]:
        return {"api_key": self.config.api_key}

    def _create_client(self) -> Any:
        from openai import AsyncOpenAI  # pylint: disable=import-outside-toplevel

        return AsyncOpenAI(
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
            **self._client_options(),
        )

    def _request(self, messages: Sequence[Message], tools: Sequence[ToolDescriptor]) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": to_openai_messages(messages),
            "temperature": self.config.temperature,
        }
        if self.config.max_tokens:
            params["max_tokens"] = self.config.max_tokens
        if tools:
            params["tools"] = to_openai_tools(tools)
            params["tool_choice"] = "auto"
        return params

    async def complete(self, messages: Sequence[Message], tools: Sequence[ToolDescriptor]) -> PlannerReply:
        client = self._get_client()
        response = await client.chat.completions.create(**self._request(messages, tools))
        message = response.choices[0].message
        calls = [
            ToolCall(id=tc.id, name=tc.function.name, args=_parse_arguments(tc.function.arguments, tc.function.name))
            for tc in message.tool_calls or []
        ]
        logger.debug("OpenAI planner response: %s (%d tool calls)", message.content, len(calls))
        return PlannerReply(content=message.content or "", tool_calls=calls)

    async def stream(
        self, messages: Sequence[Message], tools: Sequence[ToolDescriptor]
    ) -> AsyncIterator[PlannerChunk]:
        client = self._get_client()
        stream = await client.chat.completions.create(stream=True, **self._request(messages, tools))

        text = ""
        # Tool call fragments arrive keyed by index
        partial_calls: Dict[int, Dict[str, str]] = {}
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            for tc_delta in delta.tool_calls or []:
                entry = partial_calls.setdefault(tc_delta.index, {"id": "", "name": "", "arguments": ""})
                if tc_delta.id:
                    entry["id"] = tc_delta.id
                if tc_delta.function:
                    if tc_delta.function.name:
                        entry["name"] = tc_delta.function.name
                    if tc_delta.function.arguments:
                        entry["arguments"] += tc_delta.function.arguments
            if delta.content:
                text += delta.content
                yield PlannerChunk(text=text)

        calls = [
            ToolCall(id=entry["id"], name=entry["name"], args=_parse_arguments(entry["arguments"], entry["name"]))
            for _, entry in sorted(partial_calls.items())
        ]
        yield PlannerChunk(text=text, tool_calls=calls, done=True)


@register_planner(LLMProvider.SAFEBRAIN.value)
class SafebrainPlanner(OpenAIPlanner):
    """Safebrain proxy: the OpenAI wire format on a per-bot, per-group endpoint."""

    REQUIRED_FIELDS = ("api_key", "instance", "bot_id", "group_id")
    DEFAULT_MODEL = "gpt-4o"

    @property
    def base_url(self) -> str:
        if self.config.base_url:
            return self.config.base_url
        return build_safebrain_base_url(
            str(self.config.instance), str(self.config.bot_id), str(self.config.group_id)
        )

    def _client_options(self) -> Dict[str, Any]:
        logger.info("Using Safebrain endpoint %s", self.base_url)
        return {
            "api_key": self.config.api_key,
            "base_url": self.base_url,
            "default_headers": {"Authorization": f"Bearer {self.config.api_key}"},
        }


# ---------------------------------------------------------------------------
# Anthropic wire format
# ---------------------------------------------------------------------------
def to_anthropic_messages(messages: Sequence[Message]) -> Tuple[str, List[Dict[str, Any]]]:
    """Split out the system prompt and convert the rest; consecutive tool results share one user turn."""
    system_parts: List[str] = []
    converted: List[Dict[str, Any]] = []
    for message in messages:
        if message.role is Role.SYSTEM:
            system_parts.append(message.content)
        elif message.role is Role.TOOL:
            block = {"type": "tool_result", "tool_use_id": message.tool_call_id, "content": message.content}
            previous = converted[-1] if converted else None
            if previous and previous["role"] == "user" and isinstance(previous["content"], list):
                previous["content"].append(block)
            else:
                converted.append({"role": "user", "content": [block]})
        elif message.role is Role.ASSISTANT and message.tool_calls:
            blocks: List[Dict[str, Any]] = []
            if message.content:
                blocks.append({"type": "text", "text": message.content})
            blocks.extend(
                {"type": "tool_use", "id": call.id, "name": call.name, "input": call.args}
                for call in message.tool_calls
            )
            converted.append({"role": "assistant", "content": blocks})
        else:
            converted.append({"role": message.role.value, "content": message.content})
    return "\n\n".join(system_parts), converted


def to_anthropic_tools(tools: Sequence[ToolDescriptor]) -> List[Dict[str, Any]]:
    return [
        {"name": tool.name, "description": tool.description, "input_schema": tool.parameters_schema()}
        for tool in tools
    ]


def _reply_from_anthropic(response: Any) -> PlannerReply:
    text = ""
    calls: List[ToolCall] = []
    for block in response.content:
        if block.type == "text":
            text += block.text
        elif block.type == "tool_use":
            calls.append(ToolCall(id=block.id, name=block.name, args=dict(block.input or {})))
    return PlannerReply(content=text, tool_calls=calls)


@register_planner(LLMProvider.ANTHROPIC.value)
class AnthropicPlanner(BasePlanner):
    """Anthropic Claude-based planner."""

    DEFAULT_MODEL = "claude-3-5-haiku-latest"
    DEFAULT_MAX_TOKENS = 4096

    def _create_client(self) -> Any:
        from anthropic import AsyncAnthropic  # pylint: disable=import-outside-toplevel

        return AsyncAnthropic(
            api_key=self.config.api_key,
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
        )

    def _request(self, messages: Sequence[Message], tools: Sequence[ToolDescriptor]) -> Dict[str, Any]:
        system, converted = to_anthropic_messages(messages)
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": converted,
            "max_tokens": self.config.max_tokens or self.DEFAULT_MAX_TOKENS,
            "temperature": self.config.temperature,
        }
        if system:
            params["system"] = system
        if tools:
            params["tools"] = to_anthropic_tools(tools)
        return params

    async def complete(self, messages: Sequence[Message], tools: Sequence[ToolDescriptor]) -> PlannerReply:
        client = self._get_client()
        response = await client.messages.create(**self._request(messages, tools))
        reply = _reply_from_anthropic(response)
        logger.debug("Anthropic planner response: %s (%d tool calls)", reply.content, len(reply.tool_calls))
        return reply

    async def stream(
        self, messages: Sequence[Message], tools: Sequence[ToolDescriptor]
    ) -> AsyncIterator[PlannerChunk]:
        client = self._get_client()
        async with client.messages.stream(**self._request(messages, tools)) as stream:
            async for event in stream:
                if event.type == "text":
                    yield PlannerChunk(text=event.snapshot)
            final = await stream.get_final_message()
        reply = _reply_from_anthropic(final)
        yield PlannerChunk(text=reply.content, tool_calls=reply.tool_calls, done=True)
