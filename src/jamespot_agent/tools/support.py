"""
Helpers shared by every tool body: error formatting, debug tracing and the backend-call wrapper.

Tools never raise into the agent loop.  :func:`run_tool` is the boundary that turns any failure into
an ``"Error: ..."`` string the LLM can read and react to.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Mapping,
)

from jamespot_agent.client.backend import (
    BackendResult,
    JamespotClient,
    UserProfile,
)
from jamespot_agent.common import truncate

logger = logging.getLogger(__name__)

RULE = "=" * 80


@dataclass(frozen=True)
class ToolContext:
    """What every tool body captures: the shared session, the signed-in user and the debug flag."""

    client: JamespotClient
    current_user: UserProfile
    backend_url: str
    debug: bool = False
    unsplash_access_key: str | None = None


def format_error(error: BaseException) -> str:
    """Best human-readable message for *error*."""
    message = getattr(error, "error_msg", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or error.__class__.__name__


def to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def with_prefix(value: str | int, prefix: str) -> str:
    """Turn ``"123"`` into ``"user/123"`` while leaving ``"user/123"`` alone."""
    text = str(value)
    return text if text.startswith(f"{prefix}/") else f"{prefix}/{text}"


# ---------------------------------------------------------------------------
# Debug tracing
# ---------------------------------------------------------------------------
def trace_input(ctx: ToolContext, tool_name: str, params: Any) -> None:
    if not ctx.debug:
        return
    logger.info("\n%s\nTOOL CALLED: %s\n%s\nINPUT (received from LLM):\n%s", RULE, tool_name, RULE, to_json(params))


def trace_output(ctx: ToolContext, tool_name: str, output: str) -> None:
    if not ctx.debug:
        return
    logger.info("OUTPUT of %s (returned to LLM):\n%s\n%s", tool_name, truncate(output), RULE)


def trace_api_call(ctx: ToolContext, operation: str, params: Mapping[str, Any] | None) -> None:
    if not ctx.debug:
        return
    if params:
        logger.info("API CALL: %s\nParameters: %s", operation, to_json(params))
    else:
        logger.info("API CALL: %s", operation)


def trace_api_response(ctx: ToolContext, operation: str, result: Any, elapsed_ms: float | None = None) -> None:
    if not ctx.debug:
        return
    status = ""
    if isinstance(result, BackendResult):
        status = "SUCCESS" if result.ok else f"ERROR ({result.error_msg})"
        result = result.model_dump(by_alias=True)
    timing = f" in {elapsed_ms:.0f}ms" if elapsed_ms is not None else ""
    logger.info("API RESPONSE from %s%s %s\n%s", operation, timing, status, to_json(result))


# ---------------------------------------------------------------------------
# Execution helpers
# ---------------------------------------------------------------------------
async def run_tool(
    ctx: ToolContext,
    tool_name: str,
    inputs: Any,
    body: Callable[[], Awaitable[str]],
) -> str:
    """Run *body*, converting any exception into an error string."""
    trace_input(ctx, tool_name, inputs)
    try:
        output = await body()
    except Exception as exc:  # noqa: BLE001 - the LLM must see tool failures, not the loop
        logger.warning("Tool '%s' failed: %s", tool_name, exc)
        output = f"Error: {format_error(exc)}"
    trace_output(ctx, tool_name, output)
    return output


async def backend_call(ctx: ToolContext, operation: str, params: Mapping[str, Any] | None = None) -> BackendResult:
    """Call the backend with tracing and timing."""
    trace_api_call(ctx, operation, params)
    started = time.perf_counter()
    result = await ctx.client.call(operation, params)
    trace_api_response(ctx, operation, result, (time.perf_counter() - started) * 1000)
    return result


def envelope_output(result: BackendResult, failure: str, render: Callable[[Any], str] = to_json) -> str:
    """Render a successful envelope, or the backend's error message."""
    if result.ok:
        return render(result.result)
    return f"Error: {result.error_msg or failure}"


async def call_backend(
    ctx: ToolContext,
    tool_name: str,
    operation: str,
    params: Mapping[str, Any] | None = None,
    *,
    failure: str,
    render: Callable[[Any], str] = to_json,
) -> str:
    """The common tool shape: one backend call, envelope rendered or its error reported."""

    async def body() -> str:
        return envelope_output(await backend_call(ctx, operation, params), failure, render)

    return await run_tool(ctx, tool_name, params or {}, body)
