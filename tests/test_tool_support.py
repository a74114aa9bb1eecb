"""Fail-soft behavior and tracing of the shared tool helpers."""

import json
import logging

import pytest

from conftest import FakeBackendClient
from jamespot_agent.client.backend import (
    BackendError,
    BackendResult,
    LoginError,
)
from jamespot_agent.tools.support import (
    ToolContext,
    call_backend,
    envelope_output,
    format_error,
    run_tool,
    with_prefix,
)


def test_format_error_prefers_backend_message() -> None:
    assert format_error(LoginError(7, "bad credentials")) == "bad credentials"
    assert format_error(ValueError("plain")) == "plain"
    assert format_error(RuntimeError()) == "RuntimeError"


def test_with_prefix() -> None:
    assert with_prefix("123", "user") == "user/123"
    assert with_prefix(123, "user") == "user/123"
    assert with_prefix("user/123", "user") == "user/123"


def test_envelope_output() -> None:
    assert envelope_output(BackendResult(error=0, result={"a": 1}), "failed") == json.dumps({"a": 1}, indent=2)
    assert envelope_output(BackendResult(error=1, errorMsg="not found"), "failed") == "Error: not found"
    assert envelope_output(BackendResult(error=3), "Failed to get group") == "Error: Failed to get group"


@pytest.mark.asyncio
async def test_run_tool_turns_exceptions_into_error_strings(ctx: ToolContext) -> None:
    async def body() -> str:
        raise BackendError("Request 'group.list' failed: timeout")

    output = await run_tool(ctx, "jamespot_list_groups", {}, body)

    assert output == "Error: Request 'group.list' failed: timeout"


@pytest.mark.asyncio
async def test_call_backend_error_envelope(ctx: ToolContext, backend: FakeBackendClient) -> None:
    backend.responses["group.getSpot"] = {"error": 1, "errorMsg": "not found"}

    output = await call_backend(ctx, "jamespot_get_group", "group.getSpot", {"idSpot": "9"}, failure="Failed")

    assert output == "Error: not found"
    assert backend.calls == [("group.getSpot", {"idSpot": "9"})]


@pytest.mark.asyncio
async def test_tracing_only_in_debug_mode(
    ctx: ToolContext, backend: FakeBackendClient, caplog: pytest.LogCaptureFixture
) -> None:
    backend.responses["group.list"] = {"error": 0, "result": ["x" * 600]}
    debug_ctx = ToolContext(client=ctx.client, current_user=ctx.current_user, backend_url=ctx.backend_url, debug=True)

    with caplog.at_level(logging.INFO, logger="jamespot_agent.tools.support"):
        await call_backend(ctx, "jamespot_list_groups", "group.list", failure="Failed")
        assert caplog.records == []

        await call_backend(debug_ctx, "jamespot_list_groups", "group.list", failure="Failed")

    text = caplog.text
    assert "TOOL CALLED: jamespot_list_groups" in text
    assert "API CALL: group.list" in text
    assert "API RESPONSE from group.list" in text
    assert "SUCCESS" in text
    assert "... (truncated)" in text
