"""
Basic sanity tests for the tool executor.

Run with:
$ pytest -q
"""

import pytest
from pydantic import Field

from jamespot_agent.agent.tool_executor import (
    ToolExecutionError,
    execute_tool,
    invoke_tool,
)
from jamespot_agent.core.schema import ToolCall
from jamespot_agent.tools import (
    ToolArgs,
    ToolCatalog,
    ToolDescriptor,
)


class AddArgs(ToolArgs):
    a: int = Field(..., description="First operand")
    b: int = Field(..., description="Second operand")


# This is a stub tool for testing purposes.
async def _add(args: AddArgs) -> str:
    """Return the sum of two integers (used only for tests)."""

    return str(args.a + args.b)


async def _explode(_: AddArgs) -> str:
    raise RuntimeError("boom")


@pytest.fixture
def catalog() -> ToolCatalog:
    return ToolCatalog(
        [
            ToolDescriptor("add", "Add two numbers", AddArgs, _add),
            ToolDescriptor("explode", "Always fails", AddArgs, _explode),
        ]
    )


@pytest.mark.asyncio
async def test_invoke_tool_success(catalog: ToolCatalog) -> None:
    """Executor should return the correct value when the tool is valid."""

    assert await invoke_tool(catalog, "add", {"a": 2, "b": 3}) == "5"


@pytest.mark.asyncio
async def test_invoke_tool_missing(catalog: ToolCatalog) -> None:
    """Executor should raise *ToolExecutionError* for an unknown tool."""

    with pytest.raises(ToolExecutionError, match="not_a_tool"):
        await invoke_tool(catalog, "not_a_tool", {})


@pytest.mark.asyncio
async def test_invoke_tool_bad_args(catalog: ToolCatalog) -> None:
    """Executor should raise *ToolExecutionError* for wrong arguments."""

    with pytest.raises(ToolExecutionError, match="Invalid arguments"):
        await invoke_tool(catalog, "add", {"a": 2})  # missing 'b'


@pytest.mark.asyncio
async def test_invoke_tool_wraps_body_errors(catalog: ToolCatalog) -> None:
    with pytest.raises(ToolExecutionError, match="boom"):
        await invoke_tool(catalog, "explode", {"a": 1, "b": 1})


@pytest.mark.asyncio
async def test_execute_tool_reports_unknown_tool_as_result(catalog: ToolCatalog) -> None:
    """An unknown tool name becomes an error result, never an exception."""

    output = await execute_tool(catalog, ToolCall(id="c1", name="jamespot_frobnicate", args={}))

    assert output.startswith("Error: ")
    assert "jamespot_frobnicate" in output


@pytest.mark.asyncio
async def test_execute_tool_success(catalog: ToolCatalog) -> None:
    assert await execute_tool(catalog, ToolCall(id="c1", name="add", args={"a": 1, "b": 1})) == "2"
