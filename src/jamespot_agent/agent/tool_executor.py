"""Dispatches tool calls through a :class:`ToolCatalog` and wraps errors."""

import logging
from typing import (
    Any,
    Dict,
)

from pydantic import ValidationError

from jamespot_agent.core.schema import ToolCall
from jamespot_agent.tools import ToolCatalog

logger = logging.getLogger(__name__)


class ToolExecutionError(RuntimeError):
    """Raised when a requested tool cannot run or fails."""


async def invoke_tool(catalog: ToolCatalog, name: str, args: Dict[str, Any] | None = None) -> str:
    """
    Look up *name* in the catalog and invoke it with *args*.

    Parameters
    ----------
    catalog:
        The tools available to this session.
    name:
        The registered tool name.
    args:
        Arguments as sent by the LLM.  If *None*, an empty dict is assumed.

    Returns
    -------
    str
        Whatever the tool body returns.

    Raises
    ------
    ToolExecutionError
        If the tool is missing, its arguments do not validate, or its invocation raises.
    """

    if args is None:
        args = {}

    tool = catalog.get(name)
    if tool is None:
        raise ToolExecutionError(f"Tool '{name}' is not registered.")

    try:
        logger.debug("Executing tool '%s' with args=%s", name, args)
        return await tool.invoke(args)
    except ValidationError as exc:
        # Argument mismatch: give the caller a clean exception.
        logger.warning("Argument error while executing tool '%s': %s", name, exc)
        raise ToolExecutionError(f"Invalid arguments for tool '{name}': {exc}") from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled error in tool '%s'", name)
        raise ToolExecutionError(f"Tool '{name}' raised an error: {exc}") from exc


async def execute_tool(catalog: ToolCatalog, call: ToolCall) -> str:
    """Run *call* and always return a string; failures become ``"Error: ..."`` results."""
    try:
        return await invoke_tool(catalog, call.name, call.args)
    except ToolExecutionError as exc:
        return f"Error: {exc}"
