"""
Main orchestration loop for the Jamespot agent.

One turn runs a small state machine::

    AWAITING_LLM --(tool calls)--> EXECUTING_TOOLS --(all results appended)--> AWAITING_LLM
    AWAITING_LLM --(plain answer)--> DONE
    any state --(roundtrip ceiling / LLM failure)--> ABORTED

The caller's transcript receives the user message when the turn starts and exactly one assistant
message when it completes with a non-empty answer.  Intermediate tool-call requests and tool results live in the turn's
working sequence, which is sent to the LLM on every roundtrip after the transcript.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import (
    AsyncIterator,
    List,
    Tuple,
)

from jamespot_agent.agent.planner_interface import BasePlanner
from jamespot_agent.agent.tool_executor import execute_tool
from jamespot_agent.core.schema import (
    AgentTurn,
    Message,
    PlannerReply,
    TurnEvent,
)
from jamespot_agent.tools import ToolCatalog

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDTRIPS = 25


class LoopState(str, Enum):
    AWAITING_LLM = "awaiting_llm"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    ABORTED = "aborted"


class TurnAbortedError(RuntimeError):
    """The current turn could not produce an answer.  The session itself is still usable."""


class RoundtripLimitError(TurnAbortedError):
    """The LLM kept requesting tools past the roundtrip ceiling."""


class PlannerCallError(TurnAbortedError):
    """The LLM provider failed (transport, authentication, rate limit, ...)."""


def merge_partial(shown: str, current: str) -> Tuple[str, bool]:
    """
    Work out what to display when the accumulated text moves from *shown* to *current*.

    Returns ``(text, replaced)``.  When *current* extends *shown*, ``text`` is only the new suffix.
    Otherwise *current* is a correction and is returned whole with ``replaced`` set.
    """
    if current.startswith(shown):
        return current[len(shown) :], False
    return current, True


class AgentLoop:
    """Runs turns against one planner and one tool catalog."""

    def __init__(
        self,
        planner: BasePlanner,
        catalog: ToolCatalog,
        max_roundtrips: int = DEFAULT_MAX_ROUNDTRIPS,
    ) -> None:
        if max_roundtrips < 1:
            raise ValueError("max_roundtrips must be at least 1")
        self.planner = planner
        self.catalog = catalog
        self.max_roundtrips = max_roundtrips
        self.state: LoopState | None = None
        self.last_turn: AgentTurn | None = None

    async def run_turn(self, transcript: List[Message], user_input: str) -> AgentTurn:
        """
        Run one turn to completion.

        Raises
        ------
        TurnAbortedError
            If the roundtrip ceiling is hit or the LLM call fails.
        """
        async for _ in self._drive(transcript, user_input, streaming=False):
            pass
        assert self.last_turn is not None
        return self.last_turn

    async def stream_turn(self, transcript: List[Message], user_input: str) -> AsyncIterator[TurnEvent]:
        """Same as :meth:`run_turn`, yielding text fragments and tool notices as they happen."""
        async for event in self._drive(transcript, user_input, streaming=True):
            yield event

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _drive(
        self, transcript: List[Message], user_input: str, *, streaming: bool
    ) -> AsyncIterator[TurnEvent]:
        self.last_turn = None
        transcript.append(Message.user(user_input))
        working: List[Message] = []
        tools = list(self.catalog)

        for roundtrip in range(1, self.max_roundtrips + 1):
            self.state = LoopState.AWAITING_LLM
            messages = [*transcript, *working]
            logger.debug("Roundtrip %d: sending %d messages", roundtrip, len(messages))

            if streaming:
                reply = PlannerReply()
                async for event in self._stream_reply(messages, tools, reply):
                    yield event
            else:
                reply = await self._complete_reply(messages, tools)

            if not reply.tool_calls:
                self.state = LoopState.DONE
                # Some providers reject empty assistant messages on later requests
                if reply.content:
                    transcript.append(Message.assistant(reply.content))
                self.last_turn = AgentTurn(
                    user_message=user_input,
                    answer=reply.content,
                    roundtrips=roundtrip,
                    messages=working,
                )
                return

            self.state = LoopState.EXECUTING_TOOLS
            logger.info(
                "Planner returned %d tool calls: %s",
                len(reply.tool_calls),
                [call.name for call in reply.tool_calls],
            )
            working.append(Message.assistant(reply.content, reply.tool_calls))
            # Sequential, so results land in request order
            for call in reply.tool_calls:
                yield TurnEvent(kind="tool_call", call=call)
                output = await execute_tool(self.catalog, call)
                working.append(Message.tool(call.id, output))
                yield TurnEvent(kind="tool_result", text=output, call=call)

        self.state = LoopState.ABORTED
        raise RoundtripLimitError(
            f"Stopped after {self.max_roundtrips} LLM roundtrips without a final answer."
        )

    async def _complete_reply(self, messages: List[Message], tools: list) -> PlannerReply:
        try:
            return await self.planner.complete(messages, tools)
        except Exception as exc:  # noqa: BLE001 - any provider failure ends only this turn
            self.state = LoopState.ABORTED
            logger.error("LLM call failed: %s", exc)
            raise PlannerCallError(f"LLM call failed: {exc}") from exc

    async def _stream_reply(
        self, messages: List[Message], tools: list, reply: PlannerReply
    ) -> AsyncIterator[TurnEvent]:
        """Stream one roundtrip, filling *reply* in place with the final text and tool calls."""
        shown = ""
        try:
            async for chunk in self.planner.stream(messages, tools):
                text, replaced = merge_partial(shown, chunk.text)
                if text or replaced:
                    shown = chunk.text
                    yield TurnEvent(kind="text", text=text, replace=replaced)
                if chunk.done:
                    reply.tool_calls = list(chunk.tool_calls)
        except Exception as exc:  # noqa: BLE001 - any provider failure ends only this turn
            self.state = LoopState.ABORTED
            logger.error("LLM stream failed: %s", exc)
            raise PlannerCallError(f"LLM call failed: {exc}") from exc
        reply.content = shown
