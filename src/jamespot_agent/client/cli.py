"""Console conversation driver for the Jamespot agent."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import (
    Callable,
    List,
    Tuple,
)

from jamespot_agent.agent.agent_loop import (
    AgentLoop,
    TurnAbortedError,
)
from jamespot_agent.common import (
    AnsiColors,
    colored_print,
    truncate,
)
from jamespot_agent.core.schema import Message

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"exit", "quit"}
RULE = "=" * 60


class Mode(str, Enum):
    """How the driver talks to the user; fixed at startup."""

    INTERACTIVE = "interactive"
    PRINT = "print"
    STREAM = "stream"


# ---------------------------------------------------------------------------
# CLI Client
# ---------------------------------------------------------------------------
def get_user_message() -> Tuple[str, bool]:
    """
    Get a message from the user via standard input.

    Returns:
        Tuple of (user_input, success_flag)
        The success_flag is False if input couldn't be read (e.g., Ctrl+C)
    """
    import signal  # pylint: disable=import-outside-toplevel

    # Ensure SIGINT breaks out of slow system calls such as read()
    signal.siginterrupt(signal.SIGINT, True)

    try:
        user_input = input().strip()
        return user_input, True
    except (EOFError, KeyboardInterrupt):
        return "", False


class ConversationDriver:
    """
    Owns the transcript and runs turns through an :class:`AgentLoop`.

    A failed turn is reported and the session goes on; only single-shot mode turns a failure into a
    non-zero exit code.
    """

    def __init__(
        self,
        loop: AgentLoop,
        *,
        system_prompt: str | None = None,
        debug: bool = False,
        reader: Callable[[], Tuple[str, bool]] = get_user_message,
    ) -> None:
        self.loop = loop
        self.debug = debug
        self._read = reader
        self.transcript: List[Message] = []
        if system_prompt:
            self.transcript.append(Message.system(system_prompt))

    async def run(self, mode: Mode, query: str | None = None) -> int:
        if mode is Mode.PRINT:
            return await self.run_once(query)
        return await self.run_interactive(streaming=mode is Mode.STREAM)

    async def run_once(self, query: str | None) -> int:
        """Single-shot: one query, one turn, answer on stdout.  Returns the exit code."""
        if not query or not query.strip():
            colored_print("Error: --print requires a query", AnsiColors.RED)
            return 1
        try:
            turn = await self.loop.run_turn(self.transcript, query.strip())
        except Exception as exc:  # noqa: BLE001 - reported as exit code 1
            self._report_failure(exc)
            return 1
        print(turn.answer)
        return 0

    async def run_interactive(self, streaming: bool = False) -> int:
        """Read-eval-print loop until ``exit``/``quit`` or end of input."""
        colored_print(RULE, AnsiColors.GREEN)
        colored_print("You can now chat with the Jamespot AI Agent", AnsiColors.GREEN)
        colored_print("Type 'exit' or 'quit' to end the conversation", AnsiColors.GREEN)
        colored_print("Type 'debug on' or 'debug off' to toggle debug output", AnsiColors.GREEN)
        colored_print(RULE, AnsiColors.GREEN)

        while True:
            colored_print("\n🧑 You: ", AnsiColors.BLUE, end="")
            user_msg, ok = self._read()
            if not ok:
                break  # Exit if user input couldn't be retrieved (e.g., Ctrl+C)
            command = user_msg.lower()
            if command in EXIT_COMMANDS:
                break
            if command in {"debug on", "debug off"}:
                self.debug = command == "debug on"
                colored_print(f"✓ Debug mode {'enabled' if self.debug else 'disabled'}", AnsiColors.GREEN)
                continue
            if not user_msg:
                continue
            await self.handle_turn(user_msg, streaming=streaming)

        colored_print("\n👋 Goodbye!", AnsiColors.YELLOW)
        return 0

    async def handle_turn(self, user_msg: str, streaming: bool = False) -> bool:
        """Run one turn and print its answer.  Returns ``False`` if the turn failed."""
        if self.debug:
            colored_print(f"Current conversation length: {len(self.transcript) + 1}", AnsiColors.BLUE)
        try:
            if streaming:
                await self._stream_turn(user_msg)
            else:
                colored_print("\n🤔 Thinking...", AnsiColors.BLUE)
                turn = await self.loop.run_turn(self.transcript, user_msg)
                if self.debug:
                    self._dump_messages(turn.messages)
                colored_print(f"Agent: {turn.answer or '(No response)'}", AnsiColors.YELLOW)
        except Exception as exc:  # noqa: BLE001 - one bad turn must not end the session
            self._report_failure(exc)
            return False
        return True

    async def _stream_turn(self, user_msg: str) -> None:
        print("Agent: ", end="", flush=True)
        async for event in self.loop.stream_turn(self.transcript, user_msg):
            if event.kind == "text":
                if event.replace:
                    print("\n", end="")
                print(event.text, end="", flush=True)
            elif event.kind == "tool_call" and event.call is not None:
                args = json.dumps(event.call.args, ensure_ascii=False)
                colored_print(f"\n🔧 {event.call.name}({args})", AnsiColors.GREEN)
            elif event.kind == "tool_result" and event.call is not None:
                colored_print(f"✓ {event.call.name}: {truncate(event.text, 200)}", AnsiColors.GREEN)
        print()
        if self.debug and self.loop.last_turn is not None:
            self._dump_messages(self.loop.last_turn.messages)

    def _dump_messages(self, messages: List[Message]) -> None:
        colored_print("📨 Turn messages:", AnsiColors.BLUE)
        for idx, message in enumerate(messages, start=1):
            summary = message.model_dump(exclude_none=True)
            summary["content"] = truncate(message.content, 100)
            colored_print(f"  {idx}. {json.dumps(summary, ensure_ascii=False)}", AnsiColors.BLUE)

    def _report_failure(self, exc: Exception) -> None:
        if isinstance(exc, TurnAbortedError):
            logger.warning("Turn aborted: %s", exc)
        else:
            logger.exception("Unexpected error during turn")
        colored_print(f"\n❌ Error: {exc}", AnsiColors.RED)
