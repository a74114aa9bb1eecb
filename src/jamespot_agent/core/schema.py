"""
Schema definitions for planner <-> agent <-> tool messages.

These data models serve as the contract between the planner LLM, the orchestration loop, and
individual tools.  We keep them separate from runtime logic so they can be imported anywhere without
side-effects.
"""

from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Literal,
    Optional,
)

from pydantic import (
    BaseModel,
    Field,
)


class Role(str, Enum):
    """Author of a conversation message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolCall(BaseModel):
    """A call that the planner wants the agent to execute."""

    id: str = Field(..., description="Provider-issued call id, echoed back in the tool result")
    name: str = Field(..., description="Registered tool name")
    args: Dict[str, Any] = Field(default_factory=dict, description="Keyword arguments for the tool")


class Message(BaseModel):
    """One entry of the conversation transcript."""

    role: Role
    content: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)
    tool_call_id: Optional[str] = None  # set when role is ``tool``

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str, tool_calls: List[ToolCall] | None = None) -> "Message":
        return cls(role=Role.ASSISTANT, content=content, tool_calls=tool_calls or [])

    @classmethod
    def tool(cls, call_id: str, content: str) -> "Message":
        return cls(role=Role.TOOL, content=content, tool_call_id=call_id)


class PlannerReply(BaseModel):
    """A complete (non-streamed) planner response."""

    content: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)


class PlannerChunk(BaseModel):
    """
    A streamed planner update.

    ``text`` is the accumulated assistant text so far, not a delta.  Tool calls are only known once
    the stream completes, so they ride on the final chunk.
    """

    text: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)
    done: bool = False


class TurnEvent(BaseModel):
    """Progress notice emitted by the streaming agent loop."""

    kind: Literal["text", "tool_call", "tool_result"]
    text: str = ""
    replace: bool = False  # text is a correction, not an extension of what was shown
    call: Optional[ToolCall] = None


class AgentTurn(BaseModel):
    """A single completed turn in the agent loop (for display / debugging)."""

    user_message: str
    answer: str
    roundtrips: int
    messages: List[Message] = Field(default_factory=list)  # turn-local working sequence
