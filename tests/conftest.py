"""Shared fixtures: an in-memory backend and a scripted planner."""

from typing import (
    Any,
    AsyncIterator,
    Callable,
    Dict,
    List,
    Mapping,
    Sequence,
)

import httpx
import pytest

from jamespot_agent.agent.planner_interface import (
    BasePlanner,
    LLMConfig,
)
from jamespot_agent.client.backend import (
    BackendResult,
    LoginError,
    UserProfile,
)
from jamespot_agent.core.schema import (
    Message,
    PlannerChunk,
    PlannerReply,
)
from jamespot_agent.tools import ToolDescriptor
from jamespot_agent.tools.support import ToolContext

BACKEND_URL = "https://acme.jamespot.test"

Handler = Callable[[Dict[str, Any]], Dict[str, Any]] | Dict[str, Any]


class FakeBackendClient:
    """
    Stands in for :class:`JamespotClient`.

    ``responses`` maps an operation id to an envelope dict, or to a callable receiving the params and
    returning one.  Operations without a response answer ``{"error": 0, "result": None}``.
    """

    def __init__(self, responses: Mapping[str, Handler] | None = None) -> None:
        self.backend_url = BACKEND_URL
        self.responses: Dict[str, Handler] = dict(responses or {})
        self.calls: List[tuple[str, Dict[str, Any]]] = []
        self.fetches: List[tuple[str, str, Dict[str, Any]]] = []
        self.login_error: LoginError | None = None
        self.logins = 0
        self.closed = False

    async def __aenter__(self) -> "FakeBackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.closed = True

    async def call(self, operation: str, params: Mapping[str, Any] | None = None) -> BackendResult:
        payload = dict(params or {})
        self.calls.append((operation, payload))
        handler = self.responses.get(operation, {"error": 0, "result": None})
        envelope = handler(payload) if callable(handler) else handler
        return BackendResult.model_validate(envelope)

    async def fetch(self, path: str, *, method: str = "GET", **kwargs: Any) -> httpx.Response:
        self.fetches.append((method, path, kwargs))
        return httpx.Response(200, request=httpx.Request(method, f"{BACKEND_URL}{path}"))

    async def login(self, email: str, password: str) -> UserProfile:
        self.logins += 1
        if self.login_error is not None:
            raise self.login_error
        return UserProfile(id=42, firstname="Ada", lastname="Lovelace", uri="user/42")

    def operations(self) -> List[str]:
        return [operation for operation, _ in self.calls]


class ScriptedPlanner(BasePlanner):
    """Planner that replays a fixed list of replies and records what it was sent."""

    REQUIRED_FIELDS = ()

    def __init__(self, replies: Sequence[PlannerReply | Exception] = ()) -> None:
        super().__init__(LLMConfig())
        self.replies = list(replies)
        self.requests: List[List[Message]] = []

    def _create_client(self) -> Any:
        return None

    async def complete(self, messages: Sequence[Message], tools: Sequence[ToolDescriptor]) -> PlannerReply:
        self.requests.append(list(messages))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class StreamingPlanner(ScriptedPlanner):
    """Streams each scripted reply as a list of accumulated-text snapshots."""

    def __init__(self, snapshots: Sequence[Sequence[str]], replies: Sequence[PlannerReply]) -> None:
        super().__init__(replies)
        self.snapshots = [list(s) for s in snapshots]

    async def stream(
        self, messages: Sequence[Message], tools: Sequence[ToolDescriptor]
    ) -> AsyncIterator[PlannerChunk]:
        reply = await self.complete(messages, tools)
        for text in self.snapshots.pop(0):
            yield PlannerChunk(text=text)
        yield PlannerChunk(text=reply.content, tool_calls=reply.tool_calls, done=True)


@pytest.fixture
def backend() -> FakeBackendClient:
    return FakeBackendClient()


@pytest.fixture
def current_user() -> UserProfile:
    return UserProfile(id=42, firstname="Ada", lastname="Lovelace", uri="user/42")


@pytest.fixture
def ctx(backend: FakeBackendClient, current_user: UserProfile) -> ToolContext:
    return ToolContext(client=backend, current_user=current_user, backend_url=BACKEND_URL)  # type: ignore[arg-type]
