"""Conversation driver modes and per-turn error containment."""

from typing import (
    Iterable,
    List,
    Tuple,
)

import pytest

from conftest import (
    FakeBackendClient,
    ScriptedPlanner,
    StreamingPlanner,
)
from jamespot_agent import main as entry
from jamespot_agent.agent.agent_loop import AgentLoop
from jamespot_agent.client.backend import LoginError
from jamespot_agent.client.cli import (
    ConversationDriver,
    Mode,
)
from jamespot_agent.config import (
    Settings,
    settings,
)
from jamespot_agent.core.schema import (
    PlannerReply,
    Role,
)
from jamespot_agent.main import (
    _build_parser,
    _run,
    _select_mode,
)
from jamespot_agent.tools import ToolCatalog


def scripted_input(lines: Iterable[str]):
    """Reader returning *lines* one by one, then end of input."""
    pending: List[str] = list(lines)

    def read() -> Tuple[str, bool]:
        if not pending:
            return "", False
        return pending.pop(0).strip(), True

    return read


def make_driver(planner, lines: Iterable[str] = (), **kwargs) -> ConversationDriver:
    loop = AgentLoop(planner, ToolCatalog())
    return ConversationDriver(loop, reader=scripted_input(lines), **kwargs)


def test_system_prompt_seeds_transcript() -> None:
    driver = make_driver(ScriptedPlanner([PlannerReply(content="ok")]), system_prompt="You help with Jamespot.")

    assert len(driver.transcript) == 1
    assert driver.transcript[0].role is Role.SYSTEM


@pytest.mark.asyncio
async def test_interactive_commands(capsys: pytest.CaptureFixture) -> None:
    planner = ScriptedPlanner([PlannerReply(content="Hello!")])
    driver = make_driver(planner, ["", "debug on", "hi", "debug off", "QUIT", "never read"])

    code = await driver.run(Mode.INTERACTIVE)

    assert code == 0
    # Empty input and debug toggles do not consume a turn
    assert len(planner.requests) == 1
    assert driver.debug is False
    out = capsys.readouterr().out
    assert "Agent: Hello!" in out
    assert "Debug mode enabled" in out
    assert "Goodbye" in out


@pytest.mark.asyncio
async def test_failed_turn_does_not_end_session(capsys: pytest.CaptureFixture) -> None:
    planner = ScriptedPlanner([RuntimeError("provider down"), PlannerReply(content="Recovered")])
    driver = make_driver(planner, ["first", "second", "exit"])

    code = await driver.run(Mode.INTERACTIVE)

    assert code == 0
    out = capsys.readouterr().out
    assert "Error: LLM call failed: provider down" in out
    assert "Agent: Recovered" in out
    assert [m.content for m in driver.transcript] == ["first", "second", "Recovered"]


@pytest.mark.asyncio
async def test_print_mode_success(capsys: pytest.CaptureFixture) -> None:
    driver = make_driver(ScriptedPlanner([PlannerReply(content="42 groups")]))

    assert await driver.run(Mode.PRINT, "How many groups?") == 0
    assert capsys.readouterr().out.strip().endswith("42 groups")


@pytest.mark.asyncio
async def test_print_mode_failure_and_missing_query() -> None:
    failing = make_driver(ScriptedPlanner([RuntimeError("boom")]))
    assert await failing.run(Mode.PRINT, "hello") == 1

    planner = ScriptedPlanner([PlannerReply(content="unused")])
    assert await make_driver(planner).run(Mode.PRINT, "   ") == 1
    assert planner.requests == []


@pytest.mark.asyncio
async def test_stream_mode_prints_incremental_text(capsys: pytest.CaptureFixture) -> None:
    planner = StreamingPlanner([["Hel", "Hello"]], [PlannerReply(content="Hello")])
    driver = make_driver(planner, ["hi", "exit"])

    assert await driver.run(Mode.STREAM) == 0
    assert "Agent: Hello" in capsys.readouterr().out
    assert driver.transcript[-1].content == "Hello"


@pytest.mark.parametrize(
    "argv, mode, query",
    [
        ([], Mode.INTERACTIVE, None),
        (["--stream"], Mode.STREAM, None),
        (["-p", "list my groups"], Mode.PRINT, "list my groups"),
        (["--print"], Mode.PRINT, ""),
    ],
)
def test_argument_parsing(argv: List[str], mode: Mode, query: str | None) -> None:
    args = _build_parser().parse_args(argv)

    assert _select_mode(args) is mode
    assert args.print == query


# =========================================================================
# Startup and exit codes
# =========================================================================


@pytest.fixture
def startup(monkeypatch: pytest.MonkeyPatch):
    """Point the entry point at an in-memory backend and record every agent loop it builds."""
    backend = FakeBackendClient()
    loops: List[AgentLoop] = []

    def record_loop(*args, **kwargs) -> AgentLoop:
        loop = AgentLoop(*args, **kwargs)
        loops.append(loop)
        return loop

    monkeypatch.setattr(settings, "JAMESPOT_URL", backend.backend_url)
    monkeypatch.setattr(settings, "JAMESPOT_EMAIL", "ada@acme.test")
    monkeypatch.setattr(settings, "JAMESPOT_PASSWORD", "secret")
    monkeypatch.setattr(settings, "LLM_PROVIDER", "openai")
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(entry, "JamespotClient", lambda url: backend)
    monkeypatch.setattr(entry, "AgentLoop", record_loop)
    return backend, loops


@pytest.mark.asyncio
async def test_login_failure_exits_before_the_loop(startup, capsys: pytest.CaptureFixture) -> None:
    backend, loops = startup
    backend.login_error = LoginError(7, "bad credentials")

    code = await _run(_build_parser().parse_args(["-p", "list my groups"]))

    assert code == 1
    assert backend.logins == 1
    assert loops == []
    assert "bad credentials" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_bad_llm_configuration_exits_before_login(startup, monkeypatch: pytest.MonkeyPatch) -> None:
    backend, loops = startup
    monkeypatch.setattr(settings, "LLM_PROVIDER", "mistral")

    assert await _run(_build_parser().parse_args([])) == 1
    assert backend.logins == 0
    assert loops == []


@pytest.mark.asyncio
async def test_missing_backend_url_exits(startup, monkeypatch: pytest.MonkeyPatch) -> None:
    backend, loops = startup
    monkeypatch.setattr(settings, "JAMESPOT_URL", "")

    assert await _run(_build_parser().parse_args([])) == 1
    assert backend.logins == 0
    assert loops == []


@pytest.mark.asyncio
async def test_blank_print_query_exits(startup) -> None:
    backend, loops = startup

    assert await _run(_build_parser().parse_args(["-p", "  "])) == 1
    assert await _run(_build_parser().parse_args(["--print"])) == 1
    assert backend.logins == 0
    assert loops == []


@pytest.mark.asyncio
async def test_print_query_runs_one_turn(startup, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    backend, loops = startup
    planner = ScriptedPlanner([PlannerReply(content="You are in 3 groups.")])
    monkeypatch.setattr(entry, "load_planner", lambda config: planner)

    code = await _run(_build_parser().parse_args(["-p", "How many groups am I in?"]))

    assert code == 0
    assert backend.logins == 1
    assert backend.closed
    assert len(loops) == 1
    assert len(planner.requests) == 1
    out = capsys.readouterr().out
    assert "Login successful" in out
    assert out.rstrip().endswith("You are in 3 groups.")


def test_settings_declare_only_consumed_backend_fields() -> None:
    backend_fields = {name for name in Settings.model_fields if name.startswith("JAMESPOT_")}

    assert backend_fields == {"JAMESPOT_URL", "JAMESPOT_EMAIL", "JAMESPOT_PASSWORD"}
