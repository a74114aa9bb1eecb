"""
Jamespot agent entry point.

This file handles startup concerns (arg-parsing, env setup, logging), builds the LLM planner and the
tool catalog, and hands over to the conversation driver.
"""

import argparse
import asyncio
import logging
import sys

from jamespot_agent.agent.agent_loop import AgentLoop
from jamespot_agent.agent.planner_interface import (
    PlannerConfigError,
    describe_llm_config,
    llm_config_from_settings,
    load_planner,
)
from jamespot_agent.client.backend import (
    BackendError,
    JamespotClient,
    LoginError,
)
from jamespot_agent.client.cli import (
    ConversationDriver,
    Mode,
)
from jamespot_agent.common import (
    AnsiColors,
    colored_print,
)
from jamespot_agent.config import (
    Settings,
    settings,
)
from jamespot_agent.tools.catalog import build_tool_catalog

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stdout,
    )
    # SDK request logging is noise next to our own tracing
    for noisy in ("httpx", "openai", "anthropic"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chat with the Jamespot AI agent")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Trace tool inputs, backend calls and tool outputs",
    )
    parser.add_argument(
        "-p",
        "--print",
        nargs="?",
        const="",
        default=None,
        metavar="QUERY",
        help="Answer a single query and exit (exit code 0 on success, 1 on failure)",
    )
    parser.add_argument(
        "--stream",
        action="store_true",
        help="Interactive mode with incremental output and tool notices",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        type=str.lower,
        default=settings.LOG_LEVEL,
        help="Logging level (default from env: %(default)s)",
    )
    return parser


def _select_mode(args: argparse.Namespace) -> Mode:
    if args.print is not None:
        return Mode.PRINT
    if args.stream:
        return Mode.STREAM
    return Mode.INTERACTIVE


async def _run(args: argparse.Namespace) -> int:
    mode = _select_mode(args)
    if mode is Mode.PRINT and not args.print.strip():
        colored_print("Error: --print requires a query", AnsiColors.RED)
        return 1

    if not settings.JAMESPOT_URL:
        colored_print("Error: JAMESPOT_URL is not set", AnsiColors.RED)
        return 1

    colored_print("🚀 Starting Jamespot AI Agent...", AnsiColors.GREEN)
    if args.debug:
        colored_print("⚠️  DEBUG MODE ENABLED", AnsiColors.YELLOW)

    # Provider configuration is checked before anything touches the network
    try:
        llm_config = llm_config_from_settings()
        planner = load_planner(llm_config)
    except PlannerConfigError as exc:
        logger.error("Invalid LLM configuration: %s", exc)
        colored_print(f"Error initializing LLM: {exc}", AnsiColors.RED)
        return 1

    try:
        async with JamespotClient(settings.JAMESPOT_URL) as client:
            try:
                catalog = await build_tool_catalog(
                    client,
                    email=settings.JAMESPOT_EMAIL,
                    password=settings.JAMESPOT_PASSWORD,
                    debug=args.debug,
                    unsplash_access_key=settings.UNSPLASH_ACCESS_KEY,
                )
            except (LoginError, BackendError) as exc:
                logger.error("Startup failed: %s", exc)
                colored_print(f"Error initializing agent: {exc}", AnsiColors.RED)
                return 1

            colored_print(f"✓ Created {len(catalog)} tools", AnsiColors.GREEN)
            print(describe_llm_config(llm_config))

            loop = AgentLoop(planner, catalog, max_roundtrips=settings.LLM_MAX_ROUNDTRIPS)
            driver = ConversationDriver(loop, system_prompt=settings.SYSTEM_PROMPT, debug=args.debug)
            return await driver.run(mode, args.print)
    finally:
        await planner.aclose()


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the Jamespot agent.

    Exit codes: 0 on a normal end or a successful single-shot query; 1 on a startup failure (login,
    LLM configuration) or a failed or malformed single-shot query.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _build_parser().parse_args(argv)

    # Override log level setting with command-line argument
    settings.LOG_LEVEL = "debug" if args.debug else args.log_level
    _init_logging(settings.LOG_LEVEL)

    secrets = {name for name in Settings.model_fields if name.endswith(("_PASSWORD", "_KEY", "_TOKEN"))}
    logger.debug("Settings: %s", settings.model_dump(exclude=secrets))

    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
