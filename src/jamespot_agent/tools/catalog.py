"""
Builds the full tool catalog for one authenticated Jamespot session.

Login happens exactly once, here.  Every capability group receives the same :class:`ToolContext`, so
all tool bodies share the session cookie held by the client and none of them re-authenticates.
"""

import logging
from typing import (
    Callable,
    List,
    Sequence,
)

from jamespot_agent.client.backend import JamespotClient
from jamespot_agent.common import (
    AnsiColors,
    colored_print,
)
from jamespot_agent.tools import (
    ToolCatalog,
    ToolDescriptor,
)
from jamespot_agent.tools.application_tools import build_application_tools
from jamespot_agent.tools.content_tools import build_content_tools
from jamespot_agent.tools.file_tools import build_file_tools
from jamespot_agent.tools.group_tools import build_group_tools
from jamespot_agent.tools.image_search_tools import build_image_search_tools
from jamespot_agent.tools.meeting_tools import build_meeting_tools
from jamespot_agent.tools.messenger_tools import build_messenger_tools
from jamespot_agent.tools.network_tools import build_network_tools
from jamespot_agent.tools.social_event_tools import build_social_event_tools
from jamespot_agent.tools.support import ToolContext
from jamespot_agent.tools.user_tools import build_user_tools
from jamespot_agent.tools.utility_tools import build_utility_tools

logger = logging.getLogger(__name__)

GroupBuilder = Callable[[ToolContext], List[ToolDescriptor]]

# Registration order is the order the LLM sees the tools in
TOOL_GROUPS: Sequence[GroupBuilder] = (
    build_utility_tools,
    build_user_tools,
    build_group_tools,
    build_content_tools,
    build_messenger_tools,
    build_application_tools,
    build_image_search_tools,
    build_file_tools,
    build_network_tools,
    build_social_event_tools,
    build_meeting_tools,
)


def assemble_catalog(ctx: ToolContext, groups: Sequence[GroupBuilder] = TOOL_GROUPS) -> ToolCatalog:
    """Build every capability group against *ctx* and concatenate them in order."""
    catalog = ToolCatalog()
    for build in groups:
        tools = build(ctx)
        logger.debug("%s produced %d tools", build.__name__, len(tools))
        catalog.extend(tools)
    return catalog


async def build_tool_catalog(
    client: JamespotClient,
    *,
    email: str,
    password: str,
    debug: bool = False,
    unsplash_access_key: str | None = None,
    groups: Sequence[GroupBuilder] = TOOL_GROUPS,
) -> ToolCatalog:
    """
    Log in and build the catalog.

    Raises
    ------
    jamespot_agent.client.backend.LoginError
        If the backend rejects the credentials.  Startup cannot continue without a session.
    jamespot_agent.client.backend.BackendError
        If the backend cannot be reached.
    """
    logger.info("Logging in to %s as %s", client.backend_url, email)
    user = await client.login(email, password)
    colored_print(f"Login successful: {user.display_name} (id {user.id})", AnsiColors.GREEN)

    ctx = ToolContext(
        client=client,
        current_user=user,
        backend_url=client.backend_url,
        debug=debug,
        unsplash_access_key=unsplash_access_key,
    )
    catalog = assemble_catalog(ctx, groups)
    logger.info("Created %d tools", len(catalog))
    return catalog
