"""Messenger (discussion) tools."""

from typing import List

from pydantic import Field

from jamespot_agent.tools import (
    NoArgs,
    ToolArgs,
    ToolDescriptor,
)
from jamespot_agent.tools.support import (
    ToolContext,
    call_backend,
)


class SendMessageArgs(ToolArgs):
    message: str = Field(..., description="Message content to send")
    id_discussion: str = Field(..., description="Discussion ID")


class DiscussionBetweenArgs(ToolArgs):
    id_sender: int = Field(..., description="Sender user ID")
    id_user_to: int = Field(..., description="Recipient user ID")


class SpotDiscussionArgs(ToolArgs):
    uri: str = Field(..., description="Group/Spot URI")


class MessageReadsArgs(ToolArgs):
    uri_message: str = Field(..., description="Message URI")
    limit: int | None = Field(None, description="Maximum number of results (optional)")
    page: int | None = Field(None, description="Page number for pagination (optional)")


def build_messenger_tools(ctx: ToolContext) -> List[ToolDescriptor]:
    """Create all messenger tools."""

    async def send_message(args: SendMessageArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_send_message",
            "messenger.sendMessage",
            {"message": args.message, "idDiscussion": args.id_discussion},
            failure="Failed to send message",
        )

    async def recent_discussions(_: NoArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_list_recent_discussions",
            "messenger.listRecentDiscussions",
            failure="Failed to list recent discussions",
        )

    async def discussion_between(args: DiscussionBetweenArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_or_create_discussion",
            "messenger.getOrCreateDiscussion",
            args.model_dump(by_alias=True),
            failure="Failed to get or create discussion",
        )

    async def spot_discussion(args: SpotDiscussionArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_spot_discussion",
            "messenger.getSpotDiscussion",
            {"uri": args.uri},
            failure="Failed to get spot discussion",
        )

    async def create_spot_discussion(args: SpotDiscussionArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_create_spot_discussion",
            "messenger.createSpotDiscussion",
            {"uri": args.uri},
            failure="Failed to create spot discussion",
        )

    async def message_reads(args: MessageReadsArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_message_reads",
            "messenger.getMessageReads",
            args.model_dump(by_alias=True, exclude_none=True),
            failure="Failed to get message reads",
        )

    return [
        ToolDescriptor(
            "jamespot_send_message",
            "Send a message in an existing Jamespot messenger discussion.",
            SendMessageArgs,
            send_message,
        ),
        ToolDescriptor(
            "jamespot_list_recent_discussions",
            "List the recent messenger discussions of the current user.",
            NoArgs,
            recent_discussions,
        ),
        ToolDescriptor(
            "jamespot_get_or_create_discussion",
            "Get the private discussion between two users, creating it if it does not exist yet.",
            DiscussionBetweenArgs,
            discussion_between,
        ),
        ToolDescriptor(
            "jamespot_get_spot_discussion",
            "Get the messenger discussion attached to a group.",
            SpotDiscussionArgs,
            spot_discussion,
        ),
        ToolDescriptor(
            "jamespot_create_spot_discussion",
            "Create the messenger discussion attached to a group.",
            SpotDiscussionArgs,
            create_spot_discussion,
        ),
        ToolDescriptor(
            "jamespot_get_message_reads",
            "Get which users have read a given message.",
            MessageReadsArgs,
            message_reads,
        ),
    ]
