"""User profile and directory tools."""

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
    run_tool,
    to_json,
    trace_api_response,
    with_prefix,
)


class GetUserArgs(ToolArgs):
    user_id: str = Field(..., description='User ID or URI (e.g., "user/123" or "123")')


class SearchUsersArgs(ToolArgs):
    query: str = Field(..., description="Search query (name, email, etc.)")
    limit: int = Field(10, description="Maximum number of results (default: 10)")


class UpdateProfileArgs(ToolArgs):
    first_name: str | None = Field(None, description="User first name")
    last_name: str | None = Field(None, description="User last name")
    bio: str | None = Field(None, description="User biography")
    phone: str | None = Field(None, description="User phone number")


def build_user_tools(ctx: ToolContext) -> List[ToolDescriptor]:
    """Create all user-related tools."""

    async def get_current_user(_: NoArgs) -> str:
        async def body() -> str:
            # Cached from sign-in, no backend roundtrip needed
            profile = ctx.current_user.model_dump()
            trace_api_response(ctx, "cached_user_data", profile)
            return to_json(profile)

        return await run_tool(ctx, "jamespot_get_current_user", {}, body)

    async def get_user(args: GetUserArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_user",
            "user.get",
            {"uri": with_prefix(args.user_id, "user")},
            failure="Failed to get user",
        )

    async def search_users(args: SearchUsersArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_search_users",
            "user.autocomplete",
            {"q": args.query, "limit": args.limit},
            failure="Failed to search users",
        )

    async def update_profile(args: UpdateProfileArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_update_user_profile",
            "user.userUpdateProfile",
            args.model_dump(by_alias=True, exclude_none=True),
            failure="Failed to update profile",
            render=lambda _: "Successfully updated user profile",
        )

    return [
        ToolDescriptor(
            "jamespot_get_current_user",
            "Get information about the currently authenticated user in Jamespot. Returns user "
            "profile including name, email, avatar, and other details.",
            NoArgs,
            get_current_user,
        ),
        ToolDescriptor(
            "jamespot_get_user",
            'Get information about a specific user in Jamespot by their user ID or URI (e.g., "user/123").',
            GetUserArgs,
            get_user,
        ),
        ToolDescriptor(
            "jamespot_search_users",
            "Search for users in Jamespot by name, email, or other criteria. Returns a list of matching users.",
            SearchUsersArgs,
            search_users,
        ),
        ToolDescriptor(
            "jamespot_update_user_profile",
            "Update the current user profile information in Jamespot (e.g., name, bio, phone).",
            UpdateProfileArgs,
            update_profile,
        ),
    ]
