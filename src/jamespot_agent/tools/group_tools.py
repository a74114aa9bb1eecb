"""Group (spot / community) tools."""

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


class ListGroupsArgs(ToolArgs):
    limit: int = Field(50, description="Maximum number of groups to return (default: 50)")
    visibility: bool | None = Field(None, description="Visibility of the group : public or private")


class GroupIdArgs(ToolArgs):
    group_id: str = Field(..., description="Group ID (numeric)")


class GroupMembersArgs(GroupIdArgs):
    limit: int = Field(100, description="Maximum number of members to return (default: 100)")


class SearchGroupsArgs(ToolArgs):
    query: str = Field(..., description="Search query for group name or description")


class CreateGroupArgs(ToolArgs):
    type: str = Field("spot", description='Group type (e.g., "spot", "projet"). Default value : "spot"')
    title: str = Field(..., description="Group title/name")
    description: str = Field(..., description="Group description")
    privacy: str | int = Field(..., description='Privacy level: "public" (0), "private" (1), or "secret" (2)')
    edito: str | None = Field(None, description="Editorial content for the group (optional)")
    language: str = Field(..., description='Language code (e.g., "fr", "en")')
    category: str = Field(..., description="Category identifier for the group")
    id_community: str | None = Field(None, description="Parent community ID if this is a subgroup (optional)")


class GroupUriArgs(ToolArgs):
    uri: str = Field(..., description="Group URI identifier")


class AddMemberArgs(ToolArgs):
    id_user: int = Field(..., description="User ID to add or modify")
    role: int = Field(..., description="Role level: 0 (member), 1 (moderator), 2 (admin), 3 (owner)")
    id_spot: int = Field(..., description="Group/Spot ID")


def build_group_tools(ctx: ToolContext) -> List[ToolDescriptor]:
    """Create all group-related tools."""

    async def list_groups(args: ListGroupsArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_list_groups",
            "group.list",
            {"type": "spot", "public": args.visibility, "limit": args.limit},
            failure="Failed to list groups",
        )

    async def get_group(args: GroupIdArgs) -> str:
        return await call_backend(
            ctx, "jamespot_get_group", "group.getSpot", {"idSpot": args.group_id}, failure="Failed to get group"
        )

    async def get_members(args: GroupMembersArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_group_members",
            "group.getObjectListJamespotSpotMembers",
            {"idSpot": args.group_id, "limit": args.limit},
            failure="Failed to get group members",
        )

    async def search_groups(args: SearchGroupsArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_search_groups",
            "group.list",
            {"type": "spot", "public": True, "limit": 50, "query": args.query},
            failure="Failed to search groups",
        )

    async def create_group(args: CreateGroupArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_create_group",
            "group.create",
            args.model_dump(by_alias=True, exclude_none=True),
            failure="Failed to create group",
        )

    async def categories_configuration(_: NoArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_categories_configuration",
            "group.getCategoriesConfiguration",
            failure="Failed to get categories configuration",
        )

    async def categories(_: NoArgs) -> str:
        return await call_backend(
            ctx, "jamespot_get_categories", "group.getCategories", failure="Failed to get categories"
        )

    async def count_members(args: GroupUriArgs) -> str:
        return await call_backend(
            ctx, "jamespot_count_members", "group.countMembers", {"uri": args.uri}, failure="Failed to count members"
        )

    async def properties(args: GroupIdArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_group_properties",
            "group.getProperties",
            {"idSpot": args.group_id},
            failure="Failed to get group properties",
        )

    async def add_member(args: AddMemberArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_add_member",
            "group.changeMemberRole",
            args.model_dump(by_alias=True),
            failure="Failed to add member",
            render=lambda _: f"Successfully set role {args.role} for user {args.id_user} in group {args.id_spot}",
        )

    return [
        ToolDescriptor(
            "jamespot_list_groups",
            "List groups/communities (spots) in Jamespot. Returns the list of groups the user can access.",
            ListGroupsArgs,
            list_groups,
        ),
        ToolDescriptor(
            "jamespot_get_group",
            "Get detailed information about a specific group in Jamespot by its ID.",
            GroupIdArgs,
            get_group,
        ),
        ToolDescriptor(
            "jamespot_get_group_members",
            "Get the list of members of a specific group in Jamespot.",
            GroupMembersArgs,
            get_members,
        ),
        ToolDescriptor(
            "jamespot_search_groups",
            "Search for groups/communities in Jamespot by name or description.",
            SearchGroupsArgs,
            search_groups,
        ),
        ToolDescriptor(
            "jamespot_create_group",
            "Create a new group/community in Jamespot. This will create a new collaborative space.",
            CreateGroupArgs,
            create_group,
        ),
        ToolDescriptor(
            "jamespot_get_categories_configuration",
            "Get the configuration of group categories in Jamespot.",
            NoArgs,
            categories_configuration,
        ),
        ToolDescriptor(
            "jamespot_get_categories",
            "Get the list of group categories available in Jamespot. Use it before creating a group.",
            NoArgs,
            categories,
        ),
        ToolDescriptor(
            "jamespot_count_members",
            "Count the members of a group identified by its URI.",
            GroupUriArgs,
            count_members,
        ),
        ToolDescriptor(
            "jamespot_get_group_properties",
            "Get the properties (settings) of a specific group in Jamespot.",
            GroupIdArgs,
            properties,
        ),
        ToolDescriptor(
            "jamespot_add_member",
            "Add a user to a group, or change the role of an existing member.",
            AddMemberArgs,
            add_member,
        ),
    ]
