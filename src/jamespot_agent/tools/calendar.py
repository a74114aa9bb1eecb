"""
Shared builder for calendar-like article types (meetings, social events).

Both types are articles with a dedicated create/update operation; reading, searching, listing and
deleting go through the generic article operations filtered by type.
"""

from dataclasses import dataclass
from typing import (
    Any,
    Dict,
    List,
    Type,
)

from pydantic import Field

from jamespot_agent.tools import (
    ToolArgs,
    ToolDescriptor,
)
from jamespot_agent.tools.support import (
    ToolContext,
    backend_call,
    call_backend,
    run_tool,
    to_json,
    with_prefix,
)

DATE_HELP = "(format: YYYY-MM-DD or YYYY-MM-DD HH:MM:SS)"
AUDIENCE_HELP = (
    'Audience parameter containing uris for users or groups, separated by commas. Uris have the form '
    '"type"/"ID". eg: user/123, spot/123'
)
TOKEN_HELP = (
    "Upload token from jamespot_get_upload_token. Required if you want to attach files that were "
    "uploaded with this token."
)


@dataclass(frozen=True)
class CalendarKind:
    """Names and models describing one calendar article type."""

    article_type: str  # backend ``type`` value, e.g. "meeting"
    label: str  # human label, e.g. "meeting" or "social event"
    tool_suffix: str  # e.g. "meeting" -> jamespot_create_meeting
    backend_object: str  # e.g. "meeting" -> meeting.create / meeting.update
    create_args: Type[ToolArgs]
    update_args: Type[ToolArgs]

    @property
    def plural(self) -> str:
        return f"{self.tool_suffix}s"

    @property
    def title(self) -> str:
        return self.label[0].upper() + self.label[1:]


class GetCalendarArticleArgs(ToolArgs):
    article_id: str = Field(..., description='ID or URI (e.g., "article/789" or "789")')


class SearchCalendarArgs(ToolArgs):
    query: str = Field(..., description="Search query for title or content")
    limit: int = Field(20, description="Maximum number of results (default: 20)")


class ListCalendarArgs(ToolArgs):
    group_uri: str | None = Field(None, description='Filter by group URI (e.g., "spot/123")')
    limit: int = Field(20, description="Maximum number of results (default: 20)")
    offset: int = Field(0, description="Number of results to skip for pagination (default: 0)")


class DeleteCalendarArgs(ToolArgs):
    article_id: int = Field(..., description="ID of the article to delete")


def build_calendar_tools(ctx: ToolContext, kind: CalendarKind) -> List[ToolDescriptor]:
    """Create the six create/update/get/search/list/delete tools for *kind*."""
    suffix = kind.tool_suffix

    def render_created(result: Any, args: ToolArgs) -> str:
        created = result[0] if isinstance(result, list) and result else result or {}
        url_path = f"/article/{created.get('id')}"
        summary: Dict[str, Any] = {
            "id": created.get("id"),
            "uri": created.get("uri"),
            "title": created.get("title") or getattr(args, "title", None),
            "dateStart": created.get("dateStart") or getattr(args, "date_start", None),
            "dateEnd": created.get("dateEnd") or getattr(args, "date_end", None),
            "place": created.get("place") or getattr(args, "place", None),
            "urlPath": url_path,
        }
        if ctx.backend_url:
            summary["fullUrl"] = f"{ctx.backend_url}{url_path}"
        return to_json({"success": True, "message": f"{kind.title} created successfully", suffix: summary})

    async def create(args: ToolArgs) -> str:
        return await call_backend(
            ctx,
            f"jamespot_create_{suffix}",
            f"{kind.backend_object}.create",
            args.model_dump(by_alias=True, exclude_none=True),
            failure=f"Failed to create {kind.label}",
            render=lambda result: render_created(result, args),
        )

    async def update(args: ToolArgs) -> str:
        params = args.model_dump(by_alias=True, exclude_none=True)
        params["uri"] = with_prefix(params["uri"], "article")
        return await call_backend(
            ctx,
            f"jamespot_update_{suffix}",
            f"{kind.backend_object}.update",
            params,
            failure=f"Failed to update {kind.label}",
            render=lambda result: to_json(
                {"success": True, "message": f"{kind.title} updated successfully", suffix: result}
            ),
        )

    async def get(args: GetCalendarArticleArgs) -> str:
        async def body() -> str:
            result = await backend_call(ctx, "article.get", {"uri": with_prefix(args.article_id, "article")})
            if not result.ok:
                return f"Error: {result.error_msg or f'Failed to get {kind.label}'}"
            found_type = (result.result or {}).get("type")
            if found_type != kind.article_type:
                return f"Error: The article with ID {args.article_id} is not a {kind.label} (type: {found_type})"
            return to_json(result.result)

        return await run_tool(ctx, f"jamespot_get_{suffix}", args.model_dump(by_alias=True), body)

    async def search(args: SearchCalendarArgs) -> str:
        return await call_backend(
            ctx,
            f"jamespot_search_{kind.plural}",
            "article.search",
            {"query": args.query, "type": kind.article_type, "limit": args.limit},
            failure=f"Failed to search {kind.label}s",
        )

    async def list_articles(args: ListCalendarArgs) -> str:
        payload: Dict[str, Any] = {"type": kind.article_type, "limit": args.limit, "offset": args.offset}
        if args.group_uri:
            payload["uiObjectLink"] = args.group_uri
        return await call_backend(
            ctx, f"jamespot_list_{kind.plural}", "article.list", payload, failure=f"Failed to list {kind.label}s"
        )

    async def delete(args: DeleteCalendarArgs) -> str:
        return await call_backend(
            ctx,
            f"jamespot_delete_{suffix}",
            "article.delete",
            {"idArticle": args.article_id},
            failure=f"Failed to delete {kind.label}",
            render=lambda _: f"Successfully deleted {kind.label} {args.article_id}",
        )

    return [
        ToolDescriptor(
            f"jamespot_create_{suffix}",
            f"Create a new {kind.label} in Jamespot and publish it to users or groups. Dates must use the "
            f"YYYY-MM-DD or YYYY-MM-DD HH:MM:SS format; use jamespot_get_current_datetime to resolve relative dates.",
            kind.create_args,
            create,
        ),
        ToolDescriptor(
            f"jamespot_update_{suffix}",
            f"Update an existing {kind.label} in Jamespot. Only the provided fields are changed.",
            kind.update_args,
            update,
        ),
        ToolDescriptor(
            f"jamespot_get_{suffix}",
            f"Get the details of a {kind.label} in Jamespot by its ID or URI.",
            GetCalendarArticleArgs,
            get,
        ),
        ToolDescriptor(
            f"jamespot_search_{kind.plural}",
            f"Search for {kind.label}s in Jamespot by keywords. Returns a list of {kind.label}s matching the "
            "search criteria.",
            SearchCalendarArgs,
            search,
        ),
        ToolDescriptor(
            f"jamespot_list_{kind.plural}",
            f"List {kind.label}s in Jamespot, optionally restricted to a group, with pagination.",
            ListCalendarArgs,
            list_articles,
        ),
        ToolDescriptor(
            f"jamespot_delete_{suffix}",
            f"Delete a {kind.label} from Jamespot by its ID.",
            DeleteCalendarArgs,
            delete,
        ),
    ]
