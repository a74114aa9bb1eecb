"""Article tools: create, read, search and comment."""

from typing import (
    Any,
    Dict,
    List,
)

from pydantic import Field

from jamespot_agent.tools import (
    ToolArgs,
    ToolDescriptor,
)
from jamespot_agent.tools.calendar import TOKEN_HELP
from jamespot_agent.tools.support import (
    ToolContext,
    backend_call,
    call_backend,
    envelope_output,
    run_tool,
    to_json,
)

PUBLISH_TO_HELP = (
    'This audience parameter contains uris for users or groups, separated by commas. Uris have the form '
    '"type"/"ID of object (must be a number)". eg : user/123, spot/123'
)


class CreateArticleArgs(ToolArgs):
    title: str = Field(..., description="Article title")
    description: str = Field(..., description="Article content (HTML supported)")
    publish_to: str = Field(..., description=PUBLISH_TO_HELP)
    token: str | None = Field(None, description=TOKEN_HELP)


class GetArticleArgs(ToolArgs):
    article_id: str | int = Field(..., description='Article ID or URI (e.g., "article/789")')


class SearchArticlesArgs(ToolArgs):
    query: str | None = Field(None, description="Fulltext search query for article title or content.")
    group_filter: int | None = Field(
        None,
        description="Optional, but must be provided to narrow search to articles published in this group. "
        "Value must be a spot ID",
    )
    author_filter: int | None = Field(
        None,
        description="Optional, but must be provided to narrow search to articles published by this author. "
        "Value must be a user ID",
    )
    limit: int = Field(20, description="Maximum number of results (default: 20)")


class CommentArticleArgs(ToolArgs):
    id_article: int = Field(..., description="Article ID to comment on")
    comment: str = Field(..., description="Comment text (HTML supported)")


def article_lookup(article_id: str | int) -> Dict[str, Any]:
    """Numeric ids are looked up by id, anything else by URI."""
    if isinstance(article_id, int) or str(article_id).isdigit():
        return {"idArticle": int(article_id)}
    return {"uri": article_id}


def build_search_query(args: SearchArticlesArgs) -> Dict[str, Any]:
    query: Dict[str, Any] = {"limit": args.limit}
    if args.query and args.query != "*":
        query["keywords"] = args.query
    filters = [{"field": "mainType", "value": "article"}]
    if args.group_filter:
        filters.append({"field": "__sec__", "value": f"s{args.group_filter}"})
    if args.author_filter:
        filters.append({"field": "idUser", "value": args.author_filter})
    query["filters"] = filters
    return query


def build_content_tools(ctx: ToolContext) -> List[ToolDescriptor]:
    """Create all article-related tools."""

    def render_created(result: Any) -> str:
        article = result[0] if isinstance(result, list) and result else result or {}
        url_path = f"/article/{article.get('id')}"
        summary: Dict[str, Any] = {
            "id": article.get("id"),
            "uri": article.get("uri"),
            "title": article.get("title"),
            "urlPath": url_path,
        }
        if ctx.backend_url:
            summary["fullUrl"] = f"{ctx.backend_url}{url_path}"
        return to_json({"success": True, "message": "Article created successfully", "article": summary})

    async def create_article(args: CreateArticleArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_create_article",
            "article.create",
            args.model_dump(by_alias=True, exclude_none=True),
            failure="Failed to create article",
            render=render_created,
        )

    async def get_article(args: GetArticleArgs) -> str:
        return await call_backend(
            ctx, "jamespot_get_article", "article.get", article_lookup(args.article_id), failure="Failed to get article"
        )

    async def search_articles(args: SearchArticlesArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_search_articles",
            "search.searchQuery",
            build_search_query(args),
            failure="Failed to search articles",
        )

    async def comment_article(args: CommentArticleArgs) -> str:
        async def body() -> str:
            token = await backend_call(ctx, "network.token")
            if not token.ok:
                return envelope_output(token, "Failed to get comment token")
            result = await backend_call(
                ctx,
                "article.addComment",
                {
                    "idArticle": args.id_article,
                    "token": token.result,
                    "content": args.comment,
                    "sendAlert": True,
                    "alertAuthor": False,
                },
            )
            return envelope_output(result, "Failed to add comment", lambda _: "Successfully added comment to article")

        return await run_tool(ctx, "jamespot_comment_article", args.model_dump(by_alias=True), body)

    return [
        ToolDescriptor(
            "jamespot_create_article",
            "Create a new article (post) in Jamespot and publish it to users or groups. An article must have an "
            "audience (people who can read the article) in the publishTo parameter. If an article is to be "
            "published in a group but you dont know the group Id, first try to get the group by its name, and "
            "use its uri. To attach files, upload them first with the same upload token. Returns the article id, "
            "uri and URL.",
            CreateArticleArgs,
            create_article,
        ),
        ToolDescriptor(
            "jamespot_get_article",
            "Get the full content of an article in Jamespot by its ID or URI.",
            GetArticleArgs,
            get_article,
        ),
        ToolDescriptor(
            "jamespot_search_articles",
            "Search for articles in Jamespot by keywords, optionally restricted to a group or an author.",
            SearchArticlesArgs,
            search_articles,
        ),
        ToolDescriptor(
            "jamespot_comment_article",
            "Add a comment to an existing article or post in Jamespot.",
            CommentArticleArgs,
            comment_article,
        ),
    ]
