"""
Unsplash image search tools.

These talk to the public Unsplash REST API directly, not to Jamespot.  They need an access key
(``UNSPLASH_ACCESS_KEY``); without one every call returns an error string and no request is made.
"""

import logging
from typing import (
    Any,
    Dict,
    List,
    Literal,
    Mapping,
)

import httpx
from pydantic import Field

from jamespot_agent.tools import (
    ToolArgs,
    ToolDescriptor,
)
from jamespot_agent.tools.support import (
    ToolContext,
    run_tool,
    to_json,
    trace_api_response,
)

logger = logging.getLogger(__name__)

UNSPLASH_API_URL = "https://api.unsplash.com"
MISSING_KEY_ERROR = (
    "Error: UNSPLASH_ACCESS_KEY environment variable is not set. Please configure your Unsplash API access key."
)

Orientation = Literal["landscape", "portrait", "squarish"]
ContentFilter = Literal["low", "high"]
Color = Literal[
    "black_and_white", "black", "white", "yellow", "orange", "red", "purple", "magenta", "green", "teal", "blue"
]


class SearchImagesArgs(ToolArgs):
    query: str = Field(..., description='Search query for images (e.g., "mountains", "coffee", "workspace")')
    page: int = Field(1, ge=1, description="Page number for pagination (default: 1)")
    per_page: int = Field(10, ge=1, le=30, description="Number of results per page (default: 10, max: 30)")
    order_by: Literal["relevant", "latest"] | None = Field(
        None, description="Sort order: relevant or latest (default: relevant)"
    )
    orientation: Orientation | None = Field(None, description="Filter by image orientation")
    color: Color | None = Field(None, description="Filter by color")
    content_filter: ContentFilter | None = Field(None, description="Content safety filter level (default: low)")


class ImageDetailsArgs(ToolArgs):
    id: str = Field(..., description="Unsplash image ID")


class RandomImagesArgs(ToolArgs):
    count: int = Field(1, ge=1, le=30, description="Number of random images to retrieve (default: 1, max: 30)")
    query: str | None = Field(None, description="Limit selection to photos matching a search term")
    username: str | None = Field(None, description="Limit selection to a specific user's photos")
    orientation: Orientation | None = Field(None, description="Filter by image orientation")
    content_filter: ContentFilter | None = Field(None, description="Content safety filter level (default: low)")
    collections: str | None = Field(None, description="Public collection ID(s) to filter by (comma-separated)")
    topics: str | None = Field(None, description="Public topic ID(s) to filter by (comma-separated)")


def summarize_photo(photo: Mapping[str, Any]) -> Dict[str, Any]:
    """The subset of an Unsplash photo record the LLM needs to pick and cite an image."""
    urls = photo.get("urls") or {}
    user = photo.get("user") or {}
    links = photo.get("links") or {}
    return {
        "id": photo.get("id"),
        "description": photo.get("description") or photo.get("alt_description") or "No description",
        "urls": {size: urls.get(size) for size in ("thumb", "small", "regular", "full", "raw")},
        "dimensions": {"width": photo.get("width"), "height": photo.get("height")},
        "color": photo.get("color"),
        "photographer": {
            "name": user.get("name"),
            "username": user.get("username"),
            "profile_url": (user.get("links") or {}).get("html"),
            "portfolio_url": user.get("portfolio_url"),
        },
        "links": {"html": links.get("html"), "download": links.get("download")},
        "likes": photo.get("likes"),
    }


def photo_details(photo: Mapping[str, Any]) -> Dict[str, Any]:
    user = photo.get("user") or {}
    return {
        "id": photo.get("id"),
        "description": photo.get("description") or photo.get("alt_description") or "No description",
        "created_at": photo.get("created_at"),
        "updated_at": photo.get("updated_at"),
        "dimensions": {"width": photo.get("width"), "height": photo.get("height")},
        "color": photo.get("color"),
        "blur_hash": photo.get("blur_hash"),
        "urls": photo.get("urls"),
        "links": photo.get("links"),
        "likes": photo.get("likes"),
        "photographer": {
            "name": user.get("name"),
            "username": user.get("username"),
            "bio": user.get("bio"),
            "location": user.get("location"),
            "portfolio_url": user.get("portfolio_url"),
            "profile_url": (user.get("links") or {}).get("html"),
        },
        "exif": photo.get("exif"),
        "location": photo.get("location"),
        "related_collections": photo.get("related_collections"),
    }


class UnsplashError(RuntimeError):
    """Raised when Unsplash answers with an error status."""


async def unsplash_get(
    access_key: str,
    path: str,
    params: Mapping[str, Any] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """GET an Unsplash endpoint and return the decoded JSON body."""
    query = {k: v for k, v in (params or {}).items() if v is not None}
    headers = {"Authorization": f"Client-ID {access_key}", "Accept-Version": "v1"}
    logger.debug("Unsplash GET %s %s", path, query)
    async with httpx.AsyncClient(base_url=UNSPLASH_API_URL, timeout=30.0, transport=transport) as client:
        response = await client.get(path, params=query, headers=headers)
    if response.is_error:
        try:
            errors = response.json().get("errors") or []
        except ValueError:
            errors = []
        raise UnsplashError(", ".join(errors) or f"Unsplash request failed with status {response.status_code}")
    return response.json()


def build_image_search_tools(
    ctx: ToolContext, transport: httpx.AsyncBaseTransport | None = None
) -> List[ToolDescriptor]:
    """Create all image search tools."""

    async def search_images(args: SearchImagesArgs) -> str:
        async def body() -> str:
            if not ctx.unsplash_access_key:
                return MISSING_KEY_ERROR
            data = await unsplash_get(
                ctx.unsplash_access_key,
                "/search/photos",
                {
                    "query": args.query,
                    "page": args.page,
                    "per_page": args.per_page,
                    "order_by": args.order_by,
                    "orientation": args.orientation,
                    "color": args.color,
                    "content_filter": args.content_filter,
                },
                transport,
            )
            formatted = {
                "total": data.get("total"),
                "total_pages": data.get("total_pages"),
                "current_page": args.page,
                "per_page": args.per_page,
                "images": [summarize_photo(photo) for photo in data.get("results", [])],
            }
            trace_api_response(ctx, "unsplash.search.photos", formatted)
            return to_json(formatted)

        return await run_tool(ctx, "search_unsplash_images", args.model_dump(by_alias=True), body)

    async def image_details(args: ImageDetailsArgs) -> str:
        async def body() -> str:
            if not ctx.unsplash_access_key:
                return MISSING_KEY_ERROR
            photo = await unsplash_get(ctx.unsplash_access_key, f"/photos/{args.id}", transport=transport)
            details = photo_details(photo)
            trace_api_response(ctx, "unsplash.photos.get", details)
            return to_json(details)

        return await run_tool(ctx, "get_unsplash_image_details", args.model_dump(by_alias=True), body)

    async def random_images(args: RandomImagesArgs) -> str:
        async def body() -> str:
            if not ctx.unsplash_access_key:
                return MISSING_KEY_ERROR
            data = await unsplash_get(
                ctx.unsplash_access_key,
                "/photos/random",
                {
                    "count": args.count,
                    "query": args.query,
                    "username": args.username,
                    "orientation": args.orientation,
                    "content_filter": args.content_filter,
                    "collections": args.collections,
                    "topics": args.topics,
                },
                transport,
            )
            # A single object comes back unless ``count`` is sent, but be lenient either way
            photos = data if isinstance(data, list) else [data]
            formatted = {"count": len(photos), "images": [summarize_photo(photo) for photo in photos]}
            trace_api_response(ctx, "unsplash.photos.random", formatted)
            return to_json(formatted)

        return await run_tool(ctx, "get_random_unsplash_image", args.model_dump(by_alias=True), body)

    return [
        ToolDescriptor(
            "search_unsplash_images",
            "Search for high-quality, free-to-use images from Unsplash. Returns image URLs at multiple resolutions "
            "(thumb, small, regular, full, raw), photographer information, and image metadata. For article images, "
            "use the regular resolution, in landscape orientation, and take randomly in the first result page. "
            "IMPORTANT: Requires UNSPLASH_ACCESS_KEY environment variable to be set.",
            SearchImagesArgs,
            search_images,
        ),
        ToolDescriptor(
            "get_unsplash_image_details",
            "Get detailed information about a specific Unsplash image by its ID. Returns comprehensive metadata "
            "including EXIF data, location, tags, statistics, and high-resolution download URLs.",
            ImageDetailsArgs,
            image_details,
        ),
        ToolDescriptor(
            "get_random_unsplash_image",
            "Get one or more random images from Unsplash. Optionally filter by collections, topics, username, "
            "query, or orientation. Useful for getting inspiration or placeholder images.",
            RandomImagesArgs,
            random_images,
        ),
    ]
