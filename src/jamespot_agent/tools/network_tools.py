"""Upload-token tool."""

from typing import (
    Any,
    List,
)

from jamespot_agent.tools import (
    NoArgs,
    ToolDescriptor,
)
from jamespot_agent.tools.support import (
    ToolContext,
    call_backend,
    to_json,
)


def _render_token(token: Any) -> str:
    return to_json(
        {
            "success": True,
            "token": token,
            "message": "Upload token retrieved successfully. Use this token for file uploads and article creation.",
        }
    )


def build_network_tools(ctx: ToolContext) -> List[ToolDescriptor]:
    async def get_upload_token(_: NoArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_upload_token",
            "network.token",
            failure="Failed to get upload token",
            render=_render_token,
        )

    return [
        ToolDescriptor(
            "jamespot_get_upload_token",
            "Get an upload token from the Jamespot network API. This token is required for file upload operations "
            "and for attaching files to articles. The same token should be used when uploading files and creating "
            "articles to automatically attach the uploaded files to the article.",
            NoArgs,
            get_upload_token,
        ),
    ]
