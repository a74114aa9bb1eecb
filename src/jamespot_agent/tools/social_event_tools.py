"""Social event tools (create, update, get, search, list, delete)."""

from typing import List

from pydantic import Field

from jamespot_agent.tools import (
    ToolArgs,
    ToolDescriptor,
)
from jamespot_agent.tools.calendar import (
    AUDIENCE_HELP,
    DATE_HELP,
    TOKEN_HELP,
    CalendarKind,
    build_calendar_tools,
)
from jamespot_agent.tools.support import ToolContext


class CreateSocialEventArgs(ToolArgs):
    title: str = Field(..., description="Event title")
    date_start: str = Field(..., description=f"Event start date {DATE_HELP}")
    date_end: str = Field(..., description=f"Event end date {DATE_HELP}")
    description: str | None = Field(None, description="Event description (HTML supported)")
    place: str | None = Field(None, description="Event location/place name")
    address: str | None = Field(None, description="Event address")
    all_day: bool | None = Field(None, description="Whether this is an all-day event (default: false)")
    publish_to: str = Field(..., description=AUDIENCE_HELP)
    social_event_use_ceiling: bool | None = Field(None, description="Whether to use a participant ceiling/limit")
    social_event_ceiling: int | None = Field(None, description="Maximum number of participants allowed")
    text_color: str | None = Field(None, description="Text color for the event")
    bg_color: str | None = Field(None, description="Background color for the event")
    hide_from_calendar: bool | None = Field(None, description="Hide event from calendar view")
    no_gestion: bool | None = Field(None, description="Disable event management features")
    use_qrcode: bool | None = Field(None, description="Enable QR code for the event")
    url_gestion: str | None = Field(None, description="Management URL for the event")
    token: str | None = Field(None, description=TOKEN_HELP)


class UpdateSocialEventArgs(ToolArgs):
    uri: str = Field(..., description='Event URI (e.g., "article/123" or just "123")')
    title: str | None = Field(None, description="Updated event title")
    date_start: str | None = Field(None, description=f"Updated start date {DATE_HELP}")
    date_end: str | None = Field(None, description=f"Updated end date {DATE_HELP}")
    description: str | None = Field(None, description="Updated event description (HTML supported)")
    place: str | None = Field(None, description="Updated location/place name")
    address: str | None = Field(None, description="Updated address")
    all_day: bool | None = Field(None, description="Whether this is an all-day event")
    publish_to: str | None = Field(None, description="Updated audience uris separated by commas")
    social_event_use_ceiling: bool | None = Field(None, description="Whether to use a participant ceiling/limit")
    social_event_ceiling: int | None = Field(None, description="Maximum number of participants allowed")
    text_color: str | None = Field(None, description="Text color for the event")
    bg_color: str | None = Field(None, description="Background color for the event")
    hide_from_calendar: bool | None = Field(None, description="Hide event from calendar view")
    no_gestion: bool | None = Field(None, description="Disable event management features")
    use_qrcode: bool | None = Field(None, description="Enable QR code for the event")
    url_gestion: str | None = Field(None, description="Management URL for the event")
    token: str | None = Field(None, description="Upload token if attaching new files")


SOCIAL_EVENT = CalendarKind(
    article_type="socialEvent",
    label="social event",
    tool_suffix="social_event",
    backend_object="socialEvent",
    create_args=CreateSocialEventArgs,
    update_args=UpdateSocialEventArgs,
)


def build_social_event_tools(ctx: ToolContext) -> List[ToolDescriptor]:
    return build_calendar_tools(ctx, SOCIAL_EVENT)
