"""Meeting tools (create, update, get, search, list, delete)."""

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


class CreateMeetingArgs(ToolArgs):
    title: str = Field(..., description="Meeting title")
    date_start: str = Field(..., description=f"Meeting start date {DATE_HELP}")
    date_end: str = Field(..., description=f"Meeting end date {DATE_HELP}")
    agenda: str | None = Field(None, description="Meeting agenda (HTML supported)")
    report: str | None = Field(None, description="Meeting report/minutes (HTML supported)")
    place: str | None = Field(None, description="Meeting location/place name")
    address: str | None = Field(None, description="Meeting address")
    all_day: bool | None = Field(None, description="Whether this is an all-day meeting (default: false)")
    publish_to: str = Field(..., description=AUDIENCE_HELP)
    text_color: str | None = Field(None, description="Text color for the meeting")
    bg_color: str | None = Field(None, description="Background color for the meeting")
    no_gestion: bool | None = Field(None, description="Disable meeting management features")
    url_gestion: str | None = Field(None, description="Management URL for the meeting")
    token: str | None = Field(None, description=TOKEN_HELP)


class UpdateMeetingArgs(ToolArgs):
    uri: str = Field(..., description='Meeting URI (e.g., "article/123" or just "123")')
    title: str | None = Field(None, description="Updated meeting title")
    date_start: str | None = Field(None, description=f"Updated start date {DATE_HELP}")
    date_end: str | None = Field(None, description=f"Updated end date {DATE_HELP}")
    agenda: str | None = Field(None, description="Updated meeting agenda (HTML supported)")
    report: str | None = Field(None, description="Updated meeting report/minutes (HTML supported)")
    place: str | None = Field(None, description="Updated location/place name")
    address: str | None = Field(None, description="Updated address")
    all_day: bool | None = Field(None, description="Whether this is an all-day meeting")
    publish_to: str | None = Field(None, description="Updated audience uris separated by commas")
    text_color: str | None = Field(None, description="Text color for the meeting")
    bg_color: str | None = Field(None, description="Background color for the meeting")
    no_gestion: bool | None = Field(None, description="Disable meeting management features")
    url_gestion: str | None = Field(None, description="Management URL for the meeting")
    token: str | None = Field(None, description="Upload token if attaching new files")


MEETING = CalendarKind(
    article_type="meeting",
    label="meeting",
    tool_suffix="meeting",
    backend_object="meeting",
    create_args=CreateMeetingArgs,
    update_args=UpdateMeetingArgs,
)


def build_meeting_tools(ctx: ToolContext) -> List[ToolDescriptor]:
    return build_calendar_tools(ctx, MEETING)
