"""Date and time helpers, so the LLM can resolve "tomorrow" or "next week" into backend formats."""

import calendar
from datetime import (
    datetime,
    timedelta,
)
from typing import (
    Any,
    Dict,
    List,
)
from zoneinfo import (
    ZoneInfo,
    ZoneInfoNotFoundError,
)

from pydantic import Field

from jamespot_agent.tools import (
    ToolArgs,
    ToolDescriptor,
)
from jamespot_agent.tools.support import (
    ToolContext,
    run_tool,
    to_json,
)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


class CurrentDateTimeArgs(ToolArgs):
    timezone: str | None = Field(
        None,
        description='Timezone to use (e.g., "Europe/Paris", "America/New_York"). Defaults to server timezone.',
    )


class CalculateDateArgs(ToolArgs):
    base_date: str | None = Field(
        None,
        description="Base date to calculate from (format: YYYY-MM-DD or YYYY-MM-DD HH:MM:SS). "
        "Defaults to current date/time.",
    )
    days: float = Field(0, description="Number of days to add (positive) or subtract (negative)")
    hours: float = Field(0, description="Number of hours to add (positive) or subtract (negative)")
    minutes: float = Field(0, description="Number of minutes to add (positive) or subtract (negative)")
    timezone: str | None = Field(
        None, description='Timezone to use (e.g., "Europe/Paris"). Defaults to server timezone.'
    )


def resolve_timezone(name: str | None) -> ZoneInfo | None:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone '{name}'") from exc


def now_in(name: str | None) -> datetime:
    """Aware current time in *name*, or in the server's local zone."""
    tz = resolve_timezone(name)
    return datetime.now(tz) if tz else datetime.now().astimezone()


def parse_date(value: str, tz: ZoneInfo | None = None) -> datetime:
    """Parse ``YYYY-MM-DD`` or ``YYYY-MM-DD HH:MM:SS``; naive values are placed in *tz*."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace(" ", "T"))
    except ValueError as exc:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD or YYYY-MM-DD HH:MM:SS") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz) if tz else parsed.astimezone()
    return parsed.astimezone(tz) if tz else parsed


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def describe(moment: datetime) -> Dict[str, Any]:
    return {
        "datetime": moment.strftime(DATETIME_FORMAT),
        "date": moment.strftime(DATE_FORMAT),
        "iso": moment.isoformat(),
        "timestamp": int(moment.timestamp() * 1000),
        "dayOfWeek": moment.strftime("%A"),
    }


def build_utility_tools(ctx: ToolContext) -> List[ToolDescriptor]:
    """Create the date utility tools."""

    async def current_datetime(args: CurrentDateTimeArgs) -> str:
        async def body() -> str:
            now = now_in(args.timezone)
            current = describe(now)
            current["timezone"] = args.timezone or "server default"
            current["time"] = now.strftime("%H:%M")
            return to_json(
                {
                    "current": current,
                    "helpful_relative_dates": {
                        "tomorrow": (now + timedelta(days=1)).strftime(DATE_FORMAT),
                        "next_week": (now + timedelta(days=7)).strftime(DATE_FORMAT),
                        "next_month": add_months(now, 1).strftime(DATE_FORMAT),
                    },
                    "format_info": {
                        "for_jamespot_datetime": 'YYYY-MM-DD HH:MM:SS (e.g., "2025-10-21 14:30:00")',
                        "for_jamespot_date": 'YYYY-MM-DD (e.g., "2025-10-21")',
                        "note": "Use datetime format for specific times, date format for all-day events",
                    },
                }
            )

        return await run_tool(ctx, "jamespot_get_current_datetime", args.model_dump(by_alias=True), body)

    async def calculate_date(args: CalculateDateArgs) -> str:
        async def body() -> str:
            tz = resolve_timezone(args.timezone)
            base = parse_date(args.base_date, tz) if args.base_date else now_in(args.timezone)
            moment = base + timedelta(days=args.days, hours=args.hours, minutes=args.minutes)
            return to_json(
                {
                    "result": describe(moment),
                    "calculation": {
                        "base_date": args.base_date or "current date/time",
                        "days_added": args.days,
                        "hours_added": args.hours,
                        "minutes_added": args.minutes,
                        "timezone": args.timezone or "server default",
                    },
                }
            )

        return await run_tool(ctx, "jamespot_calculate_date", args.model_dump(by_alias=True), body)

    return [
        ToolDescriptor(
            "jamespot_get_current_datetime",
            "Get the current date and time. Use this tool to know what date and time it is right now, "
            'which is essential for creating events, meetings, or understanding relative dates like "tomorrow", '
            '"next week", etc. Returns the current date and time in multiple formats useful for Jamespot API calls.',
            CurrentDateTimeArgs,
            current_datetime,
        ),
        ToolDescriptor(
            "jamespot_calculate_date",
            "Calculate a date by adding or subtracting days, hours, or minutes from a base date. Useful for "
            "scheduling events relative to a specific date. If no base date is provided, uses the current date/time.",
            CalculateDateArgs,
            calculate_date,
        ),
    ]
