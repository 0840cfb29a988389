"""Tool catalogue exposed over MCP.

Each tool pairs an argument model (also used to publish its JSON input
schema) with the message prefix used when the call fails. Argument models
narrow the service option models to the bounds advertised to callers.
"""

from dataclasses import dataclass
from typing import Literal

from mcp.types import Tool
from pydantic import BaseModel, Field

from google_assistant_mcp.services.models import (
    CamelModel,
    CreateEventOptions,
    DeclineEventOptions,
    EmailDetailsOptions,
    EmailListOptions,
    EventListOptions,
)
from google_assistant_mcp.utils.dates import OutputFormat

ServiceName = Literal["gmail", "gcalendar"]


# =============================================================================
# Argument models
# =============================================================================


class ListEmailsArgs(EmailListOptions):
    """Arguments for gmail_list_emails."""

    max_results: int = Field(
        default=10,
        ge=1,
        le=30,
        description="Maximum number of emails to return (default: 10, max: 30)",
    )
    query: str | None = Field(
        default=None,
        description='Gmail search query (e.g., "from:example@gmail.com", "is:unread", "subject:important")',
    )
    label_ids: list[str] | None = Field(
        default=None, description="Array of label IDs to filter by (default: INBOX)"
    )
    include_spam_trash: bool = Field(
        default=False, description="Whether to include spam and trash emails (default: false)"
    )
    fetch_details: bool = Field(
        default=True,
        description="If true, fetches full details for each email in the list using a single batch request.",
    )


class GetEmailDetailsArgs(EmailDetailsOptions):
    """Arguments for gmail_get_details."""

    max_words: int = Field(
        default=300,
        ge=0,
        le=3000,
        description="The maximum number of words to return (default: 300, 0 for no limit)",
    )


class SearchEmailsArgs(CamelModel):
    """Arguments for gmail_search_emails."""

    query: str = Field(
        ...,
        min_length=1,
        description='Gmail search query (e.g., "from:example@gmail.com", "is:unread", "subject:important")',
    )
    max_results: int = Field(
        default=10,
        ge=1,
        le=20,
        description="Maximum number of emails to return (default: 10, max: 20)",
    )


class DatetimeConverterArgs(BaseModel):
    """Arguments for datetime_converter."""

    datetime: str = Field(
        ...,
        description='The date-time string to convert (e.g., "2024-07-20T15:00:00-07:00", "July 20, 2024 3:00 PM PST")',
    )
    format: OutputFormat = Field(
        default="iso",
        description='The target format: "iso" (default ISO 8601), "utc" (alias for iso), or "unix" (timestamp in seconds).',
    )


class ListCalendarsArgs(BaseModel):
    """gcalendar_list_calendars takes no arguments."""


class ListEventsArgs(EventListOptions):
    """Arguments for gcalendar_list_events."""

    max_results: int = Field(
        default=20, ge=1, le=50, description="Maximum number of events to return."
    )
    time_min: str | None = Field(
        default=None,
        description='Start of time range (e.g., "2025-07-07T00:00:00+08:00"). It will be automatically converted to UTC.',
    )
    time_max: str | None = Field(
        default=None,
        description='End of time range (e.g., "2025-07-07T00:00:00+08:00"). It will be automatically converted to UTC.',
    )


class CreateEventArgs(CreateEventOptions):
    """Arguments for gcalendar_create_event."""


class DeclineEventArgs(DeclineEventOptions):
    """Arguments for gcalendar_decline_event."""


# =============================================================================
# Catalogue
# =============================================================================


@dataclass(frozen=True)
class ToolSpec:
    """Static description of one tool.

    Attributes:
        name: Tool name exposed to callers.
        description: Human-readable description.
        arguments: Model validating the call arguments.
        failure: Prefix of the error message when the call fails.
        service: Upstream client the tool needs, if any.
    """

    name: str
    description: str
    arguments: type[BaseModel]
    failure: str
    service: ServiceName | None = None

    def to_tool(self) -> Tool:
        """Build the MCP tool definition."""
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.arguments.model_json_schema(by_alias=True),
        )


TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="gmail_list_emails",
        description="Get a list of emails from Gmail with optional filtering and details",
        arguments=ListEmailsArgs,
        failure="Error fetching email list",
        service="gmail",
    ),
    ToolSpec(
        name="gmail_get_details",
        description="Get detailed information about a specific email",
        arguments=GetEmailDetailsArgs,
        failure="Error fetching email details",
        service="gmail",
    ),
    ToolSpec(
        name="gmail_search_emails",
        description="Search emails using Gmail query syntax",
        arguments=SearchEmailsArgs,
        failure="Error searching emails",
        service="gmail",
    ),
    ToolSpec(
        name="datetime_converter",
        description="Convert a date-time string to a different format or timezone",
        arguments=DatetimeConverterArgs,
        failure="Error converting date-time",
    ),
    ToolSpec(
        name="gcalendar_list_calendars",
        description="Get a list of all calendars in the user calendar list",
        arguments=ListCalendarsArgs,
        failure="Error listing calendars",
        service="gcalendar",
    ),
    ToolSpec(
        name="gcalendar_list_events",
        description="Get a list of events from a specified calendar",
        arguments=ListEventsArgs,
        failure="Error listing events",
        service="gcalendar",
    ),
    ToolSpec(
        name="gcalendar_create_event",
        description="Create a new event in a calendar",
        arguments=CreateEventArgs,
        failure="Error creating event",
        service="gcalendar",
    ),
    ToolSpec(
        name="gcalendar_decline_event",
        description="Decline an invitation to a calendar event.",
        arguments=DeclineEventArgs,
        failure="Error declining event",
        service="gcalendar",
    ),
)

TOOLS_BY_NAME: dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_SPECS}


def list_tool_definitions() -> list[Tool]:
    """Return the MCP definitions of every tool."""
    return [spec.to_tool() for spec in TOOL_SPECS]
