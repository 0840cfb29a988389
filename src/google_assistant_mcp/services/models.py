"""Pydantic models for Gmail and Calendar options and results.

Wire names are camelCase (``threadId``, ``maxResults``) to match the
upstream APIs and the tool argument contract; Python code uses the
snake_case field names. Option models carry the bounds each service
enforces before any upstream call is made.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from google_assistant_mcp.utils.dates import to_utc_iso

INBOX_LABEL = "INBOX"
DEFAULT_INCLUDE_HEADERS = ["From", "Subject", "Date", "To"]
DEFAULT_MAX_WORDS = 300
PRIMARY_CALENDAR = "primary"
UNTITLED_EVENT = "No Title"

MessageFormat = Literal["minimal", "full", "raw", "metadata"]
ResponseStatus = Literal["needsAction", "declined", "tentative", "accepted"]
EventStatus = Literal["confirmed", "tentative", "cancelled"]
EventOrder = Literal["startTime", "updated"]


class CamelModel(BaseModel):
    """Base model using camelCase aliases on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize with wire names, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# =============================================================================
# Gmail
# =============================================================================


class EmailListOptions(CamelModel):
    """Options for listing messages in the mailbox."""

    max_results: int = Field(default=10, ge=1, le=500, description="Maximum messages to return")
    page_token: str | None = Field(default=None, description="Continuation token")
    query: str | None = Field(default=None, description="Gmail search query")
    label_ids: list[str] | None = Field(
        default=None, description="Label IDs to filter by (INBOX when omitted)"
    )
    include_spam_trash: bool = Field(default=False, description="Include spam and trash")
    fetch_details: bool = Field(
        default=False, description="Fetch message details with one batch request"
    )


class EmailDetailsOptions(CamelModel):
    """Options for fetching a single message."""

    message_id: str = Field(..., min_length=1, description="Gmail message ID")
    format: MessageFormat = Field(default="full", description="Upstream message format")
    max_words: int = Field(
        default=DEFAULT_MAX_WORDS, ge=0, description="Body word cap (0 disables truncation)"
    )
    include_headers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INCLUDE_HEADERS),
        description="Header names to keep",
    )


class EmailHeader(CamelModel):
    """A single message header."""

    name: str = ""
    value: str = ""


class MessagePartBody(CamelModel):
    """Body of a message part; ``data`` is base64url encoded."""

    attachment_id: str | None = None
    size: int = 0
    data: str | None = None


class MessagePart(CamelModel):
    """A node of the MIME part tree; each part owns its children."""

    part_id: str = ""
    mime_type: str = ""
    filename: str | None = None
    headers: list[EmailHeader] = Field(default_factory=list)
    body: MessagePartBody | None = None
    parts: list["MessagePart"] = Field(default_factory=list)


class GmailMessage(CamelModel):
    """Message resource as returned by ``users.messages.get``."""

    id: str
    thread_id: str = ""
    label_ids: list[str] = Field(default_factory=list)
    snippet: str = ""
    history_id: str = ""
    internal_date: str = ""
    size_estimate: int = 0
    payload: MessagePart | None = None
    raw: str | None = None


class EmailListItem(CamelModel):
    """Message reference returned by ``users.messages.list``."""

    id: str
    thread_id: str
    label_ids: list[str] | None = None
    snippet: str | None = None
    history_id: str | None = None
    internal_date: str | None = None
    size_estimate: int | None = None


class EmailDetails(CamelModel):
    """Reshaped message with extracted body text and filtered headers."""

    id: str
    thread_id: str
    snippet: str = ""
    internal_date: str = ""
    text_body: str = ""
    headers: list[EmailHeader] = Field(default_factory=list)


class EmailListResponse(CamelModel):
    """A page of messages."""

    messages: list[EmailDetails | EmailListItem] = Field(default_factory=list)
    next_page_token: str | None = None
    result_size_estimate: int = 0


# =============================================================================
# Calendar
# =============================================================================


class CalendarListEntry(CamelModel):
    """Trimmed calendar list entry."""

    id: str
    summary: str = ""
    description: str | None = None
    time_zone: str | None = None
    primary: bool | None = None


class EventDateTime(CamelModel):
    """Start or end of an event: a date, or a date-time with optional zone."""

    date: str | None = None
    date_time: str | None = None
    time_zone: str | None = None


class EventTimeInput(EventDateTime):
    """Caller-supplied event boundary; exactly one form must be used."""

    @model_validator(mode="after")
    def check_single_form(self) -> "EventTimeInput":
        """Require either ``date`` or ``dateTime``, never both or neither."""
        if (self.date is None) == (self.date_time is None):
            raise ValueError("exactly one of 'date' or 'dateTime' must be provided")
        if self.date is not None and self.time_zone is not None:
            raise ValueError("'timeZone' is only allowed together with 'dateTime'")
        return self


class EventAttendee(CamelModel):
    """Event attendee with response status."""

    email: str = ""
    display_name: str | None = None
    response_status: ResponseStatus = "needsAction"

    @field_validator("response_status", mode="before")
    @classmethod
    def default_response_status(cls, value: Any) -> Any:
        """Treat a missing status as needsAction."""
        return value or "needsAction"


class EventOrganizer(CamelModel):
    """Event organizer identity."""

    email: str | None = None
    display_name: str | None = None


class CalendarEvent(CamelModel):
    """Canonical event shape used for every calendar result."""

    id: str
    summary: str = UNTITLED_EVENT
    description: str | None = None
    location: str | None = None
    start: EventDateTime = Field(default_factory=EventDateTime)
    end: EventDateTime = Field(default_factory=EventDateTime)
    attendees: list[EventAttendee] = Field(default_factory=list)
    organizer: EventOrganizer = Field(default_factory=EventOrganizer)
    hangout_link: str | None = None
    html_link: str = ""
    status: EventStatus = "confirmed"

    @field_validator("summary", mode="before")
    @classmethod
    def default_summary(cls, value: Any) -> Any:
        """Blank titles become "No Title"."""
        return value or UNTITLED_EVENT

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> Any:
        """Treat a missing status as confirmed."""
        return value or "confirmed"

    @field_validator("start", "end", "organizer", mode="before")
    @classmethod
    def default_nested(cls, value: Any) -> Any:
        """Accept null nested objects from upstream."""
        return value or {}

    @field_validator("attendees", mode="before")
    @classmethod
    def default_attendees(cls, value: Any) -> Any:
        """Accept a null attendee list from upstream."""
        return value or []


class EventListOptions(CamelModel):
    """Options for listing events."""

    calendar_id: str = Field(default=PRIMARY_CALENDAR, min_length=1, description="Calendar ID")
    max_results: int | None = Field(default=None, ge=1, le=2500, description="Maximum events")
    page_token: str | None = Field(default=None, description="Continuation token")
    time_min: str | None = Field(default=None, description="Lower bound (ISO8601)")
    time_max: str | None = Field(default=None, description="Upper bound (ISO8601)")
    query: str | None = Field(default=None, description="Free text search")
    single_events: bool = Field(default=True, description="Expand recurring events")
    order_by: EventOrder = Field(default="startTime", description="Sort order")

    @field_validator("time_min", "time_max")
    @classmethod
    def normalize_to_utc(cls, value: str | None) -> str | None:
        """Convert local-offset timestamps to UTC."""
        if not value:
            return None
        return to_utc_iso(value)


class EventListResponse(CamelModel):
    """A page of events."""

    events: list[CalendarEvent] = Field(default_factory=list)
    next_page_token: str | None = None


class CreateEventOptions(CamelModel):
    """Options for creating an event."""

    calendar_id: str = Field(default=PRIMARY_CALENDAR, min_length=1, description="Calendar ID")
    summary: str = Field(..., description="Event title")
    description: str | None = Field(default=None, description="Event description")
    location: str | None = Field(default=None, description="Event location")
    start: EventTimeInput = Field(..., description="Event start")
    end: EventTimeInput = Field(..., description="Event end")
    attendees: list[EmailStr] | None = Field(default=None, description="Attendee emails")
    send_notifications: bool = Field(default=True, description="Notify attendees")


class DeclineEventOptions(CamelModel):
    """Options for declining an invitation."""

    calendar_id: str = Field(default=PRIMARY_CALENDAR, min_length=1, description="Calendar ID")
    event_id: str = Field(..., min_length=1, description="Event ID")
