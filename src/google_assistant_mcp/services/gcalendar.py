"""Google Calendar client bound to a caller's access token."""

import logging
from typing import Any
from urllib.parse import quote

from google_assistant_mcp.services.base import GoogleService
from google_assistant_mcp.services.errors import ErrorCode, GCalendarServiceError, ServiceError
from google_assistant_mcp.services.models import (
    CalendarEvent,
    CalendarListEntry,
    CreateEventOptions,
    DeclineEventOptions,
    EventListOptions,
    EventListResponse,
)

logger = logging.getLogger(__name__)

CALENDAR_API_BASE = "https://www.googleapis.com/calendar/v3"
TOKEN_INFO_URL = "https://oauth2.googleapis.com/tokeninfo"

_NOT_FOUND = (ErrorCode.NOT_FOUND, "Calendar or event not found.")


def _events_url(calendar_id: str, event_id: str | None = None) -> str:
    url = f"{CALENDAR_API_BASE}/calendars/{quote(calendar_id, safe='')}/events"
    if event_id is not None:
        url = f"{url}/{quote(event_id, safe='')}"
    return url


def _send_updates(notify: bool) -> str:
    return "all" if notify else "none"


class GCalendarService(GoogleService):
    """Calendar API client for the authenticated user."""

    error_cls = GCalendarServiceError

    async def list_calendars(self) -> list[CalendarListEntry]:
        """Return every entry of the user's calendar list, following pagination."""
        try:
            calendars: list[CalendarListEntry] = []
            params: dict[str, Any] = {}
            while True:
                response = await self.api.request(
                    "GET", f"{CALENDAR_API_BASE}/users/me/calendarList", params=params or None
                )
                for item in response.get("items") or []:
                    calendars.append(CalendarListEntry.model_validate(item))

                page_token = response.get("nextPageToken")
                if not page_token:
                    return calendars
                params = {"pageToken": page_token}
        except ServiceError:
            raise
        except Exception as e:
            raise self._translate(e, "Failed to list calendars", _NOT_FOUND) from e

    async def list_events(self, options: EventListOptions | dict[str, Any]) -> EventListResponse:
        """List events of a calendar, expanding recurring events by default.

        Raises:
            GCalendarServiceError: On validation or upstream failure.
        """
        try:
            opts = EventListOptions.model_validate(options)
            params: dict[str, Any] = {
                "singleEvents": opts.single_events,
                "orderBy": opts.order_by,
            }
            optional = {
                "maxResults": opts.max_results,
                "pageToken": opts.page_token,
                "timeMin": opts.time_min,
                "timeMax": opts.time_max,
                "q": opts.query,
            }
            params.update({key: value for key, value in optional.items() if value is not None})

            response = await self.api.request("GET", _events_url(opts.calendar_id), params=params)

            return EventListResponse(
                events=[CalendarEvent.model_validate(item) for item in response.get("items") or []],
                next_page_token=response.get("nextPageToken") or None,
            )
        except ServiceError:
            raise
        except Exception as e:
            raise self._translate(e, "Failed to list events", _NOT_FOUND) from e

    async def create_event(self, options: CreateEventOptions | dict[str, Any]) -> CalendarEvent:
        """Create an event and return it in canonical shape."""
        try:
            opts = CreateEventOptions.model_validate(options)
            body: dict[str, Any] = {
                "summary": opts.summary,
                "start": opts.start.to_payload(),
                "end": opts.end.to_payload(),
            }
            if opts.description is not None:
                body["description"] = opts.description
            if opts.location is not None:
                body["location"] = opts.location
            if opts.attendees:
                body["attendees"] = [{"email": email} for email in opts.attendees]

            response = await self.api.request(
                "POST",
                _events_url(opts.calendar_id),
                params={"sendUpdates": _send_updates(opts.send_notifications)},
                json_data=body,
            )
            return CalendarEvent.model_validate(self._require_data(response, "Calendar"))
        except ServiceError:
            raise
        except Exception as e:
            raise self._translate(e, "Failed to create event", _NOT_FOUND) from e

    async def decline_event(self, options: DeclineEventOptions | dict[str, Any]) -> CalendarEvent:
        """Decline an invitation on behalf of the token's owner.

        Only the caller's own attendee entry is changed; if the caller is
        not listed (e.g. invited through a group), an entry is added. The
        organizer is always notified.

        Raises:
            GCalendarServiceError: USER_EMAIL_NOT_FOUND when the token does
                not reveal an email address, or another translated error.
        """
        try:
            opts = DeclineEventOptions.model_validate(options)
            user_email = await self.get_user_email()

            url = _events_url(opts.calendar_id, opts.event_id)
            event = self._require_data(await self.api.request("GET", url), "Calendar")

            attendees = self._declined_attendees(event.get("attendees") or [], user_email)

            response = await self.api.request(
                "PATCH",
                url,
                params={"sendUpdates": _send_updates(True)},
                json_data={"attendees": attendees},
            )
            return CalendarEvent.model_validate(self._require_data(response, "Calendar"))
        except ServiceError:
            raise
        except Exception as e:
            raise self._translate(e, "Failed to decline event", _NOT_FOUND) from e

    async def get_user_email(self) -> str:
        """Resolve the email address the access token was issued to."""
        info = await self.api.request(
            "POST", TOKEN_INFO_URL, form_data={"access_token": self.access_token}
        )
        email = info.get("email")
        if not email:
            raise GCalendarServiceError(
                "Could not determine user email from token.", ErrorCode.USER_EMAIL_NOT_FOUND
            )
        return str(email)

    @staticmethod
    def _declined_attendees(
        attendees: list[dict[str, Any]], user_email: str
    ) -> list[dict[str, Any]]:
        target = user_email.lower()
        updated: list[dict[str, Any]] = []
        found = False
        for attendee in attendees:
            if str(attendee.get("email", "")).lower() == target:
                found = True
                attendee = {**attendee, "responseStatus": "declined"}
            updated.append(attendee)

        if not found:
            updated.append({"email": user_email, "responseStatus": "declined"})
        return updated
