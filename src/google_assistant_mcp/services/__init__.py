"""Upstream Google API clients.

Each client is bound to one caller-supplied access token and shares the
process-wide pooled HTTP client. Failures surface as
:class:`~google_assistant_mcp.services.errors.ServiceError` subclasses.
"""

from google_assistant_mcp.services.errors import (
    DateTimeConversionError,
    ErrorCode,
    GCalendarServiceError,
    GmailServiceError,
    ServiceError,
)
from google_assistant_mcp.services.gcalendar import GCalendarService
from google_assistant_mcp.services.gmail import GmailService
from google_assistant_mcp.services.http import GoogleApiClient, create_http_client

__all__ = [
    "DateTimeConversionError",
    "ErrorCode",
    "GCalendarService",
    "GCalendarServiceError",
    "GmailService",
    "GmailServiceError",
    "GoogleApiClient",
    "ServiceError",
    "create_http_client",
]
