"""Typed errors shared by the Gmail and Calendar clients.

Every failure that leaves a service client is a :class:`ServiceError`
carrying a human message, a stable :class:`ErrorCode` and an optional HTTP
status. :func:`translate_error` is the single mapping from raw failures
(pydantic validation, httpx status errors, anything else) to those codes.
"""

from enum import Enum
from typing import Any

import httpx
from pydantic import ValidationError


class ErrorCode(str, Enum):
    """Machine-readable error codes reported to protocol callers."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    EMAIL_NOT_FOUND = "EMAIL_NOT_FOUND"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    API_ERROR = "API_ERROR"
    BATCH_SIZE_EXCEEDED = "BATCH_SIZE_EXCEEDED"
    MISSING_AUTHORIZATION = "MISSING_AUTHORIZATION"
    INVALID_BEARER_TOKEN = "INVALID_BEARER_TOKEN"
    MISSING_BEARER_TOKEN = "MISSING_BEARER_TOKEN"
    MISSING_ACCESS_TOKEN = "MISSING_ACCESS_TOKEN"
    NO_SESSION_CONTEXT = "NO_SESSION_CONTEXT"
    USER_EMAIL_NOT_FOUND = "USER_EMAIL_NOT_FOUND"
    DECODE_ERROR = "DECODE_ERROR"
    HEADERS_FETCH_ERROR = "HEADERS_FETCH_ERROR"
    NO_DATA_RECEIVED = "NO_DATA_RECEIVED"
    INVALID_DATETIME = "INVALID_DATETIME"


class ServiceError(Exception):
    """Base exception for upstream service clients.

    Attributes:
        message: Human-readable error description.
        code: Stable machine code.
        status_code: HTTP status from the upstream response, if any.
    """

    label = "API Error"

    def __init__(self, message: str, code: ErrorCode, status_code: int | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            code: Stable machine code.
            status_code: HTTP status from the upstream response, if any.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code

    def describe(self) -> str:
        """Return ``"<label> [<CODE>]: <message>"`` for user-facing reports."""
        return f"{self.label} [{self.code.value}]: {self.message}"


class GmailServiceError(ServiceError):
    """Error raised by the Gmail client."""

    label = "Gmail API Error"


class GCalendarServiceError(ServiceError):
    """Error raised by the Google Calendar client."""

    label = "GCalendar API Error"


class DateTimeConversionError(ServiceError):
    """Error raised by the date-time converter tool."""

    label = "DateTime Error"


# Status-specific translations shared by every client
_STATUS_TRANSLATIONS: dict[int, tuple[ErrorCode, str]] = {
    401: (
        ErrorCode.AUTHENTICATION_FAILED,
        "Authentication failed. Invalid or expired access token.",
    ),
    403: (
        ErrorCode.PERMISSION_DENIED,
        "Insufficient permissions or quota exceeded.",
    ),
    429: (
        ErrorCode.RATE_LIMIT_EXCEEDED,
        "Rate limit exceeded. Please try again later.",
    ),
}


def format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into a single line."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        problems.append(f"{location}: {item['msg']}" if location else item["msg"])
    return f"Invalid input parameters: {', '.join(problems)}"


def upstream_message(response: httpx.Response) -> str | None:
    """Extract Google's ``error.message`` from an error response body."""
    try:
        payload: Any = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            return error.get("message")
        if isinstance(error, str):
            return payload.get("error_description") or error
    return None


def translate_error(
    error: BaseException,
    default_message: str,
    error_cls: type[ServiceError] = ServiceError,
    not_found: tuple[ErrorCode, str] | None = None,
) -> ServiceError:
    """Map any failure raised around an upstream call to a typed error.

    Args:
        error: The exception that was raised.
        default_message: Operation description used for generic API errors.
        error_cls: ServiceError subclass to construct.
        not_found: Code and message to use for HTTP 404. When None, a 404
            is reported as a generic API error.

    Returns:
        The typed error to raise. Typed errors are returned unchanged.
    """
    if isinstance(error, ServiceError):
        return error

    if isinstance(error, ValidationError):
        return error_cls(format_validation_error(error), ErrorCode.VALIDATION_ERROR)

    status_code: int | None = None
    detail = str(error) or error.__class__.__name__

    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code
        detail = upstream_message(error.response) or detail

        if status_code == 404 and not_found is not None:
            code, message = not_found
            return error_cls(message, code, 404)

        if status_code in _STATUS_TRANSLATIONS:
            code, message = _STATUS_TRANSLATIONS[status_code]
            return error_cls(message, code, status_code)

    return error_cls(f"{default_message}: {detail}", ErrorCode.API_ERROR, status_code)


__all__ = [
    "ErrorCode",
    "ServiceError",
    "GmailServiceError",
    "GCalendarServiceError",
    "DateTimeConversionError",
    "format_validation_error",
    "translate_error",
    "upstream_message",
]
