"""Date-time parsing and formatting helpers.

Timestamps sent to Google APIs are normalized to UTC and rendered the way
JavaScript's ``Date.toISOString`` does (millisecond precision, ``Z``
suffix), which is also the format the converter tool returns.
"""

import math
from datetime import datetime, timezone
from typing import Literal

from dateutil import parser as dateutil_parser
from dateutil.tz import tzoffset

OutputFormat = Literal["iso", "utc", "unix"]

# Common abbreviations dateutil cannot resolve on its own
_TZINFOS = {
    "UTC": timezone.utc,
    "GMT": timezone.utc,
    "Z": timezone.utc,
    "EST": tzoffset("EST", -5 * 3600),
    "EDT": tzoffset("EDT", -4 * 3600),
    "CST": tzoffset("CST", -6 * 3600),
    "CDT": tzoffset("CDT", -5 * 3600),
    "MST": tzoffset("MST", -7 * 3600),
    "MDT": tzoffset("MDT", -6 * 3600),
    "PST": tzoffset("PST", -8 * 3600),
    "PDT": tzoffset("PDT", -7 * 3600),
    "CET": tzoffset("CET", 1 * 3600),
    "CEST": tzoffset("CEST", 2 * 3600),
    "JST": tzoffset("JST", 9 * 3600),
}


class InvalidDateTimeError(ValueError):
    """Raised when a date-time string cannot be parsed."""


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: str) -> datetime:
    """Parse a free-form date-time string into an aware UTC datetime.

    Args:
        value: Anything from ``"2024-07-20T15:00:00-07:00"`` to
            ``"July 20, 2024 3:00 PM PST"``.

    Returns:
        The parsed instant in UTC.

    Raises:
        InvalidDateTimeError: If the string is empty or unparseable.
    """
    if not value or not value.strip():
        raise InvalidDateTimeError("Invalid date-time string provided.")
    try:
        parsed = dateutil_parser.parse(value, tzinfos=_TZINFOS)
    except (ValueError, OverflowError) as e:
        raise InvalidDateTimeError("Invalid date-time string provided.") from e
    return _as_utc(parsed)


def format_iso_utc(value: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return _as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_utc_iso(value: str) -> str:
    """Normalize an ISO8601 timestamp with any offset to UTC.

    Raises:
        InvalidDateTimeError: If the string is not ISO8601.
    """
    try:
        parsed = dateutil_parser.isoparse(value)
    except (ValueError, OverflowError) as e:
        raise InvalidDateTimeError(f"Invalid ISO8601 timestamp: {value!r}") from e
    return format_iso_utc(parsed)


def convert_datetime(value: str, output_format: OutputFormat = "iso") -> str | int:
    """Convert a date-time string to ISO-8601 UTC or Unix seconds.

    Args:
        value: Date-time string to convert.
        output_format: ``"iso"`` (default), ``"utc"`` (alias for iso) or
            ``"unix"`` (integer seconds since the epoch).

    Returns:
        The converted value.

    Raises:
        InvalidDateTimeError: If the string cannot be parsed.
    """
    parsed = parse_datetime(value)
    if output_format == "unix":
        return math.floor(parsed.timestamp())
    return format_iso_utc(parsed)
