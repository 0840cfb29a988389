"""Shared helpers."""

from google_assistant_mcp.utils.dates import (
    InvalidDateTimeError,
    convert_datetime,
    format_iso_utc,
    parse_datetime,
    to_utc_iso,
)

__all__ = [
    "InvalidDateTimeError",
    "convert_datetime",
    "format_iso_utc",
    "parse_datetime",
    "to_utc_iso",
]
