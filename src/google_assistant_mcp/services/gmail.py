"""Gmail client bound to a caller's access token.

Provides message listing (optionally expanded through a single multipart
batch request), message details with plain-text body extraction and word
truncation, and query-based search.
"""

import base64
import binascii
import json
import logging
import re
from collections.abc import Iterable
from typing import Any
from urllib.parse import quote
from uuid import uuid4

from google_assistant_mcp.services.base import GoogleService
from google_assistant_mcp.services.errors import ErrorCode, GmailServiceError, ServiceError
from google_assistant_mcp.services.models import (
    DEFAULT_INCLUDE_HEADERS,
    DEFAULT_MAX_WORDS,
    INBOX_LABEL,
    EmailDetails,
    EmailDetailsOptions,
    EmailHeader,
    EmailListItem,
    EmailListOptions,
    EmailListResponse,
    GmailMessage,
    MessageFormat,
    MessagePart,
)

logger = logging.getLogger(__name__)

GMAIL_API_BASE = "https://gmail.googleapis.com/gmail/v1"
GMAIL_BATCH_URL = "https://gmail.googleapis.com/batch/gmail/v1"
GMAIL_BATCH_PATH = "/gmail/v1/users/me/messages"

# Upstream ceiling on sub-requests per batch call
MAX_BATCH_SIZE = 100

TRUNCATION_SUFFIX = "..."

_BOUNDARY_RE = re.compile(r'boundary="?([^";,\s]+)"?', re.IGNORECASE)
_JSON_DECODER = json.JSONDecoder()


# =============================================================================
# Body helpers
# =============================================================================


def decode_base64url(data: str) -> str:
    """Decode base64url data (``-``/``_`` alphabet, padding optional) to text.

    Raises:
        GmailServiceError: DECODE_ERROR if the data is not valid base64 or
            not UTF-8.
    """
    standard = data.replace("-", "+").replace("_", "/")
    padding = len(standard) % 4
    if padding:
        standard += "=" * (4 - padding)
    try:
        return base64.b64decode(standard, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise GmailServiceError("Failed to decode base64url data", ErrorCode.DECODE_ERROR) from e


def extract_email_body(message: GmailMessage) -> str:
    """Return the first inline ``text/plain`` part, searching depth-first.

    Parts that fail to decode are skipped. Falls back to the message
    snippet when no plain-text part exists.
    """
    stack: list[MessagePart] = [message.payload] if message.payload else []
    while stack:
        part = stack.pop()
        data = part.body.data if part.body else None
        if part.mime_type == "text/plain" and data:
            try:
                return decode_base64url(data)
            except GmailServiceError:
                logger.warning(f"Skipping undecodable text part {part.part_id!r} of {message.id}")
        # Reverse so the first child is visited first
        stack.extend(reversed(part.parts))
    return message.snippet or ""


def truncate_words(text: str, max_words: int) -> str:
    """Cap text at ``max_words`` whitespace-separated words.

    Text within the cap is returned unchanged. Longer text keeps the first
    ``max_words`` words joined by single spaces, followed by ``...``.
    A cap of 0 disables truncation.
    """
    if max_words <= 0:
        return text
    words = text.split()
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words]) + TRUNCATION_SUFFIX


def filter_headers(headers: Iterable[EmailHeader], include: Iterable[str]) -> list[EmailHeader]:
    """Keep headers whose name is in ``include`` (case-insensitive), in upstream order."""
    wanted = {name.lower() for name in include}
    return [header for header in headers if header.name.lower() in wanted]


# =============================================================================
# Batch helpers
# =============================================================================


def build_batch_body(message_ids: list[str], boundary: str, fmt: MessageFormat = "full") -> str:
    """Build a ``multipart/mixed`` body with one GET per message.

    Each part's Content-ID is the message's position in ``message_ids``.
    """
    lines: list[str] = []
    for index, message_id in enumerate(message_ids):
        lines.extend(
            [
                f"--{boundary}",
                "Content-Type: application/http",
                f"Content-ID: <{index}>",
                "",
                f"GET {GMAIL_BATCH_PATH}/{quote(message_id, safe='')}?format={fmt}",
                "",
            ]
        )
    lines.append(f"--{boundary}--")
    return "\r\n".join(lines) + "\r\n"


def parse_batch_response(content_type: str, body: str) -> list[dict[str, Any]]:
    """Parse a multipart batch response into the JSON body of each part.

    The boundary is read from ``content_type``; it may differ from the one
    used in the request. Parts whose JSON carries an ``error`` object and
    parts that fail to decode are logged and skipped.

    Raises:
        GmailServiceError: API_ERROR if the content type declares no boundary.
    """
    match = _BOUNDARY_RE.search(content_type or "")
    if not match:
        raise GmailServiceError(
            f"Batch response has no multipart boundary (content-type: {content_type!r})",
            ErrorCode.API_ERROR,
        )
    boundary = match.group(1)

    records: list[dict[str, Any]] = []
    for segment in body.split(f"--{boundary}"):
        segment = segment.strip()
        if not segment or segment == "--":
            continue

        start = segment.find("{")
        if start == -1:
            logger.warning("Batch part without a JSON body skipped")
            continue

        try:
            record, _ = _JSON_DECODER.raw_decode(segment, start)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to decode batch part: {e}")
            continue

        if not isinstance(record, dict):
            continue

        if "error" in record:
            error = record["error"]
            detail = error.get("message") if isinstance(error, dict) else error
            logger.warning(f"Batch sub-request failed: {detail}")
            continue

        records.append(record)

    return records


# =============================================================================
# Client
# =============================================================================


class GmailService(GoogleService):
    """Gmail API client for the authenticated user (``users/me``)."""

    error_cls = GmailServiceError

    async def get_email_list(
        self, options: EmailListOptions | dict[str, Any] | None = None
    ) -> EmailListResponse:
        """List messages, optionally expanded into details via one batch call.

        Args:
            options: Listing options; see :class:`EmailListOptions`.

        Returns:
            A page of message references (or details), the continuation
            token and the result size estimate.

        Raises:
            GmailServiceError: On validation or upstream failure.
        """
        try:
            opts = EmailListOptions.model_validate(options or {})

            params: dict[str, Any] = {
                "maxResults": opts.max_results,
                "includeSpamTrash": opts.include_spam_trash,
            }
            label_ids = [INBOX_LABEL] if opts.label_ids is None else opts.label_ids
            if label_ids:
                params["labelIds"] = label_ids
            if opts.page_token:
                params["pageToken"] = opts.page_token
            if opts.query:
                params["q"] = opts.query

            response = await self.api.request(
                "GET", f"{GMAIL_API_BASE}/users/me/messages", params=params
            )
            data = self._require_data(response, "Gmail")

            items = [EmailListItem.model_validate(m) for m in data.get("messages", [])]
            messages: list[EmailDetails | EmailListItem] = list(items)
            if opts.fetch_details and items:
                messages = list(await self.batch_get_email_details([m.id for m in items]))

            return EmailListResponse(
                messages=messages,
                next_page_token=data.get("nextPageToken") or None,
                result_size_estimate=data.get("resultSizeEstimate") or 0,
            )
        except ServiceError:
            raise
        except Exception as e:
            raise self._translate(e, "Failed to fetch email list") from e

    async def batch_get_email_details(
        self,
        message_ids: list[str],
        fmt: MessageFormat = "full",
        max_words: int = DEFAULT_MAX_WORDS,
        include_headers: list[str] | None = None,
    ) -> list[EmailDetails]:
        """Fetch up to 100 messages with a single multipart batch request.

        Partial results are returned when individual sub-requests fail.

        Raises:
            GmailServiceError: BATCH_SIZE_EXCEEDED for more than 100 IDs,
                or a translated upstream error for the batch call itself.
        """
        if len(message_ids) > MAX_BATCH_SIZE:
            raise GmailServiceError(
                f"Batch requests are limited to {MAX_BATCH_SIZE} messages, got {len(message_ids)}",
                ErrorCode.BATCH_SIZE_EXCEEDED,
            )
        if not message_ids:
            return []

        headers_to_keep = include_headers or DEFAULT_INCLUDE_HEADERS
        boundary = f"batch_{uuid4().hex}"
        try:
            response = await self.api.raw_request(
                "POST",
                GMAIL_BATCH_URL,
                content=build_batch_body(message_ids, boundary, fmt),
                headers={"Content-Type": f"multipart/mixed; boundary={boundary}"},
            )
            records = parse_batch_response(response.headers.get("content-type", ""), response.text)
        except ServiceError:
            raise
        except Exception as e:
            raise self._translate(e, "Failed to batch fetch email details") from e

        details: list[EmailDetails] = []
        for record in records:
            try:
                message = GmailMessage.model_validate(record)
            except ValueError as e:
                logger.warning(f"Skipping malformed batch record: {e}")
                continue
            details.append(self._to_email_details(message, max_words, headers_to_keep))
        return details

    async def get_email_details(self, options: EmailDetailsOptions | dict[str, Any]) -> EmailDetails:
        """Fetch one message and reshape it.

        Raises:
            GmailServiceError: EMAIL_NOT_FOUND for an unknown ID, or another
                translated error.
        """
        message_id = None
        try:
            opts = EmailDetailsOptions.model_validate(options)
            message_id = opts.message_id
            message = await self._get_message(opts.message_id, opts.format)
            return self._to_email_details(message, opts.max_words, opts.include_headers)
        except ServiceError:
            raise
        except Exception as e:
            raise self._translate(
                e,
                "Failed to fetch email details",
                not_found=(ErrorCode.EMAIL_NOT_FOUND, f"Email with ID {message_id} not found"),
            ) from e

    async def get_email_headers(self, message_id: str) -> list[EmailHeader]:
        """Return every header of a message, fetched in metadata format.

        Raises:
            GmailServiceError: HEADERS_FETCH_ERROR wrapping any failure.
        """
        try:
            if not message_id:
                raise GmailServiceError("Message ID is required", ErrorCode.VALIDATION_ERROR)
            message = await self._get_message(message_id, "metadata")
        except Exception as e:
            detail = e.message if isinstance(e, ServiceError) else str(e)
            raise GmailServiceError(
                f"Failed to fetch email headers: {detail}", ErrorCode.HEADERS_FETCH_ERROR
            ) from e
        return message.payload.headers if message.payload else []

    async def search_emails(self, query: str, max_results: int = 10) -> EmailListResponse:
        """Search the inbox with Gmail query syntax."""
        return await self.get_email_list({"query": query, "max_results": max_results})

    async def get_unread_emails(self, max_results: int = 10) -> EmailListResponse:
        """List unread inbox messages."""
        return await self.search_emails("is:unread", max_results)

    async def _get_message(self, message_id: str, fmt: MessageFormat) -> GmailMessage:
        response = await self.api.request(
            "GET",
            f"{GMAIL_API_BASE}/users/me/messages/{quote(message_id, safe='')}",
            params={"format": fmt},
        )
        return GmailMessage.model_validate(self._require_data(response, "Gmail"))

    def _to_email_details(
        self, message: GmailMessage, max_words: int, include_headers: list[str]
    ) -> EmailDetails:
        headers = message.payload.headers if message.payload else []
        return EmailDetails(
            id=message.id,
            thread_id=message.thread_id,
            snippet=message.snippet,
            internal_date=message.internal_date,
            text_body=truncate_words(extract_email_body(message), max_words),
            headers=filter_headers(headers, include_headers),
        )
