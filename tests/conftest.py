"""Shared pytest fixtures for google-assistant-mcp tests.

This module provides a routed fake of the Google REST APIs built on
``httpx.MockTransport`` plus sample Gmail and Calendar payloads.
"""

import base64
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest


def encode_body(text: str) -> str:
    """Encode text the way Gmail encodes message bodies (base64url, no padding)."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def batch_response(parts: list[dict[str, Any] | str], boundary: str = "batch_resp") -> httpx.Response:
    """Build a multipart/mixed batch response with one JSON body per part."""
    lines: list[str] = []
    for index, part in enumerate(parts):
        body = part if isinstance(part, str) else json.dumps(part)
        lines.extend(
            [
                f"--{boundary}",
                "Content-Type: application/http",
                f"Content-ID: <response-{index}>",
                "",
                "HTTP/1.1 200 OK",
                "Content-Type: application/json; charset=UTF-8",
                "",
                body,
                "",
            ]
        )
    lines.append(f"--{boundary}--")
    return httpx.Response(
        200,
        headers={"content-type": f"multipart/mixed; boundary={boundary}"},
        content="\r\n".join(lines).encode("utf-8"),
    )


# =============================================================================
# Fake Google API
# =============================================================================


class FakeGoogleApi:
    """Routes requests by (method, URL path) and records every request.

    Routes are registered with :meth:`add`; a response may be a dict (sent
    as JSON with status 200), an ``httpx.Response``, or a callable taking
    the request. Unrouted requests get a 404 Google-style error.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, response: Any) -> None:
        self.routes[(method.upper(), path)] = response

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": {"code": 404, "message": "Not Found"}})
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


@pytest.fixture
def google_api() -> FakeGoogleApi:
    """Create an empty fake Google API."""
    return FakeGoogleApi()


@pytest.fixture
def http_client(google_api: FakeGoogleApi) -> httpx.AsyncClient:
    """Create an httpx client wired to the fake Google API."""
    return google_api.client()


# =============================================================================
# Gmail payloads
# =============================================================================


@pytest.fixture
def gmail_message() -> dict[str, Any]:
    """Create a multipart Gmail message resource."""
    return {
        "id": "msg1",
        "threadId": "thread1",
        "labelIds": ["INBOX", "UNREAD"],
        "snippet": "Quarterly numbers attached",
        "internalDate": "1721487600000",
        "payload": {
            "partId": "",
            "mimeType": "multipart/alternative",
            "headers": [
                {"name": "From", "value": "alice@example.com"},
                {"name": "To", "value": "bob@example.com"},
                {"name": "Subject", "value": "Q3 report"},
                {"name": "Date", "value": "Sat, 20 Jul 2024 15:00:00 +0000"},
                {"name": "Message-ID", "value": "<abc@example.com>"},
            ],
            "body": {"size": 0},
            "parts": [
                {
                    "partId": "0",
                    "mimeType": "text/plain",
                    "body": {"size": 37, "data": encode_body("Hello Bob, the Q3 report is attached.")},
                },
                {
                    "partId": "1",
                    "mimeType": "text/html",
                    "body": {"size": 50, "data": encode_body("<p>Hello Bob</p>")},
                },
            ],
        },
    }


@pytest.fixture
def gmail_list_page() -> dict[str, Any]:
    """Create a users.messages.list response page."""
    return {
        "messages": [
            {"id": "msg1", "threadId": "thread1"},
            {"id": "msg2", "threadId": "thread2"},
        ],
        "nextPageToken": "page-2",
        "resultSizeEstimate": 42,
    }


# =============================================================================
# Calendar payloads
# =============================================================================


@pytest.fixture
def calendar_event() -> dict[str, Any]:
    """Create a Calendar event resource with the caller as attendee."""
    return {
        "id": "evt1",
        "summary": "Planning",
        "start": {"dateTime": "2025-07-07T10:00:00Z"},
        "end": {"dateTime": "2025-07-07T11:00:00Z"},
        "attendees": [
            {"email": "organizer@example.com", "responseStatus": "accepted"},
            {"email": "Me@Example.com", "responseStatus": "needsAction"},
        ],
        "organizer": {"email": "organizer@example.com"},
        "htmlLink": "https://calendar.google.com/event?eid=evt1",
        "status": "confirmed",
    }


# =============================================================================
# CLI Test Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def make_batch_response() -> Callable[..., httpx.Response]:
    """Provide the multipart batch response builder."""
    return batch_response


@pytest.fixture
def body_encoder() -> Callable[[str], str]:
    """Provide the Gmail base64url body encoder."""
    return encode_body
