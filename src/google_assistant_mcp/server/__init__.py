"""MCP server implementation for Gmail and Google Calendar.

Provides 8 tools:

Gmail Tools (3):
- List emails with optional batch-fetched details
- Get one email's details with a word-limited body
- Search emails with Gmail query syntax

Calendar Tools (4):
- List calendars
- List events
- Create events with attendees
- Decline invitations

Utility Tools (1):
- Convert date-time strings to ISO 8601 or Unix time

Transport: Streamable HTTP, one session per MCP client
Authentication: caller-supplied OAuth 2.0 bearer token on every request
"""

from starlette.applications import Starlette

from google_assistant_mcp.config import ServerSettings
from google_assistant_mcp.server.gateway import GoogleAssistantGateway
from google_assistant_mcp.server.google_assistant_server import (
    SERVER_NAME,
    GoogleAssistantServer,
    ToolExecutionError,
)
from google_assistant_mcp.server.registry import Session, SessionRegistry, SessionState
from google_assistant_mcp.server.tools import TOOL_SPECS, list_tool_definitions


def create_app(settings: ServerSettings | None = None) -> Starlette:
    """Create the gateway's ASGI application.

    Returns:
        Starlette: Application serving ``/health`` and ``/mcp``.

    Example:
        >>> app = create_app()
        >>> uvicorn.run(app, port=3000)
    """
    return GoogleAssistantGateway(settings).app


__all__ = [
    "SERVER_NAME",
    "TOOL_SPECS",
    "GoogleAssistantGateway",
    "GoogleAssistantServer",
    "Session",
    "SessionRegistry",
    "SessionState",
    "ToolExecutionError",
    "create_app",
    "list_tool_definitions",
]
