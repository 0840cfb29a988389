"""Per-session MCP tool server for Gmail and Google Calendar.

One :class:`GoogleAssistantServer` is created for every MCP session. Each
tool call reads the session's latest request headers from the registry,
builds a fresh service client bound to that bearer token, validates the
arguments and dispatches to exactly one service operation. Every failure
is reported back as a single descriptive message; nothing raised by a tool
tears down the session.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from mcp.server import Server
from mcp.types import TextContent, Tool
from pydantic import BaseModel, ValidationError

from google_assistant_mcp.__version__ import __version__
from google_assistant_mcp.auth import extract_bearer_token
from google_assistant_mcp.server.registry import SessionRegistry
from google_assistant_mcp.server.tools import (
    TOOLS_BY_NAME,
    CreateEventArgs,
    DatetimeConverterArgs,
    DeclineEventArgs,
    GetEmailDetailsArgs,
    ListEmailsArgs,
    ListEventsArgs,
    SearchEmailsArgs,
    ToolSpec,
    list_tool_definitions,
)
from google_assistant_mcp.services import (
    DateTimeConversionError,
    ErrorCode,
    GCalendarService,
    GCalendarServiceError,
    GmailService,
    GmailServiceError,
    ServiceError,
)
from google_assistant_mcp.services.errors import format_validation_error
from google_assistant_mcp.utils.dates import InvalidDateTimeError, convert_datetime

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-google-assistant-server"

HttpClientProvider = Callable[[], Awaitable[httpx.AsyncClient]]
ToolResult = dict[str, Any] | list[Any] | str | int


class ToolExecutionError(Exception):
    """A tool call failed; the message is what the caller sees."""


class GoogleAssistantServer:
    """MCP server bound to one session.

    Attributes:
        session_id: ID of the session this server serves.
        server: MCP Server instance.
        registry: Session registry holding the session's headers.
    """

    def __init__(
        self,
        session_id: str,
        registry: SessionRegistry,
        http_client_provider: HttpClientProvider,
    ) -> None:
        """Initialize the server for a session.

        Args:
            session_id: ID of the session this server serves.
            registry: Registry holding the session's latest headers.
            http_client_provider: Coroutine returning the shared HTTP client.
        """
        self.session_id = session_id
        self.registry = registry
        self._get_http_client = http_client_provider
        self.server: Server = Server(SERVER_NAME, version=__version__)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Register MCP tool handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """Return list of available tools."""
            return list_tool_definitions()

        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
            """Handle tool calls."""
            result = await self.dispatch_tool(name, arguments or {})
            return [TextContent(type="text", text=self._render(result))]

    @staticmethod
    def _render(result: ToolResult) -> str:
        if isinstance(result, str | int):
            return str(result)
        return json.dumps(result, indent=2)

    async def dispatch_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Validate arguments and run one tool.

        Args:
            name: Tool name.
            arguments: Raw call arguments.

        Returns:
            The tool result, ready to be rendered as text.

        Raises:
            ValueError: If tool name is not recognized.
            ToolExecutionError: If the tool fails for any reason.
        """
        handlers: dict[str, Callable[[Any], Awaitable[ToolResult]]] = {
            # Gmail
            "gmail_list_emails": self._list_emails,
            "gmail_get_details": self._get_email_details,
            "gmail_search_emails": self._search_emails,
            # Utilities
            "datetime_converter": self._convert_datetime,
            # Calendar
            "gcalendar_list_calendars": self._list_calendars,
            "gcalendar_list_events": self._list_events,
            "gcalendar_create_event": self._create_event,
            "gcalendar_decline_event": self._decline_event,
        }

        spec = TOOLS_BY_NAME.get(name)
        handler = handlers.get(name)
        if spec is None or handler is None:
            raise ValueError(f"Unknown tool: {name}")

        try:
            args = self._validate(spec, arguments)
            return await handler(args)
        except ServiceError as e:
            logger.warning(f"Tool {name} failed in session {self.session_id}: [{e.code.value}] {e.message}")
            raise ToolExecutionError(f"{spec.failure}: {e.describe()}") from e
        except Exception as e:
            logger.exception(f"Error calling tool {name}")
            raise ToolExecutionError(f"{spec.failure}: {e}") from e

    def _validate(self, spec: ToolSpec, arguments: dict[str, Any]) -> BaseModel:
        try:
            return spec.arguments.model_validate(arguments)
        except ValidationError as e:
            raise self._error_cls(spec)(
                format_validation_error(e), ErrorCode.VALIDATION_ERROR
            ) from e

    @staticmethod
    def _error_cls(spec: ToolSpec) -> type[ServiceError]:
        if spec.service is None:
            return DateTimeConversionError
        return GCalendarServiceError if spec.service == "gcalendar" else GmailServiceError

    # =========================================================================
    # Session credentials
    # =========================================================================

    def _session_token(self, error_cls: type[ServiceError]) -> str:
        """Read the bearer token from the session's latest headers."""
        headers = self.registry.headers(self.session_id)
        if headers is None:
            raise error_cls(
                "No authentication context found. Please ensure the request includes proper session headers.",
                ErrorCode.NO_SESSION_CONTEXT,
            )

        token = extract_bearer_token(headers)
        if token is None:
            raise error_cls(
                'Missing or invalid Authorization header. Expected format: "Authorization: Bearer <access_token>"',
                ErrorCode.MISSING_AUTHORIZATION,
            )
        return token

    async def _gmail_service(self) -> GmailService:
        token = self._session_token(GmailServiceError)
        return GmailService.from_bearer_token(token, await self._get_http_client())

    async def _calendar_service(self) -> GCalendarService:
        token = self._session_token(GCalendarServiceError)
        return GCalendarService.from_bearer_token(token, await self._get_http_client())

    # =========================================================================
    # Gmail tools
    # =========================================================================

    async def _list_emails(self, args: ListEmailsArgs) -> dict[str, Any]:
        gmail = await self._gmail_service()
        return (await gmail.get_email_list(args)).to_payload()

    async def _get_email_details(self, args: GetEmailDetailsArgs) -> dict[str, Any]:
        gmail = await self._gmail_service()
        return (await gmail.get_email_details(args)).to_payload()

    async def _search_emails(self, args: SearchEmailsArgs) -> dict[str, Any]:
        gmail = await self._gmail_service()
        return (await gmail.search_emails(args.query, args.max_results)).to_payload()

    # =========================================================================
    # Utility tools
    # =========================================================================

    async def _convert_datetime(self, args: DatetimeConverterArgs) -> str | int:
        try:
            return convert_datetime(args.datetime, args.format)
        except InvalidDateTimeError as e:
            raise DateTimeConversionError(str(e), ErrorCode.INVALID_DATETIME) from e

    # =========================================================================
    # Calendar tools
    # =========================================================================

    async def _list_calendars(self, args: BaseModel) -> list[dict[str, Any]]:
        calendar = await self._calendar_service()
        return [entry.to_payload() for entry in await calendar.list_calendars()]

    async def _list_events(self, args: ListEventsArgs) -> dict[str, Any]:
        calendar = await self._calendar_service()
        return (await calendar.list_events(args)).to_payload()

    async def _create_event(self, args: CreateEventArgs) -> dict[str, Any]:
        calendar = await self._calendar_service()
        return (await calendar.create_event(args)).to_payload()

    async def _decline_event(self, args: DeclineEventArgs) -> dict[str, Any]:
        calendar = await self._calendar_service()
        return (await calendar.decline_event(args)).to_payload()
