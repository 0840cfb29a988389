"""Session-scoped HTTP gateway for the MCP tool server.

Serves ``/health`` and the streamable-HTTP MCP endpoint ``/mcp``. Every MCP
session gets its own transport and :class:`GoogleAssistantServer`, running
as a task in the gateway's task group. The registry keeps the headers of
the latest request on each session so tool calls always use the caller's
current bearer token.
"""

import contextlib
import json
import logging
from collections.abc import AsyncIterator
from typing import Any
from uuid import uuid4

import anyio
import httpx
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.types import Message, Receive, Scope, Send

from google_assistant_mcp.config import ServerSettings
from google_assistant_mcp.server.google_assistant_server import SERVER_NAME, GoogleAssistantServer
from google_assistant_mcp.server.registry import Session, SessionRegistry, snapshot_headers
from google_assistant_mcp.services import create_http_client

logger = logging.getLogger(__name__)

NO_SESSION_MESSAGE = "Bad Request: No valid session ID provided"
INVALID_SESSION_MESSAGE = "Invalid or missing session ID"


def jsonrpc_error(code: int, message: str) -> dict[str, Any]:
    """Build a JSON-RPC error envelope with a null id."""
    return {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": None}


def is_initialize_request(payload: Any) -> bool:
    """Check whether a JSON-RPC payload (single or batch) is an initialize request."""
    if isinstance(payload, list):
        return any(is_initialize_request(item) for item in payload)
    return isinstance(payload, dict) and payload.get("method") == "initialize"


def _replay_body(body: bytes, receive: Receive) -> Receive:
    """Wrap ``receive`` so an already-read request body is delivered again."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class GoogleAssistantGateway:
    """HTTP front door multiplexing MCP sessions over one process.

    Attributes:
        settings: Gateway configuration.
        registry: Active sessions by ID.
        app: Starlette application serving the gateway.
    """

    def __init__(self, settings: ServerSettings | None = None) -> None:
        """Initialize the gateway.

        Args:
            settings: Gateway configuration; defaults are used when omitted.
        """
        self.settings = settings or ServerSettings()
        self.registry = SessionRegistry()
        self._http_client: httpx.AsyncClient | None = None
        self._task_group: TaskGroup | None = None
        self.app = Starlette(
            routes=[
                Route("/health", endpoint=self.health, methods=["GET"]),
                Route("/mcp", endpoint=_McpEndpoint(self), methods=["GET", "POST", "DELETE"]),
            ],
            lifespan=self.lifespan,
        )

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client with connection pooling."""
        if self._http_client is None:
            self._http_client = create_http_client(
                verify_ssl=self.settings.verify_ssl,
                timeout=self.settings.request_timeout,
            )
        return self._http_client

    async def close(self) -> None:
        """Close the shared HTTP client and release resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    @contextlib.asynccontextmanager
    async def lifespan(self, app: Starlette) -> AsyncIterator[None]:
        """Own the session task group for the lifetime of the application."""
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.info("Gateway started")
            try:
                yield
            finally:
                logger.info(f"Gateway shutting down, closing {len(self.registry)} session(s)")
                tg.cancel_scope.cancel()
                self._task_group = None
        await self.close()

    async def health(self, request: Request) -> JSONResponse:
        """Liveness probe."""
        return JSONResponse({"status": "ok", "service": SERVER_NAME})

    # =========================================================================
    # MCP endpoint
    # =========================================================================

    async def handle_mcp(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Route one MCP request to its session, opening a session on initialize."""
        request = Request(scope, receive)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)

        if request.method == "POST":
            if session_id is None:
                await self._open_session(request, scope, receive, send)
                return
            if session_id not in self.registry:
                response = JSONResponse(jsonrpc_error(-32000, NO_SESSION_MESSAGE), status_code=400)
                await response(scope, receive, send)
                return
        elif session_id is None or session_id not in self.registry:
            await PlainTextResponse(INVALID_SESSION_MESSAGE, status_code=400)(scope, receive, send)
            return

        self.registry.refresh_headers(session_id, snapshot_headers(request.headers.items()))
        transport: StreamableHTTPServerTransport = self.registry.transport(session_id)
        await transport.handle_request(scope, receive, send)

        if request.method == "DELETE" and transport.is_terminated:
            self.registry.close(session_id)

    async def _open_session(
        self, request: Request, scope: Scope, receive: Receive, send: Send
    ) -> None:
        body = await request.body()
        try:
            payload = json.loads(body)
        except ValueError:
            payload = None

        if not is_initialize_request(payload):
            response = JSONResponse(jsonrpc_error(-32000, NO_SESSION_MESSAGE), status_code=400)
            await response(scope, receive, send)
            return

        if self._task_group is None:
            raise RuntimeError("Gateway task group is not running")

        session = Session(id=uuid4().hex, headers=snapshot_headers(request.headers.items()))
        transport = StreamableHTTPServerTransport(
            mcp_session_id=session.id,
            is_json_response_enabled=self.settings.json_response,
            event_store=None,
        )
        server = GoogleAssistantServer(session.id, self.registry, self._get_http_client)

        confirmed_id = await self._task_group.start(self._run_session, server, transport)
        if confirmed_id != session.id:
            raise RuntimeError(f"Transport confirmed unexpected session ID {confirmed_id}")

        session.transport = transport
        self.registry.activate(session)
        await transport.handle_request(scope, _replay_body(body, receive), send)

    async def _run_session(
        self,
        server: GoogleAssistantServer,
        transport: StreamableHTTPServerTransport,
        *,
        task_status: TaskStatus[str] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        """Run one session's protocol server until its transport closes."""
        session_id = server.session_id
        try:
            async with transport.connect() as (read_stream, write_stream):
                task_status.started(transport.mcp_session_id)
                await server.server.run(
                    read_stream,
                    write_stream,
                    server.server.create_initialization_options(),
                    stateless=False,
                )
        except Exception:
            logger.exception(f"Session {session_id} crashed")
        finally:
            self.registry.close(session_id)


class _McpEndpoint:
    """ASGI endpoint guarding ``/mcp`` against unexpected failures."""

    def __init__(self, gateway: GoogleAssistantGateway) -> None:
        self.gateway = gateway

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response_started = False

        async def tracked_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.gateway.handle_mcp(scope, receive, tracked_send)
        except Exception:
            logger.exception("Error handling MCP request")
            if not response_started:
                response = JSONResponse(
                    jsonrpc_error(-32603, "Internal server error"), status_code=500
                )
                await response(scope, receive, send)
