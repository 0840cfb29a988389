"""In-memory registry of MCP sessions.

Maps a session ID to the transport serving it and the headers of the most
recent request seen on it. All operations are synchronous, so each one is
atomic on the event loop and sessions never wait on each other.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from google_assistant_mcp.auth import HeaderMap

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle of a session."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class Session:
    """A stateful MCP connection.

    Attributes:
        id: Opaque session identifier.
        headers: Headers of the latest request on this session.
        transport: Transport exclusively owned by this session.
        state: Current lifecycle state.
    """

    id: str
    headers: HeaderMap = field(default_factory=dict)
    transport: Any = None
    state: SessionState = SessionState.UNINITIALIZED


def snapshot_headers(items: Iterable[tuple[str, str]]) -> dict[str, str | list[str]]:
    """Build a header mapping from (name, value) pairs.

    Repeated names collect into a list of values.
    """
    snapshot: dict[str, str | list[str]] = {}
    for name, value in items:
        existing = snapshot.get(name)
        if existing is None:
            snapshot[name] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            snapshot[name] = [existing, value]
    return snapshot


class SessionRegistry:
    """Session table owned by the gateway."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._sessions: dict[str, Session] = {}

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def activate(self, session: Session) -> Session:
        """Insert a session whose transport has confirmed its ID.

        Raises:
            ValueError: If the ID is already registered or no transport is set.
        """
        if session.id in self._sessions:
            raise ValueError(f"Session {session.id} is already registered")
        if session.transport is None:
            raise ValueError(f"Session {session.id} has no transport")
        session.state = SessionState.ACTIVE
        self._sessions[session.id] = session
        logger.info(f"Session opened: {session.id} ({len(self._sessions)} active)")
        return session

    def get(self, session_id: str) -> Session | None:
        """Return the active session with this ID, if any."""
        return self._sessions.get(session_id)

    def refresh_headers(self, session_id: str, headers: HeaderMap) -> bool:
        """Replace (never merge) a session's headers.

        Returns:
            False if the session is unknown.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return False
        session.headers = headers
        return True

    def headers(self, session_id: str) -> HeaderMap | None:
        """Return the latest headers of a session, or None if unknown."""
        session = self._sessions.get(session_id)
        return session.headers if session is not None else None

    def transport(self, session_id: str) -> Any:
        """Return the transport of a session, or None if unknown."""
        session = self._sessions.get(session_id)
        return session.transport if session is not None else None

    def close(self, session_id: str) -> Session | None:
        """Remove a session together with its headers and transport.

        Closing an unknown or already closed session is a no-op.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None
        session.state = SessionState.CLOSED
        logger.info(f"Session closed: {session_id} ({len(self._sessions)} active)")
        return session
