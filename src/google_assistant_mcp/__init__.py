"""Google Assistant MCP Server.

Expose Gmail and Google Calendar as MCP tools over streamable HTTP,
authenticating every session with the caller's own bearer token.
"""

from google_assistant_mcp.__version__ import __version__

__all__ = ["__version__"]
