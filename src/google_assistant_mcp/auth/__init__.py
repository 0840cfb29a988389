"""Authentication helpers for Google Assistant MCP.

Sessions carry a caller-issued Google OAuth2 access token in the
``Authorization`` header; there is no local token storage.

Quick Start:
    ```python
    from google_assistant_mcp.auth import extract_bearer_token

    token = extract_bearer_token({"authorization": "Bearer ya29.abc"})
    ```
"""

from google_assistant_mcp.auth.bearer import (
    BEARER_PREFIX,
    HeaderMap,
    HeaderValue,
    extract_bearer_token,
)

__all__ = [
    "BEARER_PREFIX",
    "HeaderMap",
    "HeaderValue",
    "extract_bearer_token",
]
