"""Bearer credential extraction from request headers.

Callers authenticate every MCP session with a pre-issued Google OAuth2
access token sent as ``Authorization: Bearer <token>``. Token acquisition
and refresh are the caller's responsibility; this module only reads the
header.
"""

from collections.abc import Mapping, Sequence

BEARER_PREFIX = "Bearer "

HeaderValue = str | Sequence[str] | None
HeaderMap = Mapping[str, HeaderValue]


def extract_bearer_token(headers: HeaderMap) -> str | None:
    """Return the token following the ``Bearer `` prefix of the authorization header.

    Both ``authorization`` and ``Authorization`` keys are accepted. For a
    multi-valued header only the first value is considered. The prefix match
    is case-sensitive.

    Args:
        headers: Mapping of header name to a single value or a list of values.

    Returns:
        The token (possibly empty, for ``"Bearer "``), or None when the header
        is missing, empty, or not a bearer credential.
    """
    value = headers.get("authorization") or headers.get("Authorization")
    if not value:
        return None

    if not isinstance(value, str):
        value = value[0] if len(value) > 0 else None

    if not value or not value.startswith(BEARER_PREFIX):
        return None

    return value[len(BEARER_PREFIX) :]
