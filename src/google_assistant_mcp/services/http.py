"""Authenticated HTTP access to Google APIs.

A :class:`GoogleApiClient` binds one bearer token to a shared, pooled
``httpx.AsyncClient``. The pool is owned by the gateway; clients built on
top of it are cheap and are created per tool call.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


def create_http_client(verify_ssl: bool = True, timeout: float = 30.0) -> httpx.AsyncClient:
    """Create the shared HTTP client with connection pooling.

    Args:
        verify_ssl: Whether to verify upstream TLS certificates.
        timeout: Total request timeout in seconds.

    Returns:
        A configured httpx.AsyncClient.
    """
    if not verify_ssl:
        logger.warning(
            "SSL verification is disabled. This is not recommended for production environments."
        )
    return httpx.AsyncClient(
        http2=True,
        verify=verify_ssl,
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
        timeout=httpx.Timeout(timeout, connect=10.0),
    )


class GoogleApiClient:
    """HTTP handle for Google APIs bound to a single access token.

    Attributes:
        access_token: OAuth2 access token sent on every request.
    """

    def __init__(self, access_token: str, http_client: httpx.AsyncClient) -> None:
        """Bind a token to the shared HTTP client.

        Args:
            access_token: OAuth2 access token.
            http_client: Shared pooled client used for transport.
        """
        self.access_token = access_token
        self._http_client = http_client

    def _auth_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        form_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated request and decode the JSON response.

        Args:
            method: HTTP method (GET, POST, etc.).
            url: Full URL to request.
            params: Optional query parameters.
            json_data: Optional JSON body data.
            form_data: Optional form-encoded body data.

        Returns:
            JSON response as a dictionary; empty for bodiless responses.

        Raises:
            httpx.HTTPStatusError: If the request fails.
        """
        response = await self._http_client.request(
            method=method,
            url=url,
            params=params,
            json=json_data,
            data=form_data,
            headers=self._auth_headers({"Accept": "application/json"}),
        )
        response.raise_for_status()
        if not response.content:
            return {}
        result: dict[str, Any] = response.json()
        return result

    async def raw_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        content: bytes | str | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make an authenticated request returning the raw response.

        Args:
            method: HTTP method (GET, POST, etc.).
            url: Full URL to request.
            params: Optional query parameters.
            content: Optional raw body content.
            headers: Optional additional headers.

        Returns:
            Raw httpx.Response object.

        Raises:
            httpx.HTTPStatusError: If the request fails.
        """
        response = await self._http_client.request(
            method=method,
            url=url,
            params=params,
            content=content,
            headers=self._auth_headers(headers),
        )
        response.raise_for_status()
        return response
