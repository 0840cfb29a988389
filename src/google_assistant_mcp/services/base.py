"""Common construction and error policy for upstream service clients."""

from typing import Any, ClassVar, TypeVar

import httpx

from google_assistant_mcp.auth import BEARER_PREFIX
from google_assistant_mcp.services.errors import ErrorCode, ServiceError, translate_error
from google_assistant_mcp.services.http import GoogleApiClient

ServiceT = TypeVar("ServiceT", bound="GoogleService")


class GoogleService:
    """Base class for token-bound Google API clients.

    A service instance carries no state beyond its token and is meant to be
    built for a single tool call and then dropped.

    Attributes:
        api: Authenticated HTTP handle used for every upstream call.
    """

    error_cls: ClassVar[type[ServiceError]] = ServiceError

    def __init__(self, access_token: str, http_client: httpx.AsyncClient) -> None:
        """Initialize the client.

        Args:
            access_token: Google OAuth2 access token.
            http_client: Shared pooled HTTP client.

        Raises:
            ServiceError: MISSING_ACCESS_TOKEN when the token is empty.
        """
        if not access_token:
            raise self.error_cls("Access token is required", ErrorCode.MISSING_ACCESS_TOKEN)
        self.api = GoogleApiClient(access_token, http_client)

    @property
    def access_token(self) -> str:
        """Token this client authenticates with."""
        return self.api.access_token

    @classmethod
    def from_bearer_token(
        cls: type[ServiceT], bearer_token: str | None, http_client: httpx.AsyncClient
    ) -> ServiceT:
        """Create a client from a bearer value.

        Args:
            bearer_token: Either ``"Bearer <token>"`` or the bare token.
            http_client: Shared pooled HTTP client.

        Returns:
            A client bound to the token.

        Raises:
            ServiceError: MISSING_BEARER_TOKEN when no value is given,
                INVALID_BEARER_TOKEN when the token part is empty.
        """
        if bearer_token is None:
            raise cls.error_cls("Bearer token is required", ErrorCode.MISSING_BEARER_TOKEN)

        token = bearer_token
        if token.startswith(BEARER_PREFIX):
            token = token[len(BEARER_PREFIX) :]

        if not token.strip():
            raise cls.error_cls("Invalid bearer token format", ErrorCode.INVALID_BEARER_TOKEN)

        return cls(token, http_client)

    def _translate(
        self,
        error: BaseException,
        default_message: str,
        not_found: tuple[ErrorCode, str] | None = None,
    ) -> ServiceError:
        return translate_error(error, default_message, self.error_cls, not_found)

    def _require_data(self, response: dict[str, Any] | None, api_name: str) -> dict[str, Any]:
        if not response:
            raise self.error_cls(
                f"No data received from {api_name} API", ErrorCode.NO_DATA_RECEIVED
            )
        return response
