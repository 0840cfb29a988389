"""Runtime settings for the gateway.

Values come from CLI options, which fall back to environment variables
(optionally loaded from a ``.env`` file) and then to the defaults below.
"""

import logging

from pydantic import BaseModel, Field, field_validator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ServerSettings(BaseModel):
    """Gateway configuration.

    Attributes:
        host: Interface to bind.
        port: TCP port to listen on.
        log_level: Root logger level name.
        json_response: Answer POST requests with JSON instead of SSE streams.
        verify_ssl: Verify upstream TLS certificates.
        request_timeout: Total timeout for one upstream request, in seconds.
    """

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = "INFO"
    json_response: bool = False
    verify_ssl: bool = True
    request_timeout: float = Field(default=30.0, gt=0)

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the process."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
