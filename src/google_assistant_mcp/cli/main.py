"""Command-line interface for google-assistant-mcp."""

import logging
import sys

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from google_assistant_mcp.__version__ import __version__
from google_assistant_mcp.config import ServerSettings, configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Google Assistant MCP Server - Gmail and Calendar tools over MCP.

    Every MCP session authenticates with the caller's own Google OAuth2
    access token, sent as "Authorization: Bearer <access_token>".
    """
    load_dotenv()


@main.command()
@click.option("--host", envvar="HOST", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", envvar="PORT", default=3000, show_default=True, type=int, help="Port to listen on")
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    default="INFO",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
@click.option(
    "--json-response",
    envvar="MCP_JSON_RESPONSE",
    is_flag=True,
    default=False,
    help="Answer MCP requests with JSON instead of SSE streams",
)
@click.option(
    "--verify-ssl/--no-verify-ssl",
    envvar="GOOGLE_API_VERIFY_SSL",
    default=True,
    show_default=True,
    help="Verify TLS certificates of Google APIs",
)
@click.option(
    "--timeout",
    "request_timeout",
    envvar="GOOGLE_API_TIMEOUT",
    default=30.0,
    show_default=True,
    type=float,
    help="Timeout for one Google API request, in seconds",
)
def serve(
    host: str,
    port: int,
    log_level: str,
    json_response: bool,
    verify_ssl: bool,
    request_timeout: float,
) -> None:
    """Start the HTTP gateway.

    Serves the MCP endpoint at /mcp and a health check at /health.
    """
    import uvicorn

    from google_assistant_mcp.server import TOOL_SPECS, create_app

    try:
        settings = ServerSettings(
            host=host,
            port=port,
            log_level=log_level,
            json_response=json_response,
            verify_ssl=verify_ssl,
            request_timeout=request_timeout,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e

    configure_logging(settings.log_level)

    logger.info(f"Google Assistant MCP Server {__version__} listening on http://{settings.host}:{settings.port}")
    logger.info(f"  - Health check: http://{settings.host}:{settings.port}/health")
    logger.info(f"  - MCP endpoint: http://{settings.host}:{settings.port}/mcp")
    logger.info(f"  - Available tools: {', '.join(spec.name for spec in TOOL_SPECS)}")
    logger.info('  - Authentication: send "Authorization: Bearer <access_token>" on every request')

    try:
        uvicorn.run(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)
    except Exception as e:
        click.echo(f"❌ Server error: {e}", err=True)
        sys.exit(1)


@main.command()
def tools() -> None:
    """List the tools exposed to MCP clients."""
    from google_assistant_mcp.server import TOOL_SPECS

    click.echo(f"Available tools ({len(TOOL_SPECS)}):")
    for spec in TOOL_SPECS:
        click.echo(f"  - {spec.name}: {spec.description}")


if __name__ == "__main__":
    main()
