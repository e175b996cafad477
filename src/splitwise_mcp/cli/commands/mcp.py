"""MCP server commands for the Splitwise MCP CLI.

This module provides the `splitwise-mcp mcp serve` command that starts the
Model Context Protocol server, exposing a Splitwise account to AI
assistants running in desktop MCP clients such as Cursor.
"""

import importlib
import logging
from typing import Annotated, get_args

import typer

from ...config import TransportType

app = typer.Typer(help="MCP server for AI assistant integration")
logger = logging.getLogger(__name__)

_VALID_TRANSPORTS: tuple[str, ...] = get_args(TransportType)


@app.command("serve")
def serve(
    transport: Annotated[
        str | None,
        typer.Option(
            "--transport",
            "-t",
            help="MCP transport type: stdio, sse, or streamable-http",
        ),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", help="Bind address for the HTTP transports"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port for the HTTP transports"),
    ] = None,
) -> None:
    """Start the Splitwise MCP server.

    The server talks stdio by default, which is what desktop AI clients
    expect. The HTTP transports also serve a GET /health endpoint.

    Examples:
        # Start MCP server for a local client
        splitwise-mcp mcp serve

        # Serve over HTTP on a custom port
        splitwise-mcp mcp serve -t streamable-http --port 9000
    """
    from ...config import get_settings
    from ...mcp.server import close_client, init_client, mcp

    try:
        settings = get_settings()
        settings.validate_required_credentials()
    except ValueError as e:
        logger.error("❌ %s", e)
        raise typer.Exit(1) from e

    transport = transport or settings.server.transport
    if transport not in _VALID_TRANSPORTS:
        logger.error(
            "❌ Invalid transport '%s'. Must be one of: %s",
            transport,
            ", ".join(_VALID_TRANSPORTS),
        )
        raise typer.Exit(1)

    # Cast validated string to the literal type
    validated_transport: TransportType = transport  # type: ignore[assignment]

    # Import tools/resources/prompts to register their decorators with the server
    for module in (
        "splitwise_mcp.mcp.tools",
        "splitwise_mcp.mcp.resources",
        "splitwise_mcp.mcp.prompts",
    ):
        importlib.import_module(module)

    mcp.settings.host = host or settings.server.host
    mcp.settings.port = port or settings.server.port

    try:
        init_client(settings.splitwise)
        if validated_transport == "stdio":
            logger.info("MCP server starting (transport=stdio)")
        else:
            logger.info(
                "MCP server starting (transport=%s, http://%s:%d)",
                validated_transport,
                mcp.settings.host,
                mcp.settings.port,
            )
        mcp.run(transport=validated_transport)
    except ValueError as e:
        logger.error("❌ %s", e)
        raise typer.Exit(1) from e
    except KeyboardInterrupt:
        logger.info("MCP server stopped by user")
    finally:
        close_client()
