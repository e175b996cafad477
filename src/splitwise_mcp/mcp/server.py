"""MCP server definition with Splitwise client lifecycle management.

This module creates the FastMCP server instance and manages the shared
Splitwise client used by all tools and resources. The client's connection
pool is shared; every request still carries its full parameter set.

Documentation: https://modelcontextprotocol.github.io/python-sdk/
"""

import logging

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..client import SplitwiseClient
from ..config import SplitwiseConfig

logger = logging.getLogger(__name__)

SERVICE_NAME = "splitwise-mcp"

# Global server instance: tools/resources/prompts register against this
mcp = FastMCP(
    "Splitwise",
    instructions=(
        "Splitwise MCP gives access to the user's Splitwise account: groups, "
        "friends, balances and shared expenses. Call get_categories before "
        "creating an expense to pick the most specific category id. "
        "list_expenses and get_expense require a 'fields' list; request only "
        "the fields you need. list_expenses can search text, filter by "
        "category ids and show or hide deleted expenses; these filters are "
        "applied locally, so a narrow date range or group keeps them fast."
    ),
)

# Module-level client, set by init_client() before the server starts
_client: SplitwiseClient | None = None


def get_client() -> SplitwiseClient:
    """Get the shared Splitwise client.

    Returns:
        The active Splitwise client.

    Raises:
        RuntimeError: If the client has not been initialized.
    """
    if _client is None:
        raise RuntimeError(
            "Splitwise client not initialized. Call init_client() first."
        )
    return _client


def init_client(config: SplitwiseConfig) -> SplitwiseClient:
    """Create the shared Splitwise client from explicit configuration.

    Args:
        config: Splitwise API settings (key, base URL, timeout).

    Returns:
        The newly created client.

    Raises:
        ValueError: If no API key is configured.
    """
    global _client  # noqa: PLW0603

    api_key = config.api_key.get_secret_value()
    if not api_key:
        raise ValueError(
            "Splitwise API key is not set. Export SPLITWISE_API_KEY "
            "(create one at https://secure.splitwise.com/apps)."
        )

    close_client()
    logger.info("Connecting to Splitwise API at %s", config.base_url)
    _client = SplitwiseClient(
        api_key=api_key, base_url=config.base_url, timeout=config.timeout
    )
    return _client


def close_client() -> None:
    """Close the Splitwise client if open."""
    global _client  # noqa: PLW0603

    if _client is not None:
        _client.close()
        _client = None
        logger.info("Splitwise client closed")


@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> JSONResponse:
    """Liveness probe for the HTTP transports."""
    return JSONResponse({"status": "healthy", "service": SERVICE_NAME})
