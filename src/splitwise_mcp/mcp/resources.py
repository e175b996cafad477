"""MCP resource definitions for Splitwise.

Resources provide read-only reference data that AI assistants can load
directly, without spending a tool call. They are registered with the
FastMCP server via decorators.

Documentation: https://modelcontextprotocol.github.io/python-sdk/servers/resources/
"""

import json
import logging

from .server import get_client, mcp

logger = logging.getLogger(__name__)


@mcp.resource("splitwise://categories")
def categories() -> str:
    """Expense categories as a flat id -> name table, subcategories included."""
    logger.info("Resource read: categories")
    rows: list[dict[str, object]] = []
    for category in get_client().get_categories():
        rows.append({"id": category.id, "name": category.name, "parent_id": None})
        for sub in category.subcategories or []:
            rows.append({"id": sub.id, "name": sub.name, "parent_id": category.id})
    return json.dumps(rows, indent=2)


@mcp.resource("splitwise://currencies")
def currencies() -> str:
    """Supported currency codes and their display units."""
    logger.info("Resource read: currencies")
    data = [c.model_dump(mode="json") for c in get_client().get_currencies()]
    return json.dumps(data, indent=2)
