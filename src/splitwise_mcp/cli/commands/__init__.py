"""Command groups for the Splitwise MCP CLI."""
