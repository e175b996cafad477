"""Splitwise MCP: expose the Splitwise expense-sharing API to AI assistants.

This package provides a Model Context Protocol server with:
- A thin httpx client for the Splitwise REST API
- A client-side expense query engine (search, category and deleted filters)
- Field projection so assistants only receive the fields they ask for
- A typer CLI for serving the tools and querying expenses from the shell

Credentials are passed in explicitly; nothing is cached between calls.
"""

__version__ = "0.1.0"
