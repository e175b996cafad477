"""Splitwise MCP CLI package.

This package provides the command-line interface for serving the MCP
server, querying expenses from the shell and inspecting configuration.
"""

from .main import app, main

__all__ = ["app", "main"]
