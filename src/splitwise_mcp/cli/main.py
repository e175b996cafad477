"""Main CLI application for Splitwise MCP.

This module provides the unified entry point for all CLI operations,
organizing commands into groups for serving the MCP server, querying
expenses and inspecting configuration.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from ..config import clear_settings_cache
from ..logging import setup_logging
from .commands import config, expenses, mcp

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="splitwise-mcp",
    help="Splitwise MCP: expose your Splitwise account to AI assistants",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    env_file: Annotated[
        Path | None,
        typer.Option(
            "--env-file",
            "-e",
            help="Extra .env file to load before reading settings",
            envvar="SPLITWISE_MCP_ENV_FILE",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose debug logging",
        ),
    ] = False,
) -> None:
    """Global options for the Splitwise MCP CLI.

    Credentials come from SPLITWISE_API_KEY (or SPLITWISE_MCP_SPLITWISE__API_KEY),
    read from the environment, a .env file in the working directory, or the
    file given with --env-file. Values already in the environment win.

    Examples:
      splitwise-mcp mcp serve                          # stdio server for desktop clients
      splitwise-mcp mcp serve -t streamable-http       # HTTP server on port 8080
      splitwise-mcp -e ~/.splitwise.env config show
      splitwise-mcp expenses list --fields id,cost --search pizza
    """
    setup_logging(cli_mode=True, verbose=verbose)

    if env_file is not None:
        if not env_file.is_file():
            logger.error("❌ Env file not found: %s", env_file)
            raise typer.Exit(1)
        load_dotenv(env_file)
        clear_settings_cache()
        logger.debug("Loaded environment from %s", env_file)


app.add_typer(mcp.app, name="mcp", help="MCP server commands")
app.add_typer(expenses.app, name="expenses", help="Query expenses directly")
app.add_typer(config.app, name="config", help="Configuration commands")


def main() -> None:
    """Entry point for the Splitwise MCP CLI application."""
    app()


if __name__ == "__main__":
    main()
