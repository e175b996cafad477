"""Configuration inspection commands for the Splitwise MCP CLI."""

import logging

import typer

from ...config import get_settings
from ...logging import get_log_config_summary

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="config",
    help="Configuration inspection",
    no_args_is_help=True,
)


def _mask(secret: str) -> str:
    if not secret:
        return "(not set)"
    if len(secret) <= 8:
        return "****"
    return f"{secret[:4]}...{secret[-4:]}"


@app.command("show")
def show_config() -> None:
    """Show the effective configuration. The API key is masked.

    Example:
        splitwise-mcp config show
    """
    try:
        settings = get_settings()
    except ValueError as e:
        logger.error("❌ %s", e)
        raise typer.Exit(1) from e

    log_summary = get_log_config_summary()

    print("\n📋 Splitwise MCP Configuration")
    print(f"   API key: {_mask(settings.splitwise.api_key.get_secret_value())}")
    print(f"   Base URL: {settings.splitwise.base_url}")
    print(f"   Timeout: {settings.splitwise.timeout}s")
    print("\n🔌 Server")
    print(f"   Transport: {settings.server.transport}")
    print(f"   Host: {settings.server.host}")
    print(f"   Port: {settings.server.port}")
    print("\n📝 Logging")
    print(f"   Level: {log_summary['level']}")
    print(f"   Log to file: {log_summary['log_to_file']}")
    if log_summary["log_to_file"]:
        print(f"   Log file: {log_summary['log_file_path']}")
    print()
