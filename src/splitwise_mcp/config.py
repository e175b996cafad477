"""Centralized configuration management for the Splitwise MCP server.

This module provides a Pydantic Settings-based configuration system with
environment variable integration, type validation, and clear error handling.
Settings are only read at the edges (CLI and server start-up); the expense
query engine receives everything it needs as explicit arguments.
"""

import os
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://secure.splitwise.com/api/v3.0"

TransportType = Literal["stdio", "sse", "streamable-http"]


class SplitwiseConfig(BaseModel):
    """Splitwise API configuration settings."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr = Field(
        default=SecretStr(""), description="Splitwise API key (Bearer token)"
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Base URL of the Splitwise REST API"
    )
    timeout: float = Field(
        default=30.0, ge=1.0, le=300.0, description="HTTP timeout in seconds"
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure the base URL is absolute and has no trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip("/")


class ServerConfig(BaseModel):
    """MCP server transport settings."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(default="127.0.0.1", description="Bind address for HTTP")
    port: int = Field(default=8080, ge=1, le=65535, description="Port for HTTP")
    transport: TransportType = Field(
        default="stdio", description="MCP transport used by 'mcp serve'"
    )


class SplitwiseMcpSettings(BaseSettings):
    """Main application settings with environment variable integration.

    Environment variables are loaded with the SPLITWISE_MCP_ prefix.
    For nested configs, use double underscores: SPLITWISE_MCP_SPLITWISE__API_KEY

    The plain SPLITWISE_API_KEY and PORT variables are still honored when the
    prefixed forms are not set.
    """

    splitwise: SplitwiseConfig = Field(default_factory=SplitwiseConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SPLITWISE_MCP_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",  # Allow extra env vars that don't match our schema
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def apply_legacy_variables(cls, data: Any) -> Any:
        """Fill api_key and port from the unprefixed variables.

        Only the single missing field is supplied; every other value already
        resolved for the same sub-model is kept.
        """
        if not isinstance(data, dict):
            return data

        api_key = os.getenv("SPLITWISE_API_KEY")
        if api_key:
            _fill_missing(data, "splitwise", "api_key", api_key)

        port = os.getenv("PORT")
        if port and port.isdigit():
            _fill_missing(data, "server", "port", int(port))

        return data

    def validate_required_credentials(self) -> None:
        """Validate that required credentials are present."""
        if not self.splitwise.api_key.get_secret_value():
            raise ValueError(
                "Missing required configuration: SPLITWISE_API_KEY is required "
                "(or SPLITWISE_MCP_SPLITWISE__API_KEY)"
            )


def _fill_missing(data: dict[str, Any], section: str, key: str, value: Any) -> None:
    """Set data[section][key] unless it was already given."""
    current = data.get(section)
    if current is None:
        data[section] = {key: value}
    elif isinstance(current, dict) and key not in current:
        data[section] = {**current, key: value}


_settings: SplitwiseMcpSettings | None = None


def get_settings() -> SplitwiseMcpSettings:
    """Get the application settings instance.

    Settings are loaded once and cached. A ``.env`` file in the working
    directory is loaded first so the legacy unprefixed variables it defines
    are visible too.

    Returns:
        SplitwiseMcpSettings: The configuration instance

    Raises:
        ValueError: If the configuration is invalid
    """
    global _settings

    if _settings is not None:
        return _settings

    load_dotenv()
    try:
        _settings = SplitwiseMcpSettings()
    except Exception as e:
        raise ValueError(f"Configuration error: {e}") from e
    return _settings


def reload_settings() -> SplitwiseMcpSettings:
    """Reload settings from environment variables.

    Useful for testing or when environment variables change at runtime.

    Returns:
        SplitwiseMcpSettings: The reloaded configuration instance
    """
    clear_settings_cache()
    return get_settings()


def clear_settings_cache() -> None:
    """Drop the cached settings so the next access reloads them."""
    global _settings
    _settings = None


def get_splitwise_config() -> SplitwiseConfig:
    """Get the Splitwise API configuration.

    Returns:
        SplitwiseConfig: The Splitwise configuration
    """
    return get_settings().splitwise


def get_server_config() -> ServerConfig:
    """Get the MCP server configuration.

    Returns:
        ServerConfig: The server configuration
    """
    return get_settings().server
