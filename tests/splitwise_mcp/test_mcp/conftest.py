"""Shared fixtures for MCP tests.

Tools read the module-level client through get_client(); these fixtures
swap in a mock client for the duration of a test.
"""

from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock

import pytest

from splitwise_mcp.client import SplitwiseClient
from splitwise_mcp.mcp import server


@pytest.fixture
def mock_client(mocker: Any) -> Generator[MagicMock, None, None]:
    """Install a MagicMock shaped like SplitwiseClient as the shared client."""
    client = mocker.MagicMock(spec=SplitwiseClient)
    server._client = client
    yield client
    server._client = None
