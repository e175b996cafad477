"""Shared pytest fixtures for splitwise_mcp tests.

Provides an expense factory and an in-memory page source so the query
engine and the tools can be exercised without any network access.
"""

import os
from collections.abc import Callable, Generator, Sequence
from pathlib import Path
from typing import Any

import pytest

from splitwise_mcp.client.schemas import Expense, ExpenseScope
from splitwise_mcp.config import clear_settings_cache

_ENV_VARS = (
    "SPLITWISE_API_KEY",
    "PORT",
    "LOG_LEVEL",
    "LOG_TO_FILE",
    "LOG_FILE_PATH",
)


@pytest.fixture(autouse=True)
def isolated_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Run every test against a clean environment and settings cache.

    The working directory is moved to a temp dir so a developer's .env file
    is never picked up.
    """
    monkeypatch.chdir(tmp_path)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("SPLITWISE_MCP_"):
            monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


def expense_payload(
    expense_id: int,
    description: str = "Lunch",
    details: str | None = None,
    category_id: int = 15,
    category_name: str = "General",
    deleted: bool = False,
    **overrides: Any,
) -> dict[str, Any]:
    """Build a raw expense dict shaped like the Splitwise API response."""
    payload: dict[str, Any] = {
        "id": expense_id,
        "group_id": 10,
        "friendship_id": None,
        "expense_bundle_id": None,
        "description": description,
        "repeats": False,
        "repeat_interval": "never",
        "email_reminder": False,
        "email_reminder_in_advance": -1,
        "next_repeat": None,
        "details": details,
        "comments_count": 0,
        "payment": False,
        "creation_method": "equal",
        "transaction_method": "offline",
        "transaction_confirmed": False,
        "transaction_id": None,
        "transaction_status": None,
        "cost": "25.0",
        "currency_code": "USD",
        "repayments": [{"from": 2, "to": 1, "amount": "12.5"}],
        "date": "2025-03-01T12:00:00Z",
        "created_at": "2025-03-01T12:00:00Z",
        "created_by": {"id": 1, "first_name": "Ada", "last_name": "L"},
        "updated_at": "2025-03-01T12:00:00Z",
        "updated_by": None,
        "deleted_at": "2025-03-02T08:00:00Z" if deleted else None,
        "deleted_by": {"id": 1, "first_name": "Ada"} if deleted else None,
        "category": {
            "id": category_id,
            "name": category_name,
            "icon": "https://example.test/icon.png",
        },
        "receipt": {"large": None, "original": None},
        "users": [
            {
                "user_id": 1,
                "user": {"id": 1, "first_name": "Ada"},
                "paid_share": "25.0",
                "owed_share": "12.5",
                "net_balance": "12.5",
            },
            {
                "user_id": 2,
                "user": {"id": 2, "first_name": "Bob"},
                "paid_share": "0.0",
                "owed_share": "12.5",
                "net_balance": "-12.5",
            },
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Factory fixture returning raw API expense dicts."""
    return expense_payload


@pytest.fixture
def make_expense() -> Callable[..., Expense]:
    """Factory fixture returning validated Expense records."""

    def _make(expense_id: int, **kwargs: Any) -> Expense:
        return Expense.model_validate(expense_payload(expense_id, **kwargs))

    return _make


class FakePageSource:
    """In-memory page source that records every fetch.

    ``limit=None`` returns everything from ``offset`` on, like the real
    client's unlimited request. ``fail_at_offset`` makes that fetch raise.
    """

    def __init__(
        self,
        records: Sequence[Expense],
        fail_at_offset: int | None = None,
    ):
        self.records = list(records)
        self.fail_at_offset = fail_at_offset
        self.calls: list[tuple[ExpenseScope, int | None, int]] = []

    def fetch_page(
        self, scope: ExpenseScope, limit: int | None, offset: int
    ) -> list[Expense]:
        self.calls.append((scope, limit, offset))
        if offset == self.fail_at_offset:
            raise ConnectionError("upstream unavailable")
        if limit is None:
            return self.records[offset:]
        return self.records[offset : offset + limit]

    @property
    def non_empty_calls(self) -> int:
        """Number of fetches that returned at least one record."""
        return sum(1 for _, _, offset in self.calls if offset < len(self.records))


@pytest.fixture
def fake_source_factory() -> Callable[..., FakePageSource]:
    """Factory fixture for FakePageSource instances."""

    def _make(
        records: Sequence[Expense], fail_at_offset: int | None = None
    ) -> FakePageSource:
        return FakePageSource(records, fail_at_offset=fail_at_offset)

    return _make
