"""Splitwise REST API client built on httpx.

Every method is a single request and a single decoded response. The client
also serves as the expense page source for the query engine through
``fetch_page``; it does no filtering of its own.
"""

import json
import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from ..config import DEFAULT_BASE_URL
from ..errors import SplitwiseApiError, SplitwiseDecodeError, SplitwiseTransportError
from .schemas import (
    Category,
    CreateExpenseRequest,
    CreateGroupRequest,
    Currency,
    Expense,
    ExpenseScope,
    Friend,
    Group,
    GroupUserInput,
    UpdateExpenseRequest,
    User,
)

logger = logging.getLogger(__name__)

# Upstream treats limit=0 as "no limit"
UNLIMITED = 0


class SplitwiseClient:
    """Synchronous client for the Splitwise v3.0 API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Splitwise API key, sent as a Bearer token.
            base_url: API root, e.g. https://secure.splitwise.com/api/v3.0
            timeout: Per-request timeout in seconds.
            http_client: Pre-built httpx client (mainly for tests); when
                given, ``api_key``/``base_url``/``timeout`` are not applied.
        """
        if http_client is None:
            http_client = httpx.Client(
                base_url=base_url.rstrip("/"),
                timeout=timeout,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                },
            )
        self._http = http_client

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._http.close()

    def __enter__(self) -> "SplitwiseClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON object.

        Raises:
            SplitwiseTransportError: If no response was received.
            SplitwiseApiError: If the API answered with an error status.
            SplitwiseDecodeError: If a success response is not a JSON object.
        """
        logger.debug("%s %s params=%s", method, endpoint, params)
        try:
            response = self._http.request(method, endpoint, params=params, json=body)
        except httpx.HTTPError as e:
            raise SplitwiseTransportError(
                f"Request to {endpoint} failed: {e}"
            ) from e

        text = response.text
        if not response.is_success:
            raise SplitwiseApiError(response.status_code, _parse_errors(text))

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SplitwiseDecodeError(
                _decode_failure(response.status_code, text)
            ) from e
        if not isinstance(data, dict):
            raise SplitwiseDecodeError(_decode_failure(response.status_code, text))
        return data

    def _get(self, endpoint: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        return self._request("GET", endpoint, params=params)

    def _post(self, endpoint: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        return self._request("POST", endpoint, body=body or {})

    @staticmethod
    def _decode(data: dict[str, Any], key: str, schema: Any) -> Any:
        """Validate ``data[key]`` against a model or a list-of-models type."""
        if key not in data:
            raise SplitwiseDecodeError(
                f"Response is missing '{key}'; keys: {sorted(data)}"
            )
        try:
            return TypeAdapter(schema).validate_python(data[key])
        except ValidationError as e:
            raise SplitwiseDecodeError(f"Invalid '{key}' payload: {e}") from e

    @staticmethod
    def _raise_for_errors(data: dict[str, Any], action: str) -> None:
        """Mutations report failures in an ``errors`` object with a 200 status."""
        errors = data.get("errors")
        if errors:
            logger.warning("Failed to %s: %s", action, errors)
            raise SplitwiseApiError(200, _normalize_errors(errors))

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_current_user(self) -> User:
        """Return the user that owns the API key."""
        return self._decode(self._get("/get_current_user"), "user", User)

    def get_user(self, user_id: int) -> User:
        """Return a user by id."""
        return self._decode(self._get(f"/get_user/{user_id}"), "user", User)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def get_groups(self) -> list[Group]:
        """Return every group the current user belongs to."""
        return self._decode(self._get("/get_groups"), "groups", list[Group])

    def get_group(self, group_id: int) -> Group:
        """Return one group with members and debts."""
        return self._decode(self._get(f"/get_group/{group_id}"), "group", Group)

    def create_group(self, request: CreateGroupRequest) -> Group:
        """Create a group; the current user is added automatically."""
        data = self._post("/create_group", request.to_body())
        self._raise_for_errors(data, "create group")
        return self._decode(data, "group", Group)

    def delete_group(self, group_id: int) -> bool:
        """Delete a group. Returns the API's success flag."""
        data = self._post(f"/delete_group/{group_id}")
        self._raise_for_errors(data, "delete group")
        return bool(data.get("success", False))

    def add_user_to_group(self, group_id: int, user: GroupUserInput) -> User:
        """Add an existing user (by id) or invite a new one (by email)."""
        body: dict[str, Any] = {"group_id": group_id}
        body.update(user.model_dump(exclude_none=True))
        data = self._post("/add_user_to_group", body)
        if not data.get("success"):
            errors = data.get("errors") or ["Unknown error"]
            raise SplitwiseApiError(200, _normalize_errors(errors))
        return self._decode(data, "user", User)

    def remove_user_from_group(self, group_id: int, user_id: int) -> bool:
        """Remove a user from a group. Fails upstream if they have a balance."""
        data = self._post(
            "/remove_user_from_group", {"group_id": group_id, "user_id": user_id}
        )
        self._raise_for_errors(data, "remove user from group")
        return bool(data.get("success", False))

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def fetch_page(
        self, scope: ExpenseScope, limit: int | None, offset: int
    ) -> list[Expense]:
        """Fetch one page of expenses in the API's own order.

        Args:
            scope: Server-side filters, forwarded verbatim.
            limit: Page size. None fetches everything from ``offset`` on.
            offset: Number of expenses to skip.

        Returns:
            The expenses on this page; an empty list means no more data.
        """
        params = scope.to_params()
        params["limit"] = str(UNLIMITED if limit is None else limit)
        params["offset"] = str(offset)
        return self._decode(
            self._get("/get_expenses", params=params), "expenses", list[Expense]
        )

    def get_expense(self, expense_id: int) -> Expense:
        """Return one expense, including soft-deleted ones."""
        return self._decode(
            self._get(f"/get_expense/{expense_id}"), "expense", Expense
        )

    def create_expense(self, request: CreateExpenseRequest) -> list[Expense]:
        """Create an expense. Recurring expenses may come back as several."""
        data = self._post("/create_expense", request.to_body())
        self._raise_for_errors(data, "create expense")
        return self._decode(data, "expenses", list[Expense])

    def update_expense(
        self, expense_id: int, request: UpdateExpenseRequest
    ) -> list[Expense]:
        """Update an expense. Only the fields set on ``request`` change."""
        data = self._post(f"/update_expense/{expense_id}", request.to_body())
        self._raise_for_errors(data, "update expense")
        return self._decode(data, "expenses", list[Expense])

    def delete_expense(self, expense_id: int) -> bool:
        """Soft-delete an expense. Returns the API's success flag."""
        data = self._post(f"/delete_expense/{expense_id}")
        self._raise_for_errors(data, "delete expense")
        return bool(data.get("success", False))

    # ------------------------------------------------------------------
    # Friends
    # ------------------------------------------------------------------

    def get_friends(self) -> list[Friend]:
        """Return all friends with their balances."""
        return self._decode(self._get("/get_friends"), "friends", list[Friend])

    def get_friend(self, friend_id: int) -> Friend:
        """Return a single friend by user id."""
        return self._decode(self._get(f"/get_friend/{friend_id}"), "friend", Friend)

    def create_friend(self, email: str) -> list[Friend]:
        """Add a friend by email address."""
        data = self._post("/create_friend", {"user_email": email})
        self._raise_for_errors(data, "add friend")
        return self._decode(data, "friends", list[Friend])

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------

    def get_currencies(self) -> list[Currency]:
        """Return the currencies Splitwise supports."""
        return self._decode(self._get("/get_currencies"), "currencies", list[Currency])

    def get_categories(self) -> list[Category]:
        """Return top-level categories with their subcategories."""
        return self._decode(self._get("/get_categories"), "categories", list[Category])


def _parse_errors(text: str) -> dict[str, Any]:
    """Extract the ``errors`` map from an error body, falling back to raw text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return {"base": [text]}
    if isinstance(data, dict):
        errors = data.get("errors")
        if errors:
            return _normalize_errors(errors)
        if "error" in data:
            return {"base": [data["error"]]}
    return {"base": [text]}


def _decode_failure(status_code: int, text: str) -> str:
    return (
        f"Failed to parse response. Status: {status_code}, Length: {len(text)}, "
        f"First 500 chars: {text[:500]}"
    )


def _normalize_errors(errors: Any) -> dict[str, Any]:
    """Coerce the API's list/string error shapes into a field -> messages map."""
    if isinstance(errors, dict):
        return errors
    if isinstance(errors, list):
        return {"base": errors}
    return {"base": [errors]}
