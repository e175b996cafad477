"""MCP tool implementations for Splitwise.

Tools are callable functions that AI assistants can invoke to read and
change Splitwise data. Each tool is registered with the FastMCP server via
the @mcp.tool() decorator and returns its result as JSON text.

Failures are raised as ToolError with the underlying message unchanged, so
the client sees e.g. which batch offset a listing failed at.
"""

import json
import logging
from typing import Any, Literal, NoReturn

from mcp.server.fastmcp.exceptions import ToolError
from pydantic import BaseModel, ValidationError

from ..client.schemas import (
    CreateExpenseRequest,
    CreateGroupRequest,
    ExpenseScope,
    ExpenseShare,
    GroupType,
    GroupUserInput,
    UpdateExpenseRequest,
)
from ..errors import InvalidQueryError, SplitwiseMcpError
from ..expenses import ExpenseQuery, ExpenseQueryEngine, project
from ..expenses.projection import COMMON_FIELDS, describe_fields
from .server import get_client, mcp

logger = logging.getLogger(__name__)

DeletedModeName = Literal["exclude", "include", "only"]
GroupTypeName = Literal["home", "trip", "couple", "other"]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_json(data: Any) -> str:
    """Serialize models, lists of models, or plain data to JSON text."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True)
    elif isinstance(data, list):
        data = [
            item.model_dump(mode="json", by_alias=True)
            if isinstance(item, BaseModel)
            else item
            for item in data
        ]
    return json.dumps(data, indent=2, default=str)


def _fail(tool: str, error: Exception) -> NoReturn:
    """Log a failed tool call and surface its message to the client."""
    logger.error("Tool %s failed: %s", tool, error)
    raise ToolError(str(error)) from error


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@mcp.tool()
def get_current_user() -> str:
    """Get information about the currently authenticated user."""
    logger.info("Tool called: get_current_user")
    try:
        return _to_json(get_client().get_current_user())
    except SplitwiseMcpError as e:
        _fail("get_current_user", e)


@mcp.tool()
def get_user(user_id: int) -> str:
    """Get information about a specific user by ID.

    Args:
        user_id: The ID of the user to retrieve.
    """
    logger.info("Tool called: get_user(%s)", user_id)
    try:
        return _to_json(get_client().get_user(user_id))
    except SplitwiseMcpError as e:
        _fail("get_user", e)


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------


@mcp.tool()
def list_groups() -> str:
    """List all groups the current user belongs to, with members and debts."""
    logger.info("Tool called: list_groups")
    try:
        return _to_json(get_client().get_groups())
    except SplitwiseMcpError as e:
        _fail("list_groups", e)


@mcp.tool()
def get_group(group_id: int) -> str:
    """Get detailed information about a specific group.

    Args:
        group_id: The ID of the group to retrieve.
    """
    logger.info("Tool called: get_group(%s)", group_id)
    try:
        return _to_json(get_client().get_group(group_id))
    except SplitwiseMcpError as e:
        _fail("get_group", e)


@mcp.tool()
def create_group(
    name: str,
    group_type: GroupTypeName | None = None,
    simplify_by_default: bool | None = None,
) -> str:
    """Create a new group. The current user is added automatically.

    Args:
        name: Name of the group.
        group_type: One of home, trip, couple, other (default: other).
        simplify_by_default: Whether to simplify debts by default.
    """
    logger.info("Tool called: create_group(%s)", name)
    try:
        request = CreateGroupRequest(
            name=name,
            group_type=GroupType(group_type) if group_type else None,
            simplify_by_default=simplify_by_default,
        )
        return _to_json(get_client().create_group(request))
    except (SplitwiseMcpError, ValidationError) as e:
        _fail("create_group", e)


@mcp.tool()
def delete_group(group_id: int) -> str:
    """Delete a group and all of its expenses.

    Args:
        group_id: The ID of the group to delete.
    """
    logger.info("Tool called: delete_group(%s)", group_id)
    try:
        return _to_json({"success": get_client().delete_group(group_id)})
    except SplitwiseMcpError as e:
        _fail("delete_group", e)


@mcp.tool()
def add_user_to_group(
    group_id: int,
    user_id: int | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
) -> str:
    """Add a user to a group, by user ID or by name and email.

    Args:
        group_id: The group to add the user to.
        user_id: ID of an existing Splitwise user.
        first_name: First name, when inviting by email.
        last_name: Last name, when inviting by email.
        email: Email address, when inviting someone new.
    """
    logger.info("Tool called: add_user_to_group(%s)", group_id)
    try:
        user = GroupUserInput(
            user_id=user_id, first_name=first_name, last_name=last_name, email=email
        )
        return _to_json(get_client().add_user_to_group(group_id, user))
    except (SplitwiseMcpError, ValidationError) as e:
        _fail("add_user_to_group", e)


@mcp.tool()
def remove_user_from_group(group_id: int, user_id: int) -> str:
    """Remove a user from a group. Only works when their balance is zero.

    Args:
        group_id: The group to remove the user from.
        user_id: The user to remove.
    """
    logger.info("Tool called: remove_user_from_group(%s, %s)", group_id, user_id)
    try:
        success = get_client().remove_user_from_group(group_id, user_id)
        return _to_json({"success": success})
    except SplitwiseMcpError as e:
        _fail("remove_user_from_group", e)


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------

_LIST_EXPENSES_DESCRIPTION = f"""List expenses with optional filters.

The Splitwise API filters by group, friend and dates only. search_text,
category_ids and include_deleted are applied here, reading the expense
history in batches until `limit` matches are found or it runs out.

Args:
    fields: Fields to include (REQUIRED). Common: {', '.join(COMMON_FIELDS)}.
        All available: {describe_fields()}. deleted_at and deleted_by only
        appear on deleted expenses.
    group_id: Only expenses in this group.
    friend_id: Only expenses shared with this friend (user ID).
    dated_after: Only expenses dated after this date (YYYY-MM-DD).
    dated_before: Only expenses dated before this date (YYYY-MM-DD).
    updated_after: Only expenses updated after this time (ISO 8601).
    updated_before: Only expenses updated before this time (ISO 8601).
    limit: Maximum number of expenses to return. Omit to return all matches.
    offset: Number of upstream expenses to skip before reading.
    search_text: Case-insensitive substring to look for.
    search_fields: Where to search: description, details, category.
        Defaults to all three.
    category_ids: Only these category IDs (see get_categories).
    include_deleted: 'exclude' (default), 'include' or 'only'.
"""


@mcp.tool(description=_LIST_EXPENSES_DESCRIPTION)
def list_expenses(
    fields: list[str],
    group_id: int | None = None,
    friend_id: int | None = None,
    dated_after: str | None = None,
    dated_before: str | None = None,
    updated_after: str | None = None,
    updated_before: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    search_text: str | None = None,
    search_fields: list[str] | None = None,
    category_ids: list[int] | None = None,
    include_deleted: DeletedModeName = "exclude",
) -> str:
    logger.info("Tool called: list_expenses")
    try:
        query = ExpenseQuery.build(
            fields=fields,
            scope=ExpenseScope(
                group_id=group_id,
                friend_id=friend_id,
                dated_after=dated_after,
                dated_before=dated_before,
                updated_after=updated_after,
                updated_before=updated_before,
            ),
            limit=limit,
            offset=offset,
            deleted_mode=include_deleted,
            category_ids=category_ids,
            search_text=search_text,
            search_fields=search_fields,
        )
        engine = ExpenseQueryEngine(get_client())
        return _to_json(engine.list_projected(query))
    except SplitwiseMcpError as e:
        _fail("list_expenses", e)


@mcp.tool(
    description=(
        "Get a single expense by ID, including deleted ones.\n\n"
        "Args:\n"
        "    expense_id: The ID of the expense to retrieve.\n"
        f"    fields: Fields to include (REQUIRED). Available: {describe_fields()}\n"
    )
)
def get_expense(expense_id: int, fields: list[str]) -> str:
    logger.info("Tool called: get_expense(%s)", expense_id)
    try:
        if not fields:
            raise InvalidQueryError("fields must name at least one field")
        return _to_json(project(get_client().get_expense(expense_id), fields))
    except SplitwiseMcpError as e:
        _fail("get_expense", e)


@mcp.tool()
def create_expense(
    cost: str,
    description: str,
    currency_code: str | None = None,
    group_id: int | None = None,
    split_equally: bool = True,
    split_by_shares: list[ExpenseShare] | None = None,
    date: str | None = None,
    category_id: int | None = None,
    details: str | None = None,
) -> str:
    """Create a new expense.

    Call get_categories first and pass the most specific category or
    subcategory ID; the category decides the icon shown in Splitwise.

    Args:
        cost: Total cost, as a decimal string (e.g. '25.00').
        description: Short description of the expense.
        currency_code: Currency code (e.g. 'USD', 'EUR').
        group_id: Group to add the expense to.
        split_equally: Split equally among all group members (default true).
            Ignored when split_by_shares is given.
        split_by_shares: Custom split. Each entry names a user (user_id, or
            email) with the amount they paid and the amount they owe.
        date: Date of the expense (YYYY-MM-DD).
        category_id: Category or subcategory ID from get_categories.
        details: Free-text notes.
    """
    logger.info("Tool called: create_expense(%s)", description)
    try:
        request = CreateExpenseRequest(
            cost=cost,
            description=description,
            currency_code=currency_code,
            group_id=group_id,
            split_equally=split_equally and not split_by_shares,
            split_by_shares=split_by_shares,
            date=date,
            category_id=category_id,
            details=details,
        )
        return _to_json(get_client().create_expense(request))
    except (SplitwiseMcpError, ValidationError) as e:
        _fail("create_expense", e)


@mcp.tool()
def update_expense(
    expense_id: int,
    cost: str | None = None,
    description: str | None = None,
    currency_code: str | None = None,
    category_id: int | None = None,
    date: str | None = None,
    details: str | None = None,
    split_equally: bool | None = None,
    split_by_shares: list[ExpenseShare] | None = None,
) -> str:
    """Update an existing expense. Only the given fields change.

    When changing the cost, also pass split_equally or split_by_shares so the
    shares still add up.

    Args:
        expense_id: The ID of the expense to update.
        cost: New total cost.
        description: New description.
        currency_code: New currency code.
        category_id: New category or subcategory ID.
        date: New date (YYYY-MM-DD).
        details: New notes.
        split_equally: Re-split equally among group members.
        split_by_shares: New custom split (see create_expense).
    """
    logger.info("Tool called: update_expense(%s)", expense_id)
    try:
        request = UpdateExpenseRequest(
            cost=cost,
            description=description,
            currency_code=currency_code,
            category_id=category_id,
            date=date,
            details=details,
            split_equally=split_equally,
            split_by_shares=split_by_shares,
        )
        return _to_json(get_client().update_expense(expense_id, request))
    except (SplitwiseMcpError, ValidationError) as e:
        _fail("update_expense", e)


@mcp.tool()
def delete_expense(expense_id: int) -> str:
    """Delete an expense. Deleted expenses can still be listed with include_deleted.

    Args:
        expense_id: The ID of the expense to delete.
    """
    logger.info("Tool called: delete_expense(%s)", expense_id)
    try:
        return _to_json({"success": get_client().delete_expense(expense_id)})
    except SplitwiseMcpError as e:
        _fail("delete_expense", e)


# ---------------------------------------------------------------------------
# Friends
# ---------------------------------------------------------------------------


@mcp.tool()
def list_friends() -> str:
    """List all friends and their balances."""
    logger.info("Tool called: list_friends")
    try:
        return _to_json(get_client().get_friends())
    except SplitwiseMcpError as e:
        _fail("list_friends", e)


@mcp.tool()
def get_friend(friend_id: int) -> str:
    """Get detailed information about a specific friend.

    Args:
        friend_id: The user ID of the friend.
    """
    logger.info("Tool called: get_friend(%s)", friend_id)
    try:
        return _to_json(get_client().get_friend(friend_id))
    except SplitwiseMcpError as e:
        _fail("get_friend", e)


@mcp.tool()
def add_friend(email: str) -> str:
    """Add a new friend by email.

    Args:
        email: Email address of the friend to add.
    """
    logger.info("Tool called: add_friend")
    try:
        return _to_json(get_client().create_friend(email))
    except SplitwiseMcpError as e:
        _fail("add_friend", e)


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@mcp.tool()
def get_currencies() -> str:
    """Get the list of supported currencies."""
    logger.info("Tool called: get_currencies")
    try:
        return _to_json(get_client().get_currencies())
    except SplitwiseMcpError as e:
        _fail("get_currencies", e)


@mcp.tool()
def get_categories() -> str:
    """Get expense categories and subcategories with their IDs.

    Each category has an icon in Splitwise (e.g. 25=Food, 31=Transportation);
    prefer the most specific subcategory when creating expenses.
    """
    logger.info("Tool called: get_categories")
    try:
        return _to_json(get_client().get_categories())
    except SplitwiseMcpError as e:
        _fail("get_categories", e)
