"""Expense query commands for the Splitwise MCP CLI.

These commands run the same query engine the MCP tools use, which makes
them handy for checking a filter before handing it to an assistant.
"""

import json
import logging
from typing import Annotated

import typer

from ...client import SplitwiseClient
from ...client.schemas import ExpenseScope
from ...config import get_settings
from ...errors import SplitwiseMcpError
from ...expenses import ExpenseQuery, ExpenseQueryEngine, project

app = typer.Typer(help="Query Splitwise expenses", no_args_is_help=True)
logger = logging.getLogger(__name__)


def _parse_fields(fields: str) -> list[str]:
    return [name.strip() for name in fields.split(",") if name.strip()]


def _open_client() -> SplitwiseClient:
    try:
        settings = get_settings()
        settings.validate_required_credentials()
    except ValueError as e:
        logger.error("❌ %s", e)
        raise typer.Exit(1) from e

    config = settings.splitwise
    return SplitwiseClient(
        api_key=config.api_key.get_secret_value(),
        base_url=config.base_url,
        timeout=config.timeout,
    )


@app.command("list")
def list_expenses(
    fields: Annotated[
        str,
        typer.Option(
            "--fields", "-f", help="Comma-separated fields, e.g. id,cost,date"
        ),
    ] = "id,description,cost,currency_code,date",
    group_id: Annotated[
        int | None, typer.Option("--group-id", help="Only this group")
    ] = None,
    friend_id: Annotated[
        int | None, typer.Option("--friend-id", help="Only shared with this friend")
    ] = None,
    dated_after: Annotated[
        str | None, typer.Option("--dated-after", help="YYYY-MM-DD")
    ] = None,
    dated_before: Annotated[
        str | None, typer.Option("--dated-before", help="YYYY-MM-DD")
    ] = None,
    updated_after: Annotated[
        str | None, typer.Option("--updated-after", help="ISO 8601 timestamp")
    ] = None,
    updated_before: Annotated[
        str | None, typer.Option("--updated-before", help="ISO 8601 timestamp")
    ] = None,
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", help="Maximum number of results")
    ] = None,
    offset: Annotated[
        int, typer.Option("--offset", help="Upstream records to skip")
    ] = 0,
    search: Annotated[
        str | None,
        typer.Option("--search", "-s", help="Case-insensitive text to look for"),
    ] = None,
    search_fields: Annotated[
        list[str] | None,
        typer.Option(
            "--search-field",
            help="Field to search (repeatable): description, details, category",
        ),
    ] = None,
    category_ids: Annotated[
        list[int] | None,
        typer.Option("--category-id", help="Accept only this category (repeatable)"),
    ] = None,
    deleted: Annotated[
        str,
        typer.Option("--deleted", help="Deleted expenses: exclude, include or only"),
    ] = "exclude",
) -> None:
    """List expenses as JSON.

    Examples:
        splitwise-mcp expenses list --search pizza --limit 5
        splitwise-mcp expenses list -f id,cost,deleted_at --deleted only
    """
    try:
        query = ExpenseQuery.build(
            fields=_parse_fields(fields),
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
            deleted_mode=deleted,
            category_ids=category_ids or None,
            search_text=search,
            search_fields=search_fields or None,
        )
    except SplitwiseMcpError as e:
        logger.error("❌ %s", e)
        raise typer.Exit(1) from e

    with _open_client() as client:
        try:
            results = ExpenseQueryEngine(client).list_projected(query)
        except SplitwiseMcpError as e:
            logger.error("❌ %s", e)
            raise typer.Exit(1) from e

    print(json.dumps(results, indent=2, default=str))
    logger.debug("Listed %d expenses", len(results))


@app.command("get")
def get_expense(
    expense_id: Annotated[int, typer.Argument(help="Expense ID")],
    fields: Annotated[
        str,
        typer.Option("--fields", "-f", help="Comma-separated fields"),
    ] = "id,description,cost,currency_code,date,category",
) -> None:
    """Show one expense as JSON, including deleted ones."""
    field_names = _parse_fields(fields)
    if not field_names:
        logger.error("❌ --fields must name at least one field")
        raise typer.Exit(1)

    with _open_client() as client:
        try:
            expense = client.get_expense(expense_id)
        except SplitwiseMcpError as e:
            logger.error("❌ %s", e)
            raise typer.Exit(1) from e

    print(json.dumps(project(expense, field_names), indent=2, default=str))
