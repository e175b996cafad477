"""MCP prompt templates for Splitwise.

Prompts are pre-built templates that guide AI assistants through common
expense workflows. Each prompt is registered with the FastMCP server via
the @mcp.prompt() decorator.

Documentation: https://modelcontextprotocol.github.io/python-sdk/servers/prompts/
"""

from .server import mcp


@mcp.prompt()
def find_expenses(description: str, period: str = "the last 90 days") -> str:
    """Find expenses matching a description.

    Args:
        description: What to look for (e.g. 'groceries', 'Airbnb').
        period: Time period to search (e.g. 'March 2025').
    """
    return (
        f"Find my Splitwise expenses about '{description}' in {period}.\n\n"
        "Steps:\n"
        "1. Translate the period into dated_after/dated_before (YYYY-MM-DD)\n"
        f"2. Call list_expenses with search_text='{description}' and "
        "fields=['id', 'description', 'cost', 'currency_code', 'date', 'category']\n"
        "3. If nothing matches, call get_categories, pick the closest category "
        "ids and retry with category_ids instead of search_text\n"
        "4. Report the matches with a total per currency"
    )


@mcp.prompt()
def settle_up_summary(group_name: str) -> str:
    """Summarize who owes whom in a group.

    Args:
        group_name: Name of the group to summarize.
    """
    return (
        f"Summarize the balances in my Splitwise group '{group_name}'.\n\n"
        "Steps:\n"
        "1. Call list_groups and find the group by name\n"
        "2. Call get_group with its id and read simplified_debts\n"
        "3. Map user ids to names using the group's members\n"
        "4. List each payment needed to settle up, largest first, per currency\n"
        "5. Mention any member whose balance is already zero"
    )
