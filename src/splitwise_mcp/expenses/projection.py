"""Field projection for expenses.

``EXPENSE_FIELDS`` is the one table of fields a caller may request. Both the
list and the single-expense tools project through it, and the tool
descriptions are generated from its keys.
"""

from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel

from ..client.schemas import Expense

Accessor = Callable[[Expense], Any]


def _dump(value: BaseModel | list[BaseModel] | None) -> Any:
    """JSON-ready form of a nested model (or list of models)."""
    if value is None:
        return None
    if isinstance(value, list):
        return [item.model_dump(mode="json", by_alias=True) for item in value]
    return value.model_dump(mode="json", by_alias=True)


def _attr(name: str) -> Accessor:
    return lambda e: getattr(e, name)


def _nested(name: str) -> Accessor:
    return lambda e: _dump(getattr(e, name))


EXPENSE_FIELDS: dict[str, Accessor] = {
    "id": _attr("id"),
    "description": _attr("description"),
    "cost": _attr("cost"),
    "currency_code": _attr("currency_code"),
    "date": _attr("date"),
    # id and name only; icon and subcategories are dropped
    "category": lambda e: {"id": e.category.id, "name": e.category.name},
    "payment": _attr("payment"),
    "group_id": _attr("group_id"),
    "friendship_id": _attr("friendship_id"),
    "details": _attr("details"),
    "users": _nested("users"),
    "repayments": _nested("repayments"),
    "created_at": _attr("created_at"),
    "created_by": _nested("created_by"),
    "updated_at": _attr("updated_at"),
    "updated_by": _nested("updated_by"),
    "deleted_at": _attr("deleted_at"),
    "deleted_by": _nested("deleted_by"),
    "receipt": _nested("receipt"),
    "comments_count": _attr("comments_count"),
    "transaction_confirmed": _attr("transaction_confirmed"),
    "transaction_id": _attr("transaction_id"),
    "transaction_method": _attr("transaction_method"),
    "transaction_status": _attr("transaction_status"),
    "repeats": _attr("repeats"),
    "repeat_interval": _attr("repeat_interval"),
    "next_repeat": _attr("next_repeat"),
    "email_reminder": _attr("email_reminder"),
    "email_reminder_in_advance": _attr("email_reminder_in_advance"),
    "expense_bundle_id": _attr("expense_bundle_id"),
}

# Omitted from the output instead of being written as null
OMIT_WHEN_ABSENT: frozenset[str] = frozenset({"deleted_at", "deleted_by"})

COMMON_FIELDS: tuple[str, ...] = (
    "id",
    "description",
    "cost",
    "currency_code",
    "date",
    "category",
    "payment",
    "group_id",
)


def project(record: Expense, field_names: Iterable[str]) -> dict[str, Any]:
    """Return only the requested fields of ``record``.

    Unknown names are ignored. ``deleted_at`` and ``deleted_by`` only appear
    when the expense is actually deleted; every other requested field is
    always present, possibly as None.
    """
    projected: dict[str, Any] = {}
    for name in field_names:
        accessor = EXPENSE_FIELDS.get(name)
        if accessor is None:
            continue
        value = accessor(record)
        if value is None and name in OMIT_WHEN_ABSENT:
            continue
        projected[name] = value
    return projected


def describe_fields() -> str:
    """Comma-separated list of every projectable field, for tool help text."""
    return ", ".join(EXPENSE_FIELDS)
