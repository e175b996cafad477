"""Per-record filters the Splitwise API cannot apply itself.

The expenses endpoint only filters by group, friend and date; deleted
visibility, category membership and text search happen here, one record at
a time.
"""

from collections.abc import Callable, Collection, Iterable

from ..client.schemas import Expense
from .query import DeletedMode

# Text each searchable field contributes; None never matches
SEARCHABLE_FIELDS: dict[str, Callable[[Expense], str | None]] = {
    "description": lambda e: e.description,
    "details": lambda e: e.details,
    "category": lambda e: e.category.name,
}


def passes_deleted_mode(record: Expense, mode: DeletedMode | str) -> bool:
    """Apply soft-delete visibility. Unknown modes behave like EXCLUDE."""
    if mode == DeletedMode.INCLUDE:
        return True
    if mode == DeletedMode.ONLY:
        return record.is_deleted
    return not record.is_deleted


def matches_search(
    record: Expense, search_text_lower: str, search_fields: Iterable[str]
) -> bool:
    """True if any requested field contains the (already lower-cased) text."""
    for name in search_fields:
        extract = SEARCHABLE_FIELDS.get(name)
        if extract is None:
            continue
        value = extract(record)
        if value is not None and search_text_lower in value.lower():
            return True
    return False


def accepts(
    record: Expense,
    mode: DeletedMode | str,
    category_ids: Collection[int] | None,
    search_text_lower: str | None,
    search_fields: Iterable[str],
) -> bool:
    """Decide whether a record survives every active client-side filter.

    Checks run in order and stop at the first failure: deleted visibility,
    then category membership, then text search. A ``None`` category set or
    search text disables that check.
    """
    if not passes_deleted_mode(record, mode):
        return False
    if category_ids is not None and record.category.id not in category_ids:
        return False
    if search_text_lower is not None:
        return matches_search(record, search_text_lower, search_fields)
    return True
