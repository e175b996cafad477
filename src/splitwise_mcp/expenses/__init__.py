"""Client-side expense querying: filtering, paging and field projection."""

from .engine import BATCH_SIZE, ExpenseQueryEngine, PageSource
from .filters import accepts
from .projection import EXPENSE_FIELDS, project
from .query import DEFAULT_SEARCH_FIELDS, DeletedMode, ExpenseQuery

__all__ = [
    "BATCH_SIZE",
    "DEFAULT_SEARCH_FIELDS",
    "EXPENSE_FIELDS",
    "DeletedMode",
    "ExpenseQuery",
    "ExpenseQueryEngine",
    "PageSource",
    "accepts",
    "project",
]
