"""The expense query value object.

An ``ExpenseQuery`` is built once per tool call from the caller's
arguments and validated on construction, before any network call.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from ..client.schemas import ExpenseScope
from ..errors import InvalidQueryError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_FIELDS: tuple[str, ...] = ("description", "details", "category")


class DeletedMode(str, Enum):
    """How soft-deleted expenses are treated."""

    EXCLUDE = "exclude"
    INCLUDE = "include"
    ONLY = "only"

    @classmethod
    def parse(cls, value: "str | DeletedMode | None") -> "DeletedMode":
        """Convert a raw value, falling back to EXCLUDE when unrecognized."""
        if value is None:
            return cls.EXCLUDE
        try:
            return cls(value)
        except ValueError:
            logger.warning("Unknown deleted mode %r, excluding deleted expenses", value)
            return cls.EXCLUDE


@dataclass(frozen=True)
class ExpenseQuery:
    """Everything needed to answer one "list expenses" request.

    Attributes:
        fields: Output fields to project, in caller order. Must not be empty.
        scope: Filters forwarded to the API untouched.
        limit: Maximum number of results. None drains every match.
        offset: Upstream offset to start reading from.
        deleted_mode: Soft-delete visibility.
        category_ids: Accept only these category ids. None disables the check.
        search_text: Case-insensitive substring to look for. None disables it.
        search_fields: Where to look for ``search_text``.
    """

    fields: tuple[str, ...]
    scope: ExpenseScope = field(default_factory=ExpenseScope)
    limit: int | None = None
    offset: int = 0
    deleted_mode: DeletedMode = DeletedMode.EXCLUDE
    category_ids: frozenset[int] | None = None
    search_text: str | None = None
    search_fields: tuple[str, ...] = DEFAULT_SEARCH_FIELDS

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 0:
            raise InvalidQueryError(f"limit must be >= 0, got {self.limit}")
        if self.offset < 0:
            raise InvalidQueryError(f"offset must be >= 0, got {self.offset}")
        if not self.fields:
            raise InvalidQueryError("fields must name at least one field")

        # Normalize container types so callers can pass plain lists
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "deleted_mode", DeletedMode.parse(self.deleted_mode))
        if self.category_ids is not None:
            object.__setattr__(self, "category_ids", frozenset(self.category_ids))
        object.__setattr__(self, "search_fields", tuple(self.search_fields))

    @classmethod
    def build(
        cls,
        fields: Iterable[str],
        scope: ExpenseScope | None = None,
        limit: int | None = None,
        offset: int | None = None,
        deleted_mode: str | DeletedMode | None = None,
        category_ids: Iterable[int] | None = None,
        search_text: str | None = None,
        search_fields: Iterable[str] | None = None,
    ) -> "ExpenseQuery":
        """Build a query from optional tool/CLI arguments, applying defaults."""
        return cls(
            fields=tuple(fields),
            scope=scope or ExpenseScope(),
            limit=limit,
            offset=0 if offset is None else offset,
            deleted_mode=DeletedMode.parse(deleted_mode),
            category_ids=None if category_ids is None else frozenset(category_ids),
            search_text=search_text,
            search_fields=(
                DEFAULT_SEARCH_FIELDS if search_fields is None else tuple(search_fields)
            ),
        )

    @property
    def needs_local_filtering(self) -> bool:
        """True if any filter must be applied client-side."""
        return (
            self.search_text is not None
            or self.category_ids is not None
            or self.deleted_mode is not DeletedMode.INCLUDE
        )
