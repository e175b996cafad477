"""Expense query engine.

The Splitwise expenses endpoint only understands scope filters plus
``limit``/``offset`` paging. Everything else (text search, category
filtering, deleted visibility) is evaluated locally, so the engine reads the
upstream in fixed-size batches until it has collected enough matches or the
upstream returns an empty batch.

Pages are fetched strictly one after another: the only end-of-data signal is
an empty batch, so the next offset cannot be requested before the previous
batch has been seen.
"""

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from ..client.schemas import Expense, ExpenseScope
from ..errors import ExpenseFetchError
from .filters import accepts
from .projection import project
from .query import ExpenseQuery

logger = logging.getLogger(__name__)

# Matches the largest page size the upstream reliably serves
BATCH_SIZE = 100


class PageSource(Protocol):
    """Anything that can serve one page of expenses.

    ``limit=None`` asks for every record from ``offset`` on. An empty result
    means the source is exhausted; a short, non-empty page does not.
    """

    def fetch_page(
        self, scope: ExpenseScope, limit: int | None, offset: int
    ) -> Sequence[Expense]: ...


class ExpenseQueryEngine:
    """Runs expense queries against a page source.

    The engine holds no per-query state, so one instance can serve
    concurrent tool calls.
    """

    def __init__(self, source: PageSource, batch_size: int = BATCH_SIZE):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.source = source
        self.batch_size = batch_size

    def run(self, query: ExpenseQuery) -> list[Expense]:
        """Return the matching expenses in upstream order.

        Args:
            query: A validated query.

        Returns:
            At most ``query.limit`` expenses (all matches when limit is None).

        Raises:
            ExpenseFetchError: If any page fetch fails. Nothing partial is
                returned; the error carries the offset that failed.
        """
        if not query.needs_local_filtering and query.limit is None:
            logger.debug("No local filters and no limit, single pass-through fetch")
            return list(self._fetch(query.scope, None, query.offset))

        search_lower = (
            query.search_text.lower() if query.search_text is not None else None
        )
        matches: list[Expense] = []
        offset = query.offset
        calls = 0

        while query.limit is None or len(matches) < query.limit:
            batch = self._fetch(query.scope, self.batch_size, offset)
            calls += 1
            if not batch:
                break

            accepted = [
                record
                for record in batch
                if accepts(
                    record,
                    query.deleted_mode,
                    query.category_ids,
                    search_lower,
                    query.search_fields,
                )
            ]
            if query.limit is not None:
                accepted = accepted[: query.limit - len(matches)]
            matches.extend(accepted)
            logger.debug(
                "Batch at offset %d: %d records, %d accepted, %d total",
                offset,
                len(batch),
                len(accepted),
                len(matches),
            )
            # Rejected records still occupy their upstream offsets
            offset += self.batch_size

        logger.info(
            "Expense query returned %d matches after %d page fetches",
            len(matches),
            calls,
        )
        return matches

    def list_projected(self, query: ExpenseQuery) -> list[dict[str, Any]]:
        """Run ``query`` and project every match to the requested fields."""
        return [project(record, query.fields) for record in self.run(query)]

    def _fetch(
        self, scope: ExpenseScope, limit: int | None, offset: int
    ) -> Sequence[Expense]:
        try:
            return self.source.fetch_page(scope, limit, offset)
        except Exception as e:
            logger.error("Failed to fetch expenses at offset %d: %s", offset, e)
            raise ExpenseFetchError(offset, e) from e
