"""Tests for the batched expense query engine."""

from collections.abc import Callable, Collection

import pytest

from splitwise_mcp.client.schemas import Expense, ExpenseScope
from splitwise_mcp.errors import ExpenseFetchError
from splitwise_mcp.expenses.engine import BATCH_SIZE, ExpenseQueryEngine
from splitwise_mcp.expenses.query import ExpenseQuery


def _records(
    make_expense: Callable[..., Expense], count: int, matching: Collection[int] = ()
) -> list[Expense]:
    """Build ``count`` expenses; ids in ``matching`` mention pizza."""
    return [
        make_expense(i, description="Pizza" if i in matching else f"Item {i}")
        for i in range(count)
    ]


class TestEngineConstruction:
    """ExpenseQueryEngine construction."""

    @pytest.mark.unit
    def test_default_batch_size(self, fake_source_factory: Callable) -> None:
        assert ExpenseQueryEngine(fake_source_factory([])).batch_size == BATCH_SIZE

    @pytest.mark.unit
    @pytest.mark.parametrize("size", [0, -1])
    def test_batch_size_must_be_positive(
        self, fake_source_factory: Callable, size: int
    ) -> None:
        with pytest.raises(ValueError, match="batch_size"):
            ExpenseQueryEngine(fake_source_factory([]), batch_size=size)


class TestPassThrough:
    """Queries with nothing to filter locally."""

    @pytest.mark.unit
    def test_single_unlimited_fetch(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        """No local filters and no limit: one fetch with limit None."""
        records = _records(make_expense, 250)
        source = fake_source_factory(records)
        scope = ExpenseScope(group_id=10)
        query = ExpenseQuery.build(
            fields=["id"], scope=scope, offset=5, deleted_mode="include"
        )

        result = ExpenseQueryEngine(source).run(query)

        assert result == records[5:]
        assert source.calls == [(scope, None, 5)]

    @pytest.mark.unit
    def test_deleted_records_pass_through(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        records = [make_expense(1), make_expense(2, deleted=True)]
        query = ExpenseQuery.build(fields=["id"], deleted_mode="include")

        result = ExpenseQueryEngine(fake_source_factory(records)).run(query)

        assert [r.id for r in result] == [1, 2]

    @pytest.mark.unit
    def test_limit_without_filters_uses_batches(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        records = _records(make_expense, 10)
        source = fake_source_factory(records)
        query = ExpenseQuery.build(fields=["id"], limit=3, deleted_mode="include")

        result = ExpenseQueryEngine(source, batch_size=4).run(query)

        assert [r.id for r in result] == [0, 1, 2]
        assert [(limit, offset) for _, limit, offset in source.calls] == [(4, 0)]


class TestBatchedSearch:
    """Queries that need client-side filtering."""

    @pytest.mark.unit
    def test_matches_spread_over_pages(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        """300 records with 3 matches: every page is read until exhaustion."""
        records = _records(make_expense, 300, matching={10, 150, 299})
        source = fake_source_factory(records)
        query = ExpenseQuery.build(fields=["id"], search_text="pizza")

        result = ExpenseQueryEngine(source).run(query)

        assert [r.id for r in result] == [10, 150, 299]
        assert [offset for _, _, offset in source.calls] == [0, 100, 200, 300]
        assert source.non_empty_calls == 3

    @pytest.mark.unit
    def test_stops_once_limit_is_reached(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        """No page is fetched after the limit is met."""
        records = _records(make_expense, 500, matching={1, 2, 3, 150})
        source = fake_source_factory(records)
        query = ExpenseQuery.build(fields=["id"], search_text="PIZZA", limit=2)

        result = ExpenseQueryEngine(source).run(query)

        assert [r.id for r in result] == [1, 2]
        assert len(source.calls) == 1

    @pytest.mark.unit
    def test_result_never_exceeds_limit(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        """A batch with more matches than needed is truncated in order."""
        records = _records(make_expense, 50, matching=set(range(50)))
        query = ExpenseQuery.build(fields=["id"], search_text="pizza", limit=7)

        result = ExpenseQueryEngine(fake_source_factory(records)).run(query)

        assert [r.id for r in result] == list(range(7))

    @pytest.mark.unit
    def test_offsets_advance_by_batch_size(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        """Rejected records still count toward the next upstream offset."""
        records = _records(make_expense, 10, matching={9})
        source = fake_source_factory(records)
        query = ExpenseQuery.build(fields=["id"], search_text="pizza", offset=2)

        result = ExpenseQueryEngine(source, batch_size=3).run(query)

        assert [r.id for r in result] == [9]
        assert [(limit, offset) for _, limit, offset in source.calls] == [
            (3, 2),
            (3, 5),
            (3, 8),
            (3, 11),
        ]

    @pytest.mark.unit
    def test_scope_forwarded_on_every_page(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        records = _records(make_expense, 5)
        source = fake_source_factory(records)
        scope = ExpenseScope(friend_id=4, dated_after="2025-01-01")
        query = ExpenseQuery.build(fields=["id"], scope=scope, search_text="x")

        ExpenseQueryEngine(source, batch_size=2).run(query)

        assert all(call_scope == scope for call_scope, _, _ in source.calls)

    @pytest.mark.unit
    def test_fetch_count_is_bounded(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        """With N records and no matches, at most ceil(N / batch) + 1 fetches."""
        records = _records(make_expense, 23)
        source = fake_source_factory(records)
        query = ExpenseQuery.build(fields=["id"], search_text="nothing", limit=5)

        assert ExpenseQueryEngine(source, batch_size=5).run(query) == []
        assert len(source.calls) == 6

    @pytest.mark.unit
    def test_empty_upstream(self, fake_source_factory: Callable) -> None:
        source = fake_source_factory([])
        query = ExpenseQuery.build(fields=["id"], search_text="pizza")

        assert ExpenseQueryEngine(source).run(query) == []
        assert len(source.calls) == 1

    @pytest.mark.unit
    def test_zero_limit_fetches_nothing(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        source = fake_source_factory(_records(make_expense, 5))
        query = ExpenseQuery.build(fields=["id"], limit=0)

        assert ExpenseQueryEngine(source).run(query) == []
        assert source.calls == []

    @pytest.mark.unit
    def test_deleted_only_with_category(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        records = [
            make_expense(1, category_id=3, deleted=True),
            make_expense(2, category_id=3),
            make_expense(3, category_id=4, deleted=True),
            make_expense(4, category_id=3, deleted=True),
        ]
        query = ExpenseQuery.build(
            fields=["id"], deleted_mode="only", category_ids=[3]
        )

        result = ExpenseQueryEngine(fake_source_factory(records)).run(query)

        assert [r.id for r in result] == [1, 4]

    @pytest.mark.unit
    def test_default_hides_deleted(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        records = [make_expense(1), make_expense(2, deleted=True), make_expense(3)]
        query = ExpenseQuery.build(fields=["id"])

        result = ExpenseQueryEngine(fake_source_factory(records)).run(query)

        assert [r.id for r in result] == [1, 3]


class TestFetchErrors:
    """Error propagation from the page source."""

    @pytest.mark.unit
    def test_error_carries_failing_offset(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        """A failure on the third page reports offset 200 and no partial data."""
        records = _records(make_expense, 300, matching={1})
        source = fake_source_factory(records, fail_at_offset=200)
        query = ExpenseQuery.build(fields=["id"], search_text="pizza")

        with pytest.raises(ExpenseFetchError) as exc_info:
            ExpenseQueryEngine(source).run(query)

        assert exc_info.value.offset == 200
        assert str(exc_info.value) == (
            "Failed to fetch batch at offset 200: upstream unavailable"
        )
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.unit
    def test_pass_through_error_is_wrapped(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        source = fake_source_factory([make_expense(1)], fail_at_offset=0)
        query = ExpenseQuery.build(fields=["id"], deleted_mode="include")

        with pytest.raises(ExpenseFetchError, match="offset 0"):
            ExpenseQueryEngine(source).run(query)


class TestListProjected:
    """Tests for list_projected."""

    @pytest.mark.unit
    def test_projects_every_match(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        records = [
            make_expense(1, description="Pizza", category_id=25, category_name="Food"),
            make_expense(2, description="Taxi"),
        ]
        query = ExpenseQuery.build(
            fields=["id", "category", "deleted_at"], search_text="pizza"
        )

        result = ExpenseQueryEngine(fake_source_factory(records)).list_projected(query)

        assert result == [{"id": 1, "category": {"id": 25, "name": "Food"}}]


class TestDocumentedScenarios:
    """End-to-end scenarios with the default batch size."""

    @pytest.mark.unit
    def test_cap_of_ten_reads_one_page(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        records = [make_expense(i) for i in range(1, 251)]
        source = fake_source_factory(records)
        query = ExpenseQuery.build(fields=["id", "cost"], limit=10)

        result = ExpenseQueryEngine(source).list_projected(query)

        assert result == [{"id": i, "cost": "25.0"} for i in range(1, 11)]
        assert [(limit, offset) for _, limit, offset in source.calls] == [(100, 0)]

    @pytest.mark.unit
    def test_category_matches_in_three_pages(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        """Matches in every page come back in upstream order.

        The three data pages are followed by one empty fetch, which is how
        the engine learns the upstream is exhausted.
        """
        records = [
            make_expense(i, category_id=18 if i in (5, 150, 280) else 2)
            for i in range(1, 301)
        ]
        source = fake_source_factory(records)
        query = ExpenseQuery.build(fields=["id"], category_ids=[18])

        result = ExpenseQueryEngine(source).run(query)

        assert [r.id for r in result] == [5, 150, 280]
        assert source.non_empty_calls == 3
        assert len(source.calls) == 4

    @pytest.mark.unit
    def test_exactly_one_full_page(
        self, make_expense: Callable[..., Expense], fake_source_factory: Callable
    ) -> None:
        records = [make_expense(i) for i in range(1, 101)]
        source = fake_source_factory(records)
        query = ExpenseQuery.build(fields=["id"])

        result = ExpenseQueryEngine(source).run(query)

        assert len(result) == 100
        assert [offset for _, _, offset in source.calls] == [0, 100]
