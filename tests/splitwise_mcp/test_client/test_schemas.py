"""Tests for request body building and response decoding."""

from collections.abc import Callable
from typing import Any

import pytest
from pydantic import ValidationError

from splitwise_mcp.client.schemas import (
    CreateExpenseRequest,
    CreateGroupRequest,
    Debt,
    Expense,
    ExpenseScope,
    ExpenseShare,
    GroupType,
    GroupUserInput,
    UpdateExpenseRequest,
)


class TestExpenseScope:
    """Tests for ExpenseScope.to_params."""

    @pytest.mark.unit
    def test_only_set_filters_are_sent(self) -> None:
        scope = ExpenseScope(friend_id=3, updated_before="2025-02-01T00:00:00Z")
        assert scope.to_params() == {
            "friend_id": "3",
            "updated_before": "2025-02-01T00:00:00Z",
        }

    @pytest.mark.unit
    def test_empty_scope(self) -> None:
        assert ExpenseScope().to_params() == {}


class TestCreateExpenseRequest:
    """Tests for CreateExpenseRequest.to_body."""

    @pytest.mark.unit
    def test_equal_split_in_group(self) -> None:
        body = CreateExpenseRequest(
            cost="12.00", description="Snacks", group_id=5, currency_code="EUR"
        ).to_body()

        assert body == {
            "cost": "12.00",
            "description": "Snacks",
            "payment": False,
            "currency_code": "EUR",
            "group_id": 5,
            "split_equally": True,
        }

    @pytest.mark.unit
    def test_no_group_means_no_split_flag(self) -> None:
        body = CreateExpenseRequest(cost="1", description="x").to_body()
        assert "split_equally" not in body

    @pytest.mark.unit
    def test_shares_by_email(self) -> None:
        share = ExpenseShare(
            email="new@example.com",
            first_name="New",
            paid_share="0",
            owed_share="5",
        )
        body = CreateExpenseRequest(
            cost="5", description="x", split_by_shares=[share]
        ).to_body()

        assert body["users__0__email"] == "new@example.com"
        assert body["users__0__first_name"] == "New"
        assert "users__0__last_name" not in body
        assert body["users__0__paid_share"] == "0"

    @pytest.mark.unit
    def test_share_requires_identity(self) -> None:
        with pytest.raises(ValidationError, match="user_id or email"):
            ExpenseShare(paid_share="1", owed_share="1")

    @pytest.mark.unit
    def test_unknown_arguments_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateExpenseRequest(cost="1", description="x", colour="red")  # type: ignore[call-arg]


class TestUpdateExpenseRequest:
    """Tests for UpdateExpenseRequest.to_body."""

    @pytest.mark.unit
    def test_only_given_fields_are_sent(self) -> None:
        body = UpdateExpenseRequest(description="Renamed", category_id=18).to_body()
        assert body == {"description": "Renamed", "category_id": 18}

    @pytest.mark.unit
    def test_shares_replace_split(self) -> None:
        body = UpdateExpenseRequest(
            cost="10",
            split_by_shares=[ExpenseShare(user_id=9, paid_share="10", owed_share="10")],
        ).to_body()

        assert body == {
            "cost": "10",
            "users__0__user_id": 9,
            "users__0__paid_share": "10",
            "users__0__owed_share": "10",
        }


class TestGroupRequests:
    """Group creation and membership inputs."""

    @pytest.mark.unit
    def test_create_group_body(self) -> None:
        body = CreateGroupRequest(
            name="Flat",
            group_type=GroupType.HOME,
            simplify_by_default=True,
            users=[GroupUserInput(first_name="Ann", email="ann@example.com")],
        ).to_body()

        assert body == {
            "name": "Flat",
            "group_type": "home",
            "simplify_by_default": True,
            "users__0__first_name": "Ann",
            "users__0__email": "ann@example.com",
        }

    @pytest.mark.unit
    def test_group_user_needs_id_or_name_and_email(self) -> None:
        with pytest.raises(ValidationError):
            GroupUserInput(email="only@example.com")


class TestResponseDecoding:
    """Response models."""

    @pytest.mark.unit
    def test_debt_reads_from_key(self) -> None:
        debt = Debt.model_validate(
            {"from": 1, "to": 2, "amount": "3.50", "currency_code": "USD"}
        )
        assert debt.from_ == 1
        assert debt.model_dump(by_alias=True)["from"] == 1

    @pytest.mark.unit
    def test_unknown_response_keys_are_ignored(
        self, make_payload: Callable[..., dict[str, Any]]
    ) -> None:
        expense = Expense.model_validate(make_payload(1, brand_new_key="x"))
        assert expense.id == 1
