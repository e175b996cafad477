"""Pydantic schemas for Splitwise API payloads.

Response models mirror what the Splitwise v3.0 API returns and are decoded
verbatim; they are frozen because nothing downstream is allowed to mutate a
fetched record. Request models know how to flatten themselves into the
``users__<index>__<property>`` body format the API expects.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Base Models


class BaseSchema(BaseModel):
    """Base schema for upstream responses."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )


class RequestSchema(BaseModel):
    """Base schema for request bodies built from tool arguments."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
    )


class GroupType(Enum):
    """Group type enumeration."""

    HOME = "home"
    TRIP = "trip"
    COUPLE = "couple"
    OTHER = "other"


# Users


class Picture(BaseSchema):
    """Avatar URLs in the sizes the API provides."""

    small: str | None = None
    medium: str | None = None
    large: str | None = None


class UserReference(BaseSchema):
    """Compact user record embedded in expenses."""

    id: int
    first_name: str | None = None
    last_name: str | None = None
    picture: Picture | None = None


class User(BaseSchema):
    """Full user record."""

    id: int
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    registration_status: str | None = None
    picture: Picture | None = None
    default_currency: str | None = None
    locale: str | None = None


# Groups and friends


class Balance(BaseSchema):
    """An amount owed in a single currency."""

    currency_code: str
    amount: str


class Debt(BaseSchema):
    """A debt between two users inside a group."""

    from_: int = Field(alias="from")
    to: int
    amount: str
    currency_code: str


class GroupMember(BaseSchema):
    """A user as seen from inside a group."""

    id: int
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    registration_status: str | None = None
    picture: Picture | None = None
    balance: list[Balance] = Field(default_factory=list)


class Group(BaseSchema):
    """Group record with members and debts."""

    id: int
    name: str
    group_type: str | None = None
    updated_at: str | None = None
    simplify_by_default: bool = False
    members: list[GroupMember] = Field(default_factory=list)
    original_debts: list[Debt] = Field(default_factory=list)
    simplified_debts: list[Debt] = Field(default_factory=list)
    whiteboard: Any = None
    group_reminders: Any = None


class FriendGroup(BaseSchema):
    """Balance with a friend inside one shared group."""

    group_id: int
    balance: list[Balance] = Field(default_factory=list)


class Friend(BaseSchema):
    """Friend record with overall and per-group balances."""

    id: int
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    registration_status: str | None = None
    picture: Picture | None = None
    balance: list[Balance] = Field(default_factory=list)
    groups: list[FriendGroup] = Field(default_factory=list)
    updated_at: str | None = None


# Expenses


class Subcategory(BaseSchema):
    """Second-level expense category."""

    id: int
    name: str
    icon: str | None = None


class Category(BaseSchema):
    """Expense category; top-level categories carry their subcategories."""

    id: int
    name: str
    icon: str | None = None
    subcategories: list[Subcategory] | None = None


class Receipt(BaseSchema):
    """Receipt image URLs."""

    original: str | None = None
    large: str | None = None


class ExpenseUser(BaseSchema):
    """One user's share of an expense."""

    user_id: int
    user: UserReference | None = None
    paid_share: str
    owed_share: str
    net_balance: str


class Repayment(BaseSchema):
    """A simplified debt flow created by an expense."""

    from_: int = Field(alias="from")
    to: int
    amount: str


class Expense(BaseSchema):
    """A single expense as returned by the API.

    ``deleted_at``/``deleted_by`` form the soft-delete marker: both are
    absent on active expenses.
    """

    id: int
    group_id: int | None = None
    friendship_id: int | None = None
    expense_bundle_id: int | None = None
    description: str = ""
    repeats: bool = False
    repeat_interval: str | None = None
    email_reminder: bool = False
    email_reminder_in_advance: int | None = None
    next_repeat: str | None = None
    details: str | None = None
    comments_count: int = 0
    payment: bool = False
    creation_method: str | None = None
    transaction_method: str | None = None
    transaction_confirmed: bool = False
    transaction_id: int | str | None = None
    transaction_status: str | None = None
    cost: str
    currency_code: str
    repayments: list[Repayment] = Field(default_factory=list)
    date: str | None = None
    created_at: str | None = None
    created_by: UserReference | None = None
    updated_at: str | None = None
    updated_by: UserReference | None = None
    deleted_at: str | None = None
    deleted_by: UserReference | None = None
    category: Category
    receipt: Receipt = Field(default_factory=Receipt)
    users: list[ExpenseUser] = Field(default_factory=list)

    @property
    def is_deleted(self) -> bool:
        """True when the expense carries a soft-delete marker."""
        return self.deleted_at is not None


class Currency(BaseSchema):
    """Supported currency."""

    currency_code: str
    unit: str


# Query scope


class ExpenseScope(BaseSchema):
    """Filters the expenses endpoint applies server-side.

    Dates are passed through untouched (YYYY-MM-DD or ISO 8601).
    """

    group_id: int | None = None
    friend_id: int | None = None
    dated_after: str | None = None
    dated_before: str | None = None
    updated_after: str | None = None
    updated_before: str | None = None

    def to_params(self) -> dict[str, str]:
        """Return the set filters as query-string parameters."""
        return {
            key: str(value)
            for key, value in self.model_dump(exclude_none=True).items()
        }


# Request bodies


def _flatten_users(users: list[dict[str, Any]]) -> dict[str, Any]:
    """Flatten a list of user dicts into ``users__<i>__<key>`` entries."""
    body: dict[str, Any] = {}
    for index, user in enumerate(users):
        for key, value in user.items():
            if value is not None:
                body[f"users__{index}__{key}"] = value
    return body


class ExpenseShare(RequestSchema):
    """How much one participant paid and owes.

    A participant is identified by ``user_id`` or, for people without an
    account yet, by ``email`` (plus optional names).
    """

    user_id: int | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    paid_share: str
    owed_share: str

    @model_validator(mode="after")
    def require_identity(self) -> "ExpenseShare":
        """Each share needs a user_id or an email."""
        if self.user_id is None and not self.email:
            raise ValueError("Each share needs either user_id or email")
        return self

    def to_flat(self) -> dict[str, Any]:
        """Return the user fields sent for this share."""
        if self.user_id is not None:
            identity: dict[str, Any] = {"user_id": self.user_id}
        else:
            identity = {
                "email": self.email,
                "first_name": self.first_name,
                "last_name": self.last_name,
            }
        return {
            **identity,
            "paid_share": self.paid_share,
            "owed_share": self.owed_share,
        }


class CreateExpenseRequest(RequestSchema):
    """Arguments for creating an expense."""

    cost: str
    description: str
    currency_code: str | None = None
    category_id: int | None = None
    date: str | None = None
    repeat_interval: str | None = None
    details: str | None = None
    payment: bool = False
    group_id: int | None = None
    split_equally: bool = True
    split_by_shares: list[ExpenseShare] | None = None

    def to_body(self) -> dict[str, Any]:
        """Build the request body for ``/create_expense``."""
        body: dict[str, Any] = {
            "cost": self.cost,
            "description": self.description,
            "payment": self.payment,
        }
        for key in (
            "currency_code",
            "category_id",
            "date",
            "repeat_interval",
            "details",
            "group_id",
        ):
            value = getattr(self, key)
            if value is not None:
                body[key] = value

        if self.split_by_shares:
            body.update(_flatten_users([s.to_flat() for s in self.split_by_shares]))
        elif self.group_id is not None and self.split_equally:
            body["split_equally"] = True

        return body


class UpdateExpenseRequest(RequestSchema):
    """Arguments for updating an expense; only given fields are sent."""

    cost: str | None = None
    description: str | None = None
    currency_code: str | None = None
    category_id: int | None = None
    date: str | None = None
    details: str | None = None
    group_id: int | None = None
    split_equally: bool | None = None
    split_by_shares: list[ExpenseShare] | None = None

    def to_body(self) -> dict[str, Any]:
        """Build the request body for ``/update_expense/{id}``."""
        body = self.model_dump(exclude_none=True, exclude={"split_by_shares"})
        if self.split_by_shares:
            body.update(_flatten_users([s.to_flat() for s in self.split_by_shares]))
        return body


class GroupUserInput(RequestSchema):
    """A user to add to a group, by id or by name and email."""

    user_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None

    @model_validator(mode="after")
    def require_identity(self) -> "GroupUserInput":
        """A new member needs a user_id, or a first name and an email."""
        if self.user_id is None and not (self.first_name and self.email):
            raise ValueError("Provide user_id, or first_name and email")
        return self


class CreateGroupRequest(RequestSchema):
    """Arguments for creating a group."""

    name: str
    group_type: GroupType | None = None
    simplify_by_default: bool | None = None
    users: list[GroupUserInput] = Field(default_factory=list)

    def to_body(self) -> dict[str, Any]:
        """Build the request body for ``/create_group``."""
        body: dict[str, Any] = {"name": self.name}
        if self.group_type is not None:
            body["group_type"] = self.group_type.value
        if self.simplify_by_default is not None:
            body["simplify_by_default"] = self.simplify_by_default
        body.update(
            _flatten_users([u.model_dump(exclude_none=True) for u in self.users])
        )
        return body
