"""Client for the Splitwise REST API."""

from .schemas import Expense, ExpenseScope
from .splitwise_client import SplitwiseClient

__all__ = ["Expense", "ExpenseScope", "SplitwiseClient"]
