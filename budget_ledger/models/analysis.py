"""
Aggregation Models

Inputs and outputs of the aggregation engine. These are plain value
objects: the engine builds them from snapshot copies and never writes
them back to the store.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, Field

from budget_ledger.models.ledger import (
    Category,
    Goal,
    LedgerModel,
    RecurringTransaction,
    Transaction,
)


ZERO = Decimal("0")


class TransactionFilter(LedgerModel):
    """
    Filter options for listing transactions.

    Every field is optional; an absent field imposes no constraint.
    date_to is inclusive up to the end of its calendar day.
    """

    search: Optional[str] = Field(
        default=None,
        description="Case-insensitive match on description, notes or amount"
    )
    category_id: Optional[str] = None
    date_from: Optional[Union[datetime, date]] = None
    date_to: Optional[Union[datetime, date]] = None


class CategoryGroup(BaseModel):
    """
    The transactions of one category plus their accumulated total.

    SIGN CONVENTION: total is expense-positive / income-negative.
    An expense of 10 adds 10, an income of 10 subtracts 10.
    Use `magnitude` for display instead of correcting the sign by hand.
    """

    category: Category
    transactions: list[Transaction] = Field(default_factory=list)
    total: Decimal = ZERO

    @property
    def magnitude(self) -> Decimal:
        return abs(self.total)

    @property
    def count(self) -> int:
        return len(self.transactions)


class TransactionSummary(BaseModel):
    """Income, expense and balance over a set of transactions."""

    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    balance: Decimal = ZERO
    count: int = Field(default=0, ge=0)


class CategoryTypeTotals(BaseModel):
    """Sum of group magnitudes split by category type."""

    expenses: Decimal = ZERO
    income: Decimal = ZERO


class GoalProgress(BaseModel):
    """Derived progress figures for a savings goal."""

    goal: Goal
    progress: Decimal = Field(
        ...,
        description="Percent of target saved; may exceed 100"
    )
    remaining_amount: Decimal = Field(..., ge=0)
    is_completed: bool
    is_overdue: bool = Field(
        ...,
        description="Deadline has passed and the goal is not completed"
    )
    monthly_target: Decimal = Field(
        ...,
        ge=0,
        description="Amount to save per remaining month to hit the deadline"
    )


class AnalyticsReport(BaseModel):
    """Rolling-window breakdown used by the analytics view."""

    window_days: int = Field(..., ge=1)
    since: datetime
    summary: TransactionSummary
    groups: list[CategoryGroup] = Field(default_factory=list)
    type_totals: CategoryTypeTotals


class DashboardOverview(BaseModel):
    """Everything the dashboard shows in one read."""

    summary: TransactionSummary
    recent_transactions: list[Transaction] = Field(default_factory=list)
    top_categories: list[CategoryGroup] = Field(default_factory=list)
    overdue_recurring: list[RecurringTransaction] = Field(default_factory=list)
