"""
Aggregation Engine

DESIGN DECISION: Aggregation is a set of PURE functions.
They take snapshot copies from the store and return new value objects.
Nothing here reads the store, mutates an input, or keeps state between
calls, so the same input always produces the same output.

SIGN CONVENTION: category group totals are expense-positive and
income-negative. CategoryGroup.magnitude is the display value.
"""

import math
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from budget_ledger.models.analysis import (
    ZERO,
    CategoryGroup,
    CategoryTypeTotals,
    GoalProgress,
    TransactionFilter,
    TransactionSummary,
)
from budget_ledger.models.ledger import (
    Category,
    CategoryType,
    Goal,
    Transaction,
    TransactionType,
)
from budget_ledger.utils.dates import (
    align_tz,
    as_aware,
    end_of_day,
    month_key,
    start_of_day,
    utc_now,
)


CENT = Decimal("0.01")
DAYS_PER_MONTH = 30


# =============================================================================
# FILTERING
# =============================================================================

def _matches_search(tx: Transaction, needle: str) -> bool:
    haystacks = [tx.description, tx.notes or "", str(tx.amount)]
    return any(needle in h.lower() for h in haystacks)


def filter_transactions(
    transactions: Iterable[Transaction],
    filters: Optional[TransactionFilter] = None,
) -> list[Transaction]:
    """
    Keep the transactions that satisfy every set filter field.

    Both date bounds are inclusive. date_to covers the whole calendar
    day it falls on.
    """
    if filters is None:
        return list(transactions)

    needle = filters.search.lower() if filters.search else None
    date_from = start_of_day(filters.date_from) if filters.date_from else None
    date_to = end_of_day(filters.date_to) if filters.date_to else None

    result = []
    for tx in transactions:
        if needle and not _matches_search(tx, needle):
            continue
        if filters.category_id and tx.category_id != filters.category_id:
            continue
        if date_from and tx.date < align_tz(date_from, tx.date):
            continue
        if date_to and tx.date > align_tz(date_to, tx.date):
            continue
        result.append(tx)
    return result


def sort_by_date(
    transactions: Iterable[Transaction],
    descending: bool = True,
) -> list[Transaction]:
    """
    Order by transaction date; ties keep their input order.

    Naive dates are ordered as UTC.
    """
    return sorted(transactions, key=lambda tx: as_aware(tx.date), reverse=descending)


def recent_transactions(
    transactions: Iterable[Transaction],
    limit: int = 5,
) -> list[Transaction]:
    """The `limit` most recent transactions, newest first."""
    return sort_by_date(transactions)[:limit]


def transactions_since(
    transactions: Iterable[Transaction],
    days: int,
    now: Optional[datetime] = None,
) -> list[Transaction]:
    """Transactions dated within the last `days` days, inclusive."""
    since = (now or utc_now()) - timedelta(days=days)
    return [tx for tx in transactions if tx.date >= align_tz(since, tx.date)]


# =============================================================================
# GROUPING & SUMMARIES
# =============================================================================

def _signed(tx: Transaction) -> Decimal:
    return tx.amount if tx.type == TransactionType.EXPENSE else -tx.amount


def group_by_category(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
) -> list[CategoryGroup]:
    """
    Group transactions under their category.

    Every category seeds a group; transactions whose category is not in
    `categories` are skipped. Empty groups are dropped and the rest are
    sorted by |total|, largest first.
    """
    groups: dict[str, CategoryGroup] = {
        category.id: CategoryGroup(category=category)
        for category in categories
    }

    for tx in transactions:
        group = groups.get(tx.category_id)
        if group is None:
            continue
        group.transactions.append(tx)
        group.total += _signed(tx)

    survivors = [g for g in groups.values() if g.transactions]
    survivors.sort(key=lambda g: g.magnitude, reverse=True)
    return survivors


def summarize(transactions: Iterable[Transaction]) -> TransactionSummary:
    """Income, expense and balance totals plus the number scanned."""
    income = ZERO
    expenses = ZERO
    count = 0
    for tx in transactions:
        count += 1
        if tx.type == TransactionType.INCOME:
            income += tx.amount
        else:
            expenses += tx.amount

    return TransactionSummary(
        total_income=income,
        total_expenses=expenses,
        balance=income - expenses,
        count=count,
    )


def top_categories(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    limit: int = 5,
) -> list[CategoryGroup]:
    """Expense categories ranked by signed total, largest first."""
    expense_categories = [c for c in categories if c.type == CategoryType.EXPENSE]
    groups = group_by_category(transactions, expense_categories)
    groups.sort(key=lambda g: g.total, reverse=True)
    return groups[:limit]


def category_type_totals(groups: Iterable[CategoryGroup]) -> CategoryTypeTotals:
    """Split group magnitudes into expense and income totals."""
    totals = CategoryTypeTotals()
    for group in groups:
        if group.category.type == CategoryType.EXPENSE:
            totals.expenses += group.magnitude
        else:
            totals.income += group.magnitude
    return totals


def monthly_totals(transactions: Iterable[Transaction]) -> dict[str, dict[str, Decimal]]:
    """
    Sum raw amounts per calendar month and category.

    Returns {"YYYY-MM": {category_id: amount}}. Amounts are not signed
    by type.
    """
    buckets: dict[str, dict[str, Decimal]] = {}
    for tx in transactions:
        month = buckets.setdefault(month_key(tx.date), {})
        month[tx.category_id] = month.get(tx.category_id, ZERO) + tx.amount
    return buckets


# =============================================================================
# GOALS
# =============================================================================

def goal_progress(goal: Goal, now: Optional[datetime] = None) -> GoalProgress:
    """
    Derive progress figures for a savings goal.

    monthly_target spreads the remaining amount over the months left
    until the deadline, counting 30-day months and at least one.
    """
    now = now or utc_now()

    if goal.target_amount > 0:
        progress = (goal.current_amount / goal.target_amount * 100).quantize(
            CENT, rounding=ROUND_HALF_UP
        )
    else:
        progress = ZERO

    remaining = max(goal.target_amount - goal.current_amount, ZERO)
    is_completed = goal.is_completed or goal.target_reached

    is_overdue = False
    monthly_target = ZERO
    if goal.deadline is not None:
        deadline = align_tz(goal.deadline, now)
        is_overdue = deadline < now and not is_completed
        days_left = (deadline - now).days
        months_left = max(1, math.ceil(days_left / DAYS_PER_MONTH))
        monthly_target = (remaining / months_left).quantize(CENT, rounding=ROUND_HALF_UP)

    return GoalProgress(
        goal=goal,
        progress=progress,
        remaining_amount=remaining,
        is_completed=is_completed,
        is_overdue=is_overdue,
        monthly_target=monthly_target,
    )


def goals_progress(
    goals: Sequence[Goal],
    now: Optional[datetime] = None,
) -> list[GoalProgress]:
    now = now or utc_now()
    return [goal_progress(goal, now) for goal in goals]
