"""Aggregation engine and query execution package."""

from budget_ledger.queries.aggregation import (
    category_type_totals,
    filter_transactions,
    goal_progress,
    goals_progress,
    group_by_category,
    monthly_totals,
    recent_transactions,
    sort_by_date,
    summarize,
    top_categories,
    transactions_since,
)
from budget_ledger.queries.executor import LedgerQueryExecutor

__all__ = [
    "LedgerQueryExecutor",
    "category_type_totals",
    "filter_transactions",
    "goal_progress",
    "goals_progress",
    "group_by_category",
    "monthly_totals",
    "recent_transactions",
    "sort_by_date",
    "summarize",
    "top_categories",
    "transactions_since",
]
